"""Configuration module."""

from jsonprobe.config.settings import MonitorSettings

__all__ = ["MonitorSettings"]
