"""jsonprobe: continuous JSON endpoint validation service."""

__version__ = "1.0.0"
