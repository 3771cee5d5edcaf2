"""Proxy package: CORS-proxy URL wrapping and usage counters."""

from jsonprobe.proxy.cors import CorsProxy
from jsonprobe.proxy.types import ProxyEndpoint

__all__ = ["CorsProxy", "ProxyEndpoint"]
