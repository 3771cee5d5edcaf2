"""Proxy data models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ProxyEndpoint:
    """A URL-prefix proxy (CORS-proxy style) with usage counters."""

    base_url: str
    success_count: int = 0
    failure_count: int = 0
