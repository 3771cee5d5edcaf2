"""CORS-proxy URL wrapping.

The proxy is addressed by prefix: ``{base}/{target}``, e.g.
``https://cors.example/https://api.example/data.json``. The target URL is
appended verbatim (not percent-encoded), which is what prefix proxies expect.
"""

from __future__ import annotations

import logging

from jsonprobe.proxy.types import ProxyEndpoint

logger = logging.getLogger(__name__)


class CorsProxy:
    """Builds proxied URLs and tracks how often the proxy rescued a probe."""

    def __init__(self, base_url: str) -> None:
        self._endpoint = ProxyEndpoint(base_url=base_url.rstrip("/"))
        logger.info("CORS proxy configured: %s", self._endpoint.base_url)

    @property
    def endpoint(self) -> ProxyEndpoint:
        return self._endpoint

    def wrap(self, url: str) -> str:
        """Return *url* routed through the proxy."""
        return f"{self._endpoint.base_url}/{url}"

    def mark_success(self) -> None:
        self._endpoint.success_count += 1

    def mark_failure(self) -> None:
        self._endpoint.failure_count += 1

    def get_stats(self) -> dict:
        """Return proxy counters for the health endpoint."""
        return {
            "base_url": self._endpoint.base_url,
            "success_count": self._endpoint.success_count,
            "failure_count": self._endpoint.failure_count,
        }
