"""HTTP fetcher used for source feeds, direct probes and proxied probes.

``Fetcher.fetch`` never raises: every HTTP status is a completed response
whose body is returned for inspection, and every transport failure is
folded into a ``FetchResult`` with ``ok=False`` and a readable error.
"""

from __future__ import annotations

import logging

import httpx

from jsonprobe.models.outcomes import FetchResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0
DEFAULT_USER_AGENT = "Mozilla/5.0"
DEFAULT_MAX_BODY_BYTES = 5_000_000


def describe_error(exc: BaseException, timeout_seconds: float) -> str:
    """Turn a transport exception into a human-readable cause."""
    if isinstance(exc, httpx.TimeoutException):
        return f"Timeout after {timeout_seconds:g}s ({type(exc).__name__})"
    text = str(exc).strip()
    if text:
        return f"{type(exc).__name__}: {text}"
    return type(exc).__name__


class Fetcher:
    """Single-GET text fetcher over a shared ``httpx.AsyncClient``.

    Parameters
    ----------
    timeout_seconds:
        Per-request timeout applied to connect, read, write and pool waits.
    user_agent:
        Value of the ``User-Agent`` header sent with every request.
    max_body_bytes:
        Largest body accepted; anything bigger fails the attempt.
    client:
        Optional pre-built client (tests, custom transports). When omitted the
        fetcher creates and owns one, and ``aclose`` closes it.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._headers = {"User-Agent": user_agent}
        self._max_body_bytes = max_body_bytes
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
        )

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    async def fetch(self, url: str) -> FetchResult:
        """GET *url* and return its body as text, or the failure cause.

        The body is streamed and the attempt fails once it passes
        ``max_body_bytes``.
        """
        try:
            async with self._client.stream(
                "GET",
                url,
                headers=self._headers,
                timeout=self._timeout_seconds,
            ) as response:
                body = await self._read_capped(response)
                status_code = response.status_code
                encoding = response.encoding or "utf-8"
        except Exception as exc:  # noqa: BLE001
            return self._failed(url, describe_error(exc, self._timeout_seconds))

        if body is None:
            return self._failed(
                url,
                f"Response body exceeds {self._max_body_bytes} bytes",
                status_code=status_code,
            )
        text = body.decode(encoding, errors="replace")
        return FetchResult(ok=True, text=text, status_code=status_code)

    async def _read_capped(self, response: httpx.Response) -> bytes | None:
        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > self._max_body_bytes:
                return None
        return bytes(body)

    @staticmethod
    def _failed(url: str, error: str, status_code: int | None = None) -> FetchResult:
        logger.debug(
            "Fetch failed for %s: %s",
            url,
            error,
            extra={"target_url": url, "error_reason": error},
        )
        return FetchResult(ok=False, error=error, status_code=status_code)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
