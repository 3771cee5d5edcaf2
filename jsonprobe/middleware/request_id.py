"""Request ID middleware and log correlation.

Every API request gets an ID (the caller's ``X-Request-ID`` or a fresh
UUID4). The ID is exposed on ``request.state.request_id``, echoed in the
``X-Request-ID`` response header and attached to log records emitted while
the request is handled, so ``JsonFormatter`` can print it.
"""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

_current_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def current_request_id() -> str | None:
    """Return the ID of the request being handled, if any."""
    return _current_request_id.get()


class RequestIdLogFilter(logging.Filter):
    """Copies the current request ID onto log records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = current_request_id()
        return True


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that assigns a unique request ID to each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = _current_request_id.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            _current_request_id.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response
