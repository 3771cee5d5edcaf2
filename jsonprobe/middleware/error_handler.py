"""Global error hierarchy and FastAPI exception handlers.

All service-specific errors extend MonitorError. The FastAPI exception handlers
catch these errors (plus Pydantic's RequestValidationError and unhandled exceptions)
and return a consistent JSON envelope: { success, data, error, meta }.

Per-URL probe failures are never raised: the validation pipeline turns them
into failed verdicts. These errors cover the API surface and the scheduler's
source-list fetch.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class MonitorError(Exception):
    """Base error for all service-specific errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class InvalidCategoryError(MonitorError):
    """Unknown URL category or history status filter."""

    status_code = 400
    message = "Unknown category"


class UrlNotFoundError(MonitorError):
    """URL has never been observed by the store."""

    status_code = 404
    message = "URL not found"


class SourceListError(MonitorError):
    """The source feed could not be fetched."""

    status_code = 502
    message = "Source list unavailable"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _envelope(
    status_code: int,
    error: str,
    meta: dict | None = None,
) -> JSONResponse:
    """Build a JSON envelope error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "data": None,
            "error": error,
            "meta": meta,
        },
    )


async def _monitor_error_handler(_request: Request, exc: MonitorError) -> JSONResponse:
    """Handle MonitorError subclasses."""
    meta = exc.details if exc.details else None
    return _envelope(exc.status_code, exc.message, meta=meta)


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic RequestValidationError (422)."""
    field_errors = [
        {
            "field": " -> ".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return _envelope(
        status_code=422,
        error="Validation error",
        meta={"fields": field_errors},
    )


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions. Logs the traceback and returns a generic 500."""
    logger.error(
        "Unhandled exception: %s\n%s",
        exc,
        traceback.format_exc(),
    )
    return _envelope(status_code=500, error="Internal server error")


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(MonitorError, _monitor_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
