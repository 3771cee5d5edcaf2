"""Middleware package: error hierarchy and request ID."""

from jsonprobe.middleware.error_handler import (
    InvalidCategoryError,
    MonitorError,
    SourceListError,
    UrlNotFoundError,
    register_error_handlers,
)
from jsonprobe.middleware.request_id import (
    RequestIdLogFilter,
    RequestIdMiddleware,
    current_request_id,
)

__all__ = [
    "InvalidCategoryError",
    "MonitorError",
    "RequestIdLogFilter",
    "RequestIdMiddleware",
    "SourceListError",
    "UrlNotFoundError",
    "current_request_id",
    "register_error_handlers",
]
