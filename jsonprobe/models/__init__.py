"""Public models for the JSON probe service."""

from jsonprobe.models.outcomes import (
    NOT_JSON,
    AttemptDiagnostic,
    FailureDetails,
    FetchResult,
    HistoryEntry,
    OutcomeKind,
    StatsSnapshot,
    SuccessDetail,
    SuccessMethod,
    UrlRecord,
    UrlStatus,
    ValidationOutcome,
)
from jsonprobe.models.responses import ApiResponse, ConfigView

__all__ = [
    "NOT_JSON",
    "ApiResponse",
    "AttemptDiagnostic",
    "ConfigView",
    "FailureDetails",
    "FetchResult",
    "HistoryEntry",
    "OutcomeKind",
    "StatsSnapshot",
    "SuccessDetail",
    "SuccessMethod",
    "UrlRecord",
    "UrlStatus",
    "ValidationOutcome",
]
