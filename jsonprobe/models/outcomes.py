"""Verdict types and in-memory state models for URL validation.

A URL is always in exactly one state: pending while a check is in flight,
then one of the three terminal verdicts produced by the validation pipeline.
``ValidationOutcome`` is the tagged variant handed to the result store;
the store's ``record_outcome`` is the only place a URL changes state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UrlStatus(str, Enum):
    """Category a URL currently belongs to."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class SuccessMethod(str, Enum):
    """Which fetch attempt produced valid JSON."""

    DIRECT = "direct"
    PROXY = "proxy"


class OutcomeKind(str, Enum):
    """Per-URL state machine positions."""

    PENDING = "pending"
    SUCCEEDED_DIRECT = "succeeded_direct"
    SUCCEEDED_PROXY = "succeeded_proxy"
    FAILED = "failed"


NOT_JSON = "Not JSON"


@dataclass(frozen=True)
class FetchResult:
    """Result of a single HTTP GET. ``ok`` is False only for transport errors."""

    ok: bool
    text: str | None = None
    error: str | None = None
    status_code: int | None = None

    @property
    def size(self) -> int:
        """Body size in UTF-8 bytes."""
        return len(self.text.encode("utf-8")) if self.text else 0


@dataclass(frozen=True)
class AttemptDiagnostic:
    """Why one fetch attempt did not count as JSON."""

    error: str | None = None
    captcha: bool = False


@dataclass(frozen=True)
class FailureDetails:
    """Diagnostics for both attempts of a failed check."""

    direct: AttemptDiagnostic
    proxy: AttemptDiagnostic

    def to_dict(self) -> dict:
        return {
            "directError": self.direct.error,
            "directCaptcha": self.direct.captcha,
            "proxyError": self.proxy.error,
            "proxyCaptcha": self.proxy.captcha,
        }


@dataclass(frozen=True)
class ValidationOutcome:
    """Terminal (or pending) verdict for one pass over a URL."""

    url: str
    kind: OutcomeKind
    size: int | None = None
    details: FailureDetails | None = None

    @classmethod
    def pending(cls, url: str) -> ValidationOutcome:
        return cls(url=url, kind=OutcomeKind.PENDING)

    @classmethod
    def succeeded(cls, url: str, method: SuccessMethod, size: int) -> ValidationOutcome:
        kind = (
            OutcomeKind.SUCCEEDED_DIRECT
            if method == SuccessMethod.DIRECT
            else OutcomeKind.SUCCEEDED_PROXY
        )
        return cls(url=url, kind=kind, size=size)

    @classmethod
    def failed(cls, url: str, details: FailureDetails) -> ValidationOutcome:
        return cls(url=url, kind=OutcomeKind.FAILED, details=details)

    @property
    def status(self) -> UrlStatus:
        if self.kind == OutcomeKind.PENDING:
            return UrlStatus.PENDING
        if self.kind == OutcomeKind.FAILED:
            return UrlStatus.FAILED
        return UrlStatus.SUCCESS

    @property
    def method(self) -> SuccessMethod | None:
        if self.kind == OutcomeKind.SUCCEEDED_DIRECT:
            return SuccessMethod.DIRECT
        if self.kind == OutcomeKind.SUCCEEDED_PROXY:
            return SuccessMethod.PROXY
        return None


@dataclass(frozen=True)
class SuccessDetail:
    """Response metadata kept for every URL currently in the success set."""

    method: SuccessMethod
    size: int
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "method": self.method.value,
            "size": self.size,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class HistoryEntry:
    """One verdict event in the bounded history log."""

    url: str
    status: UrlStatus
    method: SuccessMethod | None
    timestamp: datetime
    details: dict
    message: str

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "status": self.status.value,
            "method": self.method.value if self.method else None,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "message": self.message,
        }


@dataclass(frozen=True)
class UrlRecord:
    """Point-in-time view of a single URL."""

    url: str
    status: UrlStatus | None
    method: SuccessMethod | None = None
    details: dict | None = None

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "status": self.status.value if self.status else None,
            "method": self.method.value if self.method else None,
            "details": self.details,
        }


@dataclass
class StatsSnapshot:
    """Aggregate counters over the store."""

    total_processed: int = 0
    success_count: int = 0
    failed_count: int = 0
    direct_count: int = 0
    proxy_count: int = 0
    unique_urls: int = 0
    pending_count: int = 0
    last_processed: datetime | None = None

    @property
    def success_rate(self) -> float:
        """Success percentage over decided URLs, two decimals, 0.0 when none."""
        decided = self.success_count + self.failed_count
        if decided == 0:
            return 0.0
        return round(self.success_count / decided * 100, 2)

    def to_dict(self) -> dict:
        return {
            "total_processed": self.total_processed,
            "success_count": self.success_count,
            "failed_count": self.failed_count,
            "direct_count": self.direct_count,
            "proxy_count": self.proxy_count,
            "unique_urls": self.unique_urls,
            "pending_count": self.pending_count,
            "last_processed": (
                self.last_processed.isoformat() if self.last_processed else None
            ),
            "success_rate": self.success_rate,
        }
