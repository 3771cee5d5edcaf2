"""In-memory result store for URL verdicts.

The store is the only shared mutable state in the service. Workers write
verdicts through ``record_outcome``; the API layer reads through the query
methods. Every operation takes the internal lock, so a reader never observes
a half-applied verdict even when the API runs handlers in a threadpool.

Guaranteed after every mutation:

- ``pending``, ``success`` and ``failed`` are pairwise disjoint subsets of
  the all-URLs collection. A URL that already has a verdict keeps it while it
  is re-checked; only never-decided URLs sit in ``pending``.
- A URL has a success-detail entry iff it is in ``success`` and a
  failure-detail entry iff it is in ``failed``.
- History holds at most ``history_cap`` entries, newest first.
- Incremental counters equal ``recount()`` at all times.

Nothing is persisted; a restart starts from an empty store.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import replace

from jsonprobe.middleware.error_handler import InvalidCategoryError
from jsonprobe.models.outcomes import (
    HistoryEntry,
    StatsSnapshot,
    SuccessDetail,
    SuccessMethod,
    UrlRecord,
    UrlStatus,
    ValidationOutcome,
    utcnow,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAP = 1000

URL_CATEGORIES = ("success", "direct", "proxy", "failed", "pending", "all")
HISTORY_FILTERS = ("success", "failed", "direct", "proxy")

_MESSAGES = {
    SuccessMethod.DIRECT: "Direct OK - JSON",
    SuccessMethod.PROXY: "Proxy OK - JSON",
    None: "Failed - Not JSON",
}


class ResultStore:
    """Authoritative record of every URL seen and its current verdict.

    Parameters
    ----------
    history_cap:
        Maximum number of verdict events kept in the history log.
    """

    def __init__(self, *, history_cap: int = DEFAULT_HISTORY_CAP) -> None:
        if history_cap < 1:
            raise ValueError("history_cap must be at least 1")
        self._history_cap = history_cap
        self._lock = threading.RLock()
        self._clear()

    def _clear(self) -> None:
        # dicts used as insertion-ordered sets
        self._all_urls: dict[str, None] = {}
        self._pending: dict[str, None] = {}
        self._success: dict[str, None] = {}
        self._failed: dict[str, None] = {}
        self._success_details: dict[str, SuccessDetail] = {}
        self._failure_details: dict[str, dict] = {}
        self._history: deque[HistoryEntry] = deque(maxlen=self._history_cap)
        self._stats = StatsSnapshot()

    @property
    def history_cap(self) -> int:
        return self._history_cap

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mark_pending(self, url: str) -> None:
        """Register *url* and flag it pending unless it already has a verdict."""
        with self._lock:
            self._add_url(url)
            if url in self._success or url in self._failed or url in self._pending:
                return
            self._pending[url] = None
            self._stats.pending_count += 1

    def record_outcome(
        self,
        url: str,
        status: UrlStatus,
        method: SuccessMethod | None = None,
        details: dict | None = None,
        size: int | None = None,
    ) -> HistoryEntry:
        """Apply one verdict for *url* and return the history entry written.

        This is the only state transition. A success moves the URL out of
        ``failed`` (dropping its failure details) and overwrites its success
        detail; a failure moves it out of ``success`` (dropping its success
        detail). Counters, history and pending are updated in the same
        locked step.

        Raises
        ------
        ValueError
            If *status* is not a verdict, or a success has no *method*.
        """
        status = UrlStatus(status)
        if status == UrlStatus.PENDING:
            raise ValueError("record_outcome requires a verdict, not pending")
        if status == UrlStatus.SUCCESS and method is None:
            raise ValueError("a success verdict needs a method")
        if status == UrlStatus.FAILED:
            method = None
        else:
            method = SuccessMethod(method)

        with self._lock:
            now = utcnow()
            self._add_url(url)
            if url in self._pending:
                del self._pending[url]
                self._stats.pending_count -= 1

            if status == UrlStatus.SUCCESS:
                entry_details = self._apply_success(url, method, size or 0, now)
            else:
                entry_details = self._apply_failure(url, dict(details or {}))

            entry = HistoryEntry(
                url=url,
                status=status,
                method=method,
                timestamp=now,
                details=dict(entry_details),
                message=_MESSAGES[method],
            )
            self._history.appendleft(entry)
            self._stats.total_processed += 1
            self._stats.last_processed = now

        return entry

    def apply(self, outcome: ValidationOutcome) -> HistoryEntry:
        """Record a pipeline verdict."""
        return self.record_outcome(
            outcome.url,
            outcome.status,
            method=outcome.method,
            details=outcome.details.to_dict() if outcome.details else None,
            size=outcome.size,
        )

    def reset(self) -> None:
        """Drop every URL, verdict, history entry and counter.

        In-flight checks are not cancelled; they write into the emptied store
        when they complete.
        """
        with self._lock:
            self._clear()
        logger.info("Result store reset")

    def _add_url(self, url: str) -> None:
        if url not in self._all_urls:
            self._all_urls[url] = None
            self._stats.unique_urls += 1

    def _apply_success(self, url, method, size, now) -> dict:
        if url in self._failed:
            del self._failed[url]
            del self._failure_details[url]
            self._stats.failed_count -= 1
        if url not in self._success:
            self._success[url] = None
            self._stats.success_count += 1

        previous = self._success_details.get(url)
        if previous is not None:
            self._bump_method(previous.method, -1)
        self._success_details[url] = SuccessDetail(method=method, size=size, timestamp=now)
        self._bump_method(method, 1)
        return {"size": size}

    def _apply_failure(self, url, details: dict) -> dict:
        if url in self._success:
            del self._success[url]
            previous = self._success_details.pop(url)
            self._bump_method(previous.method, -1)
            self._stats.success_count -= 1
        if url not in self._failed:
            self._failed[url] = None
            self._stats.failed_count += 1
        self._failure_details[url] = details
        return details

    def _bump_method(self, method: SuccessMethod, delta: int) -> None:
        if method == SuccessMethod.DIRECT:
            self._stats.direct_count += delta
        else:
            self._stats.proxy_count += delta

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def snapshot(self) -> StatsSnapshot:
        """Return a copy of the incrementally maintained counters."""
        with self._lock:
            return replace(self._stats)

    def recount(self) -> StatsSnapshot:
        """Recompute every counter from the underlying sets and history."""
        with self._lock:
            direct = sum(
                1 for d in self._success_details.values()
                if d.method == SuccessMethod.DIRECT
            )
            return StatsSnapshot(
                total_processed=self._stats.total_processed,
                success_count=len(self._success),
                failed_count=len(self._failed),
                direct_count=direct,
                proxy_count=len(self._success_details) - direct,
                unique_urls=len(self._all_urls),
                pending_count=len(self._pending),
                last_processed=self._history[0].timestamp if self._history else None,
            )

    def history(
        self, limit: int | None = None, status: str | None = None
    ) -> list[HistoryEntry]:
        """Return history entries, newest first.

        Parameters
        ----------
        limit:
            Maximum number of entries; ``None`` returns all of them.
        status:
            Optional filter: ``success``, ``failed``, ``direct`` or ``proxy``.

        Raises
        ------
        InvalidCategoryError
            If *status* is not a known filter.
        """
        if status is not None and status not in HISTORY_FILTERS:
            raise InvalidCategoryError(
                f"Unknown history filter: {status}", allowed=list(HISTORY_FILTERS)
            )
        with self._lock:
            entries = list(self._history)

        if status in ("success", "failed"):
            entries = [e for e in entries if e.status.value == status]
        elif status is not None:
            entries = [e for e in entries if e.method is not None and e.method.value == status]

        if limit is not None:
            entries = entries[: max(limit, 0)]
        return entries

    def counts(self) -> dict[str, int]:
        """Size of every URL category."""
        with self._lock:
            return {
                "success": len(self._success),
                "direct": self._stats.direct_count,
                "proxy": self._stats.proxy_count,
                "failed": len(self._failed),
                "pending": len(self._pending),
                "all": len(self._all_urls),
            }

    def urls(self, category: str) -> list[str]:
        """List URLs in *category* (see ``URL_CATEGORIES``).

        Raises
        ------
        InvalidCategoryError
            If *category* is unknown.
        """
        with self._lock:
            if category == "success":
                return list(self._success)
            if category in ("direct", "proxy"):
                return [
                    url for url, detail in self._success_details.items()
                    if detail.method.value == category
                ]
            if category == "failed":
                return list(self._failed)
            if category == "pending":
                return list(self._pending)
            if category == "all":
                return list(self._all_urls)
        raise InvalidCategoryError(
            f"Unknown URL category: {category}", allowed=list(URL_CATEGORIES)
        )

    # ------------------------------------------------------------------
    # Per-URL lookup
    # ------------------------------------------------------------------

    def exists(self, url: str) -> bool:
        with self._lock:
            return url in self._all_urls

    def status(self, url: str) -> UrlStatus | None:
        """Current category of *url*, or None if it was never seen."""
        with self._lock:
            if url in self._success:
                return UrlStatus.SUCCESS
            if url in self._failed:
                return UrlStatus.FAILED
            if url in self._pending:
                return UrlStatus.PENDING
            return None

    def method(self, url: str) -> SuccessMethod | None:
        with self._lock:
            detail = self._success_details.get(url)
            return detail.method if detail else None

    def details(self, url: str) -> dict | None:
        """Success metadata or failure diagnostics for *url*."""
        with self._lock:
            detail = self._success_details.get(url)
            if detail is not None:
                return detail.to_dict()
            failure = self._failure_details.get(url)
            return dict(failure) if failure is not None else None

    def lookup(self, url: str) -> UrlRecord:
        with self._lock:
            return UrlRecord(
                url=url,
                status=self.status(url),
                method=self.method(url),
                details=self.details(url),
            )
