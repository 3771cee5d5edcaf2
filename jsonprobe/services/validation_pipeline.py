"""Validation pipeline: decides the verdict for a single URL.

Coordinates one pass over a URL: mark pending → direct fetch → classify →
proxied fetch → classify → record verdict. There is exactly one escalation
(direct to proxy) per pass and no backoff; a URL is only re-checked when a
later batch contains it again.

Failures never leave ``check``: transport errors, challenge pages and
non-JSON bodies become a failed verdict with per-attempt diagnostics.
"""

from __future__ import annotations

import logging
import time

from jsonprobe.fetcher.client import Fetcher
from jsonprobe.models.outcomes import (
    NOT_JSON,
    AttemptDiagnostic,
    FailureDetails,
    FetchResult,
    SuccessMethod,
    ValidationOutcome,
)
from jsonprobe.proxy.cors import CorsProxy
from jsonprobe.services.result_store import ResultStore
from jsonprobe.validators.content import is_captcha, is_json_success

logger = logging.getLogger(__name__)


def diagnose(result: FetchResult) -> AttemptDiagnostic:
    """Explain why *result* was not accepted as JSON."""
    if not result.ok:
        return AttemptDiagnostic(error=result.error or "Request failed")
    if is_captcha(result.text):
        return AttemptDiagnostic(captcha=True)
    return AttemptDiagnostic(error=NOT_JSON)


class ValidationPipeline:
    """Runs the direct → proxy decision for one URL and records the verdict.

    Dependencies are injected via the constructor so the pipeline is
    testable without network calls.
    """

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        proxy: CorsProxy,
        store: ResultStore,
    ) -> None:
        self._fetcher = fetcher
        self._proxy = proxy
        self._store = store

    async def check(self, url: str) -> ValidationOutcome:
        """Validate *url* and write the verdict into the store.

        Returns the recorded outcome. Never raises.
        """
        start = time.monotonic()
        try:
            outcome = await self._check_inner(url)
        except Exception as exc:
            # Anything unexpected is still a verdict for this URL
            error = f"{type(exc).__name__}: {exc}"
            logger.error(
                "Check for %s crashed: %s",
                url,
                error,
                exc_info=True,
                extra={"target_url": url, "error_reason": error},
            )
            outcome = ValidationOutcome.failed(
                url,
                FailureDetails(
                    direct=AttemptDiagnostic(error=error),
                    proxy=AttemptDiagnostic(error=error),
                ),
            )

        try:
            self._store.apply(outcome)
        except Exception:
            logger.exception("Failed to record verdict for %s", url)

        self._log_verdict(outcome, (time.monotonic() - start) * 1000)
        return outcome

    async def _check_inner(self, url: str) -> ValidationOutcome:
        self._store.mark_pending(url)

        # 1. Direct attempt
        direct = await self._fetcher.fetch(url)
        if is_json_success(direct):
            return ValidationOutcome.succeeded(url, SuccessMethod.DIRECT, direct.size)

        # 2. Proxied attempt
        proxied = await self._fetcher.fetch(self._proxy.wrap(url))
        if is_json_success(proxied):
            self._proxy.mark_success()
            return ValidationOutcome.succeeded(url, SuccessMethod.PROXY, proxied.size)
        self._proxy.mark_failure()

        # 3. Both attempts rejected
        return ValidationOutcome.failed(
            url,
            FailureDetails(direct=diagnose(direct), proxy=diagnose(proxied)),
        )

    @staticmethod
    def _log_verdict(outcome: ValidationOutcome, duration_ms: float) -> None:
        extra = {
            "target_url": outcome.url,
            "outcome": outcome.kind.value,
            "duration_ms": round(duration_ms),
        }
        if outcome.method is not None:
            extra["method"] = outcome.method.value
            logger.info(
                "URL %s OK via %s (JSON, %d bytes)",
                outcome.url,
                outcome.method.value,
                outcome.size or 0,
                extra=extra,
            )
        else:
            details = outcome.details.to_dict() if outcome.details else {}
            extra["error_reason"] = details
            logger.info(
                "URL %s failed on direct and proxy (not JSON)",
                outcome.url,
                extra=extra,
            )
