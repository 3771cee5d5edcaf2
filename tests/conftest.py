"""Shared test fixtures and hypothesis strategies for the probe test suite."""

from __future__ import annotations

import os

import pytest
from hypothesis import strategies as st

from jsonprobe.config.settings import MonitorSettings
from jsonprobe.models.outcomes import FetchResult
from jsonprobe.proxy.cors import CorsProxy
from jsonprobe.services.result_store import ResultStore
from jsonprobe.services.validation_pipeline import ValidationPipeline


PROXY_BASE = "https://cors.test"
SOURCE_URL = "https://lists.test/urls.txt"


# ---------------------------------------------------------------------------
# Ensure required env vars are set for MonitorSettings in tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set minimal env vars so MonitorSettings can be instantiated in tests."""
    defaults = {
        "JSONPROBE_SOURCE_URL": SOURCE_URL,
        "JSONPROBE_CORS_PROXY": PROXY_BASE,
    }
    for key, value in defaults.items():
        if key not in os.environ:
            monkeypatch.setenv(key, value)


# ---------------------------------------------------------------------------
# Stub fetcher
# ---------------------------------------------------------------------------

class StubFetcher:
    """Fetcher double answering from a URL → FetchResult table.

    Unknown URLs fail like an unreachable host. Every call is recorded.
    """

    def __init__(self, responses: dict[str, FetchResult] | None = None) -> None:
        self.responses: dict[str, FetchResult] = dict(responses or {})
        self.calls: list[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        return self.responses.get(
            url, FetchResult(ok=False, error="ConnectError: unknown host")
        )

    async def aclose(self) -> None:
        return None


def ok(text: str, status_code: int = 200) -> FetchResult:
    return FetchResult(ok=True, text=text, status_code=status_code)


def err(message: str) -> FetchResult:
    return FetchResult(ok=False, error=message)


def proxied(url: str) -> str:
    return f"{PROXY_BASE}/{url}"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> MonitorSettings:
    """Test settings with safe defaults."""
    return MonitorSettings(
        source_url=SOURCE_URL,
        cors_proxy=PROXY_BASE,
        pool_width=3,
        history_cap=50,
        batch_pause_seconds=0,
        empty_list_retry_seconds=0,
        start_scheduler=False,
    )


@pytest.fixture
def store() -> ResultStore:
    return ResultStore(history_cap=50)


@pytest.fixture
def proxy() -> CorsProxy:
    return CorsProxy(PROXY_BASE)


@pytest.fixture
def fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture
def pipeline(fetcher: StubFetcher, proxy: CorsProxy, store: ResultStore) -> ValidationPipeline:
    return ValidationPipeline(fetcher=fetcher, proxy=proxy, store=store)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Hypothesis strategies (reusable across property tests)
# ---------------------------------------------------------------------------

target_urls = st.from_regex(r"https://[a-z]{1,3}\.test/[a-z0-9]{0,3}", fullmatch=True)

# (url, verdict) pairs
verdicts = st.tuples(
    target_urls,
    st.sampled_from(["direct", "proxy", "failed"]),
)
verdict_sequences = st.lists(verdicts, min_size=0, max_size=60)
