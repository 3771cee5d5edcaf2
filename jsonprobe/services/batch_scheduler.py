"""Batch scheduler: the endless validation loop.

Each cycle pulls the source feed, parses it into a URL list and fans the
list out over ``pool_width`` asyncio workers. Workers share one cursor into
the list: a worker claims the URL under the cursor, advances it, runs the
validation pipeline and repeats until the list is exhausted. The cycle ends
when every worker has exited; the loop pauses briefly and starts over, so
the same URL is re-validated every batch.

An empty or unreachable feed leaves the store untouched and the loop retries
after ``empty_list_retry_seconds``. Unexpected errors are logged and treated
the same way; the loop only ends when ``stop`` is called.
"""

from __future__ import annotations

import asyncio
import logging
import time

from jsonprobe.fetcher.client import Fetcher
from jsonprobe.middleware.error_handler import SourceListError
from jsonprobe.services.validation_pipeline import ValidationPipeline
from jsonprobe.validators.source_list import parse_url_list

logger = logging.getLogger(__name__)


class BatchScheduler:
    """Repeatedly validates the URLs listed at ``source_url``.

    Parameters
    ----------
    fetcher:
        Fetcher used to pull the source feed.
    pipeline:
        Per-URL validation pipeline.
    source_url:
        Endpoint serving newline-separated URLs.
    pool_width:
        Number of concurrent workers per batch.
    batch_pause_seconds:
        Pause after a completed batch before the feed is pulled again.
    empty_list_retry_seconds:
        Pause after an empty or failed feed pull (or an unexpected error).
    """

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        pipeline: ValidationPipeline,
        source_url: str,
        pool_width: int = 20,
        batch_pause_seconds: float = 1.0,
        empty_list_retry_seconds: float = 5.0,
    ) -> None:
        if pool_width < 1:
            raise ValueError("pool_width must be at least 1")
        self._fetcher = fetcher
        self._pipeline = pipeline
        self._source_url = source_url
        self._pool_width = pool_width
        self._batch_pause = batch_pause_seconds
        self._empty_retry = empty_list_retry_seconds

        self._task: asyncio.Task[None] | None = None
        self._sleep = asyncio.sleep
        self._stopping = False

        # Current batch
        self._urls: list[str] = []
        self._cursor = 0
        self._active_workers = 0

        # Stats tracking
        self._batches_completed = 0
        self._empty_pulls = 0
        self._last_batch_size = 0
        self._last_batch_duration_ms = 0.0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Run ``run_forever`` as a background task."""
        if self._task is not None and not self._task.done():
            logger.warning("Scheduler already running, skipping")
            return
        self._stopping = False
        self._task = asyncio.create_task(self.run_forever(), name="batch-scheduler")
        logger.info("Batch scheduler started (%d workers)", self._pool_width)

    async def stop(self) -> None:
        """Stop the loop. In-flight requests are abandoned, not awaited."""
        self._stopping = True
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Batch scheduler stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run_forever(self) -> None:
        """Run cycles until stopped, sleeping between them."""
        while not self._stopping:
            try:
                checked = await self.run_cycle()
            except Exception as exc:
                logger.error(
                    "Batch loop error: %s",
                    exc,
                    exc_info=not isinstance(exc, SourceListError),
                    extra={"error_reason": str(exc)},
                )
                checked = 0

            delay = self._batch_pause if checked else self._empty_retry
            await self._sleep(delay)

    async def run_cycle(self) -> int:
        """Pull the feed and validate every URL in it once.

        Returns the number of URLs checked; 0 means the feed was empty.

        Raises
        ------
        SourceListError
            If the feed could not be fetched.
        """
        urls = await self.load_source()
        if not urls:
            self._empty_pulls += 1
            logger.warning("Source list is empty, retrying in %.1fs", self._empty_retry)
            return 0
        return await self.run_batch(urls)

    async def load_source(self) -> list[str]:
        """Fetch and parse the source feed."""
        result = await self._fetcher.fetch(self._source_url)
        if not result.ok:
            self._empty_pulls += 1
            raise SourceListError(
                f"Source list fetch failed: {result.error}",
                source_url=self._source_url,
            )
        return parse_url_list(result.text)

    async def run_batch(self, urls: list[str]) -> int:
        """Validate *urls* with the worker pool and wait for all workers."""
        self._urls = urls
        self._cursor = 0
        start = time.monotonic()
        logger.info("Loaded %d URLs", len(urls), extra={"batch_size": len(urls)})

        workers = [
            asyncio.create_task(self._worker_loop(i), name=f"probe-worker-{i}")
            for i in range(self._pool_width)
        ]
        counts = await asyncio.gather(*workers)

        checked = sum(counts)
        self._batches_completed += 1
        self._last_batch_size = len(urls)
        self._last_batch_duration_ms = (time.monotonic() - start) * 1000
        logger.info(
            "Batch finished: %d URLs checked",
            checked,
            extra={
                "batch_size": len(urls),
                "duration_ms": round(self._last_batch_duration_ms),
            },
        )
        return checked

    def _claim(self) -> str | None:
        """Take the URL under the cursor and advance it."""
        # No await between read and increment, so claims are unique
        if self._cursor >= len(self._urls):
            return None
        url = self._urls[self._cursor]
        self._cursor += 1
        return url

    async def _worker_loop(self, worker_id: int) -> int:
        """Worker coroutine, claims URLs until the batch is exhausted."""
        checked = 0
        while True:
            url = self._claim()
            if url is None:
                break
            self._active_workers += 1
            try:
                await self._pipeline.check(url)
            finally:
                self._active_workers -= 1
            checked += 1
        logger.debug("Worker %d done (%d URLs)", worker_id, checked, extra={"worker_id": worker_id})
        return checked

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Return scheduler statistics for the health endpoint."""
        return {
            "running": self.running,
            "pool_width": self._pool_width,
            "active_workers": self._active_workers,
            "cursor": self._cursor,
            "current_batch_size": len(self._urls),
            "batches_completed": self._batches_completed,
            "empty_pulls": self._empty_pulls,
            "last_batch_size": self._last_batch_size,
            "last_batch_duration_ms": round(self._last_batch_duration_ms, 2),
        }
