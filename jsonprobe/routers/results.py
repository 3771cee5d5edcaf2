"""Result store endpoints.

- GET  /results: recent history plus stats (dashboard feed)
- GET  /stats: aggregate counters
- GET  /history: history with ?limit= and ?status= filters
- GET  /urls/lookup?url=: state of a single URL
- GET  /urls/{category}: URLs in success/direct/proxy/failed/pending/all
- POST /reset: clear the store
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Query

from jsonprobe.middleware.error_handler import UrlNotFoundError
from jsonprobe.models.responses import ApiResponse

logger = logging.getLogger(__name__)


def create_results_router(*, store: Any = None) -> APIRouter:
    """Factory that creates the results router with the injected store."""

    results_router = APIRouter(tags=["results"])

    @results_router.get("/results")
    def results() -> dict:
        """History (newest first) and stats in one payload."""
        entries = store.history()
        return ApiResponse(
            success=True,
            data={
                "results": [e.to_dict() for e in entries],
                "stats": store.snapshot().to_dict(),
                "counts": store.counts(),
            },
        ).model_dump()

    @results_router.get("/stats")
    def stats() -> dict:
        return ApiResponse(success=True, data=store.snapshot().to_dict()).model_dump()

    @results_router.get("/history")
    def history(
        limit: int = Query(default=100, ge=0),
        status: str | None = Query(default=None),
    ) -> dict:
        """History filtered by verdict (success/failed) or method (direct/proxy)."""
        entries = store.history(limit=limit, status=status)
        return ApiResponse(
            success=True,
            data={"results": [e.to_dict() for e in entries], "count": len(entries)},
        ).model_dump()

    @results_router.get("/urls/lookup")
    def lookup(url: str = Query(..., min_length=1)) -> dict:
        if not store.exists(url):
            raise UrlNotFoundError(f"URL not found: {url}")
        return ApiResponse(success=True, data=store.lookup(url).to_dict()).model_dump()

    @results_router.get("/urls/{category}")
    def urls(category: str) -> dict:
        listed = store.urls(category)
        return ApiResponse(
            success=True,
            data={"category": category, "urls": listed, "count": len(listed)},
        ).model_dump()

    @results_router.post("/reset")
    def reset() -> dict:
        store.reset()
        logger.info("Store reset via API")
        return ApiResponse(success=True, data=store.snapshot().to_dict()).model_dump()

    return results_router
