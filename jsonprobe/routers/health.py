"""Health, configuration and metrics endpoints.

- GET /health: service status, scheduler and proxy stats
- GET /config: source feed, proxy base and pool width
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from jsonprobe.models.responses import ApiResponse, ConfigView


def create_health_router(
    *,
    settings: Any = None,
    scheduler: Any = None,
    proxy: Any = None,
) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict:
        """Service health with scheduler and proxy counters."""
        scheduler_stats = scheduler.get_stats() if scheduler else {}
        proxy_stats = proxy.get_stats() if proxy else {}

        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "scheduler": scheduler_stats,
                "proxy": proxy_stats,
            },
        ).model_dump()

    @health_router.get("/config")
    async def config() -> dict:
        view = ConfigView(
            source_url=settings.source_url,
            cors_proxy=settings.cors_proxy,
            workers=settings.pool_width,
            history_cap=settings.history_cap,
            request_timeout_seconds=settings.request_timeout_seconds,
        )
        return ApiResponse(success=True, data=view.model_dump()).model_dump()

    return health_router
