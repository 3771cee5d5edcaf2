"""FastAPI application entry point with lifespan management.

``create_app`` wires settings, fetcher, CORS proxy, result store, validation
pipeline and batch scheduler, and mounts the routers.
Startup: configure logging and start the scheduler loop.
Shutdown: stop the scheduler and close the shared HTTP client.

Run with ``uvicorn jsonprobe.main:app --port 3000``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from jsonprobe.config.settings import MonitorSettings
from jsonprobe.fetcher.client import Fetcher
from jsonprobe.logging_config import configure_logging
from jsonprobe.middleware.error_handler import register_error_handlers
from jsonprobe.middleware.request_id import RequestIdMiddleware
from jsonprobe.proxy.cors import CorsProxy
from jsonprobe.routers.health import create_health_router
from jsonprobe.routers.results import create_results_router
from jsonprobe.services.batch_scheduler import BatchScheduler
from jsonprobe.services.result_store import ResultStore
from jsonprobe.services.validation_pipeline import ValidationPipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    settings: MonitorSettings = app.state.settings
    scheduler: BatchScheduler = app.state.scheduler
    fetcher: Fetcher = app.state.fetcher

    configure_logging(settings.log_level)
    logger.info("Starting JSON probe on port %d", settings.port)

    if settings.start_scheduler:
        scheduler.start()
    else:
        logger.info("Scheduler disabled by configuration")

    yield

    # --- Shutdown ---
    logger.info("Shutting down JSON probe…")
    await scheduler.stop()
    await fetcher.aclose()
    logger.info("JSON probe shut down")


def create_app(settings: MonitorSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Loads ``MonitorSettings`` eagerly so that a missing ``JSONPROBE_SOURCE_URL``
    or ``JSONPROBE_CORS_PROXY`` causes an immediate startup failure.
    """
    settings = settings or MonitorSettings()  # type: ignore[call-arg]

    store = ResultStore(history_cap=settings.history_cap)
    proxy = CorsProxy(settings.cors_proxy)
    fetcher = Fetcher(
        timeout_seconds=settings.request_timeout_seconds,
        user_agent=settings.user_agent,
        max_body_bytes=settings.max_body_bytes,
    )
    pipeline = ValidationPipeline(fetcher=fetcher, proxy=proxy, store=store)
    scheduler = BatchScheduler(
        fetcher=fetcher,
        pipeline=pipeline,
        source_url=settings.source_url,
        pool_width=settings.pool_width,
        batch_pause_seconds=settings.batch_pause_seconds,
        empty_list_retry_seconds=settings.empty_list_retry_seconds,
    )

    app = FastAPI(
        title="JSON Probe",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.fetcher = fetcher
    app.state.scheduler = scheduler

    register_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(create_results_router(store=store))
    app.include_router(
        create_health_router(settings=settings, scheduler=scheduler, proxy=proxy)
    )
    return app


_app: FastAPI | None = None


def __getattr__(name: str):
    # Built on first access so importing this module needs no environment
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
