"""Pydantic Settings for the JSON probe service.

All environment variables use the JSONPROBE_ prefix.
Example: JSONPROBE_SOURCE_URL=https://lists.example/urls.txt,
JSONPROBE_CORS_PROXY=https://cors.example
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class MonitorSettings(BaseSettings):
    """Service configuration validated from environment variables."""

    # Service
    port: int = 3000
    log_level: str = "INFO"
    start_scheduler: bool = True  # Disable to serve the API without probing

    # Upstream endpoints
    source_url: str  # Newline-separated URL feed
    cors_proxy: str  # Proxy base, the target URL is appended after a "/"

    # Worker pool
    pool_width: int = Field(default=20, ge=1, le=200)

    # Fetcher
    request_timeout_seconds: float = Field(default=20.0, gt=0)
    user_agent: str = "Mozilla/5.0"
    max_body_bytes: int = Field(default=5_000_000, ge=1)  # Larger bodies fail the attempt

    # Batch loop cooldowns
    batch_pause_seconds: float = Field(default=1.0, ge=0)
    empty_list_retry_seconds: float = Field(default=5.0, ge=0)

    # Result store
    history_cap: int = Field(default=1000, ge=1)

    model_config = {"env_prefix": "JSONPROBE_"}
