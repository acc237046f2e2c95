# recordcollector/core/config.py
"""
Central configuration for the record collector.

Environment variables override defaults (e.g. ``RETRY_TIMES=3``).
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    # Config file paths (glob patterns)
    clients_config_paths: list[str] = Field(
        default_factory=lambda: ["config/clients.yaml"]
    )
    schemas_config_paths: list[str] = Field(
        default_factory=lambda: ["config/schemas/*.yaml"]
    )

    # Page-level retry policy
    retry_times: int = Field(default=10, ge=1, description="Attempts per page")
    retry_interval_ms: float = Field(
        default=1000.0,
        ge=0,
        description="Backoff scale: sleep attempt * uniform(0, 1) * interval",
    )

    request_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Default wall-clock bound (seconds) for one top-level request",
    )


settings = Settings()
