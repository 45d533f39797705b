"""
Environment configuration — single source of truth for runtime settings.

Uses pydantic-settings for type-safe config with .env file support.
All values have sensible defaults for local development.

Scoring weights, threshold ladders and severity bands are NOT settings:
they live as immutable tables next to the code that evaluates them so
that alternative tables (e.g. region-tuned weights) can be passed per call.

Usage:
    from resilience_engine.core.config import settings
    print(settings.ASSESSOR_MAX_WORKERS)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine-wide settings loaded from environment variables or .env file.

    Precedence: env var > .env file > default value
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ──
    APP_NAME: str = "Urban Resilience Engine"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | staging | production
    LOG_LEVEL: str = "INFO"  # DEBUG | INFO | WARNING | ERROR | CRITICAL

    # ── Randomness ──
    DEFAULT_SEED: Optional[int] = None  # None → fresh entropy per call

    # ── Disaster assessment fan-out ──
    ASSESSOR_MAX_WORKERS: int = 10  # one thread per hazard evaluator

    # ── Scenario simulator ──
    SCENARIO_NOISE_MAX: float = 0.1  # upper bound of per-hour intensity noise
    SCENARIO_PEAK_TIME: float = 0.65  # fraction of the timeline at peak
    DEFAULT_SCENARIO_DURATION_HOURS: int = 24

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
