"""Engine configuration loaded from the environment."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tunables for the event engine, read from ``CALENGINE_*`` variables."""

    # Days added on each side of a queried range before expanding recurrences
    CACHE_BUFFER_DAYS: int = 365

    # Months offered when completing a bare day number ("5" -> 05/10, 05/11, ...)
    SUGGESTION_MONTHS: int = 3

    # Finished one-off events older than this many months are cleanup candidates
    RETENTION_MONTHS: int = 2

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CALENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
