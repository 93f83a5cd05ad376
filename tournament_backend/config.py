"""
Configuration and settings for the tournament backend.

Every field maps to the upper-cased environment variable of the same name
(``REDIS_URL``, ``TOURNAMENT_TTL_SECONDS`` and so on).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Key-value store (Redis expected in production)
    redis_url: Optional[str] = Field(default=None)
    store_timeout_seconds: float = Field(default=5.0, gt=0)

    # SQL store (any SQLAlchemy URL, e.g. Postgres or SQLite)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Record policy
    tournament_key_prefix: str = Field(default="tournament:")
    # 10 days, refreshed on every save.
    tournament_ttl_seconds: int = Field(default=864000, ge=1)
    max_payload_bytes: int = Field(default=1024 * 1024, ge=1)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
