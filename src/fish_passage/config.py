"""
Application settings.

Values come from environment variables prefixed with ``FISH_PASSAGE_`` or
from a local ``.env`` file, e.g. ``FISH_PASSAGE_YEAR_MIN=2000``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fish_passage.datasources.dart.client import CATALOG_URL, FIRST_YEAR, LAST_YEAR, QUERY_TEMPLATE


class Settings(BaseSettings):
    """Runtime configuration for fetch and build flows."""

    model_config = SettingsConfigDict(
        env_prefix="FISH_PASSAGE_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "fish-passage"
    app_env: str = "development"
    debug: bool = False

    data_dir: Path = Path("data")

    catalog_url: str = CATALOG_URL
    query_template: str = QUERY_TEMPLATE
    year_min: int = Field(default=FIRST_YEAR, ge=1900)
    year_max: int = Field(default=LAST_YEAR, ge=1900)

    request_timeout: float = Field(default=30.0, gt=0)
    http_retries: int = Field(default=4, ge=0)
    http_backoff: float = Field(default=2.0, ge=0)
    fetch_workers: int = Field(default=1, ge=1)

    checkpoint_ttl_days: int = Field(default=30, ge=0)

    api_port: int = 8000


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
