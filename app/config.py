"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="CineList", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )

    fetch_max_attempts: int = Field(
        default=3, alias="FETCH_MAX_ATTEMPTS", ge=1, le=10
    )
    fetch_timeout_seconds: float = Field(
        default=8.0, alias="FETCH_TIMEOUT", gt=0, le=120
    )
    fetch_backoff_seconds: float = Field(
        default=0.5, alias="FETCH_BACKOFF", ge=0, le=30
    )
    fetch_jitter_seconds: float = Field(
        default=0.0, alias="FETCH_JITTER", ge=0, le=5
    )

    enrich_batch_size: int = Field(
        default=5, alias="ENRICH_BATCH_SIZE", ge=1, le=100
    )
    enrich_batch_delay_seconds: float = Field(
        default=0.5, alias="ENRICH_BATCH_DELAY", ge=0, le=30
    )

    merge_cap: int = Field(default=20, alias="MERGE_CAP", ge=1, le=100)

    database_url: str = Field(
        default="sqlite+aiosqlite:///./cinelist.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("tmdb_api_key", mode="before")
    @classmethod
    def _blank_api_key_is_missing(cls, value: object) -> object:
        """Treat whitespace-only API keys as unset."""

        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def tmdb_base_url(self) -> str:
        """Return the provider base URL without a trailing slash."""

        return str(self.tmdb_api_url).rstrip("/")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", populate_by_name=True
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
