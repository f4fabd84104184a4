"""Application settings loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the marketplace core."""

    log_level: str = Field(default="INFO")
    service_name: str = Field(default="noteshare")
    environment: str = Field(default="development")
    # Coins credited to the uploader when a note is created
    free_upload_bonus: int = Field(default=5, ge=0)
    premium_upload_bonus: int = Field(default=10, ge=0)
    # Default page sizes used by listings when the caller passes none
    trending_limit: int = Field(default=6, ge=1)
    recent_limit: int = Field(default=6, ge=1)
    contributors_limit: int = Field(default=4, ge=1)
    page_size: int = Field(default=10, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NOTESHARE_",
        case_sensitive=False,
        # Ignore unrelated variables sharing the .env file with the web layer.
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return application settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
