"""
Application configuration using Pydantic Settings.

Centralizes all environment variables and app settings.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    All sensitive/configurable values should live here.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Threads API"
    debug: bool = False
    cors_origins: List[str] = ["*"]

    # MongoDB - Motor (async driver) connection string
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "threads_db"

    # Supabase JWT validation - must match Dashboard → Project Settings → API → JWT Secret
    supabase_url: str = "https://your-project.supabase.co"
    supabase_jwt_secret: Optional[str] = None

    @field_validator("supabase_jwt_secret", mode="before")
    @classmethod
    def strip_jwt_secret(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not isinstance(v, str):
            return v
        return v.strip() or None

    # Rendered pages are kept this long unless an action revalidates their path; 0 disables
    page_cache_ttl_seconds: int = 30

    # Page sizes used by the page handlers
    search_page_size: int = 25
    feed_page_size: int = 30


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance.
    Call get_settings.cache_clear() after changing the environment.
    """
    return Settings()
