"""Application configuration."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Company Ranker"
    app_version: str = "1.0.0"
    debug: bool = False

    # API
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Torn API
    torn_api_base_url: str = "https://api.torn.com"
    request_timeout: int = 10

    # Rate limiting (Torn allows 100 requests per minute per key)
    rate_limit_requests: int = 100
    rate_limit_window: float = 60.0

    # Cache
    cache_dir: str = "cache"
    cache_file_prefix: str = "companies_"

    # Daily reset boundary (Torn City Time is UTC, reset at 18:00)
    reset_hour: int = 18
    reset_minute: int = 0
    reset_timezone: str = "UTC"

    # Preferences database
    database_path: str = "cache/preferences.sqlite"

    # Session defaults
    default_category_id: int = 10
    default_sort_field: str = "weekly_income"
    default_sort_direction: str = "desc"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
