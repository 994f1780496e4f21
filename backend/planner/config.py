"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (in-memory stores when unset)
    database_url: str | None = None

    # Currencies
    base_currency: str = "INR"
    target_currency: str = "USD"

    # External rate provider
    exchange_rate_base_url: str = "https://api.exchangerate.host"
    exchange_rate_api_key: str = ""

    # Timeouts (milliseconds)
    rate_fetch_timeout_ms: int = 8000

    # Cache TTLs (seconds)
    currency_cache_ttl_seconds: int = 60

    # Used when neither the provider nor the store has a rate
    fallback_exchange_rate: float = 0.012

    # Background rate refresh (local hour of day)
    enable_rate_refresh_job: bool = False
    rate_refresh_hour: int = 2

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
