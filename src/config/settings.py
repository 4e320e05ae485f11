"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the signal-network application.

    All settings can be overridden via environment variables.
    Prefix is not used to allow standard env var names (e.g., REDIS_URL).
    Domain-specific tunables live in each package's ``config.py``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False

    # Key-value store
    redis_url: RedisDsn = Field(default="redis://localhost:6379/0")
    store_backend: Literal["redis", "memory"] = "redis"

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_origins: str = "*"
    cors_allow_credentials: bool = False

    # Global request limit (slowapi), on top of the per-action limits
    rate_limit_enabled: bool = False
    rate_limit_default: str = "120/minute"

    # Brief access: "free" serves briefs openly, "paid" requires x402 payment
    brief_access_mode: Literal["free", "paid"] = "free"

    # Observability
    metrics_port: int = 8000

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def briefs_are_paid(self) -> bool:
        """Check if brief reads are gated behind payment."""
        return self.brief_access_mode == "paid"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
