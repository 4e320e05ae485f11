"""Streak engine configuration (``STREAK_*`` environment variables)."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StreakConfig(BaseSettings):
    """Settings for streak bookkeeping."""

    model_config = SettingsConfigDict(
        env_prefix="STREAK_",
        case_sensitive=False,
        extra="ignore",
    )

    history_cap: int = Field(
        default=90,
        ge=1,
        description="Number of most recent filing days kept in history",
    )
