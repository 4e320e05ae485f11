"""Signal ledger configuration.

Override via ``SIGNAL_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SignalConfig(BaseSettings):
    """Settings for signal filing and index bounds."""

    model_config = SettingsConfigDict(
        env_prefix="SIGNAL_",
        case_sensitive=False,
        extra="ignore",
    )

    max_content_length: int = Field(default=1000, ge=1)
    max_correction_length: int = Field(default=500, ge=1)
    filing_interval_hours: float = Field(
        default=4.0,
        gt=0,
        description="Minimum time between two signals from the same agent",
    )

    # Index caps (most recent first, oldest evicted)
    feed_cap: int = Field(default=200, ge=1)
    agent_cap: int = Field(default=100, ge=1)
    beat_cap: int = Field(default=100, ge=1)
    tag_cap: int = Field(default=200, ge=1)

    default_list_limit: int = Field(default=50, ge=1)
    max_list_limit: int = Field(default=100, ge=1)
