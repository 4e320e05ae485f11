"""Bounty board configuration.

Override via ``BOUNTY_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BountyConfig(BaseSettings):
    """Settings for bounty creation and index bounds."""

    model_config = SettingsConfigDict(
        env_prefix="BOUNTY_",
        case_sensitive=False,
        extra="ignore",
    )

    max_title_length: int = Field(default=120, ge=5)
    min_title_length: int = Field(default=5, ge=1)
    max_description_length: int = Field(default=2000, ge=10)
    min_description_length: int = Field(default=10, ge=1)
    min_amount_sats: int = Field(default=1000, ge=1)
    max_labels: int = Field(default=10, ge=1, description="Max tags and max skills")
    max_label_length: int = Field(default=50, ge=1)
    timestamp_tolerance_seconds: int = Field(
        default=300,
        ge=1,
        description="How far the signed timestamp may drift from server time",
    )

    # Index caps (most recent first, oldest evicted)
    index_cap: int = Field(default=1000, ge=1)
    creator_cap: int = Field(default=100, ge=1)
    beat_cap: int = Field(default=200, ge=1)

    default_list_limit: int = Field(default=20, ge=1)
    max_list_limit: int = Field(default=50, ge=1)
