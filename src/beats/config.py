"""Beat registry configuration.

Override via ``BEAT_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BeatConfig(BaseSettings):
    """Settings for beat claims and staleness."""

    model_config = SettingsConfigDict(
        env_prefix="BEAT_",
        case_sensitive=False,
        extra="ignore",
    )

    expiry_days: int = Field(
        default=14,
        ge=1,
        description="Days without a signal from the claimant before a beat goes inactive",
    )
    default_color: str = Field(
        default="#22d3ee",
        pattern=r"^#[0-9a-fA-F]{6}$",
        description="Color assigned when a claim does not specify one",
    )
    max_name_length: int = Field(default=100, ge=1)
    max_description_length: int = Field(default=500, ge=0)
