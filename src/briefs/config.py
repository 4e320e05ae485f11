"""Brief compiler configuration.

Override via ``BRIEF_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BriefConfig(BaseSettings):
    """Settings for brief compilation and the brief archive."""

    model_config = SettingsConfigDict(
        env_prefix="BRIEF_",
        case_sensitive=False,
        extra="ignore",
    )

    default_lookback_hours: int = Field(default=24, ge=1, le=168)
    min_lookback_hours: int = Field(default=1, ge=1)
    max_lookback_hours: int = Field(default=168, ge=1)

    min_signals: int = Field(
        default=1,
        ge=1,
        description="Below this many in-window signals, fall back to the most recent ones",
    )
    fallback_signal_count: int = Field(default=10, ge=1)
    archive_cap: int = Field(
        default=365,
        ge=1,
        description="Number of brief dates kept in the archive index",
    )

    default_beat_color: str = "#22d3ee"
    publication_name: str = "AIBTC News"
    publication_url: str = "https://aibtc.news"
    ordinals_base_url: str = "https://ordinals.com/inscription"

    # Recent news inscriptions proxied from the inscription indexer
    inscription_feed_url: str = "https://inscribe.news/api/data/ord-news"
    inscription_feed_timeout_seconds: float = Field(default=10.0, gt=0)
    inscription_feed_default_limit: int = Field(default=10, ge=1)
    inscription_feed_max_limit: int = Field(default=100, ge=1)
