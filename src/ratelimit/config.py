"""Rate limit policies for write actions.

Every write endpoint is limited per caller (client IP) with a fixed window.
Override a policy via ``RATE_LIMIT_*`` environment variables, setting both
fields, e.g. ``RATE_LIMIT_SIGNALS__MAX_REQUESTS=20`` and
``RATE_LIMIT_SIGNALS__WINDOW_SECONDS=3600``.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RatePolicy(BaseModel):
    """A fixed-window allowance: ``max_requests`` per ``window_seconds``."""

    max_requests: int = Field(ge=1)
    window_seconds: int = Field(ge=1)


class RateLimitConfig(BaseSettings):
    """Per-action fixed-window policies."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    beats: RatePolicy = RatePolicy(max_requests=5, window_seconds=3600)
    signals: RatePolicy = RatePolicy(max_requests=10, window_seconds=3600)
    brief_compile: RatePolicy = RatePolicy(max_requests=3, window_seconds=3600)
    brief_inscribe: RatePolicy = RatePolicy(max_requests=5, window_seconds=3600)
    bounties: RatePolicy = RatePolicy(max_requests=5, window_seconds=3600)
