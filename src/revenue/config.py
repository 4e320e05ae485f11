"""Revenue settlement configuration.

Override via ``REVENUE_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RevenueConfig(BaseSettings):
    """Brief pricing, correspondent share and x402 relay settings."""

    model_config = SettingsConfigDict(
        env_prefix="REVENUE_",
        case_sensitive=False,
        extra="ignore",
    )

    brief_price_sats: int = Field(default=1000, ge=0)
    correspondent_share: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Fraction of each brief payment split among its correspondents",
    )
    payments_cap: int = Field(
        default=100,
        ge=1,
        description="Payment records kept per correspondent (newest first)",
    )

    # x402 settlement relay
    relay_url: str = "https://x402-relay.aibtc.com"
    relay_timeout_seconds: float = Field(default=15.0, gt=0)
    network: str = "stacks:mainnet"
    asset: str = "SM3VDXK3WZZSA84XXFKAFAF15NNZX32CTSG82JFQ4.sbtc-token"
    treasury_address: str = "SP236MA9EWHF1DN3X84EQAJEW7R6BDZZ93K3EMC3C"
