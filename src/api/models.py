"""
Request and response models for the signal-network API.

Request bodies use the wire's camelCase names. Required fields are
declared optional here so that missing values reach the services, which
report them with the same ``{"error", "hint"}`` body as every other
validation failure.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Accepts camelCase aliases and snake_case names alike."""

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str = Field(..., description="What went wrong")
    hint: str | None = Field(default=None, description="How to fix it")


class ClaimBeatRequest(CamelModel):
    """Request model for claiming (or reclaiming) a beat."""

    btc_address: str | None = Field(default=None, alias="btcAddress")
    name: str | None = Field(default=None, description="Display name")
    slug: str | None = Field(default=None, description="a-z0-9 + hyphens, 3-50 chars")
    description: str | None = None
    color: str | None = Field(default=None, description="#RRGGBB")
    signature: str | None = Field(
        default=None,
        description='Signature over "SIGNAL|claim-beat|{slug}|{btcAddress}"',
    )


class UpdateBeatRequest(CamelModel):
    """Request model for editing a claimed beat."""

    btc_address: str | None = Field(default=None, alias="btcAddress")
    slug: str | None = None
    description: str | None = None
    color: str | None = None
    signature: str | None = None


class FileSignalRequest(CamelModel):
    """Request model for filing a signal."""

    btc_address: str | None = Field(default=None, alias="btcAddress")
    beat: str | None = Field(default=None, description="Beat slug")
    content: str | None = Field(default=None, description="Signal body (max 1000 chars)")
    headline: str | None = None
    sources: list[Any] | None = Field(default=None, description="Up to 5 {url, title}")
    tags: list[Any] | None = Field(default=None, description="Up to 10 lowercase slugs")
    signature: str | None = Field(
        default=None,
        description='Signature over "SIGNAL|submit|{beat}|{btcAddress}|{ISO timestamp}"',
    )


class CorrectSignalRequest(CamelModel):
    """Request model for correcting one's own signal."""

    btc_address: str | None = Field(default=None, alias="btcAddress")
    correction: str | None = Field(default=None, description="Correction (max 500 chars)")
    signature: str | None = None


class CompileBriefRequest(CamelModel):
    """Request model for compiling today's brief."""

    btc_address: str | None = Field(default=None, alias="btcAddress")
    signature: str | None = Field(
        default=None,
        description='Signature over "SIGNAL|compile-brief|{date}|{btcAddress}"',
    )
    hours: int | None = Field(default=None, description="Lookback window, clamped to 1-168")


class InscribeBriefRequest(CamelModel):
    """Request model for reporting a brief's inscription."""

    btc_address: str | None = Field(default=None, alias="btcAddress")
    signature: str | None = None
    inscription_id: str | None = Field(default=None, alias="inscriptionId")


class CreateBountyRequest(CamelModel):
    """Request model for posting a bounty."""

    btc_address: str | None = Field(default=None, alias="btcAddress")
    creator_name: str | None = Field(default=None, alias="creatorName")
    title: str | None = Field(default=None, description="5-120 chars")
    description: str | None = Field(default=None, description="10-2000 chars")
    amount_sats: Any = Field(default=None, alias="amountSats", description="Integer >= 1000")
    tags: list[Any] | None = Field(default=None, description="Up to 10 labels")
    skills: list[Any] | None = Field(default=None, description="Up to 10 skills wanted")
    beat_slug: str | None = Field(default=None, alias="beatSlug")
    deadline: str | None = Field(default=None, description="ISO 8601, in the future")
    signature: str | None = None
    timestamp: str | None = Field(default=None, description="ISO 8601, within 5 minutes")


class ComponentHealth(BaseModel):
    """Health status for a single infrastructure component."""

    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency in ms")
    details: dict[str, Any] | None = Field(default=None, description="Extra details")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Overall service status: healthy or unhealthy")
    store: ComponentHealth
    brief_access_mode: str
    timestamp: str
