"""Beat endpoints: list, claim and update."""

from fastapi import APIRouter, Depends, status
import structlog

from src.api.dependencies import get_beat_registry
from src.api.models import ClaimBeatRequest, ErrorResponse, UpdateBeatRequest
from src.api.rate_limit import limit_action
from src.beats.registry import BeatRegistry

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get(
    "/beats",
    summary="List beats",
    description=(
        "All registered beats. Beats whose claimant has been silent for "
        "longer than the expiry window are reported (and stored) as inactive."
    ),
)
async def list_beats(
    registry: BeatRegistry = Depends(get_beat_registry),
) -> list[dict]:
    beats = await registry.list_beats()
    return [beat.to_dict() for beat in beats]


@router.post(
    "/beats",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_action("beats"))],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid fields"},
        401: {"model": ErrorResponse, "description": "Missing or malformed signature"},
        409: {"model": ErrorResponse, "description": "Beat has an active claimant"},
        429: {"model": ErrorResponse, "description": "Too many claims from this IP"},
    },
    summary="Claim a beat",
    description="Claim a new beat, or reclaim one whose claimant went inactive.",
)
async def claim_beat(
    request: ClaimBeatRequest,
    registry: BeatRegistry = Depends(get_beat_registry),
) -> dict:
    beat, reclaimed = await registry.claim(
        slug=request.slug or "",
        name=request.name or "",
        claimant=request.btc_address or "",
        signature=request.signature or "",
        description=request.description,
        color=request.color,
    )
    logger.info(
        "Beat claimed",
        slug=beat.slug,
        claimed_by=beat.claimed_by,
        reclaimed=reclaimed,
    )
    return {"ok": True, "beat": beat.to_dict(), "reclaimed": reclaimed}


@router.patch(
    "/beats",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid fields"},
        401: {"model": ErrorResponse, "description": "Missing or malformed signature"},
        403: {"model": ErrorResponse, "description": "Caller is not the claimant"},
        404: {"model": ErrorResponse, "description": "Beat not found"},
    },
    summary="Update a beat",
    description="Edit the description and/or color of a beat you claim.",
)
async def update_beat(
    request: UpdateBeatRequest,
    registry: BeatRegistry = Depends(get_beat_registry),
) -> dict:
    beat = await registry.update(
        slug=request.slug or "",
        claimant=request.btc_address or "",
        signature=request.signature or "",
        description=request.description,
        color=request.color,
    )
    return {"ok": True, "beat": beat.to_dict()}
