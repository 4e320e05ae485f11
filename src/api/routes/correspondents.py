"""Correspondent endpoints: leaderboard and per-agent status."""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_correspondent_service
from src.api.models import ErrorResponse
from src.correspondents.service import CorrespondentService

router = APIRouter()


@router.get(
    "/correspondents",
    summary="Correspondent leaderboard",
    description=(
        "Every beat claimant ranked by score "
        "(signals x 10 + current streak x 5 + days active x 2), with earnings."
    ),
)
async def list_correspondents(
    service: CorrespondentService = Depends(get_correspondent_service),
) -> dict:
    correspondents = await service.leaderboard()
    return {"correspondents": correspondents, "total": len(correspondents)}


@router.get(
    "/status/{address}",
    responses={400: {"model": ErrorResponse, "description": "Invalid BTC address"}},
    summary="Agent status",
    description="An agent's beat, recent signals, streak and suggested next actions.",
)
async def get_status(
    address: str,
    service: CorrespondentService = Depends(get_correspondent_service),
) -> dict:
    return await service.status(address)
