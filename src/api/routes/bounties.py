"""Bounty board endpoints: list, post, stats and single reads."""

from fastapi import APIRouter, Depends, Query, status
import structlog

from src.api.dependencies import get_bounty_board
from src.api.models import CreateBountyRequest, ErrorResponse
from src.api.rate_limit import limit_action
from src.bounties.board import SORT_NEWEST, BountyBoard

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get(
    "/bounties",
    responses={400: {"model": ErrorResponse, "description": "Unknown status"}},
    summary="List bounties",
    description=(
        "Newest first unless sorted by amount. ``total`` counts every match "
        "before ``offset``/``limit`` paging."
    ),
)
async def list_bounties(
    status_filter: str | None = Query(default=None, alias="status", description="Bounty status"),
    beat: str | None = Query(default=None, description="Beat slug"),
    creator: str | None = Query(default=None, description="Creator BTC address"),
    skills: str | None = Query(default=None, description="Comma-separated skills (any match)"),
    sort: str = Query(default=SORT_NEWEST, description="newest, amount_high or amount_low"),
    limit: int | None = Query(default=None, description="Max results (1-50, default 20)"),
    offset: int = Query(default=0, description="Matches to skip"),
    board: BountyBoard = Depends(get_bounty_board),
) -> dict:
    wanted = skills.split(",") if skills else None
    bounties, total = await board.list_bounties(
        status=status_filter,
        beat=beat,
        creator=creator,
        skills=wanted,
        sort=sort,
        limit=limit,
        offset=offset,
    )
    return {
        "bounties": [b.to_dict() for b in bounties],
        "total": total,
        "offset": max(offset, 0),
        "limit": board.page_size(limit),
    }


@router.post(
    "/bounties",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_action("bounties"))],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid fields"},
        401: {"model": ErrorResponse, "description": "Missing or malformed signature"},
        429: {"model": ErrorResponse, "description": "Too many bounties from this IP"},
    },
    summary="Post a bounty",
    description="Posting is free; the creator signs with a fresh timestamp.",
)
async def create_bounty(
    request: CreateBountyRequest,
    board: BountyBoard = Depends(get_bounty_board),
) -> dict:
    bounty = await board.create(
        creator=request.btc_address or "",
        title=request.title or "",
        description=request.description or "",
        amount_sats=request.amount_sats,
        signature=request.signature or "",
        timestamp=request.timestamp or "",
        creator_name=request.creator_name,
        tags=request.tags,
        skills=request.skills,
        beat_slug=request.beat_slug,
        deadline=request.deadline,
    )
    logger.info(
        "Bounty posted",
        bounty_id=bounty.id,
        creator=bounty.creator_btc,
        amount_sats=bounty.amount_sats,
    )
    return {"ok": True, "bounty": bounty.to_dict()}


@router.get("/bounties/stats", summary="Bounty board totals")
async def bounty_stats(board: BountyBoard = Depends(get_bounty_board)) -> dict:
    return await board.stats()


@router.get(
    "/bounties/{bounty_id}",
    responses={
        400: {"model": ErrorResponse, "description": "Malformed bounty id"},
        404: {"model": ErrorResponse, "description": "Bounty not found"},
    },
    summary="Get a bounty with its claims",
)
async def get_bounty(
    bounty_id: str,
    board: BountyBoard = Depends(get_bounty_board),
) -> dict:
    return await board.detail(bounty_id)
