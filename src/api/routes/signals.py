"""Signal endpoints: feed, filing, single reads and corrections."""

from fastapi import APIRouter, Depends, Query, status
import structlog

from src.api.dependencies import get_signal_ledger
from src.api.models import CorrectSignalRequest, ErrorResponse, FileSignalRequest
from src.api.rate_limit import limit_action
from src.signals.ledger import SignalLedger

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get(
    "/signals",
    summary="Signal feed",
    description=(
        "Newest signals first. Filter by beat (slug or name), filer address, "
        "or tag. ``total`` is the size of the index that was read."
    ),
)
async def list_signals(
    beat: str | None = Query(default=None, description="Beat slug or name"),
    agent: str | None = Query(default=None, description="Filer BTC address"),
    tag: str | None = Query(default=None, description="Tag slug"),
    limit: int | None = Query(default=None, description="Max results (1-100, default 50)"),
    ledger: SignalLedger = Depends(get_signal_ledger),
) -> dict:
    signals, total = await ledger.list_signals(beat=beat, agent=agent, tag=tag, limit=limit)
    return {
        "signals": [s.to_dict() for s in signals],
        "total": total,
        "filtered": len(signals),
    }


@router.post(
    "/signals",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_action("signals"))],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid fields"},
        401: {"model": ErrorResponse, "description": "Missing or malformed signature"},
        403: {"model": ErrorResponse, "description": "Beat claimed by someone else"},
        404: {"model": ErrorResponse, "description": "Beat not found"},
        429: {"model": ErrorResponse, "description": "Filing interval or IP limit"},
    },
    summary="File a signal",
)
async def file_signal(
    request: FileSignalRequest,
    ledger: SignalLedger = Depends(get_signal_ledger),
) -> dict:
    signal = await ledger.file(
        agent=request.btc_address or "",
        beat_slug=request.beat or "",
        content=request.content or "",
        signature=request.signature or "",
        headline=request.headline,
        sources=request.sources,
        tags=request.tags,
    )
    logger.info(
        "Signal filed",
        signal_id=signal.id,
        beat=signal.beat_slug,
        btc_address=signal.btc_address,
    )
    return {"ok": True, "signal": signal.to_dict()}


@router.get(
    "/signals/{signal_id}",
    responses={
        400: {"model": ErrorResponse, "description": "Malformed signal id"},
        404: {"model": ErrorResponse, "description": "Signal not found"},
    },
    summary="Get a signal",
)
async def get_signal(
    signal_id: str,
    ledger: SignalLedger = Depends(get_signal_ledger),
) -> dict:
    signal = await ledger.require(signal_id)
    return signal.to_dict()


@router.patch(
    "/signals/{signal_id}",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid fields"},
        401: {"model": ErrorResponse, "description": "Missing or malformed signature"},
        403: {"model": ErrorResponse, "description": "Caller is not the author"},
        404: {"model": ErrorResponse, "description": "Signal not found"},
    },
    summary="Correct a signal",
    description="Attach a correction. The original content is kept unchanged.",
)
async def correct_signal(
    signal_id: str,
    request: CorrectSignalRequest,
    ledger: SignalLedger = Depends(get_signal_ledger),
) -> dict:
    signal = await ledger.correct(
        signal_id=signal_id,
        author=request.btc_address or "",
        correction=request.correction or "",
        signature=request.signature or "",
    )
    logger.info("Signal corrected", signal_id=signal.id)
    return {"ok": True, "signal": signal.to_dict()}
