"""Brief endpoints: compile, read (optionally paid), inscribe, recent inscriptions."""

import base64
import json
from typing import Any, Literal

from fastapi import APIRouter, Depends, Header, Query, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response
import structlog

from src.api.dependencies import (
    get_brief_archive,
    get_brief_compiler,
    get_inscription_feed,
    get_revenue_settlement,
)
from src.api.models import CompileBriefRequest, ErrorResponse, InscribeBriefRequest
from src.api.rate_limit import limit_action
from src.briefs.archive import BriefArchive
from src.briefs.compiler import BriefCompiler
from src.briefs.inscription_feed import InscriptionFeed
from src.briefs.schemas import Brief
from src.common.errors import PaymentRequired
from src.config.settings import Settings, get_settings
from src.revenue.settlement import RevenueSettlement

logger = structlog.get_logger(__name__)
router = APIRouter()

BriefFormat = Literal["json", "text"]

_READ_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Malformed date or payment header"},
    402: {"model": ErrorResponse, "description": "Payment required or rejected"},
    404: {"model": ErrorResponse, "description": "No brief for that date"},
    409: {"model": ErrorResponse, "description": "Payment transaction already used"},
    502: {"model": ErrorResponse, "description": "Settlement relay unreachable"},
}


async def _charge_for_read(
    brief: Brief,
    payment_signature: str | None,
    settings: Settings,
    settlement: RevenueSettlement,
) -> dict[str, str]:
    """
    Settle a paid read and credit the brief's correspondents.

    Returns:
        Extra response headers (``payment-response`` in paid mode)

    Raises:
        PaymentRequired: Paid mode and no ``payment-signature`` header
    """
    if not settings.briefs_are_paid:
        return {}

    if not payment_signature:
        client = settlement.payment_client
        raise PaymentRequired(
            "Payment Required",
            hint=f"Reading a brief costs {client.requirement()['amount']} sats sBTC",
            requirements=client.requirements(),
        )

    result = await settlement.settle_brief_read(brief, payment_signature)
    logger.info(
        "Brief read paid",
        date=brief.date,
        txid=result.txid,
        per_head=result.per_head,
        recipients=len(result.recipients),
    )
    receipt = {"success": True, "txid": result.txid, "briefDate": brief.date}
    return {"payment-response": base64.b64encode(json.dumps(receipt).encode()).decode()}


def _render(brief: Brief, fmt: BriefFormat, body: dict[str, Any], headers: dict[str, str]) -> Response:
    if fmt == "text":
        return PlainTextResponse(brief.text, headers={"Cache-Control": "no-store", **headers})
    return JSONResponse(body, headers=headers)


def _inscription(brief: Brief) -> dict[str, str] | None:
    return brief.inscription.to_dict() if brief.inscription else None


@router.post(
    "/brief/compile",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_action("brief_compile"))],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid address"},
        401: {"model": ErrorResponse, "description": "Missing or malformed signature"},
        403: {"model": ErrorResponse, "description": "Requester claims no beat"},
        404: {"model": ErrorResponse, "description": "No signals at all"},
        429: {"model": ErrorResponse, "description": "Too many compilations from this IP"},
    },
    summary="Compile today's brief",
    description=(
        "Aggregate signals from the last ``hours`` (default 24, clamped to 1-168) "
        "into today's brief. Falls back to the newest signals when the window is empty. "
        "Recompiling the same day overwrites the earlier brief."
    ),
)
async def compile_brief(
    request: CompileBriefRequest,
    compiler: BriefCompiler = Depends(get_brief_compiler),
) -> dict:
    brief = await compiler.compile(
        requester=request.btc_address or "",
        signature=request.signature or "",
        lookback_hours=request.hours,
    )
    logger.info(
        "Brief compiled",
        date=brief.date,
        signals=brief.summary.signals,
        beats=brief.summary.beats,
    )
    return {
        "ok": True,
        "date": brief.date,
        "summary": brief.summary.to_dict(),
        "text": brief.text,
        "brief": brief.report(),
    }


@router.get(
    "/brief",
    responses=_READ_RESPONSES,
    summary="Latest brief",
    description=(
        "Today's brief if compiled, otherwise the most recent one. "
        "``format=text`` returns the plain-text edition."
    ),
)
async def get_latest_brief(
    format: BriefFormat = Query(default="json"),
    payment_signature: str | None = Header(default=None, alias="payment-signature"),
    archive: BriefArchive = Depends(get_brief_archive),
    settlement: RevenueSettlement = Depends(get_revenue_settlement),
    settings: Settings = Depends(get_settings),
) -> Response:
    brief, is_today = await archive.latest()
    headers = await _charge_for_read(brief, payment_signature, settings, settlement)
    body = {
        "date": brief.date,
        "compiledAt": brief.compiled_at,
        "latest": is_today,
        "archive": await archive.dates(),
        "inscription": _inscription(brief),
        **brief.report(),
        "text": brief.text,
    }
    return _render(brief, format, body, headers)


@router.get(
    "/brief/{date}",
    responses=_READ_RESPONSES,
    summary="Brief by date",
)
async def get_brief(
    date: str,
    format: BriefFormat = Query(default="json"),
    payment_signature: str | None = Header(default=None, alias="payment-signature"),
    archive: BriefArchive = Depends(get_brief_archive),
    settlement: RevenueSettlement = Depends(get_revenue_settlement),
    settings: Settings = Depends(get_settings),
) -> Response:
    brief = await archive.get(date)
    headers = await _charge_for_read(brief, payment_signature, settings, settlement)
    body = {
        "date": brief.date,
        "compiledAt": brief.compiled_at,
        "inscription": _inscription(brief),
        **brief.report(),
        "text": brief.text,
    }
    return _render(brief, format, body, headers)


@router.post(
    "/brief/{date}/inscribe",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_action("brief_inscribe"))],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid fields"},
        401: {"model": ErrorResponse, "description": "Missing or malformed signature"},
        404: {"model": ErrorResponse, "description": "No brief for that date"},
        409: {"model": ErrorResponse, "description": "Already inscribed"},
        429: {"model": ErrorResponse, "description": "Too many reports from this IP"},
    },
    summary="Report a brief inscription",
)
async def inscribe_brief(
    date: str,
    request: InscribeBriefRequest,
    archive: BriefArchive = Depends(get_brief_archive),
) -> dict:
    inscription = await archive.record_inscription(
        day=date,
        inscriber=request.btc_address or "",
        signature=request.signature or "",
        inscription_id=request.inscription_id or "",
    )
    logger.info(
        "Brief inscribed",
        date=date,
        inscription_id=inscription.inscription_id,
    )
    return {"ok": True, "date": date, "inscription": inscription.to_dict()}


@router.get(
    "/brief/{date}/inscription",
    responses={
        400: {"model": ErrorResponse, "description": "Malformed date"},
        404: {"model": ErrorResponse, "description": "No brief for that date"},
    },
    summary="Brief inscription status",
)
async def get_inscription(
    date: str,
    archive: BriefArchive = Depends(get_brief_archive),
) -> dict:
    return await archive.inscription_status(date)


@router.get(
    "/inscriptions",
    responses={
        502: {"model": ErrorResponse, "description": "Inscription indexer unreachable"},
    },
    summary="Recent news inscriptions",
    description="Newest on-chain news inscriptions, highest inscription number first.",
)
async def list_inscriptions(
    limit: int | None = Query(default=None, description="Max results (default 10)"),
    feed: InscriptionFeed = Depends(get_inscription_feed),
) -> JSONResponse:
    entries = await feed.recent(limit)
    return JSONResponse(content=entries, headers={"Cache-Control": "public, max-age=300"})
