"""
Health check endpoint.
"""

import time

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.dependencies import get_store
from src.api.models import ComponentHealth, HealthResponse
from src.common.timeutil import to_iso, utcnow
from src.config.settings import Settings, get_settings
from src.storage.kv import KeyValueStore

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_store(store: KeyValueStore) -> ComponentHealth:
    """Check store connectivity and measure latency."""
    start = time.perf_counter()
    try:
        healthy = await store.health_check()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Store unreachable"}},
    summary="Health check",
)
async def health_check(
    store: KeyValueStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    store_health = await _check_store(store)
    overall = store_health.status
    if overall != "healthy":
        logger.warning("Health check failed", store=store_health.model_dump())

    response = HealthResponse(
        status=overall,
        store=store_health,
        brief_access_mode=settings.brief_access_mode,
        timestamp=to_iso(utcnow()),
    )
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=response.model_dump(),
    )
