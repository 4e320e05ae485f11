"""
Dependency injection for FastAPI endpoints.

The store client and the outbound HTTP clients are process-wide singletons;
services are cheap wrappers built per request around the shared store.
Tests replace ``get_store`` (and, for paid reads and the inscription
listing, ``get_payment_client`` and ``get_inscription_feed``) through
``app.dependency_overrides``.
"""

from functools import lru_cache

import httpx
from fastapi import Depends

from src.beats.config import BeatConfig
from src.beats.registry import BeatRegistry
from src.bounties.board import BountyBoard
from src.bounties.config import BountyConfig
from src.briefs.archive import BriefArchive
from src.briefs.compiler import BriefCompiler
from src.briefs.config import BriefConfig
from src.briefs.inscription_feed import InscriptionFeed
from src.correspondents.service import CorrespondentService
from src.ratelimit.config import RateLimitConfig
from src.ratelimit.limiter import RateLimiter
from src.revenue.config import RevenueConfig
from src.revenue.payment import X402PaymentClient
from src.revenue.settlement import RevenueSettlement
from src.signals.config import SignalConfig
from src.signals.ledger import SignalLedger
from src.storage.kv import KeyValueStore, create_store
from src.streaks.config import StreakConfig
from src.streaks.engine import StreakEngine

# Global instances (initialized on first request)
_store: KeyValueStore | None = None
_relay_http: httpx.AsyncClient | None = None
_payment_client: X402PaymentClient | None = None
_indexer_http: httpx.AsyncClient | None = None
_inscription_feed: InscriptionFeed | None = None


# ── Configs ────────────────────────────────────────────────


@lru_cache
def get_beat_config() -> BeatConfig:
    return BeatConfig()


@lru_cache
def get_signal_config() -> SignalConfig:
    return SignalConfig()


@lru_cache
def get_streak_config() -> StreakConfig:
    return StreakConfig()


@lru_cache
def get_brief_config() -> BriefConfig:
    return BriefConfig()


@lru_cache
def get_bounty_config() -> BountyConfig:
    return BountyConfig()


@lru_cache
def get_revenue_config() -> RevenueConfig:
    return RevenueConfig()


@lru_cache
def get_rate_limit_config() -> RateLimitConfig:
    return RateLimitConfig()


# ── Store and clients ──────────────────────────────────────


async def get_store() -> KeyValueStore:
    """Get the key-value store (Redis or in-memory per STORE_BACKEND)."""
    global _store

    if _store is None:
        _store = create_store()

    return _store


async def get_payment_client() -> X402PaymentClient:
    """
    Get the x402 payment client.

    Shares one httpx client across requests so relay connections are pooled.
    """
    global _relay_http, _payment_client

    if _payment_client is None:
        config = get_revenue_config()
        _relay_http = httpx.AsyncClient(timeout=config.relay_timeout_seconds)
        _payment_client = X402PaymentClient(config=config, http_client=_relay_http)

    return _payment_client


async def get_inscription_feed() -> InscriptionFeed:
    """Get the inscription indexer proxy (one pooled httpx client)."""
    global _indexer_http, _inscription_feed

    if _inscription_feed is None:
        config = get_brief_config()
        _indexer_http = httpx.AsyncClient(timeout=config.inscription_feed_timeout_seconds)
        _inscription_feed = InscriptionFeed(config=config, http_client=_indexer_http)

    return _inscription_feed


# ── Services ───────────────────────────────────────────────


async def get_rate_limiter(store: KeyValueStore = Depends(get_store)) -> RateLimiter:
    return RateLimiter(store)


async def get_beat_registry(store: KeyValueStore = Depends(get_store)) -> BeatRegistry:
    return BeatRegistry(store, get_beat_config())


async def get_streak_engine(store: KeyValueStore = Depends(get_store)) -> StreakEngine:
    return StreakEngine(store, get_streak_config())


async def get_signal_ledger(
    store: KeyValueStore = Depends(get_store),
    registry: BeatRegistry = Depends(get_beat_registry),
    streaks: StreakEngine = Depends(get_streak_engine),
) -> SignalLedger:
    return SignalLedger(store, registry, streaks, get_signal_config())


async def get_brief_archive(store: KeyValueStore = Depends(get_store)) -> BriefArchive:
    return BriefArchive(store, get_brief_config())


async def get_brief_compiler(
    registry: BeatRegistry = Depends(get_beat_registry),
    ledger: SignalLedger = Depends(get_signal_ledger),
    streaks: StreakEngine = Depends(get_streak_engine),
    archive: BriefArchive = Depends(get_brief_archive),
) -> BriefCompiler:
    return BriefCompiler(registry, ledger, streaks, archive, get_brief_config())


async def get_bounty_board(store: KeyValueStore = Depends(get_store)) -> BountyBoard:
    return BountyBoard(store, get_bounty_config())


async def get_revenue_settlement(
    store: KeyValueStore = Depends(get_store),
    payment_client: X402PaymentClient = Depends(get_payment_client),
) -> RevenueSettlement:
    return RevenueSettlement(store, payment_client, get_revenue_config())


async def get_correspondent_service(
    registry: BeatRegistry = Depends(get_beat_registry),
    ledger: SignalLedger = Depends(get_signal_ledger),
    streaks: StreakEngine = Depends(get_streak_engine),
    settlement: RevenueSettlement = Depends(get_revenue_settlement),
) -> CorrespondentService:
    return CorrespondentService(registry, ledger, streaks, settlement)


async def cleanup_dependencies() -> None:
    """Cleanup global resources on shutdown."""
    global _store, _relay_http, _payment_client, _indexer_http, _inscription_feed

    if _store is not None:
        await _store.close()
        _store = None

    if _relay_http is not None:
        await _relay_http.aclose()
        _relay_http = None

    _payment_client = None

    if _indexer_http is not None:
        await _indexer_http.aclose()
        _indexer_http = None

    _inscription_feed = None
