"""Pytest fixtures for signal-network tests."""

from datetime import datetime, timezone

import pytest

from src.beats.registry import BeatRegistry
from src.bounties.board import BountyBoard
from src.briefs.archive import BriefArchive
from src.briefs.compiler import BriefCompiler
from src.config.settings import Settings
from src.revenue.settlement import RevenueSettlement
from src.signals.ledger import SignalLedger
from src.storage.kv import MemoryStore
from src.streaks.engine import StreakEngine

ALICE = "bc1qalice" + "0" * 33
BOB = "bc1qbob" + "0" * 35
CAROL = "bc1qcarol" + "0" * 33
SIGNATURE = "c2lnbmVkLWJ5LXRoZS10ZXN0LXN1aXRl"


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing."""
    return Settings(
        environment="development",
        log_level="DEBUG",
        redis_url="redis://localhost:6379/1",  # Use DB 1 for tests
        store_backend="memory",
    )


@pytest.fixture
def now() -> datetime:
    """Fixed instant used as the clock in domain tests."""
    return datetime(2026, 2, 26, 14, 5, 0, tzinfo=timezone.utc)


@pytest.fixture
def alice() -> str:
    return ALICE


@pytest.fixture
def bob() -> str:
    return BOB


@pytest.fixture
def carol() -> str:
    return CAROL


@pytest.fixture
def signature() -> str:
    """A well-formed (base64, 20-200 chars) signature."""
    return SIGNATURE


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def registry(store) -> BeatRegistry:
    return BeatRegistry(store)


@pytest.fixture
def streak_engine(store) -> StreakEngine:
    return StreakEngine(store)


@pytest.fixture
def ledger(store, registry, streak_engine) -> SignalLedger:
    return SignalLedger(store, registry, streak_engine)


@pytest.fixture
def archive(store) -> BriefArchive:
    return BriefArchive(store)


@pytest.fixture
def compiler(registry, ledger, streak_engine, archive) -> BriefCompiler:
    return BriefCompiler(registry, ledger, streak_engine, archive)


@pytest.fixture
def settlement(store) -> RevenueSettlement:
    return RevenueSettlement(store)


@pytest.fixture
def board(store) -> BountyBoard:
    return BountyBoard(store)
