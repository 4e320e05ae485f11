"""Tests for the fixed-window rate limiter."""

from datetime import datetime, timedelta, timezone

import pytest

from src.common.errors import RateLimited
from src.ratelimit.config import RateLimitConfig, RatePolicy
from src.ratelimit.limiter import RateLimiter
from src.storage.kv import MemoryStore

T0 = datetime(2026, 2, 26, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def limiter(store):
    return RateLimiter(store)


class TestCheck:
    """Counting and window resets."""

    @pytest.mark.asyncio
    async def test_allows_up_to_max(self, limiter):
        for i in range(1, 4):
            decision = await limiter.check("brief_compile", "1.2.3.4", 3, 3600, now=T0)
            assert decision.allowed
            assert decision.count == i

    @pytest.mark.asyncio
    async def test_denies_over_max_with_retry_after(self, limiter):
        for _ in range(3):
            await limiter.check("brief_compile", "1.2.3.4", 3, 3600, now=T0)

        decision = await limiter.check(
            "brief_compile", "1.2.3.4", 3, 3600, now=T0 + timedelta(minutes=10)
        )
        assert not decision.allowed
        assert decision.retry_after_seconds == 50 * 60

    @pytest.mark.asyncio
    async def test_denied_attempts_still_count(self, limiter, store):
        for _ in range(5):
            await limiter.check("beats", "ip", 2, 3600, now=T0)
        record = await store.get("ratelimit:beats:ip")
        assert record["count"] == 5

    @pytest.mark.asyncio
    async def test_window_resets(self, limiter):
        for _ in range(3):
            await limiter.check("signals", "ip", 2, 60, now=T0)

        decision = await limiter.check("signals", "ip", 2, 60, now=T0 + timedelta(seconds=61))
        assert decision.allowed
        assert decision.count == 1

    @pytest.mark.asyncio
    async def test_callers_are_independent(self, limiter):
        await limiter.check("signals", "a", 1, 60, now=T0)
        decision = await limiter.check("signals", "b", 1, 60, now=T0)
        assert decision.allowed

    @pytest.mark.asyncio
    async def test_actions_are_independent(self, limiter):
        await limiter.check("signals", "ip", 1, 60, now=T0)
        decision = await limiter.check("beats", "ip", 1, 60, now=T0)
        assert decision.allowed

    @pytest.mark.asyncio
    async def test_retry_after_at_least_one_second(self, limiter):
        await limiter.check("x", "ip", 1, 60, now=T0)
        decision = await limiter.check("x", "ip", 1, 60, now=T0 + timedelta(seconds=59, milliseconds=999))
        assert not decision.allowed
        assert decision.retry_after_seconds == 1


class TestEnforce:
    """Raising wrapper used by the API layer."""

    @pytest.mark.asyncio
    async def test_raises_rate_limited(self, limiter):
        policy = RatePolicy(max_requests=1, window_seconds=3600)
        await limiter.enforce("brief_inscribe", "ip", policy, now=T0)

        with pytest.raises(RateLimited) as exc_info:
            await limiter.enforce("brief_inscribe", "ip", policy, now=T0 + timedelta(seconds=1))

        assert exc_info.value.status_code == 429
        assert exc_info.value.retry_after_seconds == 3599


class TestConfig:
    """Default per-action policies and env overrides."""

    def test_defaults(self):
        config = RateLimitConfig()
        assert (config.beats.max_requests, config.beats.window_seconds) == (5, 3600)
        assert config.signals.max_requests == 10
        assert config.brief_compile.max_requests == 3
        assert config.brief_inscribe.max_requests == 5

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_SIGNALS__MAX_REQUESTS", "20")
        monkeypatch.setenv("RATE_LIMIT_SIGNALS__WINDOW_SECONDS", "60")
        config = RateLimitConfig()
        assert config.signals.max_requests == 20
        assert config.signals.window_seconds == 60
