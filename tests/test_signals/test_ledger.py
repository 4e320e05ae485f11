"""Tests for the signal ledger."""

from datetime import timedelta

import pytest
import pytest_asyncio

from src.common.errors import Forbidden, InvalidArgument, NotFound, RateLimited, Unauthenticated
from src.common.validation import is_signal_id
from src.signals.config import SignalConfig
from src.signals.ledger import SignalLedger
from src.signals.schemas import generate_signal_id

BEAT = "bitcoin-macro"


@pytest_asyncio.fixture
async def claimed(registry, alice, bob, signature, now):
    """Alice claims bitcoin-macro, Bob claims defi-yields."""
    await registry.claim(BEAT, "Bitcoin Macro", alice, signature, now=now)
    await registry.claim("defi-yields", "DeFi Yields", bob, signature, now=now)


# ── Filing ───────────────────────────────────────────────


class TestFile:
    """Filing signals and the derived indexes."""

    @pytest.mark.asyncio
    async def test_file_signal(self, ledger, store, claimed, alice, signature, now):
        signal = await ledger.file(
            alice,
            BEAT,
            "  ETF inflows hit a record  ",
            signature,
            headline="Record ETF inflows",
            sources=[{"url": "https://example.com/etf", "title": "ETF Daily"}],
            tags=["etf", "flows", "etf"],
            now=now,
        )

        assert is_signal_id(signal.id)
        assert signal.content == "ETF inflows hit a record"
        assert signal.beat == "Bitcoin Macro"
        assert signal.beat_slug == BEAT
        assert signal.timestamp == "2026-02-26T14:05:00.000Z"
        assert signal.tags == ["etf", "flows"]
        assert signal.sources[0].title == "ETF Daily"

        assert (await ledger.get(signal.id)) == signal
        assert await store.get("signals:feed-index") == [signal.id]
        assert await store.get(f"signals:agent:{alice}") == [signal.id]
        assert await store.get(f"signals:beat:{BEAT}") == [signal.id]
        assert await store.get("signals:tag:etf") == [signal.id]
        assert await store.get("signals:tag:flows") == [signal.id]

    @pytest.mark.asyncio
    async def test_filing_advances_streak(self, ledger, streak_engine, claimed, alice, signature, now):
        await ledger.file(alice, BEAT, "Day one", signature, now=now)
        await ledger.file(alice, BEAT, "Day two", signature, now=now + timedelta(days=1))

        streak = await streak_engine.get(alice)
        assert streak.current == 2
        assert streak.last_date == "2026-02-27"

    @pytest.mark.asyncio
    async def test_beat_slug_is_normalized(self, ledger, claimed, alice, signature, now):
        signal = await ledger.file(alice, "Bitcoin Macro", "Normalized", signature, now=now)
        assert signal.beat_slug == BEAT

    @pytest.mark.asyncio
    async def test_content_truncated(self, ledger, claimed, alice, signature, now):
        signal = await ledger.file(alice, BEAT, "x" * 1500, signature, now=now)
        assert len(signal.content) == 1000

    @pytest.mark.asyncio
    async def test_unknown_beat(self, ledger, claimed, alice, signature, now):
        with pytest.raises(NotFound) as exc_info:
            await ledger.file(alice, "unclaimed-beat", "Hello", signature, now=now)
        assert exc_info.value.hint == "Claim it first via POST /beats"

    @pytest.mark.asyncio
    async def test_someone_elses_beat(self, ledger, store, claimed, bob, signature, now):
        with pytest.raises(Forbidden):
            await ledger.file(bob, BEAT, "Not my beat", signature, now=now)
        assert await store.get("signals:feed-index") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, error, message",
        [
            ({"content": ""}, InvalidArgument, "Missing required fields"),
            ({"agent": "not-an-address"}, InvalidArgument, "Invalid BTC address"),
            ({"signature": ""}, Unauthenticated, "Missing signature"),
            ({"headline": "h" * 121}, InvalidArgument, "Invalid headline"),
            ({"sources": [{"url": "https://x"}]}, InvalidArgument, "Invalid sources"),
            ({"tags": ["Not A Tag"]}, InvalidArgument, "Invalid tags"),
            ({"content": "   "}, InvalidArgument, "Content cannot be empty"),
            ({"beat_slug": "x!"}, InvalidArgument, "Invalid beat slug"),
        ],
    )
    async def test_validation(
        self, ledger, store, claimed, alice, signature, now, overrides, error, message
    ):
        args = {
            "agent": alice,
            "beat_slug": BEAT,
            "content": "Valid content",
            "signature": signature,
            "now": now,
        }
        args.update(overrides)

        with pytest.raises(error, match=message):
            await ledger.file(**args)
        assert await store.get("signals:feed-index") is None


class TestFilingInterval:
    """One signal per agent every four hours."""

    @pytest.mark.asyncio
    async def test_rejected_just_before_interval(self, ledger, claimed, alice, signature, now):
        await ledger.file(alice, BEAT, "First", signature, now=now)

        with pytest.raises(RateLimited) as exc_info:
            await ledger.file(
                alice, BEAT, "Too soon", signature, now=now + timedelta(hours=3, minutes=59)
            )

        assert exc_info.value.retry_after_seconds == 60
        assert "1 minutes" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_accepted_at_interval(self, ledger, claimed, alice, signature, now):
        await ledger.file(alice, BEAT, "First", signature, now=now)
        second = await ledger.file(alice, BEAT, "Second", signature, now=now + timedelta(hours=4))
        assert second.content == "Second"
        assert len(await ledger.agent_signal_ids(alice)) == 2

    @pytest.mark.asyncio
    async def test_interval_is_per_agent(self, ledger, claimed, alice, bob, signature, now):
        await ledger.file(alice, BEAT, "Alice", signature, now=now)
        signal = await ledger.file(bob, "defi-yields", "Bob", signature, now=now)
        assert signal.btc_address == bob

    @pytest.mark.asyncio
    async def test_filing_wait(self, ledger, claimed, alice, signature, now):
        signal = await ledger.file(alice, BEAT, "First", signature, now=now)
        assert ledger.filing_wait(None, now) == timedelta(0)
        assert ledger.filing_wait(signal, now + timedelta(hours=1)) == timedelta(hours=3)
        assert ledger.filing_wait(signal, now + timedelta(hours=5)) == timedelta(0)


class TestFeedBound:
    """The global feed keeps the newest 200 signals."""

    @pytest.mark.asyncio
    async def test_201st_signal_evicts_oldest(self, ledger, claimed, alice, signature, now):
        filed = []
        for i in range(201):
            signal = await ledger.file(
                alice, BEAT, f"Signal {i}", signature, now=now + timedelta(hours=4 * i)
            )
            filed.append(signal.id)

        feed = await ledger.feed()
        assert len(feed) == 200
        assert feed[0].id == filed[-1]
        assert feed[-1].id == filed[1]
        assert filed[0] not in [s.id for s in feed]

        # Evicted from the index, not deleted
        assert (await ledger.get(filed[0])).content == "Signal 0"

    @pytest.mark.asyncio
    async def test_agent_index_cap(self, store, registry, streak_engine, alice, signature, now):
        ledger = SignalLedger(store, registry, streak_engine, SignalConfig(agent_cap=2))
        await registry.claim(BEAT, "Bitcoin Macro", alice, signature, now=now)
        for i in range(3):
            await ledger.file(alice, BEAT, f"S{i}", signature, now=now + timedelta(hours=4 * i))
        assert len(await ledger.agent_signal_ids(alice)) == 2


# ── Reads ────────────────────────────────────────────────


class TestListSignals:
    """Feed reads with filters."""

    @pytest_asyncio.fixture
    async def filed(self, ledger, claimed, alice, bob, signature, now):
        await ledger.file(alice, BEAT, "A1", signature, tags=["etf"], now=now)
        await ledger.file(bob, "defi-yields", "B1", signature, now=now + timedelta(minutes=1))
        await ledger.file(
            alice, BEAT, "A2", signature, tags=["etf", "miners"], now=now + timedelta(hours=4)
        )

    @pytest.mark.asyncio
    async def test_unfiltered_newest_first(self, ledger, filed):
        signals, total = await ledger.list_signals()
        assert [s.content for s in signals] == ["A2", "B1", "A1"]
        assert total == 3

    @pytest.mark.asyncio
    async def test_filter_by_beat_slug_or_name(self, ledger, filed):
        by_slug, _ = await ledger.list_signals(beat=BEAT)
        by_name, _ = await ledger.list_signals(beat="Bitcoin Macro")
        assert [s.content for s in by_slug] == ["A2", "A1"]
        assert by_name == by_slug

    @pytest.mark.asyncio
    async def test_filter_by_agent(self, ledger, filed, bob):
        signals, _ = await ledger.list_signals(agent=bob)
        assert [s.content for s in signals] == ["B1"]

    @pytest.mark.asyncio
    async def test_filter_by_tag_reads_tag_index(self, ledger, filed):
        signals, total = await ledger.list_signals(tag="miners")
        assert [s.content for s in signals] == ["A2"]
        assert total == 1

    @pytest.mark.asyncio
    async def test_limit(self, ledger, filed):
        signals, total = await ledger.list_signals(limit=2)
        assert len(signals) == 2
        assert total == 3

    @pytest.mark.asyncio
    async def test_require_rejects_malformed_id(self, ledger):
        with pytest.raises(InvalidArgument):
            await ledger.require("not-an-id")

    @pytest.mark.asyncio
    async def test_require_unknown(self, ledger, now):
        with pytest.raises(NotFound):
            await ledger.require(generate_signal_id(now))


# ── Corrections ──────────────────────────────────────────


class TestCorrect:
    """Author corrections."""

    @pytest.mark.asyncio
    async def test_correct_keeps_original(self, ledger, claimed, alice, signature, now):
        signal = await ledger.file(alice, BEAT, "Original", signature, now=now)

        corrected = await ledger.correct(
            signal.id, alice, "  Figure was 1.2B, not 2.1B  ", signature, now=now + timedelta(hours=1)
        )

        assert corrected.content == "Original"
        assert corrected.correction == "Figure was 1.2B, not 2.1B"
        assert corrected.corrected_at == "2026-02-26T15:05:00.000Z"
        stored = (await ledger.get(signal.id)).to_dict()
        assert stored["correction"] == "Figure was 1.2B, not 2.1B"
        assert stored["correctedAt"] == "2026-02-26T15:05:00.000Z"

    @pytest.mark.asyncio
    async def test_correction_truncated(self, ledger, claimed, alice, signature, now):
        signal = await ledger.file(alice, BEAT, "Original", signature, now=now)
        corrected = await ledger.correct(signal.id, alice, "c" * 600, signature, now=now)
        assert len(corrected.correction) == 500

    @pytest.mark.asyncio
    async def test_only_author_may_correct(self, ledger, claimed, alice, bob, signature, now):
        signal = await ledger.file(alice, BEAT, "Original", signature, now=now)
        with pytest.raises(Forbidden):
            await ledger.correct(signal.id, bob, "Hijack", signature, now=now)
        assert (await ledger.get(signal.id)).correction is None

    @pytest.mark.asyncio
    async def test_correct_unknown_signal(self, ledger, alice, signature, now):
        with pytest.raises(NotFound):
            await ledger.correct(generate_signal_id(now), alice, "Fix", signature, now=now)

    @pytest.mark.asyncio
    async def test_correct_malformed_id(self, ledger, alice, signature):
        with pytest.raises(InvalidArgument, match="Invalid signal ID"):
            await ledger.correct("bogus", alice, "Fix", signature)

    @pytest.mark.asyncio
    async def test_empty_correction(self, ledger, claimed, alice, signature, now):
        signal = await ledger.file(alice, BEAT, "Original", signature, now=now)
        with pytest.raises(InvalidArgument, match="cannot be empty"):
            await ledger.correct(signal.id, alice, "   ", signature, now=now)
