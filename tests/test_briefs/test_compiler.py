"""Tests for brief compilation."""

from datetime import timedelta

import pytest
import pytest_asyncio

from src.briefs.compiler import group_by_beat, select_signals
from src.common.errors import Forbidden, InvalidArgument, NotFound, Unauthenticated


@pytest_asyncio.fixture
async def newsroom(registry, ledger, alice, bob, signature, now):
    """Two beats, three recent signals.

    Feed (newest first): alice -1h, bob -2h, alice -5h.
    """
    await registry.claim("bitcoin-macro", "Bitcoin Macro", alice, signature, now=now, color="#f7931a")
    await registry.claim("defi-yields", "DeFi Yields", bob, signature, now=now)
    await ledger.file(alice, "bitcoin-macro", "Older macro", signature, now=now - timedelta(hours=5))
    await ledger.file(bob, "defi-yields", "Yields compress", signature, now=now - timedelta(hours=2))
    await ledger.file(
        alice,
        "bitcoin-macro",
        "ETF inflows",
        signature,
        headline="Record inflows",
        sources=[{"url": "https://example.com", "title": "ETF Daily"}],
        now=now - timedelta(hours=1),
    )


class TestCompile:
    """End-to-end compilation against the in-memory store."""

    @pytest.mark.asyncio
    async def test_sections_grouped_by_beat(self, compiler, newsroom, alice, bob, signature, now):
        brief = await compiler.compile(alice, signature, now=now)

        assert brief.date == "2026-02-26"
        assert brief.compiled_by == alice
        assert brief.lookback_hours == 24
        assert [(s.beat_slug, s.content) for s in brief.sections] == [
            ("bitcoin-macro", "ETF inflows"),
            ("bitcoin-macro", "Older macro"),
            ("defi-yields", "Yields compress"),
        ]
        first = brief.sections[0]
        assert first.beat == "Bitcoin Macro"
        assert first.beat_color == "#f7931a"
        assert first.correspondent_short == f"{alice[:8]}...{alice[-6:]}"
        assert first.headline == "Record inflows"
        assert first.sources == [{"url": "https://example.com", "title": "ETF Daily"}]
        assert brief.sections[2].beat_color == "#22d3ee"
        assert brief.correspondents == [alice, bob]

        summary = brief.summary.to_dict()
        assert summary == {
            "correspondents": 2,
            "beats": 2,
            "signals": 3,
            "totalBeatsRegistered": 2,
        }

    @pytest.mark.asyncio
    async def test_persisted_and_indexed(self, compiler, archive, newsroom, alice, signature, now):
        brief = await compiler.compile(alice, signature, now=now)

        stored = await archive.get("2026-02-26")
        assert stored.report() == brief.report()
        assert stored.text == brief.text
        assert await archive.dates() == ["2026-02-26"]

    @pytest.mark.asyncio
    async def test_deterministic_and_overwrites(self, compiler, archive, newsroom, alice, signature, now):
        first = await compiler.compile(alice, signature, now=now)
        second = await compiler.compile(alice, signature, now=now)

        assert first.report() == second.report()
        assert first.text == second.text
        assert await archive.dates() == ["2026-02-26"]

    @pytest.mark.asyncio
    async def test_sections_carry_streaks(self, compiler, newsroom, alice, signature, now):
        brief = await compiler.compile(alice, signature, now=now)
        # Both of alice's filings fall on the same UTC day
        assert brief.sections[0].streak == 1

    @pytest.mark.asyncio
    async def test_window_excludes_old_and_future(
        self, compiler, registry, ledger, alice, bob, signature, now
    ):
        await registry.claim("bitcoin-macro", "Bitcoin Macro", alice, signature, now=now)
        await registry.claim("defi-yields", "DeFi Yields", bob, signature, now=now)
        await ledger.file(alice, "bitcoin-macro", "Stale", signature, now=now - timedelta(hours=30))
        await ledger.file(alice, "bitcoin-macro", "Fresh", signature, now=now - timedelta(hours=3))
        await ledger.file(bob, "defi-yields", "Future", signature, now=now + timedelta(hours=1))

        brief = await compiler.compile(alice, signature, now=now)

        assert [s.content for s in brief.sections] == ["Fresh"]

    @pytest.mark.asyncio
    async def test_fallback_to_newest_ten(self, compiler, registry, ledger, alice, signature, now):
        await registry.claim("bitcoin-macro", "Bitcoin Macro", alice, signature, now=now)
        start = now - timedelta(days=30)
        for i in range(12):
            await ledger.file(alice, "bitcoin-macro", f"Old {i}", signature, now=start + timedelta(hours=4 * i))

        brief = await compiler.compile(alice, signature, now=now)

        assert brief.summary.signals == 10
        assert brief.sections[0].content == "Old 11"
        assert brief.sections[-1].content == "Old 2"

    @pytest.mark.asyncio
    async def test_lookback_clamped(self, compiler, newsroom, alice, signature, now):
        assert (await compiler.compile(alice, signature, lookback_hours=-5, now=now)).lookback_hours == 1
        assert (await compiler.compile(alice, signature, lookback_hours=500, now=now)).lookback_hours == 168

    @pytest.mark.asyncio
    async def test_zero_lookback_means_default(self, compiler, newsroom, alice, signature, now):
        brief = await compiler.compile(alice, signature, lookback_hours=0, now=now)
        assert brief.lookback_hours == 24
        assert compiler.clamp_lookback(None) == 24

    @pytest.mark.asyncio
    async def test_non_correspondent_forbidden(self, compiler, newsroom, carol, signature, now):
        with pytest.raises(Forbidden):
            await compiler.compile(carol, signature, now=now)

    @pytest.mark.asyncio
    async def test_empty_ledger(self, compiler, registry, alice, signature, now):
        await registry.claim("bitcoin-macro", "Bitcoin Macro", alice, signature, now=now)
        with pytest.raises(NotFound, match="No signals"):
            await compiler.compile(alice, signature, now=now)

    @pytest.mark.asyncio
    async def test_bad_address(self, compiler, signature, now):
        with pytest.raises(InvalidArgument):
            await compiler.compile("nope", signature, now=now)

    @pytest.mark.asyncio
    async def test_missing_signature_hint(self, compiler, alice, now):
        with pytest.raises(Unauthenticated) as exc_info:
            await compiler.compile(alice, "", now=now)
        assert exc_info.value.hint == f'Sign: "SIGNAL|compile-brief|2026-02-26|{alice}"'


class TestSelection:
    """Pure window selection and grouping."""

    @pytest.mark.asyncio
    async def test_select_in_window(self, registry, ledger, alice, signature, now):
        await registry.claim("bitcoin-macro", "Bitcoin Macro", alice, signature, now=now)
        await ledger.file(alice, "bitcoin-macro", "Recent", signature, now=now - timedelta(hours=2))
        feed = await ledger.feed()

        signals, used_fallback = select_signals(feed, now, 24, 1, 10)
        assert [s.content for s in signals] == ["Recent"]
        assert used_fallback is False

        signals, used_fallback = select_signals(feed, now, 1, 1, 10)
        assert [s.content for s in signals] == ["Recent"]
        assert used_fallback is True

    def test_select_empty_feed(self, now):
        assert select_signals([], now, 24, 1, 10) == ([], True)

    def test_group_by_beat_empty(self):
        assert group_by_beat([]) == {}
