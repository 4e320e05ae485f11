"""Tests for bounded list indexes."""

import pytest

from src.storage.index import BoundedListIndex
from src.storage.kv import MemoryStore


@pytest.fixture
def index():
    return BoundedListIndex(MemoryStore())


class TestPrepend:
    """Newest-first capped lists."""

    @pytest.mark.asyncio
    async def test_read_missing_is_empty(self, index):
        assert await index.read("signals:feed-index") == []

    @pytest.mark.asyncio
    async def test_newest_first(self, index):
        await index.prepend("feed", "a", cap=10)
        await index.prepend("feed", "b", cap=10)
        assert await index.read("feed") == ["b", "a"]

    @pytest.mark.asyncio
    async def test_cap_evicts_exactly_the_oldest(self, index):
        for i in range(200):
            await index.prepend("feed", f"s{i}", cap=200)
        items = await index.read("feed")
        assert len(items) == 200
        assert items[-1] == "s0"

        await index.prepend("feed", "s200", cap=200)
        items = await index.read("feed")
        assert len(items) == 200
        assert items[0] == "s200"
        assert "s0" not in items
        assert items[-1] == "s1"


class TestAddUnique:
    """Set-like indexes (beats, brief dates)."""

    @pytest.mark.asyncio
    async def test_append_once(self, index):
        await index.add_unique("beats", "btc")
        await index.add_unique("beats", "eth")
        await index.add_unique("beats", "btc")
        assert await index.read("beats") == ["btc", "eth"]

    @pytest.mark.asyncio
    async def test_at_head_with_cap(self, index):
        for day in ["2026-02-24", "2026-02-25", "2026-02-26"]:
            await index.add_unique("briefs", day, cap=2, at_head=True)
        assert await index.read("briefs") == ["2026-02-26", "2026-02-25"]

    @pytest.mark.asyncio
    async def test_present_item_is_not_rewritten(self, index):
        await index.add_unique("briefs", "2026-02-25", at_head=True)
        await index.add_unique("briefs", "2026-02-26", at_head=True)
        await index.add_unique("briefs", "2026-02-25", at_head=True)
        assert await index.read("briefs") == ["2026-02-26", "2026-02-25"]
