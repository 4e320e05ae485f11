"""Tests for the recent-inscriptions proxy."""

import httpx
import pytest
import respx

from src.briefs.config import BriefConfig
from src.briefs.inscription_feed import InscriptionFeed, flatten_listing
from src.common.errors import UpstreamFailure

FEED_URL = "https://indexer.test/api/data/ord-news"

LISTING = {
    "list_complete": True,
    "keys": [
        {"name": "brief-2026-02-24", "metadata": {"id": "aaa i0", "number": 101}},
        {"name": "orphan"},
        {"name": "brief-2026-02-26", "metadata": {"id": "ccc i0", "number": 305}},
        {"name": "brief-2026-02-25", "metadata": {"id": "bbb i0", "number": 204}},
        {"name": "unnumbered", "metadata": {"id": "ddd i0"}},
    ],
}


@pytest.fixture
def feed():
    return InscriptionFeed(BriefConfig(inscription_feed_url=FEED_URL))


class TestFlatten:
    """Indexer listing to entries."""

    def test_sorted_by_number_descending(self):
        entries = flatten_listing(LISTING)

        assert [e["name"] for e in entries] == [
            "brief-2026-02-26",
            "brief-2026-02-25",
            "brief-2026-02-24",
            "unnumbered",
        ]
        assert entries[0] == {"name": "brief-2026-02-26", "id": "ccc i0", "number": 305}

    @pytest.mark.parametrize("raw", [{}, {"keys": None}, [], "nope"])
    def test_empty_or_odd_listing(self, raw):
        assert flatten_listing(raw) == []


class TestRecent:
    """Fetching through httpx."""

    @pytest.mark.asyncio
    async def test_recent_default_limit(self, feed):
        listing = {
            "keys": [{"name": f"n{i}", "metadata": {"number": i}} for i in range(15)],
        }
        with respx.mock:
            respx.get(FEED_URL).mock(return_value=httpx.Response(200, json=listing))
            entries = await feed.recent()

        assert len(entries) == 10
        assert entries[0]["number"] == 14

    @pytest.mark.asyncio
    async def test_recent_with_limit(self, feed):
        with respx.mock:
            respx.get(FEED_URL).mock(return_value=httpx.Response(200, json=LISTING))
            entries = await feed.recent(limit=2)

        assert [e["number"] for e in entries] == [305, 204]

    @pytest.mark.asyncio
    async def test_indexer_unreachable(self, feed):
        with respx.mock:
            respx.get(FEED_URL).mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(UpstreamFailure, match="Failed to fetch inscriptions") as exc_info:
                await feed.recent()

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_indexer_error_status(self, feed):
        with respx.mock:
            respx.get(FEED_URL).mock(return_value=httpx.Response(503, text="down"))
            with pytest.raises(UpstreamFailure):
                await feed.recent()

    @pytest.mark.asyncio
    async def test_indexer_returns_garbage(self, feed):
        with respx.mock:
            respx.get(FEED_URL).mock(return_value=httpx.Response(200, text="<html>"))
            with pytest.raises(UpstreamFailure):
                await feed.recent()

    @pytest.mark.asyncio
    async def test_shared_http_client(self):
        with respx.mock:
            respx.get(FEED_URL).mock(return_value=httpx.Response(200, json=LISTING))
            async with httpx.AsyncClient() as http:
                feed = InscriptionFeed(BriefConfig(inscription_feed_url=FEED_URL), http_client=http)
                entries = await feed.recent(limit=1)

        assert entries[0]["name"] == "brief-2026-02-26"
