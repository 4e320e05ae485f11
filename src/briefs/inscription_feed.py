"""
Recent on-chain news inscriptions.

Reads the inscription indexer's listing (``{"keys": [{"name", "metadata"}]}``)
and flattens it into ``{"name", **metadata}`` entries, highest inscription
number first. Entries without metadata are skipped.
"""

import logging
from typing import Any

import httpx

from src.briefs.config import BriefConfig
from src.common.errors import UpstreamFailure

logger = logging.getLogger(__name__)


def flatten_listing(raw: Any) -> list[dict[str, Any]]:
    """Turn the indexer's key listing into entries sorted by number, descending."""
    keys = raw.get("keys") if isinstance(raw, dict) else None
    entries = [
        {"name": entry.get("name"), **entry["metadata"]}
        for entry in keys or []
        if isinstance(entry, dict) and isinstance(entry.get("metadata"), dict)
    ]
    entries.sort(key=lambda e: e.get("number") or 0, reverse=True)
    return entries


class InscriptionFeed:
    """
    Proxy for the inscription indexer's recent news listing.

    Example:
        feed = InscriptionFeed(BriefConfig())
        latest = await feed.recent(limit=5)
    """

    def __init__(
        self,
        config: BriefConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._config = config or BriefConfig()
        self._http = http_client

    async def recent(self, limit: int | None = None) -> list[dict[str, Any]]:
        """
        Fetch the newest inscriptions.

        Args:
            limit: Entries returned (default 10, capped at the configured max).

        Raises:
            UpstreamFailure: Indexer unreachable or returned garbage.
        """
        cfg = self._config
        limit = min(
            max(limit or cfg.inscription_feed_default_limit, 1),
            cfg.inscription_feed_max_limit,
        )

        try:
            if self._http is not None:
                response = await self._http.get(cfg.inscription_feed_url)
            else:
                timeout = cfg.inscription_feed_timeout_seconds
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.get(cfg.inscription_feed_url)
            response.raise_for_status()
            raw = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Inscription feed error: %s", e)
            raise UpstreamFailure("Failed to fetch inscriptions") from e

        return flatten_listing(raw)[:limit]
