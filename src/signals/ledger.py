"""Signal ledger: filing, fan-out into derived indexes, and corrections.

A successful filing performs, in order and without any transaction:

1. ``signal:{id}`` record
2. ``signals:feed-index`` (cap 200)
3. ``signals:agent:{address}`` (cap 100)
4. ``signals:beat:{slug}`` (cap 100)
5. ``signals:tag:{tag}`` for each tag (cap 200)
6. streak update

A failure part-way leaves the earlier writes in place, and concurrent
filings can lose index updates (last writer wins). Both are accepted
limitations of the single-key store.
"""

import asyncio
import logging
import math
from datetime import datetime, timedelta
from typing import Any

from src.beats.registry import BeatRegistry
from src.common.errors import Forbidden, InvalidArgument, NotFound, RateLimited
from src.common.timeutil import parse_iso, to_iso, utcnow
from src.common.validation import (
    is_headline,
    is_signal_id,
    is_slug,
    is_sources,
    is_tags,
    normalize_slug,
    require_btc_address,
    require_signature,
    sanitize,
)
from src.observability.metrics import get_metrics
from src.signals.config import SignalConfig
from src.signals.schemas import Signal, Source, generate_signal_id
from src.storage import keys
from src.storage.index import BoundedListIndex
from src.storage.kv import KeyValueStore
from src.streaks.engine import StreakEngine

logger = logging.getLogger(__name__)


class SignalLedger:
    """Append-only signal store with feed, agent, beat and tag indexes."""

    def __init__(
        self,
        store: KeyValueStore,
        registry: BeatRegistry,
        streaks: StreakEngine,
        config: SignalConfig | None = None,
    ) -> None:
        self._store = store
        self._index = BoundedListIndex(store)
        self._registry = registry
        self._streaks = streaks
        self._config = config or SignalConfig()

    # ── Reads ──────────────────────────────────────────────

    async def get(self, signal_id: str) -> Signal | None:
        data = await self._store.get(keys.signal(signal_id))
        return Signal.from_dict(data) if data else None

    async def require(self, signal_id: str) -> Signal:
        if not is_signal_id(signal_id):
            raise InvalidArgument("Invalid signal ID format")
        signal = await self.get(signal_id)
        if signal is None:
            raise NotFound("Signal not found")
        return signal

    async def _load(self, signal_ids: list[str]) -> list[Signal]:
        docs = await asyncio.gather(*(self._store.get(keys.signal(i)) for i in signal_ids))
        return [Signal.from_dict(doc) for doc in docs if doc]

    async def feed(self) -> list[Signal]:
        """Every signal still in the global feed, newest first."""
        return await self._load(await self._index.read(keys.SIGNAL_FEED))

    async def agent_signal_ids(self, agent: str) -> list[str]:
        return await self._index.read(keys.agent_signals(agent))

    async def recent_for_agent(self, agent: str, limit: int = 10) -> list[Signal]:
        ids = await self.agent_signal_ids(agent)
        return await self._load(ids[:limit])

    async def latest_for_agent(self, agent: str) -> Signal | None:
        """The agent's newest signal, via the head of their index."""
        ids = await self.agent_signal_ids(agent)
        return await self.get(ids[0]) if ids else None

    async def list_signals(
        self,
        beat: str | None = None,
        agent: str | None = None,
        tag: str | None = None,
        limit: int | None = None,
    ) -> tuple[list[Signal], int]:
        """Read the feed (or a tag index) with optional filters.

        Args:
            beat: Beat slug or name filter.
            agent: Filer address filter.
            tag: Read the tag index instead of the global feed.
            limit: Maximum signals returned (capped at ``max_list_limit``).

        Returns:
            Tuple of (signals newest first, length of the index read).
        """
        limit = min(max(limit or self._config.default_list_limit, 1), self._config.max_list_limit)
        index_key = keys.tag_signals(tag) if tag else keys.SIGNAL_FEED
        signal_ids = await self._index.read(index_key)

        signals = []
        for signal in await self._load(signal_ids):
            if beat and beat not in (signal.beat_slug, signal.beat):
                continue
            if agent and signal.btc_address != agent:
                continue
            signals.append(signal)
            if len(signals) >= limit:
                break
        return signals, len(signal_ids)

    # ── Filing ─────────────────────────────────────────────

    def filing_wait(self, last_signal: Signal | None, now: datetime) -> timedelta:
        """Time left before the agent may file again (zero when allowed)."""
        if last_signal is None:
            return timedelta(0)
        interval = timedelta(hours=self._config.filing_interval_hours)
        elapsed = now - parse_iso(last_signal.timestamp)
        if elapsed >= interval:
            return timedelta(0)
        return interval - elapsed

    async def file(
        self,
        agent: str,
        beat_slug: str,
        content: str,
        signature: str,
        headline: str | None = None,
        sources: list[dict[str, Any]] | None = None,
        tags: list[str] | None = None,
        now: datetime | None = None,
    ) -> Signal:
        """File a signal on a beat the agent has claimed.

        Raises:
            InvalidArgument: Missing fields or bad headline/sources/tags/content.
            Unauthenticated: Missing or malformed signature.
            NotFound: Unknown beat.
            Forbidden: Agent is not the beat's claimant.
            RateLimited: Agent filed less than the filing interval ago.
        """
        now = now or utcnow()
        if not agent or not beat_slug or not content:
            raise InvalidArgument("Missing required fields: btcAddress, beat, content")
        require_btc_address(agent)
        require_signature(signature, f"SIGNAL|submit|{beat_slug}|{agent}|{{ISO timestamp}}")

        if headline is not None and not is_headline(headline):
            raise InvalidArgument("Invalid headline (string, 1-120 chars)")
        if sources is not None and not is_sources(sources):
            raise InvalidArgument("Invalid sources (array of {url, title}, max 5)")
        if tags is not None and not is_tags(tags):
            raise InvalidArgument(
                "Invalid tags (array of lowercase slugs, max 10, 2-30 chars each)"
            )

        clean_content = sanitize(content, self._config.max_content_length)
        if not clean_content:
            raise InvalidArgument("Content cannot be empty")

        slug = normalize_slug(beat_slug)
        if not is_slug(slug):
            raise InvalidArgument("Invalid beat slug (a-z0-9 + hyphens, 3-50 chars)")

        beat = await self._registry.get(slug)
        if beat is None:
            raise NotFound(
                f'Beat "{beat_slug}" not found',
                hint="Claim it first via POST /beats",
            )
        if beat.claimed_by != agent:
            raise Forbidden(f'Beat "{beat_slug}" is claimed by {beat.claimed_by}, not {agent}')

        wait = self.filing_wait(await self.latest_for_agent(agent), now)
        if wait > timedelta(0):
            wait_minutes = math.ceil(wait.total_seconds() / 60)
            raise RateLimited(
                f"Rate limited. Next signal allowed in {wait_minutes} minutes.",
                retry_after_seconds=math.ceil(wait.total_seconds()),
            )

        unique_tags = list(dict.fromkeys(tags)) if tags else None
        signal = Signal(
            id=generate_signal_id(now),
            btc_address=agent,
            beat=beat.name,
            beat_slug=slug,
            headline=sanitize(headline, 120) if headline else None,
            content=clean_content,
            sources=[Source(url=s["url"], title=s["title"]) for s in sources] if sources else None,
            tags=unique_tags,
            timestamp=to_iso(now),
            signature=signature,
        )

        await self._store.put(keys.signal(signal.id), signal.to_dict())
        await self._fan_out(signal)
        await self._streaks.update(agent, now)

        get_metrics().record_signal_filed(slug)
        logger.info("Signal %s filed on %s by %s", signal.id, slug, agent)
        return signal

    async def _fan_out(self, signal: Signal) -> None:
        cfg = self._config
        await self._index.prepend(keys.SIGNAL_FEED, signal.id, cfg.feed_cap)
        await self._index.prepend(keys.agent_signals(signal.btc_address), signal.id, cfg.agent_cap)
        await self._index.prepend(keys.beat_signals(signal.beat_slug), signal.id, cfg.beat_cap)
        if signal.tags:
            await asyncio.gather(
                *(
                    self._index.prepend(keys.tag_signals(tag), signal.id, cfg.tag_cap)
                    for tag in signal.tags
                )
            )

    # ── Corrections ────────────────────────────────────────

    async def correct(
        self,
        signal_id: str,
        author: str,
        correction: str,
        signature: str,
        now: datetime | None = None,
    ) -> Signal:
        """Attach the author's correction; the original content is kept.

        Raises:
            InvalidArgument: Bad id, missing fields or empty correction.
            Unauthenticated: Missing or malformed signature.
            NotFound: Unknown signal.
            Forbidden: Caller is not the original author.
        """
        now = now or utcnow()
        if not is_signal_id(signal_id):
            raise InvalidArgument("Invalid signal ID format")
        if not author or not correction:
            raise InvalidArgument("Missing required fields: btcAddress, correction, signature")
        require_btc_address(author)
        require_signature(signature)

        clean = sanitize(correction, self._config.max_correction_length)
        if not clean:
            raise InvalidArgument("Correction cannot be empty")

        signal = await self.require(signal_id)
        if signal.btc_address != author:
            raise Forbidden("Only the original author can correct this signal")

        signal.correction = clean
        signal.corrected_at = to_iso(now)
        await self._store.put(keys.signal(signal.id), signal.to_dict())

        get_metrics().record_signal_corrected()
        logger.info("Signal %s corrected by %s", signal.id, author)
        return signal
