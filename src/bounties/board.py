"""Bounty board: posting, filtered listing, single reads and stats.

Posting writes, in order and without any transaction:

1. ``bounty:{id}`` record
2. ``bounties:index`` (cap 1000)
3. ``bounties:creator:{address}`` (cap 100)
4. ``bounties:beat:{slug}`` when the bounty names a beat (cap 200)

Listing walks the global index, or the creator or beat index when filtered
that way; stats walk the global index. A bounty evicted from an index no
longer shows up there even though its record remains readable by id.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any

from src.bounties.config import BountyConfig
from src.bounties.schemas import BOUNTY_OPEN, BOUNTY_STATUSES, Bounty, generate_bounty_id
from src.common.errors import InvalidArgument, NotFound
from src.common.timeutil import parse_iso, to_iso, utcnow
from src.common.validation import (
    is_bounty_id,
    is_slug,
    require_btc_address,
    require_signature,
    sanitize,
)
from src.observability.metrics import get_metrics
from src.storage import keys
from src.storage.index import BoundedListIndex
from src.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

SORT_NEWEST = "newest"
SORT_AMOUNT_HIGH = "amount_high"
SORT_AMOUNT_LOW = "amount_low"


def _parse_moment(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return parse_iso(value)
    except ValueError:
        return None


class BountyBoard:
    """Free-to-post bounties with global, creator and beat indexes."""

    def __init__(self, store: KeyValueStore, config: BountyConfig | None = None) -> None:
        self._store = store
        self._index = BoundedListIndex(store)
        self._config = config or BountyConfig()

    # ── Reads ──────────────────────────────────────────────

    async def get(self, bounty_id: str) -> Bounty | None:
        data = await self._store.get(keys.bounty(bounty_id))
        return Bounty.from_dict(data) if data else None

    async def detail(self, bounty_id: str) -> dict[str, Any]:
        """The bounty document with its ``claims`` list attached.

        Raises:
            InvalidArgument: Malformed id.
            NotFound: Unknown bounty.
        """
        if not is_bounty_id(bounty_id):
            raise InvalidArgument("Invalid bounty ID format")
        bounty, claims = await asyncio.gather(
            self.get(bounty_id),
            self._index.read(keys.bounty_claims(bounty_id)),
        )
        if bounty is None:
            raise NotFound("Bounty not found")
        return {**bounty.to_dict(), "claims": claims}

    async def _load(self, bounty_ids: list[str]) -> list[Bounty]:
        docs = await asyncio.gather(*(self._store.get(keys.bounty(i)) for i in bounty_ids))
        return [Bounty.from_dict(doc) for doc in docs if doc]

    def page_size(self, limit: int | None) -> int:
        """Requested page size clamped to [1, max_list_limit] (default 20)."""
        return min(max(limit or self._config.default_list_limit, 1), self._config.max_list_limit)

    async def list_bounties(
        self,
        status: str | None = None,
        beat: str | None = None,
        creator: str | None = None,
        skills: list[str] | None = None,
        sort: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[Bounty], int]:
        """Filter, sort and page the board.

        Args:
            status: Only bounties in this status.
            beat: Only bounties tied to this beat slug (reads the beat index).
            creator: Only bounties posted by this address (reads the creator index).
            skills: Keep bounties wanting at least one of these (case-insensitive).
            sort: ``newest`` (index order), ``amount_high`` or ``amount_low``.
                Anything else reads as ``newest``.
            limit: Page size (capped at ``max_list_limit``, default 20).
            offset: Matches to skip.

        Returns:
            Tuple of (page, number of matches before paging).

        Raises:
            InvalidArgument: Unknown status.
        """
        if status and status not in BOUNTY_STATUSES:
            raise InvalidArgument(f"Invalid status. Must be one of: {', '.join(BOUNTY_STATUSES)}")
        wanted = {s.strip().lower() for s in skills or [] if s and s.strip()}
        limit = self.page_size(limit)
        offset = max(offset or 0, 0)

        if creator:
            index_key = keys.creator_bounties(creator)
        elif beat:
            index_key = keys.beat_bounties(beat)
        else:
            index_key = keys.BOUNTIES_INDEX

        matching = []
        for bounty in await self._load(await self._index.read(index_key)):
            if creator and bounty.creator_btc != creator:
                continue
            if status and bounty.status != status:
                continue
            if beat and bounty.beat_slug != beat:
                continue
            if wanted and not wanted & {s.lower() for s in bounty.skills}:
                continue
            matching.append(bounty)

        if sort == SORT_AMOUNT_HIGH:
            matching.sort(key=lambda b: b.amount_sats, reverse=True)
        elif sort == SORT_AMOUNT_LOW:
            matching.sort(key=lambda b: b.amount_sats)

        return matching[offset : offset + limit], len(matching)

    async def stats(self) -> dict[str, int]:
        """Index size, a count per status, total sats and sats still open."""
        ids = await self._index.read(keys.BOUNTIES_INDEX)
        bounties = await self._load(ids)
        counts = dict.fromkeys(BOUNTY_STATUSES, 0)
        total_sats = open_sats = 0
        for bounty in bounties:
            if bounty.status in counts:
                counts[bounty.status] += 1
            total_sats += bounty.amount_sats
            if bounty.status == BOUNTY_OPEN:
                open_sats += bounty.amount_sats
        return {"total": len(ids), **counts, "totalSats": total_sats, "openSats": open_sats}

    # ── Posting ────────────────────────────────────────────

    def _check_labels(self, values: Any, kind: str) -> list[str]:
        cfg = self._config
        if values is None:
            return []
        if not isinstance(values, list) or len(values) > cfg.max_labels:
            raise InvalidArgument(f"{kind}s must be an array of up to {cfg.max_labels} strings")
        for value in values:
            if not isinstance(value, str) or not 1 <= len(value) <= cfg.max_label_length:
                raise InvalidArgument(
                    f"Each {kind} must be a non-empty string up to {cfg.max_label_length} chars"
                )
        return list(values)

    async def create(
        self,
        creator: str,
        title: str,
        description: str,
        amount_sats: Any,
        signature: str,
        timestamp: str,
        creator_name: str | None = None,
        tags: list[str] | None = None,
        skills: list[str] | None = None,
        beat_slug: str | None = None,
        deadline: str | None = None,
        now: datetime | None = None,
    ) -> Bounty:
        """Post a bounty.

        Args:
            creator: Posting agent's BTC address.
            title: Title, trimmed.
            description: Body, trimmed.
            amount_sats: Integer reward in sats.
            signature: Signature supplied by the creator.
            timestamp: ISO time the creator signed at; must be within
                ``timestamp_tolerance_seconds`` of ``now``.
            creator_name: Optional display name.
            tags: Optional labels.
            skills: Optional skills wanted.
            beat_slug: Optional beat the bounty is about.
            deadline: Optional ISO deadline, strictly in the future.
            now: Posting time (defaults to UTC now).

        Raises:
            InvalidArgument: Missing or malformed fields.
            Unauthenticated: Missing or malformed signature.
        """
        now = now or utcnow()
        cfg = self._config
        required = (creator, title, description, signature, timestamp)
        if not all(required) or amount_sats is None:
            raise InvalidArgument(
                "Missing required fields: btcAddress, title, description, "
                "amountSats, signature, timestamp"
            )
        require_btc_address(creator)
        require_signature(signature)

        signed_at = _parse_moment(timestamp)
        if signed_at is None:
            raise InvalidArgument("Invalid timestamp (expected ISO 8601)")
        if abs(now - signed_at) > timedelta(seconds=cfg.timestamp_tolerance_seconds):
            raise InvalidArgument(
                "Timestamp too old or too far in future "
                f"(must be within {cfg.timestamp_tolerance_seconds // 60} minutes)"
            )

        clean_title = sanitize(title, cfg.max_title_length)
        if len(clean_title) < cfg.min_title_length:
            raise InvalidArgument(
                f"Title too short (min {cfg.min_title_length} chars, max {cfg.max_title_length})"
            )
        clean_description = sanitize(description, cfg.max_description_length)
        if len(clean_description) < cfg.min_description_length:
            raise InvalidArgument(
                f"Description too short (min {cfg.min_description_length} chars, "
                f"max {cfg.max_description_length})"
            )

        if (
            isinstance(amount_sats, bool)
            or not isinstance(amount_sats, int)
            or amount_sats < cfg.min_amount_sats
        ):
            raise InvalidArgument(f"amountSats must be an integer >= {cfg.min_amount_sats}")

        clean_tags = self._check_labels(tags, "tag")
        clean_skills = self._check_labels(skills, "skill")

        slug = beat_slug.lower() if beat_slug else None
        if slug and not is_slug(slug):
            raise InvalidArgument("Invalid beatSlug (a-z0-9 + hyphens, 3-50 chars)")

        due = None
        if deadline is not None:
            due = _parse_moment(deadline)
            if due is None:
                raise InvalidArgument("Invalid deadline (expected ISO 8601)")
            if due <= now:
                raise InvalidArgument("deadline must be in the future")

        bounty = Bounty(
            id=generate_bounty_id(now),
            creator_btc=creator,
            creator_name=sanitize(creator_name, 100) or None,
            title=clean_title,
            description=clean_description,
            amount_sats=amount_sats,
            tags=clean_tags,
            skills=clean_skills,
            beat_slug=slug,
            deadline=to_iso(due) if due else None,
            created_at=to_iso(now),
            updated_at=to_iso(now),
        )

        await self._store.put(keys.bounty(bounty.id), bounty.to_dict())
        await self._index.prepend(keys.BOUNTIES_INDEX, bounty.id, cfg.index_cap)
        await self._index.prepend(keys.creator_bounties(creator), bounty.id, cfg.creator_cap)
        if slug:
            await self._index.prepend(keys.beat_bounties(slug), bounty.id, cfg.beat_cap)

        get_metrics().record_bounty_created()
        logger.info("Bounty %s posted by %s for %d sats", bounty.id, creator, amount_sats)
        return bounty

