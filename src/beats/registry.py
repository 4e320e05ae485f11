"""Beat registry: claim, reclaim, claimant edits and lazy staleness.

The registry is the source of truth for "who may file what". There is no
background job: a beat's status is re-evaluated whenever it is read, by
looking up the claimant's newest signal through the per-agent index.
"""

import asyncio
import logging
from datetime import datetime, timedelta

from src.beats.config import BeatConfig
from src.beats.schemas import BEAT_ACTIVE, BEAT_INACTIVE, Beat
from src.common.errors import Conflict, Forbidden, InvalidArgument, NotFound
from src.common.timeutil import parse_iso, to_iso, utcnow
from src.common.validation import (
    is_hex_color,
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


def is_stale(
    last_signal_at: datetime | None,
    has_signals: bool,
    now: datetime,
    expiry_days: int,
) -> bool:
    """Decide whether a claimant has gone quiet on their beat.

    A claimant who has never filed is not stale. One whose newest signal
    cannot be found, or is older than ``expiry_days``, is.
    """
    if not has_signals:
        return False
    if last_signal_at is None:
        return True
    return last_signal_at < now - timedelta(days=expiry_days)


class BeatRegistry:
    """Claim lifecycle for beats stored at ``beat:{slug}``.

    Args:
        store: Key-value store handle.
        config: Registry settings (expiry window, default color).
    """

    def __init__(self, store: KeyValueStore, config: BeatConfig | None = None) -> None:
        self._store = store
        self._index = BoundedListIndex(store)
        self._config = config or BeatConfig()

    async def get(self, slug: str) -> Beat | None:
        data = await self._store.get(keys.beat(slug))
        return Beat.from_dict(data) if data else None

    async def require(self, slug: str) -> Beat:
        beat = await self.get(slug)
        if beat is None:
            raise NotFound(
                f'Beat "{slug}" not found',
                hint="Claim it first via POST /beats",
            )
        return beat

    async def all_beats(self) -> list[Beat]:
        """Every registered beat in registration order, without staleness checks."""
        slugs = await self._index.read(keys.BEATS_INDEX)
        docs = await asyncio.gather(*(self._store.get(keys.beat(s)) for s in slugs))
        return [Beat.from_dict(doc) for doc in docs if doc]

    async def list_beats(self, now: datetime | None = None) -> list[Beat]:
        """Every registered beat, with the staleness check applied to each."""
        now = now or utcnow()
        beats = await self.all_beats()
        return list(await asyncio.gather(*(self.check_staleness(b, now) for b in beats)))

    async def beats_claimed_by(self, address: str) -> list[Beat]:
        return [b for b in await self.all_beats() if b.claimed_by == address]

    async def is_correspondent(self, address: str) -> bool:
        """True when ``address`` currently claims at least one beat."""
        return bool(await self.beats_claimed_by(address))

    async def check_staleness(self, beat: Beat, now: datetime | None = None) -> Beat:
        """Flip ``beat`` to inactive if its claimant has gone quiet.

        Reads the claimant's newest signal via ``signals:agent:{address}``.
        Persists only when the status actually changes.
        """
        if beat.status == BEAT_INACTIVE:
            return beat
        now = now or utcnow()

        signal_ids = await self._index.read(keys.agent_signals(beat.claimed_by))
        last_signal_at = None
        if signal_ids:
            last_signal = await self._store.get(keys.signal(signal_ids[0]))
            if last_signal and last_signal.get("timestamp"):
                last_signal_at = parse_iso(last_signal["timestamp"])

        if is_stale(last_signal_at, bool(signal_ids), now, self._config.expiry_days):
            beat.status = BEAT_INACTIVE
            await self._store.put(keys.beat(beat.slug), beat.to_dict())
            get_metrics().record_beat_expired()
            logger.info(
                "Beat %s marked inactive (claimant %s silent for %d+ days)",
                beat.slug,
                beat.claimed_by,
                self._config.expiry_days,
            )
        return beat

    async def claim(
        self,
        slug: str,
        name: str,
        claimant: str,
        signature: str,
        description: str | None = None,
        color: str | None = None,
        now: datetime | None = None,
    ) -> tuple[Beat, bool]:
        """Claim a new beat or reclaim an inactive one.

        Args:
            slug: Beat key.
            name: Display name.
            claimant: Claiming agent's BTC address.
            signature: Signature over ``SIGNAL|claim-beat|{slug}|{address}``.
            description: Optional scope description.
            color: Optional ``#RRGGBB`` color.
            now: Current time (defaults to UTC now).

        Returns:
            Tuple of (beat, reclaimed).

        Raises:
            InvalidArgument: Missing or malformed fields.
            Unauthenticated: Missing or malformed signature.
            Conflict: The beat has an active claimant.
        """
        now = now or utcnow()
        if not claimant or not name or not slug:
            raise InvalidArgument("Missing required fields: btcAddress, name, slug")
        require_btc_address(claimant)
        if not is_slug(slug):
            raise InvalidArgument("Invalid slug (a-z0-9 + hyphens, 3-50 chars)")
        if color and not is_hex_color(color):
            raise InvalidArgument("Invalid color format (expected #RRGGBB)")
        require_signature(signature, f"SIGNAL|claim-beat|{slug}|{claimant}")

        clean_name = sanitize(name, self._config.max_name_length)
        if not clean_name:
            raise InvalidArgument("Beat name cannot be empty")

        existing = await self.get(slug)
        if existing is not None:
            existing = await self.check_staleness(existing, now)
            if existing.is_active:
                raise Conflict(f'Beat "{slug}" is already claimed by {existing.claimed_by}')

        beat = Beat(
            slug=slug,
            name=clean_name,
            description=sanitize(description or "", self._config.max_description_length),
            color=color or self._config.default_color,
            claimed_by=claimant,
            claimed_at=to_iso(now),
            status=BEAT_ACTIVE,
            signature=signature,
            previous_claimant=existing.claimed_by if existing else None,
        )
        reclaimed = existing is not None

        await self._store.put(keys.beat(slug), beat.to_dict())
        await self._index.add_unique(keys.BEATS_INDEX, slug)

        get_metrics().record_beat_claimed(reclaimed)
        logger.info(
            "Beat %s %s by %s",
            slug,
            "reclaimed" if reclaimed else "claimed",
            claimant,
        )
        return beat, reclaimed

    async def update(
        self,
        slug: str,
        claimant: str,
        signature: str,
        description: str | None = None,
        color: str | None = None,
        now: datetime | None = None,
    ) -> Beat:
        """Edit the description and/or color of a beat (claimant only).

        Raises:
            InvalidArgument: Missing fields or bad color.
            Unauthenticated: Missing or malformed signature.
            NotFound: Unknown slug.
            Forbidden: Caller is not the current claimant.
        """
        now = now or utcnow()
        if not claimant or not slug:
            raise InvalidArgument("Missing required fields: btcAddress, slug, signature")
        require_btc_address(claimant)
        require_signature(signature, f"SIGNAL|update-beat|{slug}|{claimant}")

        beat = await self.get(slug)
        if beat is None:
            raise NotFound(f'Beat "{slug}" not found')
        if beat.claimed_by != claimant:
            raise Forbidden("Only the claimant can update this beat")

        if color is not None and not is_hex_color(color):
            raise InvalidArgument("Invalid color format (expected #RRGGBB)")

        if description is not None:
            beat.description = sanitize(description, self._config.max_description_length)
        if color is not None:
            beat.color = color
        beat.signature = signature
        beat.updated_at = to_iso(now)

        await self._store.put(keys.beat(slug), beat.to_dict())
        logger.info("Beat %s updated by %s", slug, claimant)
        return beat
