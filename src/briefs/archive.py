"""Brief archive: stored briefs by date, the date index and inscriptions."""

import logging
from datetime import datetime
from typing import Any

from src.briefs.config import BriefConfig
from src.briefs.schemas import Brief, Inscription
from src.common.errors import Conflict, InvalidArgument, NotFound
from src.common.timeutil import date_key, to_iso, utcnow
from src.common.validation import (
    is_inscription_id,
    require_btc_address,
    require_date_key,
    require_signature,
)
from src.storage import keys
from src.storage.index import BoundedListIndex
from src.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)


class BriefArchive:
    """Read/write access to ``brief:{date}`` and ``briefs:index``."""

    def __init__(self, store: KeyValueStore, config: BriefConfig | None = None) -> None:
        self._store = store
        self._index = BoundedListIndex(store)
        self._config = config or BriefConfig()

    async def dates(self) -> list[str]:
        """Dates with a compiled brief, newest first."""
        return await self._index.read(keys.BRIEFS_INDEX)

    async def save(self, brief: Brief) -> None:
        """Store ``brief``, replacing any brief already compiled for its date."""
        await self._store.put(keys.brief(brief.date), brief.to_record())
        await self._index.add_unique(
            keys.BRIEFS_INDEX,
            brief.date,
            self._config.archive_cap,
            at_head=True,
        )

    async def find(self, day: str) -> Brief | None:
        record = await self._store.get(keys.brief(day))
        return Brief.from_record(day, record) if record else None

    async def get(self, day: str) -> Brief:
        """The brief for ``day``.

        Raises:
            InvalidArgument: ``day`` is not ``YYYY-MM-DD``.
            NotFound: No brief for that date (hint lists available dates).
        """
        require_date_key(day)
        brief = await self.find(day)
        if brief is not None:
            return brief

        available = await self.dates()
        if not available:
            hint = "No briefs have been compiled yet. POST /brief/compile to compile one."
        else:
            more = "..." if len(available) > 10 else ""
            hint = f"Available dates: {', '.join(available[:10])}{more}"
        raise NotFound(f"No brief for {day}", hint=hint)

    async def latest(self, now: datetime | None = None) -> tuple[Brief, bool]:
        """Today's brief if compiled, else the newest one.

        Returns:
            Tuple of (brief, is_today).

        Raises:
            NotFound: Nothing compiled yet.
        """
        today = date_key(now or utcnow())
        available = await self.dates()
        if today in available:
            day = today
        elif available:
            day = available[0]
        else:
            raise NotFound(
                "No briefs compiled yet",
                hint="POST /brief/compile to compile the first brief",
            )

        brief = await self.find(day)
        if brief is None:
            raise NotFound(f"Brief data missing for {day}")
        return brief, day == today

    async def record_inscription(
        self,
        day: str,
        inscriber: str,
        signature: str,
        inscription_id: str,
        now: datetime | None = None,
    ) -> Inscription:
        """Attach an inscription report to the brief for ``day`` (once).

        Raises:
            InvalidArgument: Bad date, address or inscription id.
            Unauthenticated: Missing or malformed signature.
            NotFound: No brief for that date.
            Conflict: The brief already has an inscription.
        """
        require_date_key(day)
        if not inscriber or not inscription_id:
            raise InvalidArgument("Missing required fields: btcAddress, signature, inscriptionId")
        require_btc_address(inscriber)
        require_signature(signature)
        if not is_inscription_id(inscription_id):
            raise InvalidArgument(
                "Invalid inscription ID format",
                hint="Expected {txid}i{index} (e.g. abc123...i0) or numeric ordinal number",
            )

        brief = await self.find(day)
        if brief is None:
            raise NotFound(f"No brief found for {day}")
        if brief.inscription is not None:
            raise Conflict(
                f"Brief for {day} is already inscribed ({brief.inscription.inscription_id})"
            )

        brief.inscription = Inscription(
            inscription_id=inscription_id,
            inscribed_by=inscriber,
            inscribed_at=to_iso(now or utcnow()),
            signature=signature,
        )
        await self._store.put(keys.brief(day), brief.to_record())
        logger.info("Brief %s inscribed as %s by %s", day, inscription_id, inscriber)
        return brief.inscription

    async def inscription_status(self, day: str) -> dict[str, Any]:
        """Inscription state of the brief for ``day``, with an ordinals link."""
        require_date_key(day)
        brief = await self.find(day)
        if brief is None:
            raise NotFound(f"No brief found for {day}")
        if brief.inscription is None:
            return {"date": day, "inscribed": False}

        inscription = brief.inscription
        return {
            "date": day,
            "inscribed": True,
            "inscriptionId": inscription.inscription_id,
            "ordinalLink": f"{self._config.ordinals_base_url}/{inscription.inscription_id}",
            "inscribedBy": inscription.inscribed_by,
            "inscribedAt": inscription.inscribed_at,
        }
