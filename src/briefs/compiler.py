"""Brief compiler: aggregates recent signals into the brief for today.

Compilation reads beats, the global signal feed and every filer's streak,
then writes a single ``brief:{date}`` record (overwriting any earlier
compilation for the same date) and adds the date to the archive index.
Given the same ledger state and ``now``, output is identical.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta

from src.beats.registry import BeatRegistry
from src.briefs.archive import BriefArchive
from src.briefs.config import BriefConfig
from src.briefs.rendering import render_text
from src.briefs.schemas import Brief, BriefSection, BriefSummary
from src.common.errors import Forbidden, NotFound
from src.common.timeutil import date_key, parse_iso, to_iso, utcnow
from src.common.validation import require_btc_address, require_signature, short_address
from src.observability.metrics import get_metrics
from src.signals.ledger import SignalLedger
from src.signals.schemas import Signal
from src.streaks.engine import StreakEngine

logger = logging.getLogger(__name__)


def select_signals(
    feed: list[Signal],
    now: datetime,
    lookback_hours: int,
    min_signals: int,
    fallback_count: int,
) -> tuple[list[Signal], bool]:
    """Pick the signals a brief covers.

    Args:
        feed: Global feed, newest first.
        now: Compilation time.
        lookback_hours: Window length.
        min_signals: Below this many in-window signals, fall back.
        fallback_count: How many of the newest signals the fallback uses.

    Returns:
        Tuple of (signals, used_fallback).
    """
    cutoff = now - timedelta(hours=lookback_hours)
    in_window = [s for s in feed if cutoff <= parse_iso(s.timestamp) <= now]
    if len(in_window) >= min_signals:
        return in_window, False
    return feed[:fallback_count], True


def group_by_beat(signals: list[Signal]) -> dict[str, list[Signal]]:
    """Group by beat slug (first-appearance order), newest first within a beat."""
    groups: dict[str, list[Signal]] = {}
    for signal in signals:
        groups.setdefault(signal.beat_slug or signal.beat, []).append(signal)
    for beat_signals in groups.values():
        beat_signals.sort(key=lambda s: parse_iso(s.timestamp), reverse=True)
    return groups


class BriefCompiler:
    """Compiles and stores the daily brief."""

    def __init__(
        self,
        registry: BeatRegistry,
        ledger: SignalLedger,
        streaks: StreakEngine,
        archive: BriefArchive,
        config: BriefConfig | None = None,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._streaks = streaks
        self._archive = archive
        self._config = config or BriefConfig()

    def clamp_lookback(self, hours: int | None) -> int:
        if not hours:
            return self._config.default_lookback_hours
        return min(max(int(hours), self._config.min_lookback_hours), self._config.max_lookback_hours)

    async def compile(
        self,
        requester: str,
        signature: str,
        lookback_hours: int | None = None,
        now: datetime | None = None,
    ) -> Brief:
        """Compile today's brief.

        Args:
            requester: Correspondent requesting compilation.
            signature: Signature over ``SIGNAL|compile-brief|{date}|{address}``.
            lookback_hours: Window in hours, clamped to [1, 168] (default 24);
                zero or None means the default.
            now: Compilation time (defaults to UTC now).

        Returns:
            The stored Brief.

        Raises:
            InvalidArgument: Bad address.
            Unauthenticated: Missing or malformed signature.
            Forbidden: Requester does not claim any beat.
            NotFound: The ledger has no signals at all.
        """
        start_time = time.perf_counter()
        now = now or utcnow()
        day = date_key(now)
        require_btc_address(requester)
        require_signature(signature, f"SIGNAL|compile-brief|{day}|{requester}")
        hours = self.clamp_lookback(lookback_hours)

        beats, feed = await asyncio.gather(self._registry.all_beats(), self._ledger.feed())

        if not any(b.claimed_by == requester for b in beats):
            raise Forbidden(
                "Only registered correspondents can compile briefs",
                hint="Claim a beat first via POST /beats",
            )

        signals, used_fallback = select_signals(
            feed,
            now,
            hours,
            self._config.min_signals,
            self._config.fallback_signal_count,
        )
        if not signals:
            raise NotFound(
                "No signals to compile",
                hint="Agents need to file signals via POST /signals before a brief can be compiled",
            )

        correspondents = list(dict.fromkeys(s.btc_address for s in signals))
        streaks = await self._streaks.get_many(correspondents)
        beat_by_slug = {b.slug: b for b in beats}
        groups = group_by_beat(signals)

        sections = []
        for beat_key, beat_signals in groups.items():
            beat = beat_by_slug.get(beat_key)
            for signal in beat_signals:
                sections.append(
                    BriefSection(
                        beat=beat.name if beat else beat_key,
                        beat_slug=beat_key,
                        beat_color=beat.color if beat else self._config.default_beat_color,
                        correspondent=signal.btc_address,
                        correspondent_short=short_address(signal.btc_address),
                        streak=streaks[signal.btc_address].current,
                        timestamp=signal.timestamp,
                        headline=signal.headline,
                        content=signal.content,
                        sources=[s.to_dict() for s in signal.sources] if signal.sources else None,
                        tags=signal.tags,
                        signal_id=signal.id,
                    )
                )

        summary = BriefSummary(
            correspondents=len(correspondents),
            beats=len(groups),
            signals=len(signals),
            total_beats_registered=len(beats),
        )
        brief = Brief(
            date=day,
            compiled_at=to_iso(now),
            compiled_by=requester,
            lookback_hours=hours,
            summary=summary,
            sections=sections,
            text=render_text(
                day,
                summary,
                sections,
                self._config.publication_name,
                self._config.publication_url,
            ),
        )

        await self._archive.save(brief)

        latency = time.perf_counter() - start_time
        get_metrics().record_brief_compiled(used_fallback, latency)
        logger.info(
            "Brief %s compiled by %s: %d signals, %d beats, %d correspondents%s",
            day,
            requester,
            summary.signals,
            summary.beats,
            summary.correspondents,
            " (fallback)" if used_fallback else "",
        )
        return brief
