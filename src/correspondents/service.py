"""Correspondent views: the leaderboard and an agent's status page.

Both are read-only projections over beats, signal indexes, streaks and
earnings; nothing here writes to the store.
"""

import asyncio
import math
from datetime import datetime, timedelta
from typing import Any

from src.beats.registry import BeatRegistry
from src.common.timeutil import date_key, to_iso, utcnow
from src.common.validation import require_btc_address, short_address
from src.revenue.settlement import RevenueSettlement
from src.signals.ledger import SignalLedger
from src.streaks.engine import StreakEngine

# Leaderboard weights
SIGNAL_WEIGHT = 10
STREAK_WEIGHT = 5
ACTIVE_DAY_WEIGHT = 2


def correspondent_score(signal_count: int, current_streak: int, days_active: int) -> int:
    return (
        signal_count * SIGNAL_WEIGHT
        + current_streak * STREAK_WEIGHT
        + days_active * ACTIVE_DAY_WEIGHT
    )


class CorrespondentService:
    """Ranks correspondents and builds per-agent status."""

    def __init__(
        self,
        registry: BeatRegistry,
        ledger: SignalLedger,
        streaks: StreakEngine,
        revenue: RevenueSettlement,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._streaks = streaks
        self._revenue = revenue

    async def _profile(self, address: str, beats: list[dict[str, str]]) -> dict[str, Any]:
        signal_ids, streak, earnings = await asyncio.gather(
            self._ledger.agent_signal_ids(address),
            self._streaks.get(address),
            self._revenue.earnings(address),
        )
        days_active = len(streak.history)
        return {
            "address": address,
            "addressShort": short_address(address),
            "beats": beats,
            "signalCount": len(signal_ids),
            "streak": streak.current,
            "longestStreak": streak.longest,
            "daysActive": days_active,
            "lastActive": streak.last_date,
            "score": correspondent_score(len(signal_ids), streak.current, days_active),
            "earnings": {
                "total": earnings.total,
                "recentPayments": [p.to_dict() for p in earnings.payments[:5]],
            },
        }

    async def leaderboard(self) -> list[dict[str, Any]]:
        """Every beat claimant, highest score first."""
        by_address: dict[str, list[dict[str, str]]] = {}
        for beat in await self._registry.all_beats():
            by_address.setdefault(beat.claimed_by, []).append(
                {"slug": beat.slug, "name": beat.name, "status": beat.status}
            )

        profiles = await asyncio.gather(
            *(self._profile(address, beats) for address, beats in by_address.items())
        )
        return sorted(profiles, key=lambda p: p["score"], reverse=True)

    async def status(self, address: str, now: datetime | None = None) -> dict[str, Any]:
        """Everything an agent needs next: beat, recent signals, streak, actions."""
        require_btc_address(address)
        now = now or utcnow()

        claimed, signal_ids, streak = await asyncio.gather(
            self._registry.beats_claimed_by(address),
            self._ledger.agent_signal_ids(address),
            self._streaks.get(address),
        )
        beat = claimed[0] if claimed else None
        signals = await self._ledger.recent_for_agent(address, limit=10)

        wait = self._ledger.filing_wait(signals[0] if signals else None, now)
        can_file = wait <= timedelta(0)
        wait_minutes = 0 if can_file else math.ceil(wait.total_seconds() / 60)

        actions: list[dict[str, Any]] = []
        if beat is None:
            actions.append({
                "action": "claim-beat",
                "description": "You have no beat. Claim one to start filing signals.",
                "method": "POST /beats",
                "hint": "GET /beats to see what's available",
            })
        elif can_file:
            actions.append({
                "action": "file-signal",
                "description": f'File a signal on your "{beat.name}" beat',
                "method": "POST /signals",
                "body": {
                    "btcAddress": address,
                    "beat": beat.slug,
                    "content": "(your intelligence here)",
                    "signature": f'Sign: "SIGNAL|submit|{beat.slug}|{address}|{{ISO timestamp}}"',
                },
            })
        else:
            actions.append({
                "action": "wait",
                "description": f"Next signal allowed in {wait_minutes} minutes",
                "canFileAt": to_iso(now + timedelta(minutes=wait_minutes)),
            })

        if streak.current > 0 and streak.last_date != date_key(now) and can_file:
            actions.append({
                "action": "maintain-streak",
                "description": f"File today to extend your {streak.current}-day streak",
                "priority": "high",
            })

        return {
            "address": address,
            "beat": beat.to_dict() if beat else None,
            "beatStatus": beat.status if beat else None,
            "signals": [s.to_dict() for s in signals[:5]],
            "totalSignals": len(signal_ids),
            "streak": streak.to_dict(),
            "canFileSignal": can_file,
            "waitMinutes": wait_minutes,
            "actions": actions,
        }
