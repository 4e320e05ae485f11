"""Streak engine: consecutive-day filing counters.

The engine is the only writer of ``streak:{address}`` and is only invoked
after a successful signal filing. Rollover is lazy; there is no daily job.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime

from src.common.timeutil import date_key, previous_date_key
from src.storage import keys
from src.storage.kv import KeyValueStore
from src.streaks.config import StreakConfig
from src.streaks.schemas import Streak

logger = logging.getLogger(__name__)


def advance(streak: Streak, today: str, history_cap: int = 90) -> Streak | None:
    """Apply a filing on ``today`` to ``streak``.

    Args:
        streak: Current streak record.
        today: UTC filing date (``YYYY-MM-DD``).
        history_cap: Maximum history length.

    Returns:
        The new streak, or None when ``today`` was already counted.
    """
    if streak.last_date == today:
        return None

    if streak.last_date is not None and streak.last_date == previous_date_key(today):
        current = streak.current + 1
    else:
        current = 1

    return replace(
        streak,
        current=current,
        longest=max(streak.longest, current),
        last_date=today,
        history=[today, *streak.history][:history_cap],
    )


class StreakEngine:
    """Reads and advances per-agent streaks."""

    def __init__(self, store: KeyValueStore, config: StreakConfig | None = None) -> None:
        self._store = store
        self._config = config or StreakConfig()

    async def get(self, agent: str) -> Streak:
        """The agent's streak; an empty streak when they never filed."""
        return Streak.from_dict(await self._store.get(keys.streak(agent)))

    async def get_many(self, agents: list[str]) -> dict[str, Streak]:
        """Streaks for several agents, read concurrently."""
        streaks = await asyncio.gather(*(self.get(a) for a in agents))
        return dict(zip(agents, streaks))

    async def update(self, agent: str, filing_instant: datetime) -> Streak:
        """Record a filing at ``filing_instant`` (idempotent per UTC day)."""
        streak = await self.get(agent)
        advanced = advance(streak, date_key(filing_instant), self._config.history_cap)
        if advanced is None:
            return streak

        await self._store.put(keys.streak(agent), advanced.to_dict())
        logger.debug(
            "Streak for %s now %d (longest %d)",
            agent,
            advanced.current,
            advanced.longest,
        )
        return advanced
