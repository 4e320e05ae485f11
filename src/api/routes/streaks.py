"""Streak endpoint."""

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_beat_registry, get_streak_engine
from src.beats.registry import BeatRegistry
from src.streaks.engine import StreakEngine

router = APIRouter()


@router.get(
    "/streaks",
    summary="Filing streaks",
    description=(
        "Without ``agent``: a map of every beat claimant to their streak. "
        "With ``agent``: that agent's streak (zeros if they never filed)."
    ),
)
async def get_streaks(
    agent: str | None = Query(default=None, description="BTC address"),
    registry: BeatRegistry = Depends(get_beat_registry),
    streaks: StreakEngine = Depends(get_streak_engine),
) -> dict:
    if agent:
        streak = await streaks.get(agent)
        return {"agent": agent, **streak.to_dict()}

    beats = await registry.all_beats()
    agents = list(dict.fromkeys(b.claimed_by for b in beats))
    by_agent = await streaks.get_many(agents)
    return {address: streak.to_dict() for address, streak in by_agent.items()}
