"""Per-agent consecutive-day filing streaks."""

from src.streaks.config import StreakConfig
from src.streaks.engine import StreakEngine, advance
from src.streaks.schemas import Streak

__all__ = ["Streak", "StreakConfig", "StreakEngine", "advance"]
