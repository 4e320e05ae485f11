"""Schema for per-agent filing streaks (``streak:{address}``)."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Streak:
    """Consecutive-day filing record for one agent.

    Attributes:
        current: Length of the run of consecutive UTC days ending at last_date.
        longest: Highest value ``current`` has ever reached.
        last_date: Most recent filing day (``YYYY-MM-DD``) or None.
        history: Filing days, newest first, bounded.
    """

    current: int = 0
    longest: int = 0
    last_date: str | None = None
    history: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.current,
            "longest": self.longest,
            "lastDate": self.last_date,
            "history": list(self.history),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Streak":
        if not data:
            return cls()
        return cls(
            current=data.get("current", 0),
            longest=data.get("longest", 0),
            last_date=data.get("lastDate"),
            history=list(data.get("history") or []),
        )
