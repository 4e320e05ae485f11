"""Schema definitions for bounties.

A bounty is a sats-denominated request for coverage posted by any agent.
Posting is free; claims against a bounty live in a separate list at
``bounty:{id}:claims``.
"""

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

BOUNTY_OPEN = "open"
BOUNTY_STATUSES = ("open", "claimed", "submitted", "completed", "cancelled")

_BASE36 = string.digits + string.ascii_lowercase


def _random_base36(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_bounty_id(moment: datetime) -> str:
    """``{base36 epoch millis}-{6 random}-{4 random}``, all base36."""
    millis = int(moment.timestamp() * 1000)
    digits = []
    while millis:
        millis, remainder = divmod(millis, 36)
        digits.append(_BASE36[remainder])
    stamp = "".join(reversed(digits)) or "0"
    return f"{stamp}-{_random_base36(6)}-{_random_base36(4)}"


@dataclass
class Bounty:
    """A posted bounty (``bounty:{id}``).

    Attributes:
        id: Unique identifier.
        creator_btc: Posting agent.
        title: Short title (5-120 chars).
        description: Body (10-2000 chars).
        amount_sats: Offered reward, at least 1000 sats.
        created_at: ISO creation time.
        updated_at: ISO time of the last change.
        creator_name: Optional display name.
        tags: Free-form labels.
        skills: Skills wanted, matched case-insensitively when filtering.
        beat_slug: Beat the bounty is about, if any.
        status: One of ``BOUNTY_STATUSES``.
        deadline: Optional ISO deadline.
        claim_count: Number of claims recorded.
    """

    id: str
    creator_btc: str
    title: str
    description: str
    amount_sats: int
    created_at: str
    updated_at: str
    creator_name: str | None = None
    tags: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    beat_slug: str | None = None
    status: str = BOUNTY_OPEN
    deadline: str | None = None
    claim_count: int = 0

    def __post_init__(self) -> None:
        if self.status not in BOUNTY_STATUSES:
            raise ValueError(f"Invalid bounty status: {self.status}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "creatorBtc": self.creator_btc,
            "creatorName": self.creator_name,
            "title": self.title,
            "description": self.description,
            "amountSats": self.amount_sats,
            "tags": list(self.tags),
            "skills": list(self.skills),
            "beatSlug": self.beat_slug,
            "status": self.status,
            "deadline": self.deadline,
            "claimCount": self.claim_count,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Bounty":
        return cls(
            id=data["id"],
            creator_btc=data["creatorBtc"],
            title=data.get("title", ""),
            description=data.get("description", ""),
            amount_sats=data.get("amountSats") or 0,
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt") or data.get("createdAt", ""),
            creator_name=data.get("creatorName"),
            tags=list(data.get("tags") or []),
            skills=list(data.get("skills") or []),
            beat_slug=data.get("beatSlug"),
            status=data.get("status") or BOUNTY_OPEN,
            deadline=data.get("deadline"),
            claim_count=data.get("claimCount") or 0,
        )
