"""Schema definitions for beats.

A beat is a topical channel that exactly one agent may file signals on.
Stored as a camelCase JSON document at ``beat:{slug}``.
"""

from dataclasses import dataclass
from typing import Any

BEAT_ACTIVE = "active"
BEAT_INACTIVE = "inactive"

VALID_BEAT_STATUSES: frozenset[str] = frozenset({BEAT_ACTIVE, BEAT_INACTIVE})


@dataclass
class Beat:
    """A claimed beat.

    Attributes:
        slug: Unique key (lowercase alnum + hyphens).
        name: Display name.
        description: Free-text scope of the beat.
        color: ``#RRGGBB`` display color.
        claimed_by: BTC address of the current claimant.
        claimed_at: ISO timestamp of the (re)claim.
        status: ``active`` or ``inactive``.
        signature: Signature supplied with the latest claim or update.
        previous_claimant: Prior claimant when the beat was reclaimed.
        updated_at: ISO timestamp of the last claimant edit.
    """

    slug: str
    name: str
    claimed_by: str
    claimed_at: str
    description: str = ""
    color: str = "#22d3ee"
    status: str = BEAT_ACTIVE
    signature: str | None = None
    previous_claimant: str | None = None
    updated_at: str | None = None

    def __post_init__(self) -> None:
        if self.status not in VALID_BEAT_STATUSES:
            raise ValueError(
                f"Invalid status {self.status!r}. "
                f"Must be one of: {sorted(VALID_BEAT_STATUSES)}"
            )

    @property
    def is_active(self) -> bool:
        return self.status != BEAT_INACTIVE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "claimedBy": self.claimed_by,
            "claimedAt": self.claimed_at,
            "status": self.status,
            "signature": self.signature,
        }
        if self.previous_claimant:
            data["previousClaimant"] = self.previous_claimant
        if self.updated_at:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Beat":
        """Build from a stored document; a missing status means active."""
        return cls(
            slug=data["slug"],
            name=data.get("name", data["slug"]),
            description=data.get("description", ""),
            color=data.get("color", "#22d3ee"),
            claimed_by=data["claimedBy"],
            claimed_at=data.get("claimedAt", ""),
            status=data.get("status") or BEAT_ACTIVE,
            signature=data.get("signature"),
            previous_claimant=data.get("previousClaimant"),
            updated_at=data.get("updatedAt"),
        )
