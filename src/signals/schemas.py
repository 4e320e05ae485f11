"""Schema definitions for signals.

A signal is one time-stamped intelligence entry filed by a beat's
claimant. Records are immutable except for the author's correction,
which is stored alongside (never replacing) the original content.
"""

import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Any

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_signal_id(moment: datetime) -> str:
    """Time-derived id: ``s_{base36 epoch millis}_{4 random base36 chars}``.

    Ids sort by filing time (the millis part has a fixed width for the
    foreseeable future); the random suffix separates same-millisecond filings.
    """
    millis = int(moment.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"s_{_to_base36(millis)}_{suffix}"


@dataclass
class Source:
    """A cited source."""

    url: str
    title: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "title": self.title}


@dataclass
class Signal:
    """A filed signal (``signal:{id}``).

    Attributes:
        id: Unique, time-sortable identifier.
        btc_address: Filing agent.
        beat: Beat display name at filing time.
        beat_slug: Beat key.
        content: Body text (at most 1000 chars).
        timestamp: ISO filing time.
        signature: Signature supplied by the filer.
        headline: Optional headline.
        sources: Optional cited sources.
        tags: Optional lowercase tag slugs.
        inscription_id: Reserved for on-chain inscription of the signal.
        correction: Author's correction, if any.
        corrected_at: ISO time of the correction.
    """

    id: str
    btc_address: str
    beat: str
    beat_slug: str
    content: str
    timestamp: str
    signature: str
    headline: str | None = None
    sources: list[Source] | None = None
    tags: list[str] | None = None
    inscription_id: str | None = None
    correction: str | None = None
    corrected_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "btcAddress": self.btc_address,
            "beat": self.beat,
            "beatSlug": self.beat_slug,
            "headline": self.headline,
            "content": self.content,
            "sources": [s.to_dict() for s in self.sources] if self.sources else None,
            "tags": list(self.tags) if self.tags else None,
            "timestamp": self.timestamp,
            "signature": self.signature,
            "inscriptionId": self.inscription_id,
        }
        if self.correction is not None:
            data["correction"] = self.correction
            data["correctedAt"] = self.corrected_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Signal":
        sources = data.get("sources")
        return cls(
            id=data["id"],
            btc_address=data["btcAddress"],
            beat=data.get("beat") or data.get("beatSlug", ""),
            beat_slug=data.get("beatSlug") or data.get("beat", ""),
            content=data.get("content", ""),
            timestamp=data["timestamp"],
            signature=data.get("signature", ""),
            headline=data.get("headline"),
            sources=[Source(url=s["url"], title=s["title"]) for s in sources] if sources else None,
            tags=list(data["tags"]) if data.get("tags") else None,
            inscription_id=data.get("inscriptionId"),
            correction=data.get("correction"),
            corrected_at=data.get("correctedAt"),
        )
