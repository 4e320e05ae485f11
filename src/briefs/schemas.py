"""Schema definitions for compiled briefs.

Stored at ``brief:{date}`` as::

    {"text": ..., "json": {report}, "compiledAt": ..., "compiledBy": ...,
     "inscription": {...} | absent}

where ``report`` carries date, compiledAt, compiledBy, lookbackHours,
summary and sections.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class BriefSection:
    """One signal as it appears in a brief."""

    beat: str
    beat_slug: str
    beat_color: str
    correspondent: str
    correspondent_short: str
    streak: int
    timestamp: str
    content: str
    signal_id: str
    headline: str | None = None
    sources: list[dict[str, str]] | None = None
    tags: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "beat": self.beat,
            "beatSlug": self.beat_slug,
            "beatColor": self.beat_color,
            "correspondent": self.correspondent,
            "correspondentShort": self.correspondent_short,
            "streak": self.streak,
            "timestamp": self.timestamp,
            "headline": self.headline,
            "content": self.content,
            "sources": self.sources,
            "tags": self.tags,
            "signalId": self.signal_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BriefSection":
        return cls(
            beat=data["beat"],
            beat_slug=data.get("beatSlug", data["beat"]),
            beat_color=data.get("beatColor", "#22d3ee"),
            correspondent=data["correspondent"],
            correspondent_short=data.get("correspondentShort", data["correspondent"]),
            streak=data.get("streak", 0),
            timestamp=data["timestamp"],
            content=data.get("content", ""),
            signal_id=data.get("signalId", ""),
            headline=data.get("headline"),
            sources=data.get("sources"),
            tags=data.get("tags"),
        )


@dataclass
class BriefSummary:
    """Counts shown at the top of a brief."""

    correspondents: int
    beats: int
    signals: int
    total_beats_registered: int

    def to_dict(self) -> dict[str, int]:
        return {
            "correspondents": self.correspondents,
            "beats": self.beats,
            "signals": self.signals,
            "totalBeatsRegistered": self.total_beats_registered,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BriefSummary":
        return cls(
            correspondents=data.get("correspondents", 0),
            beats=data.get("beats", 0),
            signals=data.get("signals", 0),
            total_beats_registered=data.get("totalBeatsRegistered", 0),
        )


@dataclass
class Inscription:
    """Report that a brief was inscribed on Bitcoin."""

    inscription_id: str
    inscribed_by: str
    inscribed_at: str
    signature: str

    def to_dict(self) -> dict[str, str]:
        return {
            "inscriptionId": self.inscription_id,
            "inscribedBy": self.inscribed_by,
            "inscribedAt": self.inscribed_at,
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Inscription":
        return cls(
            inscription_id=data["inscriptionId"],
            inscribed_by=data.get("inscribedBy", ""),
            inscribed_at=data.get("inscribedAt", ""),
            signature=data.get("signature", ""),
        )


@dataclass
class Brief:
    """A compiled brief for one UTC calendar date."""

    date: str
    compiled_at: str
    compiled_by: str
    lookback_hours: int
    summary: BriefSummary
    sections: list[BriefSection] = field(default_factory=list)
    text: str = ""
    inscription: Inscription | None = None

    @property
    def correspondents(self) -> list[str]:
        """Distinct correspondents in section order."""
        return list(dict.fromkeys(s.correspondent for s in self.sections))

    def report(self) -> dict[str, Any]:
        """The structured edition (``json`` field of the stored record)."""
        return {
            "date": self.date,
            "compiledAt": self.compiled_at,
            "compiledBy": self.compiled_by,
            "lookbackHours": self.lookback_hours,
            "summary": self.summary.to_dict(),
            "sections": [s.to_dict() for s in self.sections],
        }

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "text": self.text,
            "json": self.report(),
            "compiledAt": self.compiled_at,
            "compiledBy": self.compiled_by,
        }
        if self.inscription is not None:
            record["inscription"] = self.inscription.to_dict()
        return record

    @classmethod
    def from_record(cls, day: str, record: dict[str, Any]) -> "Brief":
        report = record.get("json") or {}
        inscription = record.get("inscription")
        return cls(
            date=report.get("date", day),
            compiled_at=record.get("compiledAt") or report.get("compiledAt", ""),
            compiled_by=record.get("compiledBy") or report.get("compiledBy", ""),
            lookback_hours=report.get("lookbackHours", 24),
            summary=BriefSummary.from_dict(report.get("summary") or {}),
            sections=[BriefSection.from_dict(s) for s in report.get("sections") or []],
            text=record.get("text", ""),
            inscription=Inscription.from_dict(inscription) if inscription else None,
        )
