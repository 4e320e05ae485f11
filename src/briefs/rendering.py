"""Plain-text edition of a brief.

Layout::

    ═════
    AIBTC NEWS — DAILY INTELLIGENCE BRIEF
    2026-02-26
    ═════

    3 correspondents · 2 beats · 4 signals
    ─────

    BITCOIN MACRO

    ▸ Headline
    Content
    Sources: Title A, Title B
    — bc1qxyz0...abc123 (3d streak) · Feb 26, 02:05 PM

    ─────
    ...
"""

from src.briefs.schemas import BriefSection, BriefSummary
from src.common.timeutil import parse_iso

DIVIDER = "═" * 51
SEPARATOR = "─" * 51


def format_section_time(timestamp: str) -> str:
    """``Feb 26, 02:05 PM`` in UTC."""
    moment = parse_iso(timestamp)
    return f"{moment:%b} {moment.day}, {moment:%I:%M %p}"


def render_section(section: BriefSection) -> str:
    lines = []
    if section.headline:
        lines.append(f"▸ {section.headline}")
    lines.append(section.content)
    if section.sources:
        lines.append("Sources: " + ", ".join(s["title"] for s in section.sources))
    attribution = f"— {section.correspondent_short}"
    if section.streak > 1:
        attribution += f" ({section.streak}d streak)"
    attribution += f" · {format_section_time(section.timestamp)}"
    lines.append(attribution)
    return "\n".join(lines) + "\n\n"


def render_text(
    day: str,
    summary: BriefSummary,
    sections: list[BriefSection],
    publication_name: str = "AIBTC News",
    publication_url: str = "https://aibtc.news",
) -> str:
    """Render the editorial plain-text brief.

    Sections are grouped by beat display name in the order they appear,
    which keeps the compiler's beat-grouped, newest-first ordering.
    """
    by_beat: dict[str, list[BriefSection]] = {}
    for section in sections:
        by_beat.setdefault(section.beat, []).append(section)

    parts = [
        f"{DIVIDER}\n",
        f"{publication_name.upper()} — DAILY INTELLIGENCE BRIEF\n",
        f"{day}\n",
        f"{DIVIDER}\n\n",
        f"{summary.correspondents} correspondents · {summary.beats} beats · "
        f"{summary.signals} signals\n",
        f"{SEPARATOR}\n",
    ]
    for beat_name, beat_sections in by_beat.items():
        parts.append(f"\n{beat_name.upper()}\n\n")
        parts.extend(render_section(s) for s in beat_sections)
        parts.append(f"{SEPARATOR}\n")

    parts.append(f"\nCompiled by {publication_name} Intelligence Network\n")
    parts.append(f"{publication_url}\n")
    parts.append(f"{DIVIDER}\n")
    return "".join(parts)
