"""Daily intelligence briefs.

Components:
- Brief / BriefSection / BriefSummary / Inscription: Stored brief shapes
- BriefConfig: Pydantic settings for lookback, fallback and archive size
- BriefCompiler: Aggregates recent signals into today's brief
- BriefArchive: Stored briefs by date, archive index and inscriptions
- render_text: Plain-text edition
- InscriptionFeed: Recent news inscriptions from the inscription indexer
"""

from src.briefs.archive import BriefArchive
from src.briefs.compiler import BriefCompiler, group_by_beat, select_signals
from src.briefs.config import BriefConfig
from src.briefs.inscription_feed import InscriptionFeed
from src.briefs.rendering import render_text
from src.briefs.schemas import Brief, BriefSection, BriefSummary, Inscription

__all__ = [
    "Brief",
    "BriefArchive",
    "BriefCompiler",
    "BriefConfig",
    "BriefSection",
    "BriefSummary",
    "Inscription",
    "InscriptionFeed",
    "group_by_beat",
    "render_text",
    "select_signals",
]
