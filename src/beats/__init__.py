"""Beat registry: topical channels claimed by a single correspondent.

Components:
- Beat: Dataclass for the ``beat:{slug}`` document
- BeatConfig: Pydantic settings for expiry and defaults
- BeatRegistry: Claim / reclaim / update / lazy staleness
"""

from src.beats.config import BeatConfig
from src.beats.registry import BeatRegistry, is_stale
from src.beats.schemas import BEAT_ACTIVE, BEAT_INACTIVE, Beat

__all__ = [
    "BEAT_ACTIVE",
    "BEAT_INACTIVE",
    "Beat",
    "BeatConfig",
    "BeatRegistry",
    "is_stale",
]
