"""Bounty board: open requests for coverage, optionally tied to a beat.

Components:
- Bounty: Dataclass for the ``bounty:{id}`` document
- BountyConfig: Pydantic settings for field limits and index caps
- BountyBoard: Creation with index fan-out, filtered listing and stats
"""

from src.bounties.board import BountyBoard
from src.bounties.config import BountyConfig
from src.bounties.schemas import BOUNTY_STATUSES, Bounty, generate_bounty_id

__all__ = [
    "BOUNTY_STATUSES",
    "Bounty",
    "BountyBoard",
    "BountyConfig",
    "generate_bounty_id",
]
