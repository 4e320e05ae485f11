"""Correspondent leaderboard and agent status views."""

from src.correspondents.service import CorrespondentService, correspondent_score

__all__ = ["CorrespondentService", "correspondent_score"]
