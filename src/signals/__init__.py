"""Signal ledger: filed intelligence entries and their derived indexes.

Components:
- Signal / Source: Dataclasses for the ``signal:{id}`` document
- SignalConfig: Pydantic settings for content limits, filing interval and index caps
- SignalLedger: Filing with fan-out, feed reads and author corrections
"""

from src.signals.config import SignalConfig
from src.signals.ledger import SignalLedger
from src.signals.schemas import Signal, Source, generate_signal_id

__all__ = [
    "Signal",
    "SignalConfig",
    "SignalLedger",
    "Source",
    "generate_signal_id",
]
