"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import BattleStateRepository
from .reference_data import LearnsetLookup, MoveEntry, ReferenceData, ReferenceDataError

__all__ = [
    "BattleStateRepository",
    "LearnsetLookup",
    "MoveEntry",
    "ReferenceData",
    "ReferenceDataError",
]
