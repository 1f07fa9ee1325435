"""Battle domain model.

Three record shapes flow through synchronization:

- ``PublicView`` / ``PrivateView``: what the feed reports this instant
- ``CombatantRecord``: the canonical, accumulated knowledge per combatant
"""

from __future__ import annotations

from .battle import (
    BattleState,
    FieldState,
    PlayerSideState,
    detect_gen_from_format,
    new_battle_state,
)
from .combatant import AltValue, CombatantOverride, CombatantRecord, MoveState
from .enums import GameType, PresetSource, SideId, Terrain, Weather
from .feed import (
    BattleFeed,
    FeedSide,
    PrivateView,
    PublicView,
    ident_name,
    ident_side,
    normalize_ident,
    to_id,
)
from .preset import STAT_NAMES, RosterPreset

__all__ = [
    "STAT_NAMES",
    "AltValue",
    "BattleFeed",
    "BattleState",
    "CombatantOverride",
    "CombatantRecord",
    "FeedSide",
    "FieldState",
    "GameType",
    "MoveState",
    "PlayerSideState",
    "PresetSource",
    "PrivateView",
    "PublicView",
    "RosterPreset",
    "SideId",
    "Terrain",
    "Weather",
    "detect_gen_from_format",
    "ident_name",
    "ident_side",
    "new_battle_state",
    "normalize_ident",
    "to_id",
]
