"""Battle-wide aggregate: two player sides plus the shared field."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .combatant import CombatantRecord  # noqa: TC001
from .enums import GameType, SideId, Terrain, Weather

_GEN_PATTERN = re.compile(r"^gen(\d+)", re.IGNORECASE)
DEFAULT_GEN = 9


def detect_gen_from_format(format_: str | None) -> int:
    if not format_:
        return DEFAULT_GEN
    match = _GEN_PATTERN.match(format_.strip())
    return int(match.group(1)) if match else DEFAULT_GEN


@dataclass(frozen=True, slots=True, kw_only=True)
class PlayerSideState:
    side_id: SideId
    name: str | None = None
    rating: int | None = None
    pokemon: tuple[CombatantRecord, ...] = ()
    active_index: int = -1
    active_indices: tuple[int, ...] = ()
    selection_index: int = 0
    auto_select: bool = True
    pokemon_order: tuple[str, ...] = ()

    def find(self, identity_key: str) -> tuple[int, CombatantRecord | None]:
        for index, record in enumerate(self.pokemon):
            if record.identity_key == identity_key:
                return index, record
        return -1, None


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldState:
    game_type: GameType
    weather: Weather | None = None
    terrain: Terrain | None = None
    pseudo_weather: tuple[str, ...] = ()
    side_conditions: dict[SideId, dict[str, int]] = field(
        default_factory=dict[SideId, dict[str, int]]
    )
    attacker_index: int = -1
    defender_index: int = -1

    def conditions_for(self, side_id: SideId) -> dict[str, int]:
        return self.side_conditions.get(side_id, {})


@dataclass(frozen=True, slots=True, kw_only=True)
class BattleState:
    battle_id: str
    format: str | None = None
    battle_nonce: str | None = None
    p1: PlayerSideState = field(default_factory=lambda: PlayerSideState(side_id=SideId.P1))
    p2: PlayerSideState = field(default_factory=lambda: PlayerSideState(side_id=SideId.P2))
    field_state: FieldState = field(
        default_factory=lambda: FieldState(game_type=GameType.SINGLES)
    )

    @property
    def gen(self) -> int:
        return detect_gen_from_format(self.format)

    def side(self, side_id: SideId) -> PlayerSideState:
        return self.p1 if side_id is SideId.P1 else self.p2


def new_battle_state(
    battle_id: str,
    *,
    format_: str | None = None,
    auto_select: bool = True,
    game_type: GameType = GameType.SINGLES,
) -> BattleState:
    """Build the empty state a battle starts from before its first sync."""

    return BattleState(
        battle_id=battle_id,
        format=format_,
        p1=PlayerSideState(side_id=SideId.P1, auto_select=auto_select),
        p2=PlayerSideState(side_id=SideId.P2, auto_select=auto_select),
        field_state=FieldState(game_type=game_type),
    )
