"""Saved roster configuration for a single combatant."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .battle import detect_gen_from_format
from .combatant import AltValue
from .enums import PresetSource

if TYPE_CHECKING:
    from .combatant import CombatantRecord

STAT_NAMES: tuple[str, ...] = ("hp", "atk", "def", "spa", "spd", "spe")


@dataclass(slots=True, kw_only=True)
class RosterPreset:
    identity_key: str
    species_forme: str
    source: PresetSource | None = None
    name: str | None = None
    player_name: str | None = None
    format: str | None = None
    nickname: str | None = None
    usage: float | None = None
    level: int | None = None
    gender: str | None = None
    hidden_power_type: str | None = None
    tera_types: list[AltValue] = field(default_factory=list[AltValue])
    shiny: bool | None = None
    happiness: int | None = None
    dynamax_level: int | None = None
    gigantamax: bool | None = None
    ability: str | None = None
    alt_abilities: list[AltValue] = field(default_factory=list[AltValue])
    item: str | None = None
    alt_items: list[AltValue] = field(default_factory=list[AltValue])
    moves: list[str] = field(default_factory=list[str])
    alt_moves: list[AltValue] = field(default_factory=list[AltValue])
    nature: str | None = None
    ivs: dict[str, int] = field(default_factory=dict[str, int])
    evs: dict[str, int] = field(default_factory=dict[str, int])
    pokeball: str | None = None

    @property
    def gen(self) -> int:
        return detect_gen_from_format(self.format)

    @classmethod
    def from_record(
        cls,
        record: CombatantRecord,
        *,
        format_: str | None = None,
        player_name: str | None = None,
        source: PresetSource = PresetSource.SERVER,
    ) -> RosterPreset:
        """Capture what is currently known about ``record`` as a preset."""

        return cls(
            identity_key=record.identity_key,
            species_forme=record.species_forme,
            source=source,
            name="Imported" if record.server_sourced else "Observed",
            player_name=player_name,
            format=format_,
            nickname=record.nickname if record.nickname != record.species_forme else None,
            level=record.level,
            gender=record.gender,
            tera_types=[AltValue(record.tera_type)] if record.tera_type else [],
            shiny=record.shiny,
            ability=record.effective_ability,
            alt_abilities=list(record.alt_abilities),
            item=record.effective_item,
            alt_items=list(record.alt_items),
            moves=list(record.moves or record.move_state.revealed),
            alt_moves=list(record.alt_moves),
            nature=record.nature,
            ivs=dict(record.ivs),
            evs=dict(record.evs),
            pokeball=record.pokeball,
        )
