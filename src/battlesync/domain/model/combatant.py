"""Canonical per-combatant record.

A ``CombatantRecord`` is immutable; every sync produces a new record through
``battlesync.domain.sync.merge`` and the roster swaps it in at the same
position.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .feed import ident_name


@dataclass(frozen=True, slots=True)
class AltValue:
    """Candidate value for an attribute that public information cannot pin down."""

    value: str
    usage: float | None = None


@dataclass(frozen=True, slots=True)
class MoveState:
    """Partition of what is known about a combatant's moves."""

    revealed: tuple[str, ...] = ()
    learnset: tuple[str, ...] = ()
    other: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class CombatantOverride:
    """Manual corrections a user layers over what the feed reports.

    Boosts, ivs and evs are merged stat by stat into what the record already
    holds; ``None`` leaves the corresponding attribute alone.
    """

    ability: str | None = None
    item: str | None = None
    nature: str | None = None
    boosts: dict[str, int] = field(default_factory=dict[str, int])
    ivs: dict[str, int] = field(default_factory=dict[str, int])
    evs: dict[str, int] = field(default_factory=dict[str, int])


@dataclass(frozen=True, slots=True, kw_only=True)
class CombatantRecord:
    identity_key: str
    ident: str
    species_forme: str
    searchid: str | None = None
    name: str | None = None
    details: str | None = None
    level: int = 100
    gender: str | None = None
    shiny: bool = False
    # carried for downstream calculation of fused base stats
    fusion_body: str | None = None

    hp: int | None = None
    max_hp: int | None = None
    status: str | None = None
    volatiles: tuple[str, ...] = ()

    ability: str | None = None
    base_ability: str | None = None
    dirty_ability: str | None = None
    item: str | None = None
    prev_item: str | None = None
    dirty_item: str | None = None
    tera_type: str | None = None
    pokeball: str | None = None

    alt_abilities: tuple[AltValue, ...] = ()
    alt_items: tuple[AltValue, ...] = ()
    alt_moves: tuple[AltValue, ...] = ()

    moves: tuple[str, ...] = ()
    move_state: MoveState = field(default_factory=MoveState)

    stats: dict[str, int] = field(default_factory=dict[str, int])
    boosts: dict[str, int] = field(default_factory=dict[str, int])
    dirty_boosts: dict[str, int] = field(default_factory=dict[str, int])

    nature: str | None = None
    ivs: dict[str, int] = field(default_factory=dict[str, int])
    evs: dict[str, int] = field(default_factory=dict[str, int])

    server_sourced: bool = False

    @property
    def nickname(self) -> str:
        return ident_name(self.ident)

    @property
    def fainted(self) -> bool:
        return self.hp == 0 or self.status == "fnt"

    @property
    def effective_ability(self) -> str | None:
        return self.dirty_ability or self.ability

    @property
    def effective_item(self) -> str | None:
        return self.dirty_item or self.item
