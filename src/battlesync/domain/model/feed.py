"""Read-only observations of a battle as delivered by the client feed.

``PublicView`` is what every spectator can see about one combatant, revealed
piece by piece. ``PrivateView`` is the fully-known record the server sends to
the player about their own team. Neither is ever stored; both are folded into
a ``CombatantRecord`` by the merge unit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import SideId

_NON_ID_CHARS = re.compile(r"[^a-z0-9]")


def to_id(text: str | None) -> str:
    """Normalize a display name into a Showdown-style id (``"U-turn"`` -> ``"uturn"``)."""

    return _NON_ID_CHARS.sub("", (text or "").lower())


def ident_name(ident: str) -> str:
    """Return the nickname-or-species part of an ident like ``"p1a: Pikachu"``."""

    _prefix, sep, name = ident.partition(": ")
    return name.strip() if sep else ident.strip()


def ident_side(ident: str) -> str | None:
    """Return the side prefix (``"p1"``) of an ident, ignoring the position letter."""

    prefix, sep, _name = ident.partition(": ")
    if not sep or len(prefix) < 2:  # noqa: PLR2004
        return None
    return prefix[:2]


def normalize_ident(ident: str) -> str:
    """Strip the active-position letter so ``"p1a: X"`` and ``"p1: X"`` compare equal."""

    side = ident_side(ident)
    if side is None:
        return ident.strip()
    return f"{side}: {ident_name(ident)}"


@dataclass(frozen=True, slots=True, kw_only=True)
class PublicView:
    """Partially-revealed observation of one combatant."""

    ident: str
    searchid: str | None = None
    name: str | None = None
    species_forme: str | None = None
    details: str | None = None
    level: int | None = None
    gender: str | None = None
    shiny: bool | None = None
    fusion_body: str | None = None
    side_id: SideId | None = None
    hp: int | None = None
    max_hp: int | None = None
    status: str | None = None
    ability: str | None = None
    base_ability: str | None = None
    item: str | None = None
    prev_item: str | None = None
    tera_type: str | None = None
    revealed_moves: tuple[str, ...] = ()
    boosts: dict[str, int] | None = None
    volatiles: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class PrivateView:
    """Ground-truth record of one of the viewer's own combatants."""

    ident: str
    searchid: str | None = None
    name: str | None = None
    species_forme: str | None = None
    details: str | None = None
    level: int | None = None
    gender: str | None = None
    shiny: bool | None = None
    hp: int | None = None
    max_hp: int | None = None
    status: str | None = None
    ability: str | None = None
    base_ability: str | None = None
    item: str | None = None
    tera_type: str | None = None
    pokeball: str | None = None
    moves: tuple[str, ...] = ()
    stats: dict[str, int] = field(default_factory=dict[str, int])
    active: bool = False

    def as_public_stub(self) -> PublicView:
        """Public-shaped placeholder for a combatant the feed has not revealed yet."""

        return PublicView(
            ident=self.ident,
            searchid=self.searchid,
            name=self.name,
            species_forme=self.species_forme,
            details=self.details,
            level=self.level,
            gender=self.gender,
            shiny=self.shiny,
            hp=self.hp,
            max_hp=self.max_hp,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class FeedSide:
    """One player's slot in the feed."""

    side_id: SideId
    name: str | None = None
    rating: int | None = None
    pokemon: tuple[PublicView, ...] = ()
    active: tuple[str | None, ...] = ()
    side_conditions: dict[str, int] = field(default_factory=dict[str, int])


@dataclass(frozen=True, slots=True, kw_only=True)
class BattleFeed:
    """Snapshot of a live battle as emitted by the host client."""

    battle_id: str | None
    nonce: str | None = None
    game_type: str | None = None
    weather: str | None = None
    pseudo_weather: tuple[str, ...] = ()
    sides: dict[SideId, FeedSide] = field(default_factory=dict["SideId", FeedSide])
    my_pokemon: tuple[PrivateView, ...] = ()
    my_side: SideId | None = None

    def side(self, side_id: SideId) -> FeedSide | None:
        return self.sides.get(side_id)
