"""Translate Showdown client battle payloads into domain feed views."""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from battlesync.domain.model import BattleFeed, FeedSide, PrivateView, PublicView, SideId

from .schema import BattlePayload

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .schema import PokemonPayload, ServerPokemonPayload, SidePayload

log = getLogger(__name__)

_LEVEL_PATTERN = re.compile(r"^L(\d+)$")
_FUSION_PATTERN = re.compile(r"fusion: (.+?)(?:,|$)")
_GENDERS = frozenset({"M", "F", "N"})


@dataclass(frozen=True, slots=True)
class ParsedDetails:
    species_forme: str | None
    level: int | None = None
    gender: str | None = None
    shiny: bool = False
    fusion_body: str | None = None


def parse_details(details: str | None) -> ParsedDetails:
    """Parse a details string such as ``"Houndoom, L76, F, shiny, fusion: Jolteon"``.

    A missing level means level 100; a missing gender means genderless.
    """

    if not details or not details.strip():
        return ParsedDetails(species_forme=None)

    species, *tokens = (token.strip() for token in details.split(","))
    level = 100
    gender = "N"
    shiny = False
    for token in tokens:
        level_match = _LEVEL_PATTERN.match(token)
        if level_match:
            level = int(level_match.group(1))
        elif token in _GENDERS:
            gender = token
        elif token == "shiny":
            shiny = True

    fusion_match = _FUSION_PATTERN.search(details)
    return ParsedDetails(
        species_forme=species or None,
        level=level,
        gender=gender,
        shiny=shiny,
        fusion_body=fusion_match.group(1).strip() if fusion_match else None,
    )


def parse_condition(condition: str | None) -> tuple[int | None, int | None, str | None]:
    """Split a server condition like ``"187/231 par"`` or ``"0 fnt"`` into hp, max hp, status."""

    if not condition or not condition.strip():
        return None, None, None
    hp_part, _sep, status = condition.strip().partition(" ")
    current, _slash, maximum = hp_part.partition("/")
    try:
        hp = int(current)
        max_hp = int(maximum) if maximum else None
    except ValueError:
        log.debug("Unparseable condition %r", condition)
        return None, None, None
    return hp, max_hp, status.strip() or None


def parse_battle(raw: Mapping[str, object] | str | bytes) -> BattleFeed:
    """Validate a raw battle payload (JSON text or decoded mapping) into a feed."""

    if isinstance(raw, str | bytes):
        payload = BattlePayload.model_validate_json(raw)
    else:
        payload = BattlePayload.model_validate(raw)
    return translate_battle(payload)


def translate_battle(payload: BattlePayload) -> BattleFeed:
    sides: dict[SideId, FeedSide] = {}
    for side_id in SideId:
        side_payload: SidePayload | None = getattr(payload, side_id.value)
        if side_payload is None:
            continue
        if side_payload.sideid and side_payload.sideid != side_id.value:
            log.warning(
                "Dropping side %s: payload reports sideid %r",
                side_id,
                side_payload.sideid,
            )
            continue
        sides[side_id] = translate_side(side_payload, side_id)

    my_side = payload.my_side if payload.my_side in {s.value for s in SideId} else None
    return BattleFeed(
        battle_id=payload.id,
        nonce=payload.nonce,
        game_type=payload.game_type,
        weather=payload.weather,
        pseudo_weather=tuple(_pseudo_weather_names(payload.pseudo_weather)),
        sides=sides,
        my_pokemon=tuple(translate_server_pokemon(entry) for entry in payload.my_pokemon or ()),
        my_side=SideId(my_side) if my_side else None,
    )


def translate_side(payload: SidePayload, side_id: SideId) -> FeedSide:
    return FeedSide(
        side_id=side_id,
        name=payload.name,
        rating=payload.rating,
        pokemon=tuple(translate_pokemon(entry, side_id) for entry in payload.pokemon),
        active=tuple(entry.ident if entry is not None else None for entry in payload.active),
        side_conditions={
            condition_id: _condition_layers(entry)
            for condition_id, entry in payload.side_conditions.items()
        },
    )


def translate_pokemon(payload: PokemonPayload, side_id: SideId | None = None) -> PublicView:
    details = parse_details(payload.details)
    side = payload.side if payload.side in {s.value for s in SideId} else None
    status = "fnt" if payload.fainted and not payload.status else payload.status
    return PublicView(
        ident=payload.ident,
        searchid=payload.searchid,
        name=payload.name,
        species_forme=payload.species_forme or details.species_forme,
        details=payload.details,
        level=payload.level or details.level,
        gender=payload.gender or details.gender,
        shiny=payload.shiny if payload.shiny is not None else details.shiny,
        fusion_body=details.fusion_body,
        side_id=SideId(side) if side else side_id,
        hp=payload.hp,
        max_hp=payload.maxhp,
        status=status,
        ability=payload.ability,
        base_ability=payload.base_ability,
        item=payload.item,
        prev_item=payload.prev_item,
        tera_type=payload.tera_type,
        revealed_moves=tuple(name for name, _pp in payload.move_track),
        boosts=dict(payload.boosts) if payload.boosts is not None else None,
        volatiles=tuple(payload.volatiles),
    )


def translate_server_pokemon(payload: ServerPokemonPayload) -> PrivateView:
    details = parse_details(payload.details)
    hp, max_hp, status = parse_condition(payload.condition)
    return PrivateView(
        ident=payload.ident,
        searchid=payload.searchid,
        name=payload.name,
        species_forme=payload.species_forme or details.species_forme,
        details=payload.details,
        level=payload.level or details.level,
        gender=payload.gender or details.gender,
        shiny=payload.shiny if payload.shiny is not None else details.shiny,
        hp=payload.hp if payload.hp is not None else hp,
        max_hp=payload.maxhp if payload.maxhp is not None else max_hp,
        status=payload.status or status,
        ability=payload.ability,
        base_ability=payload.base_ability,
        item=payload.item,
        tera_type=payload.tera_type,
        pokeball=payload.pokeball,
        moves=tuple(payload.moves),
        stats=dict(payload.stats),
        active=payload.active,
    )


def _condition_layers(entry: list[object]) -> int:
    # [name, layers, minTimeLeft, maxTimeLeft]
    if len(entry) > 1 and isinstance(entry[1], int) and entry[1] > 0:
        return entry[1]
    return 1


def _pseudo_weather_names(entries: list[object]) -> list[str]:
    names: list[str] = []
    for entry in entries:
        if isinstance(entry, str):
            names.append(entry)
        elif isinstance(entry, list) and entry and isinstance(entry[0], str):
            names.append(entry[0])
    return names
