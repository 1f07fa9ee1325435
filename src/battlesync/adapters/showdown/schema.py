"""Pydantic models describing Showdown client battle objects and dex files."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _side_id_from(value: object) -> object:
    # the client links combatants to their side object; serialized copies keep only the id
    if isinstance(value, Mapping):
        return cast(Mapping[str, object], value).get("sideid")
    return value


class ShowdownBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PokemonPayload(ShowdownBaseModel):
    """Public ``Showdown.Pokemon`` as seen by every battle participant."""

    ident: str
    searchid: str | None = None
    name: str | None = None
    species_forme: str | None = Field(default=None, alias="speciesForme")
    details: str | None = None
    level: int | None = None
    gender: str | None = None
    shiny: bool | None = None
    side: str | None = None
    hp: int | None = None
    maxhp: int | None = None
    status: str | None = None
    fainted: bool | None = None
    ability: str | None = None
    base_ability: str | None = Field(default=None, alias="baseAbility")
    item: str | None = None
    prev_item: str | None = Field(default=None, alias="prevItem")
    tera_type: str | None = Field(default=None, alias="teraType")
    move_track: list[tuple[str, int]] = Field(default_factory=list, alias="moveTrack")
    boosts: dict[str, int] | None = None
    volatiles: dict[str, object] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_ident(cls, value: object) -> object:
        if isinstance(value, str):
            return {"ident": value}
        return value

    _normalize_side = field_validator("side", mode="before")(_side_id_from)
    _normalize_blanks = field_validator(
        "gender",
        "status",
        "ability",
        "base_ability",
        "item",
        "prev_item",
        "tera_type",
        mode="before",
    )(_blank_to_none)


class ServerPokemonPayload(ShowdownBaseModel):
    """Private ``Showdown.ServerPokemon`` sent only for the player's own team."""

    ident: str
    details: str | None = None
    condition: str | None = None
    active: bool = False
    searchid: str | None = None
    name: str | None = None
    species_forme: str | None = Field(default=None, alias="speciesForme")
    level: int | None = None
    gender: str | None = None
    shiny: bool | None = None
    hp: int | None = None
    maxhp: int | None = None
    status: str | None = None
    stats: dict[str, int] = Field(default_factory=dict)
    moves: list[str] = Field(default_factory=list)
    ability: str | None = None
    base_ability: str | None = Field(default=None, alias="baseAbility")
    # an empty string here means the combatant holds nothing, which is known
    item: str | None = None
    pokeball: str | None = None
    tera_type: str | None = Field(default=None, alias="teraType")

    _normalize_blanks = field_validator(
        "gender",
        "ability",
        "base_ability",
        "pokeball",
        "tera_type",
        mode="before",
    )(_blank_to_none)


class SidePayload(ShowdownBaseModel):
    sideid: str | None = None
    name: str | None = None
    rating: int | None = None
    pokemon: list[PokemonPayload] = Field(default_factory=list)
    active: list[PokemonPayload | None] = Field(default_factory=list)
    side_conditions: dict[str, list[object]] = Field(default_factory=dict, alias="sideConditions")

    @field_validator("rating", mode="before")
    @classmethod
    def _parse_rating(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            return int(stripped) if stripped.isdigit() else None
        return value

    _normalize_name = field_validator("name", mode="before")(_blank_to_none)


class BattlePayload(ShowdownBaseModel):
    """Serialized ``Showdown.Battle`` as emitted by the host client."""

    id: str | None = None
    nonce: str | None = None
    game_type: str | None = Field(default=None, alias="gameType")
    weather: str | None = None
    pseudo_weather: list[object] = Field(default_factory=list, alias="pseudoWeather")
    p1: SidePayload | None = None
    p2: SidePayload | None = None
    my_pokemon: list[ServerPokemonPayload] | None = Field(default=None, alias="myPokemon")
    my_side: str | None = Field(default=None, alias="mySide")

    @field_validator("nonce", mode="before")
    @classmethod
    def _stringify_nonce(cls, value: object) -> object:
        if isinstance(value, int | float):
            return str(value)
        return value

    _normalize_side = field_validator("my_side", mode="before")(_side_id_from)
    _normalize_blanks = field_validator("id", "game_type", "weather", mode="before")(
        _blank_to_none
    )


class DexSpecies(ShowdownBaseModel):
    name: str
    abilities: dict[str, str] = Field(default_factory=dict)
    prevo: str | None = None
    base_species: str | None = Field(default=None, alias="baseSpecies")
    changes_from: str | None = Field(default=None, alias="changesFrom")

    _normalize_blanks = field_validator("prevo", "base_species", "changes_from", mode="before")(
        _blank_to_none
    )


class DexMove(ShowdownBaseModel):
    name: str
    type: str | None = None
    category: str | None = None
    base_power: int = Field(default=0, alias="basePower")


class DexLearnset(ShowdownBaseModel):
    learnset: dict[str, list[str]] = Field(default_factory=dict)
