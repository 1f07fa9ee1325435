"""Compact text codec for roster presets.

A dehydrated preset is a flat list of ``<opcode>~<value>`` pairs joined by a
delimiter (``,`` by default)::

    cid~3f2a...,src~server,fme~Pikachu,lvl~50,shy~y,mov~Thunderbolt@0.91/Surf

Alt arrays are ``/``-separated values with an optional ``@usage`` suffix;
stats tables are ``/``-separated in ``hp/atk/def/spa/spd/spe`` order; booleans
are ``y`` or ``n``.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from battlesync.domain.model import STAT_NAMES, AltValue, PresetSource, RosterPreset

if TYPE_CHECKING:
    from collections.abc import Sequence

log = getLogger(__name__)

OPCODE_SEPARATOR = "~"
ARRAY_SEPARATOR = "/"
USAGE_SEPARATOR = "@"
MAX_MOVES = 4

# attribute -> opcode, in output order
OPCODES: dict[str, str] = {
    "identity_key": "cid",
    "source": "src",
    "name": "nom",
    "player_name": "pln",
    "format": "fmt",
    "nickname": "nkn",
    "usage": "usg",
    "species_forme": "fme",
    "level": "lvl",
    "gender": "gdr",
    "hidden_power_type": "hpt",
    "tera_types": "trt",
    "shiny": "shy",
    "happiness": "hpy",
    "dynamax_level": "dml",
    "gigantamax": "gmx",
    "alt_abilities": "abl",
    "alt_items": "itm",
    "alt_moves": "mov",
    "nature": "ntr",
    "ivs": "ivs",
    "evs": "evs",
    "pokeball": "pkb",
}

ATTRIBUTES: dict[str, str] = {opcode: attribute for attribute, opcode in OPCODES.items()}

_ALT_ATTRIBUTES = frozenset({"tera_types", "alt_abilities", "alt_items", "alt_moves"})
_STATS_ATTRIBUTES = frozenset({"ivs", "evs"})
_INT_ATTRIBUTES = frozenset({"level", "happiness", "dynamax_level"})
_BOOL_ATTRIBUTES = frozenset({"shiny", "gigantamax"})


def dehydrate_preset(preset: RosterPreset, delimiter: str = ",") -> str | None:
    """Serialize ``preset``; ``None`` when it lacks an identity key or species forme."""

    if not preset.identity_key or not preset.species_forme:
        return None

    output: list[str] = []
    for attribute, opcode in OPCODES.items():
        value = getattr(preset, attribute)
        if attribute in _ALT_ATTRIBUTES:
            encoded = _dehydrate_alts(value or _definite_fallback(preset, attribute))
        elif attribute in _STATS_ATTRIBUTES:
            encoded = _dehydrate_stats(value)
        else:
            encoded = _dehydrate_value(value)
        if encoded:
            output.append(f"{opcode}{OPCODE_SEPARATOR}{encoded}")
    return delimiter.join(output)


def hydrate_preset(text: str, delimiter: str = ",") -> RosterPreset:
    """Rebuild a preset from its dehydrated form.

    The definite ability and item are taken from the first alt value and the
    definite moves from the first four alt moves.
    """

    values: dict[str, object] = {}
    for chunk in text.strip().split(delimiter):
        opcode, sep, raw = chunk.partition(OPCODE_SEPARATOR)
        attribute = ATTRIBUTES.get(opcode.strip())
        if not sep or attribute is None:
            log.debug("Skipping unknown preset chunk %r", chunk)
            continue
        values[attribute] = _hydrate_value(attribute, raw)

    identity_key = values.pop("identity_key", None)
    species_forme = values.pop("species_forme", None)
    if not isinstance(identity_key, str) or not isinstance(species_forme, str):
        raise ValueError("Dehydrated preset is missing its identity key or species forme")

    preset = RosterPreset(identity_key=identity_key, species_forme=species_forme)
    for attribute, value in values.items():
        setattr(preset, attribute, value)

    if preset.alt_abilities:
        preset.ability = preset.alt_abilities[0].value
    if preset.alt_items:
        preset.item = preset.alt_items[0].value
    preset.moves = [alt.value for alt in preset.alt_moves[:MAX_MOVES]]
    return preset


def _definite_fallback(preset: RosterPreset, attribute: str) -> list[AltValue]:
    if attribute == "alt_abilities" and preset.ability:
        return [AltValue(preset.ability)]
    if attribute == "alt_items" and preset.item:
        return [AltValue(preset.item)]
    if attribute == "alt_moves":
        return [AltValue(move) for move in preset.moves if move]
    return []


def _dehydrate_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "y" if value else "n"
    if isinstance(value, PresetSource):
        return value.value
    return str(value)


def _dehydrate_alts(alts: Sequence[AltValue]) -> str:
    parts: list[str] = []
    for alt in alts:
        if not alt.value:
            continue
        if alt.usage is None:
            parts.append(alt.value)
        else:
            parts.append(f"{alt.value}{USAGE_SEPARATOR}{alt.usage}")
    return ARRAY_SEPARATOR.join(parts)


def _dehydrate_stats(stats: dict[str, int]) -> str:
    if not stats:
        return ""
    return ARRAY_SEPARATOR.join(
        str(stats[stat]) if stat in stats else "" for stat in STAT_NAMES
    )


def _hydrate_value(attribute: str, raw: str) -> object:
    if attribute in _ALT_ATTRIBUTES:
        return _hydrate_alts(raw)
    if attribute in _STATS_ATTRIBUTES:
        return _hydrate_stats(raw)
    if attribute in _INT_ATTRIBUTES:
        return int(raw)
    if attribute in _BOOL_ATTRIBUTES:
        return raw == "y"
    if attribute == "source":
        return PresetSource(raw)
    if attribute == "usage":
        return float(raw)
    return raw


def _hydrate_alts(raw: str) -> list[AltValue]:
    alts: list[AltValue] = []
    for part in raw.split(ARRAY_SEPARATOR):
        value, sep, usage = part.partition(USAGE_SEPARATOR)
        if not value:
            continue
        alts.append(AltValue(value, float(usage) if sep and usage else None))
    return alts


def _hydrate_stats(raw: str) -> dict[str, int]:
    return {
        stat: int(value)
        for stat, value in zip(STAT_NAMES, raw.split(ARRAY_SEPARATOR), strict=False)
        if value
    }
