"""Field reconciler: weather, terrain and per-side conditions."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from battlesync.domain.model import GameType, SideId, Terrain, Weather, to_id

if TYPE_CHECKING:
    from battlesync.domain.model import BattleFeed, FieldState

log = getLogger(__name__)

GAME_TYPES: dict[str, GameType] = {
    "singles": GameType.SINGLES,
    "doubles": GameType.DOUBLES,
    "triples": GameType.DOUBLES,
    "multi": GameType.DOUBLES,
    "freeforall": GameType.DOUBLES,
}

WEATHERS: dict[str, Weather] = {
    "sunnyday": Weather.SUN,
    "raindance": Weather.RAIN,
    "sandstorm": Weather.SAND,
    "hail": Weather.HAIL,
    "snow": Weather.SNOW,
    "snowscape": Weather.SNOW,
    "desolateland": Weather.HARSH_SUNSHINE,
    "primordialsea": Weather.HEAVY_RAIN,
    "deltastream": Weather.STRONG_WINDS,
}

TERRAINS: dict[str, Terrain] = {
    "electricterrain": Terrain.ELECTRIC,
    "grassyterrain": Terrain.GRASSY,
    "mistyterrain": Terrain.MISTY,
    "psychicterrain": Terrain.PSYCHIC,
}


def parse_game_type(value: str | None) -> GameType | None:
    return GAME_TYPES.get(to_id(value)) if value else None


def reconcile_field(
    prior: FieldState,
    feed: BattleFeed,
    attacker_index: int,
    defender_index: int,
) -> FieldState | None:
    """Return the field as of ``feed``, or ``None`` when its battle mode is unknown."""

    game_type = parse_game_type(feed.game_type)
    if game_type is None:
        log.warning(
            "Failed to sync the field of battle %s: unrecognized game type %r",
            feed.battle_id,
            feed.game_type,
        )
        return None

    terrain: Terrain | None = None
    pseudo_weather: list[str] = []
    for name in feed.pseudo_weather:
        matched = TERRAINS.get(to_id(name))
        if matched is not None:
            terrain = matched
            continue
        pseudo_weather.append(name)

    side_conditions = {
        side_id: dict(conditions) for side_id, conditions in prior.side_conditions.items()
    }
    for side_id in SideId:
        feed_side = feed.side(side_id)
        if feed_side is not None:
            side_conditions[side_id] = dict(feed_side.side_conditions)

    return replace(
        prior,
        game_type=game_type,
        weather=WEATHERS.get(to_id(feed.weather)) if feed.weather else None,
        terrain=terrain,
        pseudo_weather=tuple(pseudo_weather),
        side_conditions=side_conditions,
        attacker_index=attacker_index,
        defender_index=defender_index,
    )
