"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from battlesync.adapters.memory import InMemoryBattleStateRepository
from battlesync.adapters.preset_codec import dehydrate_preset, hydrate_preset
from battlesync.adapters.showdown import ShowdownDex, ShowdownDexClient, parse_battle
from battlesync.config import get_sync_config
from battlesync.domain.model import BattleState, RosterPreset, new_battle_state
from battlesync.domain.sync import MissingBattleIdError, SyncController

if TYPE_CHECKING:
    from battlesync.config import ShowdownConfig, SyncConfig
    from battlesync.domain.model import BattleFeed
    from battlesync.domain.ports import BattleStateRepository, ReferenceData

log = getLogger(__name__)

_SNAPSHOT_ADAPTER = TypeAdapter(BattleState)
_PRESET_ADAPTER = TypeAdapter(RosterPreset)


def open_battle(
    battle_id: str,
    *,
    repository: BattleStateRepository,
    format_: str | None = None,
    config: SyncConfig | None = None,
) -> BattleState:
    """Create and register the empty state a battle is synchronized into."""

    effective_config = config or get_sync_config()
    state = new_battle_state(
        battle_id,
        format_=format_,
        auto_select=effective_config.auto_select,
    )
    repository.add(state)
    log.info("Opened battle %s (format=%s)", battle_id, format_)
    return state


async def load_reference(
    *,
    offline: bool = False,
    config: ShowdownConfig | None = None,
) -> ReferenceData:
    """Reference data for a sync run; offline runs get an empty index."""

    if offline:
        log.info("Using an empty reference index (offline)")
        return ShowdownDex.empty()
    return await ShowdownDex.load(ShowdownDexClient(config=config))


def read_feeds(path: Path) -> list[BattleFeed]:
    """Parse a JSON-lines file with one serialized battle per line."""

    feeds: list[BattleFeed] = []
    with path.open(encoding="utf-8") as handle:
        for line in handle:
            if line.strip():
                feeds.append(parse_battle(line))
    return feeds


def replay_feed(
    path: Path | str,
    *,
    format_: str | None = None,
    config: SyncConfig | None = None,
    reference: ReferenceData | None = None,
    repository: BattleStateRepository | None = None,
    offline: bool = False,
) -> BattleState:
    """Synchronize every battle snapshot in ``path`` in order and return the final state."""

    feeds = read_feeds(Path(path))
    if not feeds:
        raise ValueError(f"No battle snapshots found in {path}")
    return asyncio.run(
        _replay(
            feeds,
            format_=format_,
            config=config or get_sync_config(),
            reference=reference,
            repository=repository if repository is not None else InMemoryBattleStateRepository(),
            offline=offline,
        )
    )


async def _replay(
    feeds: list[BattleFeed],
    *,
    format_: str | None,
    config: SyncConfig,
    reference: ReferenceData | None,
    repository: BattleStateRepository,
    offline: bool,
) -> BattleState:
    battle_id = feeds[0].battle_id
    if not battle_id:
        raise MissingBattleIdError("The first battle snapshot carries no battle id")
    if repository.get(battle_id) is None:
        open_battle(battle_id, repository=repository, format_=format_, config=config)

    controller = SyncController(
        repository=repository,
        reference=reference if reference is not None else await load_reference(offline=offline),
        config=config,
    )
    state = await controller.sync(feeds[0])
    for index, feed in enumerate(feeds[1:], start=2):
        state = await controller.sync(feed)
        log.debug("Replayed snapshot %s of %s", index, len(feeds))
    log.info(
        "Finished replay of %s: %s snapshots, change token %s",
        battle_id,
        len(feeds),
        state.battle_nonce,
    )
    return state


def dump_snapshot(state: BattleState, *, indent: int | None = 2) -> str:
    return _SNAPSHOT_ADAPTER.dump_json(state, indent=indent).decode()


def encode_preset(payload: str | bytes) -> str | None:
    """Dehydrate a preset given as JSON."""

    return dehydrate_preset(_PRESET_ADAPTER.validate_json(payload))


def decode_preset(text: str, *, indent: int | None = 2) -> str:
    """Hydrate a dehydrated preset and render it as JSON."""

    return _PRESET_ADAPTER.dump_json(hydrate_preset(text), indent=indent).decode()
