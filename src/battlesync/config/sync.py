"""Synchronization defaults for battle reconciliation."""

from __future__ import annotations

from dataclasses import dataclass

from .env import positive_int_env

DEFAULT_MAX_COMBATANTS = 24


@dataclass(frozen=True, slots=True)
class SyncConfig:
    max_combatants: int = DEFAULT_MAX_COMBATANTS
    auto_select: bool = True


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        max_combatants=positive_int_env("BATTLESYNC_MAX_COMBATANTS", DEFAULT_MAX_COMBATANTS),
    )
