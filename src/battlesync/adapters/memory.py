"""In-memory battle state repository.

Stored snapshots are detached from the values callers pass in and get back,
so mutating a returned state (or one handed to ``commit``) never reaches the
committed copy.
"""

from __future__ import annotations

from copy import deepcopy
from logging import getLogger
from typing import TYPE_CHECKING

from battlesync.domain.sync import UnknownBattleError

if TYPE_CHECKING:
    from battlesync.domain.model import BattleState

log = getLogger(__name__)


class InMemoryBattleStateRepository:
    """Keeps only the latest committed state per battle id."""

    def __init__(self) -> None:
        self._states: dict[str, BattleState] = {}

    def get(self, battle_id: str) -> BattleState | None:
        state = self._states.get(battle_id)
        return deepcopy(state) if state is not None else None

    def add(self, state: BattleState) -> None:
        if state.battle_id in self._states:
            raise ValueError(f"Battle {state.battle_id} is already initialized")
        self._states[state.battle_id] = deepcopy(state)
        log.debug("Initialized battle %s", state.battle_id)

    def commit(self, state: BattleState) -> None:
        if state.battle_id not in self._states:
            raise UnknownBattleError(state.battle_id)
        self._states[state.battle_id] = deepcopy(state)

    def __len__(self) -> int:
        return len(self._states)
