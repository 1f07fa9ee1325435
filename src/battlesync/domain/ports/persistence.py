"""Port for holding the latest committed state of each battle."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from battlesync.domain.model import BattleState


@runtime_checkable
class BattleStateRepository(Protocol):
    """Store of committed battle snapshots, one per battle id.

    ``add`` is the initialization path; ``commit`` replaces the whole value.
    """

    def get(self, battle_id: str) -> BattleState | None: ...

    def add(self, state: BattleState) -> None: ...

    def commit(self, state: BattleState) -> None: ...
