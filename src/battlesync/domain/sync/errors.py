"""Contract errors raised by battle synchronization."""

from __future__ import annotations


class BattleSyncError(RuntimeError):
    """Base class for failures that abort a sync request."""


class MissingBattleIdError(BattleSyncError):
    """Raised when a feed snapshot carries no battle identifier."""


class UnknownBattleError(BattleSyncError):
    """Raised when no battle state was initialized for the feed's battle id."""

    def __init__(self, battle_id: str) -> None:
        super().__init__(f"Could not find a battle state with battle id {battle_id!r}")
        self.battle_id = battle_id


class MissingCapabilityError(BattleSyncError):
    """Raised when the reference data lacks a capability sync depends on."""


class UnknownCombatantError(BattleSyncError):
    """Raised when an override targets a combatant the side does not hold."""

    def __init__(self, battle_id: str, identity_key: str) -> None:
        super().__init__(f"Could not find combatant {identity_key!r} in battle {battle_id!r}")
        self.battle_id = battle_id
        self.identity_key = identity_key
