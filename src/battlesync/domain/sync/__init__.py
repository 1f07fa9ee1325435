"""Battle-state synchronization engine.

Flow of one sync request:
1) gate on the feed's change token
2) per side: resolve identities, merge views into canonical records
3) reconcile the shared field (abort the whole request if it fails)
4) enrich move knowledge for new or changed combatants
5) commit the new battle state as one value

Manual overrides go through the same per-battle lock and commit path.
"""

from __future__ import annotations

from .controller import SyncController, detect_viewer_side
from .enrichment import enrich_combatant, enrich_side, is_rule_relaxed
from .errors import (
    BattleSyncError,
    MissingBattleIdError,
    MissingCapabilityError,
    UnknownBattleError,
    UnknownCombatantError,
)
from .field import reconcile_field
from .identity import identify
from .merge import apply_override, merge_combatant, sanitize_public
from .roster import RosterReconciliation, reconcile_roster, reconcile_side

__all__ = [
    "BattleSyncError",
    "MissingBattleIdError",
    "MissingCapabilityError",
    "RosterReconciliation",
    "SyncController",
    "UnknownBattleError",
    "UnknownCombatantError",
    "apply_override",
    "detect_viewer_side",
    "enrich_combatant",
    "enrich_side",
    "identify",
    "is_rule_relaxed",
    "merge_combatant",
    "reconcile_field",
    "reconcile_roster",
    "reconcile_side",
    "sanitize_public",
]
