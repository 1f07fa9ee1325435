"""Synchronization controller.

One request runs at a time per battle id. Each request reads the committed
state, builds a new value from it and swaps it in on success; an aborted
request leaves the committed value untouched. A request that was queued behind
another re-checks the change token once it gets its turn, so redundant feed
churn never reaches the reconcilers.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from battlesync.config.sync import SyncConfig
from battlesync.domain.model import SideId, ident_side
from battlesync.domain.ports import LearnsetLookup

from .enrichment import enrich_side
from .errors import (
    MissingBattleIdError,
    MissingCapabilityError,
    UnknownBattleError,
    UnknownCombatantError,
)
from .field import reconcile_field
from .merge import apply_override
from .roster import reconcile_side

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from battlesync.domain.model import (
        BattleFeed,
        BattleState,
        CombatantOverride,
        PlayerSideState,
    )
    from battlesync.domain.ports import BattleStateRepository, ReferenceData

log = getLogger(__name__)


def detect_viewer_side(feed: BattleFeed) -> SideId | None:
    """Side the private roster belongs to, if the feed carries one."""

    if feed.my_side is not None:
        return feed.my_side
    for view in feed.my_pokemon:
        side = ident_side(view.ident)
        if side in {SideId.P1.value, SideId.P2.value}:
            return SideId(side)
    return None


class SyncController:
    """Reconcile feed snapshots into committed battle states."""

    def __init__(
        self,
        *,
        repository: BattleStateRepository,
        reference: ReferenceData,
        config: SyncConfig | None = None,
    ) -> None:
        self._repository = repository
        self._reference = reference
        self._config = config or SyncConfig()
        # battle id -> (lock, requests holding or waiting for it)
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    async def sync(self, feed: BattleFeed) -> BattleState:
        """Synchronize ``feed`` and return the committed state afterwards."""

        battle_id = feed.battle_id
        if not battle_id:
            raise MissingBattleIdError("Attempted to sync a battle feed without a battle id")

        async with self._battle_lock(battle_id):
            return await self._sync_locked(battle_id, feed)

    async def apply_override(
        self,
        battle_id: str,
        side_id: SideId,
        identity_key: str,
        override: CombatantOverride,
    ) -> BattleState:
        """Record manual corrections for one combatant and commit the result."""

        async with self._battle_lock(battle_id):
            committed = self._repository.get(battle_id)
            if committed is None:
                raise UnknownBattleError(battle_id)

            side = committed.side(side_id)
            index, record = side.find(identity_key)
            if record is None:
                raise UnknownCombatantError(battle_id, identity_key)

            pokemon = list(side.pokemon)
            pokemon[index] = apply_override(record, override)
            side = replace(side, pokemon=tuple(pokemon))
            updated = replace(committed, **{side_id.value: side})
            self._repository.commit(updated)
            log.debug("Committed override of %s in %s", record.species_forme, battle_id)
            return updated

    @asynccontextmanager
    async def _battle_lock(self, battle_id: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(battle_id, (asyncio.Lock(), 0))
        self._locks[battle_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[battle_id]
            if users > 1:
                self._locks[battle_id] = (lock, users - 1)
            else:
                del self._locks[battle_id]

    async def _sync_locked(self, battle_id: str, feed: BattleFeed) -> BattleState:
        committed = self._repository.get(battle_id)
        if committed is None:
            raise UnknownBattleError(battle_id)

        if committed.battle_nonce and committed.battle_nonce == feed.nonce:
            log.debug("Skipping sync of %s: change token %s unchanged", battle_id, feed.nonce)
            return committed

        if not isinstance(self._reference, LearnsetLookup):
            raise MissingCapabilityError("Reference data must provide a learnable() lookup")

        viewer_side = detect_viewer_side(feed)
        sides: dict[SideId, PlayerSideState] = {}
        pending: dict[SideId, tuple[str, ...]] = {}
        for side_id in SideId:
            sides[side_id], pending[side_id] = self._sync_side(
                committed,
                feed,
                side_id,
                is_viewer=side_id is viewer_side,
            )

        field_state = reconcile_field(
            committed.field_state,
            feed,
            sides[SideId.P1].active_index,
            sides[SideId.P2].active_index,
        )
        if field_state is None:
            log.warning("Discarding sync of %s: field could not be established", battle_id)
            return committed

        for side_id in SideId:
            if pending[side_id]:
                sides[side_id] = await enrich_side(
                    sides[side_id],
                    pending[side_id],
                    self._reference,
                    committed.format,
                )

        synced = replace(
            committed,
            p1=sides[SideId.P1],
            p2=sides[SideId.P2],
            field_state=field_state,
            battle_nonce=feed.nonce or committed.battle_nonce,
        )
        self._repository.commit(synced)
        log.debug("Committed sync of %s at change token %s", battle_id, synced.battle_nonce)
        return synced

    def _sync_side(
        self,
        committed: BattleState,
        feed: BattleFeed,
        side_id: SideId,
        *,
        is_viewer: bool,
    ) -> tuple[PlayerSideState, tuple[str, ...]]:
        prior = committed.side(side_id)
        feed_side = feed.side(side_id)
        if feed_side is None:
            log.warning("Ignoring updates for %s: side is missing from the feed", side_id)
            return prior, ()

        prior = replace(
            prior,
            name=feed_side.name or prior.name,
            rating=feed_side.rating or prior.rating,
        )
        if not feed_side.pokemon:
            log.warning("Ignoring combatant updates for %s: the side has no combatants", side_id)
            return prior, ()

        private_roster = feed.my_pokemon if is_viewer else ()
        return reconcile_side(
            prior,
            feed_side,
            private_roster,
            capacity=self._config.max_combatants,
            reference=self._reference,
            format_=committed.format,
        )
