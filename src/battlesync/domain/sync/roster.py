"""Roster reconciler: one side's combatants, matched and merged per sync.

The feed moves a side's active combatant to the front of its working array,
so positional indices of the viewer's own team would drift turn to turn. The
first private roster seen freezes an order anchor of idents, and from then on
that anchor is the iteration order regardless of how the feed shuffles.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from battlesync.domain.model import normalize_ident

from .identity import identify
from .merge import merge_combatant

if TYPE_CHECKING:
    from collections.abc import Sequence

    from battlesync.domain.model import (
        CombatantRecord,
        FeedSide,
        PlayerSideState,
        PrivateView,
        PublicView,
        SideId,
    )
    from battlesync.domain.ports import ReferenceData

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RosterReconciliation:
    roster: tuple[CombatantRecord, ...]
    order_anchor: tuple[str, ...]
    # identity key for each ident placed this sync
    keys_by_ident: dict[str, str]
    # combatants that are new or changed forme and need their moves enriched
    needs_enrichment: tuple[str, ...]


def capture_order_anchor(
    order_anchor: Sequence[str],
    private_roster: Sequence[PrivateView],
) -> tuple[str, ...]:
    if order_anchor or not private_roster:
        return tuple(order_anchor)
    return tuple(normalize_ident(view.ident) for view in private_roster)


def working_sequence(
    order_anchor: Sequence[str],
    public_roster: Sequence[PublicView],
    private_roster: Sequence[PrivateView],
) -> list[tuple[int, PublicView]]:
    """Entries to merge, paired with the slot their identity is derived from.

    With an anchor the slot is the position in the anchor, so an anchored
    combatant missing from both rosters does not shift the ones after it.
    """

    if not order_anchor:
        return list(enumerate(public_roster))

    public_by_ident = {normalize_ident(view.ident): view for view in public_roster}
    private_by_ident = {normalize_ident(view.ident): view for view in private_roster}
    sequence: list[tuple[int, PublicView]] = []
    for slot, ident in enumerate(order_anchor):
        public = public_by_ident.get(ident)
        if public is not None:
            sequence.append((slot, public))
            continue
        private = private_by_ident.get(ident)
        if private is not None:
            sequence.append((slot, private.as_public_stub()))
            continue
        log.debug("Anchored ident %s is missing from both rosters", ident)
    return sequence


def match_private(
    public: PublicView,
    private_roster: Sequence[PrivateView],
) -> PrivateView | None:
    ident = normalize_ident(public.ident)
    for private in private_roster:
        if normalize_ident(private.ident) == ident:
            return private
    if public.searchid:
        for private in private_roster:
            if private.searchid == public.searchid:
                return private
    return None


def reconcile_roster(
    side_id: SideId,
    prior_roster: Sequence[CombatantRecord],
    order_anchor: Sequence[str],
    public_roster: Sequence[PublicView],
    private_roster: Sequence[PrivateView] = (),
    *,
    capacity: int,
    reference: ReferenceData | None = None,
    format_: str | None = None,
) -> RosterReconciliation:
    """Merge one side's observations into its append-only roster."""

    anchor = capture_order_anchor(order_anchor, private_roster)
    roster = list(prior_roster)
    position_by_key = {record.identity_key: index for index, record in enumerate(roster)}
    keys_by_ident: dict[str, str] = {}
    needs_enrichment: list[str] = []
    placed: set[str] = set()

    for slot, public in working_sequence(anchor, public_roster, private_roster):
        key = identify(public, slot, side_id)
        if key in placed:
            log.debug("Skipping duplicate observation of %s in slot %s", public.ident, slot)
            continue
        private = match_private(public, private_roster) if private_roster else None
        position = position_by_key.get(key)
        previous = roster[position] if position is not None else None

        if previous is None and len(roster) >= capacity:
            log.warning(
                "Ignoring new combatant %s for %s: roster is at capacity (%s)",
                public.ident,
                side_id,
                capacity,
            )
            continue

        merged = merge_combatant(
            previous,
            public,
            private,
            identity_key=key,
            reference=reference,
            format_=format_,
        )
        placed.add(key)
        keys_by_ident[normalize_ident(public.ident)] = key

        if previous is None or previous.species_forme != merged.species_forme:
            needs_enrichment.append(key)

        if position is None:
            position_by_key[key] = len(roster)
            roster.append(merged)
            log.debug("Adding %s to %s at index %s", merged.species_forme, side_id, len(roster) - 1)
        else:
            roster[position] = merged
            log.debug("Updating %s of %s at index %s", merged.species_forme, side_id, position)

    return RosterReconciliation(
        roster=tuple(roster),
        order_anchor=anchor,
        keys_by_ident=keys_by_ident,
        needs_enrichment=tuple(needs_enrichment),
    )


def locate_active(
    roster: Sequence[CombatantRecord],
    keys_by_ident: dict[str, str],
    active_ident: str | None,
) -> int:
    """Index of the combatant the feed reports as active, or -1."""

    if not active_ident:
        return -1
    ident = normalize_ident(active_ident)
    key = keys_by_ident.get(ident)
    for index, record in enumerate(roster):
        if key is not None and record.identity_key == key:
            return index
        if key is None and normalize_ident(record.ident) == ident:
            return index
    return -1


def reconcile_side(
    prior: PlayerSideState,
    feed_side: FeedSide,
    private_roster: Sequence[PrivateView] = (),
    *,
    capacity: int,
    reference: ReferenceData | None = None,
    format_: str | None = None,
) -> tuple[PlayerSideState, tuple[str, ...]]:
    """Apply one feed side to its player state.

    Returns the new state plus the identity keys still awaiting enrichment.
    """

    result = reconcile_roster(
        prior.side_id,
        prior.pokemon,
        prior.pokemon_order,
        feed_side.pokemon,
        private_roster,
        capacity=capacity,
        reference=reference,
        format_=format_,
    )
    active_indices = tuple(
        index
        for index in (
            locate_active(result.roster, result.keys_by_ident, ident) for ident in feed_side.active
        )
        if index > -1
    )

    updated = replace(prior, pokemon=result.roster, pokemon_order=result.order_anchor)
    if active_indices:
        updated = replace(updated, active_index=active_indices[0], active_indices=active_indices)
        if updated.auto_select:
            updated = replace(updated, selection_index=active_indices[0])
    return updated, result.needs_enrichment
