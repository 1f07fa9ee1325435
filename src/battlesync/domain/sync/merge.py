"""Combatant merge unit.

Folds a fresh public observation (and, for the viewer's own side, the private
record) into the previously known canonical record. Knowledge is monotonic:
an attribute that neither view reports keeps its previous value. Where both
views report an attribute the private one wins.

Transient battle state (boosts, volatiles) is replaced whenever the public
view reports it, since an empty boost table is itself an observation.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from battlesync.domain.model import (
    AltValue,
    CombatantRecord,
    MoveState,
    detect_gen_from_format,
    ident_name,
    to_id,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from battlesync.domain.model import CombatantOverride, PrivateView, PublicView
    from battlesync.domain.ports import ReferenceData

# abilities were introduced in generation 3
_FIRST_ABILITY_GEN = 3


def merge_combatant(
    previous: CombatantRecord | None,
    public: PublicView,
    private: PrivateView | None = None,
    *,
    identity_key: str,
    reference: ReferenceData | None = None,
    format_: str | None = None,
) -> CombatantRecord:
    """Return the canonical record after observing ``public`` (and ``private``).

    ``identity_key`` only seeds a record seen for the first time; a known
    record keeps the key it was created with.
    """

    base = previous or sanitize_public(public, identity_key=identity_key)

    species_forme = _first(
        private.species_forme if private else None,
        public.species_forme,
        base.species_forme,
    )
    boosts = dict(public.boosts) if public.boosts is not None else dict(base.boosts)
    ability = _first(private.ability if private else None, public.ability, base.ability)
    item = _merged_item(base, public, private)

    merged = replace(
        base,
        ident=public.ident or base.ident,
        searchid=_first(private.searchid if private else None, public.searchid, base.searchid),
        name=_first(private.name if private else None, public.name, base.name),
        species_forme=species_forme,
        details=_first(private.details if private else None, public.details, base.details),
        level=_first(private.level if private else None, public.level, base.level),
        gender=_first(private.gender if private else None, public.gender, base.gender),
        shiny=bool(_first(private.shiny if private else None, public.shiny, base.shiny)),
        fusion_body=_first(public.fusion_body, base.fusion_body),
        hp=_first(private.hp if private else None, public.hp, base.hp),
        max_hp=_first(private.max_hp if private else None, public.max_hp, base.max_hp),
        status=_merged_status(base, public, private),
        volatiles=public.volatiles,
        ability=ability,
        base_ability=_first(
            private.base_ability if private else None,
            public.base_ability,
            base.base_ability,
        ),
        dirty_ability=_clear_if_confirmed(base.dirty_ability, ability),
        item=item,
        prev_item=_first(public.prev_item, base.prev_item),
        dirty_item=_clear_if_confirmed(base.dirty_item, item),
        tera_type=_first(private.tera_type if private else None, public.tera_type, base.tera_type),
        pokeball=_first(private.pokeball if private else None, base.pokeball),
        stats=dict(private.stats) if private and private.stats else dict(base.stats),
        boosts=boosts,
        dirty_boosts=_prune_dirty_boosts(base.dirty_boosts, boosts),
        server_sourced=base.server_sourced or private is not None,
    )

    private_moves = _move_names(private.moves, reference) if private else ()
    merged = replace(
        merged,
        moves=private_moves or base.moves,
        move_state=replace(
            base.move_state,
            revealed=_accumulate(base.move_state.revealed, public.revealed_moves, private_moves),
        ),
    )

    species_changed = previous is not None and previous.species_forme != merged.species_forme
    if reference is not None and (
        species_changed or (not merged.alt_abilities and merged.ability is None)
    ):
        merged = replace(
            merged,
            alt_abilities=_seed_alt_abilities(merged, reference, format_),
        )
    return merged


def sanitize_public(public: PublicView, *, identity_key: str) -> CombatantRecord:
    """Canonical-shaped starting point for a combatant seen for the first time."""

    return CombatantRecord(
        identity_key=identity_key,
        ident=public.ident,
        species_forme=public.species_forme or ident_name(public.ident),
        searchid=public.searchid,
        name=public.name,
        details=public.details,
        level=public.level or 100,
        gender=public.gender,
        shiny=bool(public.shiny),
        fusion_body=public.fusion_body,
        move_state=MoveState(),
    )


def apply_override(record: CombatantRecord, override: CombatantOverride) -> CombatantRecord:
    """Layer manual corrections over ``record``.

    A dirty value that matches what the record already observes carries no
    information and is dropped straight away, the same rule a merge applies
    when a later observation catches up with the override.
    """

    dirty_boosts = {**record.dirty_boosts, **override.boosts}
    return replace(
        record,
        dirty_ability=_clear_if_confirmed(
            _first(override.ability, record.dirty_ability), record.ability
        ),
        dirty_item=_clear_if_confirmed(_first(override.item, record.dirty_item), record.item),
        dirty_boosts=_prune_dirty_boosts(dirty_boosts, record.boosts),
        nature=_first(override.nature, record.nature),
        ivs={**record.ivs, **override.ivs},
        evs={**record.evs, **override.evs},
    )


def _first[T](*values: T | None) -> T | None:
    for value in values:
        if value is not None:
            return value
    return None


def _merged_status(
    base: CombatantRecord,
    public: PublicView,
    private: PrivateView | None,
) -> str | None:
    if private is not None and private.hp is not None:
        # the private condition string is authoritative, including "no status"
        return private.status
    if public.hp is not None:
        return public.status
    return base.status


def _merged_item(
    base: CombatantRecord,
    public: PublicView,
    private: PrivateView | None,
) -> str | None:
    if private is not None and private.item is not None:
        return private.item or None
    if public.item is not None:
        return public.item
    if public.prev_item is not None and public.prev_item == base.item:
        # consumed, knocked off or tricked away since the last sync
        return None
    return base.item


def _clear_if_confirmed(dirty: str | None, observed: str | None) -> str | None:
    if dirty is not None and dirty == observed:
        return None
    return dirty


def _prune_dirty_boosts(dirty: Mapping[str, int], boosts: Mapping[str, int]) -> dict[str, int]:
    return {stat: value for stat, value in dirty.items() if value != boosts.get(stat, 0)}


def _accumulate(*groups: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    ordered: list[str] = []
    for group in groups:
        for name in group:
            key = to_id(name)
            if not key or key in seen:
                continue
            seen.add(key)
            ordered.append(name)
    return tuple(ordered)


def _move_names(move_ids: Iterable[str], reference: ReferenceData | None) -> tuple[str, ...]:
    names: list[str] = []
    for move_id in move_ids:
        entry = reference.moves.get(to_id(move_id)) if reference is not None else None
        names.append(entry.name if entry is not None else move_id)
    return tuple(names)


def _seed_alt_abilities(
    record: CombatantRecord,
    reference: ReferenceData,
    format_: str | None,
) -> tuple[AltValue, ...]:
    if format_ and detect_gen_from_format(format_) < _FIRST_ABILITY_GEN:
        return ()
    return tuple(AltValue(name) for name in reference.species_abilities(record.species_forme))
