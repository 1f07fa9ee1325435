"""Move-knowledge enrichment from the learnability index.

This is the only step of a sync that awaits I/O. A failed or empty lookup
leaves the unseen sets empty (or falls back to the full catalog) instead of
failing the sync.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from battlesync.domain.model import CombatantRecord, PlayerSideState
    from battlesync.domain.ports import MoveEntry, ReferenceData

log = getLogger(__name__)

# known substrings only; unlisted relaxed formats are not detected
RULE_RELAXED_FORMAT = re.compile(r"anythinggoes|hackmons", re.IGNORECASE)


def is_rule_relaxed(format_: str | None) -> bool:
    return format_ is not None and RULE_RELAXED_FORMAT.search(format_) is not None


async def enrich_combatant(
    record: CombatantRecord,
    reference: ReferenceData,
    format_: str | None = None,
) -> CombatantRecord:
    """Return ``record`` with its learnable and other unseen moves recomputed."""

    learnable = await _lookup_learnable(record, reference)
    revealed = set(record.move_state.revealed)
    learnset = sorted(
        name for name in _names(learnable.keys(), reference.moves) if name not in revealed
    )

    other: list[str] = []
    if not learnset or is_rule_relaxed(format_):
        excluded = revealed | set(learnset)
        other = sorted(
            name for name in _names(reference.moves.keys(), reference.moves) if name not in excluded
        )

    return replace(
        record,
        move_state=replace(record.move_state, learnset=tuple(learnset), other=tuple(other)),
    )


async def enrich_side(
    side: PlayerSideState,
    identity_keys: Iterable[str],
    reference: ReferenceData,
    format_: str | None = None,
) -> PlayerSideState:
    """Enrich the listed combatants of ``side`` concurrently."""

    wanted = set(identity_keys)
    targets = [record for record in side.pokemon if record.identity_key in wanted]
    if not targets:
        return side
    enriched = await asyncio.gather(
        *(enrich_combatant(record, reference, format_) for record in targets)
    )
    by_key = {record.identity_key: record for record in enriched}
    return replace(
        side,
        pokemon=tuple(by_key.get(record.identity_key, record) for record in side.pokemon),
    )


async def _lookup_learnable(
    record: CombatantRecord,
    reference: ReferenceData,
) -> Mapping[str, object]:
    try:
        learnable = await reference.learnable(record.species_forme)
    except Exception:  # noqa: BLE001
        log.warning("Learnset lookup failed for %s", record.species_forme, exc_info=True)
        return {}
    if not learnable:
        log.debug("No learnset available for %s", record.species_forme)
        return {}
    return learnable


def _names(move_ids: Iterable[str], catalog: Mapping[str, MoveEntry]) -> set[str]:
    names: set[str] = set()
    for move_id in move_ids:
        entry = catalog.get(move_id)
        if entry is not None and entry.name:
            names.add(entry.name)
    return names
