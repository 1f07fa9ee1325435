"""Showdown-backed implementation of the reference-data port."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from battlesync.domain.model import to_id
from battlesync.domain.ports import MoveEntry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from .client import ShowdownDexClient
    from .schema import DexLearnset, DexMove, DexSpecies

log = getLogger(__name__)

# pokedex ability slots in display order
_ABILITY_SLOTS = ("0", "1", "H", "S")

type LearnsetLoader = Callable[[], Awaitable[dict[str, DexLearnset]]]


class ShowdownDex:
    """Species, move and learnset lookups over Showdown's dex files.

    Learnsets are by far the largest file, so they are only fetched the first
    time a learnability lookup needs them.
    """

    def __init__(
        self,
        *,
        species: Mapping[str, DexSpecies],
        moves: Mapping[str, DexMove],
        learnsets: Mapping[str, DexLearnset] | None = None,
        learnset_loader: LearnsetLoader | None = None,
    ) -> None:
        self._species = dict(species)
        self._moves = {
            move_id: MoveEntry(
                name=move.name,
                type=move.type,
                category=move.category,
                base_power=move.base_power,
            )
            for move_id, move in moves.items()
        }
        self._learnsets = dict(learnsets) if learnsets is not None else None
        self._learnset_loader = learnset_loader
        self._learnset_lock = asyncio.Lock()

    @classmethod
    async def load(cls, client: ShowdownDexClient) -> ShowdownDex:
        species, moves = await asyncio.gather(client.fetch_pokedex(), client.fetch_moves())
        log.info("Loaded Showdown dex: %s species, %s moves", len(species), len(moves))
        return cls(species=species, moves=moves, learnset_loader=client.fetch_learnsets)

    @classmethod
    def empty(cls) -> ShowdownDex:
        return cls(species={}, moves={}, learnsets={})

    @property
    def moves(self) -> Mapping[str, MoveEntry]:
        return self._moves

    def species_abilities(self, species_forme: str) -> tuple[str, ...]:
        species = self._species.get(to_id(species_forme))
        if species is None:
            return ()
        ordered = [species.abilities[slot] for slot in _ABILITY_SLOTS if slot in species.abilities]
        extra = [name for slot, name in species.abilities.items() if slot not in _ABILITY_SLOTS]
        return tuple(dict.fromkeys(ordered + extra))

    async def learnable(self, species_forme: str) -> dict[str, list[str]]:
        """Moves learnable by ``species_forme`` or any of its pre-evolutions."""

        learnsets = await self._ensure_learnsets()
        moves: dict[str, list[str]] = {}
        for learnset in self._learnset_chain(to_id(species_forme), learnsets):
            for move_id, sources in learnset.learnset.items():
                moves.setdefault(move_id, sources)
        return moves

    async def _ensure_learnsets(self) -> Mapping[str, DexLearnset]:
        if self._learnsets is not None:
            return self._learnsets
        async with self._learnset_lock:
            if self._learnsets is None:
                if self._learnset_loader is None:
                    self._learnsets = {}
                else:
                    self._learnsets = await self._learnset_loader()
                    log.info("Loaded Showdown learnsets for %s species", len(self._learnsets))
        return self._learnsets

    def _learnset_chain(
        self,
        species_id: str,
        learnsets: Mapping[str, DexLearnset],
    ) -> list[DexLearnset]:
        chain: list[DexLearnset] = []
        seen: set[str] = set()
        current: str | None = species_id
        while current and current not in seen:
            seen.add(current)
            learnset = learnsets.get(current)
            species = self._species.get(current)
            if (learnset is None or not learnset.learnset) and species is not None:
                # cosmetic and battle-only formes share their base forme's learnset
                fallback = to_id(species.changes_from or species.base_species)
                if fallback and fallback != current:
                    current = fallback
                    continue
            if learnset is not None and learnset.learnset:
                chain.append(learnset)
            current = to_id(species.prevo) if species is not None and species.prevo else None
        return chain
