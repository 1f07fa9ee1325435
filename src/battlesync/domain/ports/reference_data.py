"""Port for the move/species reference-data provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


class ReferenceDataError(RuntimeError):
    """Raised when reference data is unavailable or malformed."""


@dataclass(frozen=True, slots=True)
class MoveEntry:
    name: str
    type: str | None = None
    category: str | None = None
    base_power: int = 0


@runtime_checkable
class LearnsetLookup(Protocol):
    """Minimal capability the enrichment step cannot run without."""

    async def learnable(self, species_forme: str) -> Mapping[str, object]: ...


@runtime_checkable
class ReferenceData(LearnsetLookup, Protocol):
    """Reference data consumed by merging and enrichment.

    ``learnable`` returns move ids mapped to learn-method metadata; only the key
    set is used. ``moves`` is the full catalog keyed by move id.
    """

    @property
    def moves(self) -> Mapping[str, MoveEntry]: ...

    def species_abilities(self, species_forme: str) -> tuple[str, ...]: ...
