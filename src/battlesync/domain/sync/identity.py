"""Stable identity keys for combatants.

The key is derived from attributes the feed reports on first sight of a
combatant (ident label, level, gender, shiny flag) plus its roster slot and
side, so repeated partial reveals of the same combatant resolve to the same
key. Formes change mid-battle, so ``species_forme`` is not part of the key
and a forme change updates the existing record.
"""

from __future__ import annotations

from typing import Protocol
from uuid import NAMESPACE_URL, uuid5

from battlesync.domain.model import SideId, ident_name

_IDENTITY_NAMESPACE = uuid5(NAMESPACE_URL, "battlesync:combatant")
DEFAULT_LEVEL = 100
GENDERLESS = "N"


class Identifiable(Protocol):
    @property
    def ident(self) -> str: ...

    @property
    def level(self) -> int | None: ...

    @property
    def gender(self) -> str | None: ...

    @property
    def shiny(self) -> bool | None: ...


def identify(candidate: Identifiable, slot: int, side_id: SideId) -> str:
    """Return the deterministic identity key of ``candidate`` at ``slot`` on ``side_id``.

    A candidate that carries its own side reference uses it; otherwise the
    caller-supplied ``side_id`` stands in.
    """

    side = getattr(candidate, "side_id", None) or side_id
    parts = (
        SideId(side).value,
        str(slot),
        ident_name(candidate.ident),
        str(candidate.level or DEFAULT_LEVEL),
        candidate.gender or GENDERLESS,
        "shiny" if candidate.shiny else "",
    )
    return str(uuid5(_IDENTITY_NAMESPACE, "|".join(parts)))

