"""HTTP client for the Pokemon Showdown static data files."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from battlesync.adapters.http_resilience import ResilientClient
from battlesync.config.showdown import get_showdown_config
from battlesync.domain.ports import ReferenceDataError

from .schema import DexLearnset, DexMove, DexSpecies

if TYPE_CHECKING:
    from collections.abc import Callable

    from battlesync.config.http_resilience import ResilienceConfig
    from battlesync.config.showdown import ShowdownConfig

log = getLogger(__name__)

POKEDEX_PATH = "pokedex.json"
MOVES_PATH = "moves.json"
LEARNSETS_PATH = "learnsets.json"

_SPECIES_ADAPTER = TypeAdapter(dict[str, DexSpecies])
_MOVES_ADAPTER = TypeAdapter(dict[str, DexMove])
_LEARNSETS_ADAPTER = TypeAdapter(dict[str, DexLearnset])


class ShowdownDexClient:
    """Low-level client for ``pokedex.json``, ``moves.json`` and ``learnsets.json``."""

    def __init__(
        self,
        *,
        config: ShowdownConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config or get_showdown_config()
        self._resilience = self._config.resilience
        self._client_factory = client_factory or ResilientClient

    async def fetch_pokedex(self) -> dict[str, DexSpecies]:
        return _SPECIES_ADAPTER.validate_python(await self._fetch_json(POKEDEX_PATH))

    async def fetch_moves(self) -> dict[str, DexMove]:
        return _MOVES_ADAPTER.validate_python(await self._fetch_json(MOVES_PATH))

    async def fetch_learnsets(self) -> dict[str, DexLearnset]:
        return _LEARNSETS_ADAPTER.validate_python(await self._fetch_json(LEARNSETS_PATH))

    async def _fetch_json(self, path: str) -> dict[str, object]:
        if self._resilience.base_url is None:
            raise ReferenceDataError("Missing Showdown base_url in resilience configuration")

        log.debug("Fetching Showdown data file %s", path)
        async with self._client_factory(self._resilience) as client:
            response = await client.get(path)
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise ReferenceDataError(f"Unexpected Showdown payload for {path}")
        return payload
