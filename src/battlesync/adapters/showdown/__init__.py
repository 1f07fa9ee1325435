"""Pokemon Showdown adapter: client feed translation and dex reference data."""

from __future__ import annotations

from .client import ShowdownDexClient
from .dex import ShowdownDex
from .feed import parse_battle, parse_condition, parse_details, translate_battle

__all__ = [
    "ShowdownDex",
    "ShowdownDexClient",
    "parse_battle",
    "parse_condition",
    "parse_details",
    "translate_battle",
]
