"""Pokemon Showdown reference-data configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .storage import StorageConfig, get_storage_config

DEFAULT_SHOWDOWN_DATA_URL = "https://play.pokemonshowdown.com/data/"
# dex files change with game patches, not per battle
DEFAULT_DEX_CACHE_TTL_SECONDS = 24 * 60 * 60.0


@dataclass(frozen=True, slots=True)
class ShowdownConfig:
    resilience: ResilienceConfig


def get_showdown_config(*, storage: StorageConfig | None = None) -> ShowdownConfig:
    base_url = os.getenv("SHOWDOWN_DATA_URL") or DEFAULT_SHOWDOWN_DATA_URL
    if not base_url.endswith("/"):
        base_url = f"{base_url}/"
    storage_config = storage or get_storage_config()

    resilience = ResilienceConfig(
        name="showdown",
        base_url=base_url,
        timeout_seconds=60.0,
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        cache=CacheConfig(
            enabled=True,
            backend="sqlite",
            sqlite_path=str(storage_config.http_cache_path()),
            default_ttl_seconds=DEFAULT_DEX_CACHE_TTL_SECONDS,
        ),
        default_headers={"User-Agent": "battlesync"},
    )
    return ShowdownConfig(resilience=resilience)
