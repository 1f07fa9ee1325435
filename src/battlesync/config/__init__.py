"""Application configuration helpers."""

from __future__ import annotations

from .env import positive_int_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .showdown import ShowdownConfig, get_showdown_config
from .storage import StorageConfig, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ShowdownConfig",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "get_showdown_config",
    "get_storage_config",
    "get_sync_config",
    "positive_int_env",
    "require_env_vars",
]
