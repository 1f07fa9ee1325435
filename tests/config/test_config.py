from __future__ import annotations

import os
from pathlib import Path

import pytest

from battlesync.config import (
    ConfigurationError,
    MissingConfigurationError,
    StorageConfig,
    get_showdown_config,
    get_storage_config,
    get_sync_config,
    require_env_vars,
)
from battlesync.config.sync import DEFAULT_MAX_COMBATANTS


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_sync_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BATTLESYNC_MAX_COMBATANTS", raising=False)

    config = get_sync_config()

    assert config.max_combatants == DEFAULT_MAX_COMBATANTS
    assert config.auto_select


def test_sync_config_reads_capacity(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATTLESYNC_MAX_COMBATANTS", " 12 ")

    assert get_sync_config().max_combatants == 12


@pytest.mark.parametrize("raw", ["zero", "0", "-3"])
def test_sync_config_rejects_invalid_capacity(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("BATTLESYNC_MAX_COMBATANTS", raw)

    with pytest.raises(ConfigurationError):
        get_sync_config()


def test_storage_config_uses_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("BATTLESYNC_DATA_DIR", str(tmp_path / "data"))

    config = get_storage_config()
    cache_path = config.http_cache_path()

    assert config.data_dir == tmp_path / "data"
    assert cache_path == (tmp_path / "data").resolve() / "http_cache.db"
    assert cache_path.parent.is_dir()


@pytest.mark.skipif(os.name == "nt", reason="XDG paths apply to POSIX only")
def test_storage_config_defaults_to_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("BATTLESYNC_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_storage_config().data_dir == tmp_path.resolve() / "battlesync"


def test_showdown_config_normalizes_base_url(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("SHOWDOWN_DATA_URL", "https://mirror.example.test/data")

    config = get_showdown_config(storage=StorageConfig(data_dir=tmp_path))
    resilience = config.resilience

    assert resilience.base_url == "https://mirror.example.test/data/"
    assert resilience.cache is not None
    assert resilience.cache.backend == "sqlite"
    assert resilience.cache.sqlite_path == str(tmp_path.resolve() / "http_cache.db")
    assert resilience.ratelimit is not None


def test_showdown_config_default_url(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("SHOWDOWN_DATA_URL", raising=False)

    config = get_showdown_config(storage=StorageConfig(data_dir=tmp_path))

    assert config.resilience.base_url == "https://play.pokemonshowdown.com/data/"
