from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from battlesync.domain.model import new_battle_state
from battlesync.ui import cli as cli_module
from tests.support.feeds import BATTLE_ID, raw_battle

if TYPE_CHECKING:
    from pathlib import Path


def test_cli_sync_passes_options(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}

    def fake_replay(path: str, **kwargs: object) -> object:
        captured["path"] = path
        captured.update(kwargs)
        return new_battle_state(BATTLE_ID, format_="gen9ou")

    monkeypatch.delenv("BATTLESYNC_MAX_COMBATANTS", raising=False)
    monkeypatch.setattr(cli_module, "replay_feed", fake_replay)

    cli_module.main(["sync", "feed.jsonl", "--format", "gen9ou", "--max-combatants", "8"])

    assert captured["path"] == "feed.jsonl"
    assert captured["format_"] == "gen9ou"
    assert captured["offline"] is False
    assert captured["config"].max_combatants == 8  # type: ignore[attr-defined]
    assert json.loads(capsys.readouterr().out)["battle_id"] == BATTLE_ID


def test_cli_sync_offline_end_to_end(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    path = tmp_path / "battle.jsonl"
    path.write_text(json.dumps(raw_battle()) + "\n")

    cli_module.main(["sync", str(path), "--format", "gen9ou", "--offline"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["battle_nonce"] == "n1"
    assert payload["p1"]["pokemon_order"] == ["p1: Pikachu", "p1: Bulby"]


def test_cli_rejects_non_positive_capacity() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync", "feed.jsonl", "--format", "gen9ou", "--max-combatants", "0"])

    assert excinfo.value.code == 2


def test_cli_requires_format() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync", "feed.jsonl"])

    assert excinfo.value.code == 2


def test_cli_reports_fatal_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_replay(*_: object, **__: object) -> object:
        raise RuntimeError("feed unreadable")

    monkeypatch.setattr(cli_module, "replay_feed", failing_replay)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync", "feed.jsonl", "--format", "gen9ou"])

    assert excinfo.value.code == 1


def test_cli_preset_round_trip(capsys: pytest.CaptureFixture[str]) -> None:
    cli_module.main(["preset", "encode", '{"identity_key": "a1", "species_forme": "Ditto"}'])
    encoded = capsys.readouterr().out.strip()

    cli_module.main(["preset", "decode", encoded])
    decoded = json.loads(capsys.readouterr().out)

    assert encoded == "cid~a1,fme~Ditto"
    assert decoded["identity_key"] == "a1"
    assert decoded["species_forme"] == "Ditto"


def test_cli_preset_encode_needs_identity() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["preset", "encode", '{"identity_key": "", "species_forme": "Ditto"}'])

    assert excinfo.value.code == 1
