from __future__ import annotations

import pytest

from battlesync.adapters.memory import InMemoryBattleStateRepository
from battlesync.config import SyncConfig
from battlesync.domain.model import new_battle_state
from battlesync.domain.sync import SyncController
from tests.support.feeds import BATTLE_ID
from tests.support.reference import FakeReferenceData


@pytest.fixture
def reference() -> FakeReferenceData:
    return FakeReferenceData(
        learnsets={
            "Pikachu": ("Thunderbolt", "Quick Attack", "Iron Tail", "Volt Tackle", "Surf"),
            "Snorlax": ("Body Slam", "Rest"),
            "Ditto": ("Transform",),
        },
        abilities={"Pikachu": ("Static", "Lightning Rod"), "Snorlax": ("Immunity", "Thick Fat")},
    )


@pytest.fixture
def repository() -> InMemoryBattleStateRepository:
    repo = InMemoryBattleStateRepository()
    repo.add(new_battle_state(BATTLE_ID, format_="gen9ou"))
    return repo


@pytest.fixture
def controller(
    repository: InMemoryBattleStateRepository,
    reference: FakeReferenceData,
) -> SyncController:
    return SyncController(
        repository=repository,
        reference=reference,
        config=SyncConfig(max_combatants=6),
    )
