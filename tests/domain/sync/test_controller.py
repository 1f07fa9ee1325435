from __future__ import annotations

import asyncio

import pytest

from battlesync.adapters.memory import InMemoryBattleStateRepository
from battlesync.domain.model import (
    CombatantOverride,
    GameType,
    SideId,
    Weather,
    new_battle_state,
)
from battlesync.domain.sync import (
    MissingBattleIdError,
    MissingCapabilityError,
    SyncController,
    UnknownBattleError,
    UnknownCombatantError,
    detect_viewer_side,
    identify,
)
from tests.support.feeds import BATTLE_ID, make_feed, make_side, private, public
from tests.support.reference import CatalogOnlyReference, FakeReferenceData


class SlowReferenceData(FakeReferenceData):
    async def learnable(self, species_forme: str) -> dict[str, list[str]]:
        await asyncio.sleep(0)
        return await super().learnable(species_forme)


def test_sync_pikachu_scenario(
    controller: SyncController,
    repository: InMemoryBattleStateRepository,
) -> None:
    feed = make_feed(nonce="t1", p1=make_side(SideId.P1, (public("p1: Pikachu"),)))

    state = asyncio.run(controller.sync(feed))

    assert state.battle_nonce == "t1"
    assert len(state.p1.pokemon) == 1
    pikachu = state.p1.pokemon[0]
    assert pikachu.identity_key == identify(public("p1: Pikachu"), 0, SideId.P1)
    assert pikachu.alt_moves == ()
    assert pikachu.move_state.learnset == (
        "Iron Tail",
        "Quick Attack",
        "Surf",
        "Thunderbolt",
        "Volt Tackle",
    )
    assert repository.get(BATTLE_ID) == state


def test_sync_own_side_with_unrevealed_private_combatant(controller: SyncController) -> None:
    feed = make_feed(
        p1=make_side(SideId.P1, (public("p1: Snorlax"),), active=("p1a: Snorlax",)),
        my_pokemon=(private("p1: Ditto"), private("p1: Snorlax", active=True)),
    )

    state = asyncio.run(controller.sync(feed))

    assert state.p1.pokemon_order == ("p1: Ditto", "p1: Snorlax")
    assert [record.species_forme for record in state.p1.pokemon] == ["Ditto", "Snorlax"]
    assert state.p1.active_index == 1
    assert state.p1.pokemon[0].server_sourced
    assert state.p2.pokemon == ()


def test_private_roster_only_applies_to_viewer_side(controller: SyncController) -> None:
    feed = make_feed(
        p1=make_side(SideId.P1, (public("p1: Pikachu"),)),
        p2=make_side(SideId.P2, (public("p2: Pikachu"),)),
        my_pokemon=(private("p2: Pikachu", item="Light Ball"),),
    )

    state = asyncio.run(controller.sync(feed))

    assert state.p1.pokemon[0].item is None
    assert state.p1.pokemon_order == ()
    assert state.p2.pokemon[0].item == "Light Ball"
    assert state.p2.pokemon_order == ("p2: Pikachu",)


def test_stale_token_returns_committed_state(controller: SyncController) -> None:
    feed = make_feed(nonce="t1", p1=make_side(SideId.P1, (public("p1: Pikachu"),)))
    first = asyncio.run(controller.sync(feed))

    churn = make_feed(nonce="t1", p1=make_side(SideId.P1, (public("p1: Eevee"),)))
    second = asyncio.run(controller.sync(churn))

    assert second == first
    assert [record.species_forme for record in second.p1.pokemon] == ["Pikachu"]


def test_field_abort_preserves_committed_state(
    controller: SyncController,
    repository: InMemoryBattleStateRepository,
) -> None:
    asyncio.run(
        controller.sync(make_feed(nonce="t1", p1=make_side(SideId.P1, (public("p1: Pikachu"),))))
    )
    before = repository.get(BATTLE_ID)

    broken = make_feed(
        nonce="t2",
        game_type="???",
        p1=make_side(SideId.P1, (public("p1: Pikachu"), public("p1: Eevee"))),
    )
    after = asyncio.run(controller.sync(broken))

    assert after == before
    assert repository.get(BATTLE_ID) == before


def test_sync_updates_field_and_side_metadata(controller: SyncController) -> None:
    feed = make_feed(
        game_type="doubles",
        weather="raindance",
        p1=make_side(
            SideId.P1,
            (public("p1: Pikachu"), public("p1: Eevee")),
            active=("p1a: Eevee",),
            name="Ash",
            rating=1500,
        ),
        p2=make_side(SideId.P2, (public("p2: Snorlax"),), active=("p2a: Snorlax",), name="Gary"),
    )

    state = asyncio.run(controller.sync(feed))

    assert state.p1.name == "Ash"
    assert state.p1.rating == 1500
    assert state.p2.name == "Gary"
    assert state.field_state.game_type is GameType.DOUBLES
    assert state.field_state.weather is Weather.RAIN
    assert (state.field_state.attacker_index, state.field_state.defender_index) == (1, 0)


def test_missing_and_empty_sides_keep_prior_state(
    controller: SyncController,
    caplog: pytest.LogCaptureFixture,
) -> None:
    first = asyncio.run(
        controller.sync(
            make_feed(
                nonce="t1",
                p1=make_side(SideId.P1, (public("p1: Pikachu"),)),
                p2=make_side(SideId.P2, (public("p2: Eevee"),)),
            )
        )
    )

    second = asyncio.run(
        controller.sync(make_feed(nonce="t2", p1=make_side(SideId.P1, (), name="Ash")))
    )

    assert second.p1.pokemon == first.p1.pokemon
    assert second.p1.name == "Ash"
    assert second.p2 == first.p2
    assert second.battle_nonce == "t2"
    assert "side is missing from the feed" in caplog.text
    assert "the side has no combatants" in caplog.text


def test_forme_change_updates_record_and_reenriches() -> None:
    reference = FakeReferenceData(
        learnsets={"Pikachu": ("Thunderbolt",), "Pikachu-Gmax": ("Volt Tackle",)},
    )
    repository = InMemoryBattleStateRepository()
    repository.add(new_battle_state(BATTLE_ID, format_="gen8ou"))
    controller = SyncController(repository=repository, reference=reference)

    first = asyncio.run(
        controller.sync(
            make_feed(
                nonce="t1",
                p2=make_side(SideId.P2, (public("p2: Pikachu", species_forme="Pikachu"),)),
            )
        )
    )
    second = asyncio.run(
        controller.sync(
            make_feed(
                nonce="t2",
                p2=make_side(SideId.P2, (public("p2: Pikachu", species_forme="Pikachu-Gmax"),)),
            )
        )
    )

    assert len(second.p2.pokemon) == 1
    assert second.p2.pokemon[0].identity_key == first.p2.pokemon[0].identity_key
    assert second.p2.pokemon[0].move_state.learnset == ("Volt Tackle",)
    assert reference.learnable_calls == ["Pikachu", "Pikachu-Gmax"]


def test_unchanged_combatants_are_not_reenriched(
    controller: SyncController,
    reference: FakeReferenceData,
) -> None:
    side = make_side(SideId.P1, (public("p1: Pikachu"),))
    asyncio.run(controller.sync(make_feed(nonce="t1", p1=side)))
    asyncio.run(controller.sync(make_feed(nonce="t2", p1=side)))

    assert reference.learnable_calls == ["Pikachu"]


def test_concurrent_requests_do_not_interleave() -> None:
    reference = SlowReferenceData(learnsets={"Pikachu": ("Thunderbolt",)})
    repository = InMemoryBattleStateRepository()
    repository.add(new_battle_state(BATTLE_ID))
    controller = SyncController(repository=repository, reference=reference)

    first_feed = make_feed(nonce="t1", p1=make_side(SideId.P1, (public("p1: Pikachu"),)))
    second_feed = make_feed(
        nonce="t2",
        p1=make_side(SideId.P1, (public("p1: Pikachu"), public("p1: Eevee"))),
    )

    async def _both() -> tuple[object, ...]:
        return tuple(
            await asyncio.gather(
                controller.sync(first_feed),
                controller.sync(first_feed),
                controller.sync(second_feed),
            )
        )

    first, duplicate, second = asyncio.run(_both())

    assert duplicate == first
    final = repository.get(BATTLE_ID)
    assert final == second
    assert final is not None
    assert [record.species_forme for record in final.p1.pokemon] == ["Pikachu", "Eevee"]
    assert final.p1.pokemon[0].move_state.learnset == ("Thunderbolt",)
    assert reference.learnable_calls == ["Pikachu", "Eevee"]


def test_missing_battle_id_is_rejected(controller: SyncController) -> None:
    with pytest.raises(MissingBattleIdError):
        asyncio.run(controller.sync(make_feed(battle_id=None)))


def test_unknown_battle_is_rejected(controller: SyncController) -> None:
    with pytest.raises(UnknownBattleError) as excinfo:
        asyncio.run(controller.sync(make_feed(battle_id="battle-gen9ou-404")))

    assert excinfo.value.battle_id == "battle-gen9ou-404"


def test_missing_learnset_capability_is_rejected(
    repository: InMemoryBattleStateRepository,
) -> None:
    controller = SyncController(
        repository=repository,
        reference=CatalogOnlyReference(),  # type: ignore[arg-type]
    )

    with pytest.raises(MissingCapabilityError):
        asyncio.run(controller.sync(make_feed()))

    state = repository.get(BATTLE_ID)
    assert state is not None
    assert state.battle_nonce is None


def test_detect_viewer_side_from_private_idents() -> None:
    assert detect_viewer_side(make_feed(my_side=SideId.P2)) is SideId.P2
    assert detect_viewer_side(make_feed(my_pokemon=(private("p2: Ditto"),))) is SideId.P2
    assert detect_viewer_side(make_feed()) is None


def test_override_is_cleared_once_observed_boosts_match(
    controller: SyncController,
    repository: InMemoryBattleStateRepository,
) -> None:
    first = asyncio.run(
        controller.sync(
            make_feed(nonce="t1", p2=make_side(SideId.P2, (public("p2: Snorlax", boosts={}),)))
        )
    )
    key = first.p2.pokemon[0].identity_key

    overridden = asyncio.run(
        controller.apply_override(
            BATTLE_ID,
            SideId.P2,
            key,
            CombatantOverride(
                ability="Thick Fat",
                boosts={"atk": 2, "def": 0},
                ivs={"spe": 0},
                nature="Brave",
            ),
        )
    )

    snorlax = overridden.p2.pokemon[0]
    assert snorlax.dirty_ability == "Thick Fat"
    assert snorlax.dirty_boosts == {"atk": 2}
    assert (snorlax.nature, snorlax.ivs) == ("Brave", {"spe": 0})
    assert repository.get(BATTLE_ID) == overridden

    synced = asyncio.run(
        controller.sync(
            make_feed(
                nonce="t2",
                p2=make_side(SideId.P2, (public("p2: Snorlax", boosts={"atk": 2}),)),
            )
        )
    )

    snorlax = synced.p2.pokemon[0]
    assert snorlax.dirty_boosts == {}
    assert snorlax.boosts == {"atk": 2}
    assert snorlax.effective_ability == "Thick Fat"
    assert snorlax.nature == "Brave"


def test_override_of_unknown_combatant_is_rejected(controller: SyncController) -> None:
    with pytest.raises(UnknownCombatantError) as excinfo:
        asyncio.run(
            controller.apply_override(BATTLE_ID, SideId.P1, "missing", CombatantOverride())
        )

    assert excinfo.value.identity_key == "missing"


def test_returned_states_are_detached_from_committed_state(
    controller: SyncController,
    repository: InMemoryBattleStateRepository,
) -> None:
    first = asyncio.run(
        controller.sync(
            make_feed(
                nonce="t1",
                p1=make_side(SideId.P1, (public("p1: Pikachu", boosts={"spa": 1}),)),
                p2=make_side(SideId.P2, (public("p2: Eevee"),), side_conditions={"spikes": 1}),
            )
        )
    )
    second = asyncio.run(
        controller.sync(make_feed(nonce="t2", p1=make_side(SideId.P1, (public("p1: Pikachu"),))))
    )

    first.field_state.side_conditions[SideId.P2]["spikes"] = 3
    second.field_state.side_conditions[SideId.P2]["toxicspikes"] = 2
    second.p1.pokemon[0].boosts["spa"] = 6

    committed = repository.get(BATTLE_ID)
    assert committed is not None
    assert committed.field_state.side_conditions[SideId.P2] == {"spikes": 1}
    assert committed.p1.pokemon[0].boosts == {"spa": 1}


def test_contended_battle_lock_is_released_between_event_loops() -> None:
    reference = SlowReferenceData(learnsets={"Pikachu": ("Thunderbolt",)})
    repository = InMemoryBattleStateRepository()
    repository.add(new_battle_state(BATTLE_ID))
    controller = SyncController(repository=repository, reference=reference)

    async def _contend(idents: tuple[str, ...], *nonces: str) -> None:
        # the first sync meets a new combatant and awaits enrichment holding the lock
        side = make_side(SideId.P1, tuple(public(ident) for ident in idents))
        await asyncio.gather(
            *(controller.sync(make_feed(nonce=nonce, p1=side)) for nonce in nonces)
        )

    asyncio.run(_contend(("p1: Pikachu",), "t1", "t2"))
    asyncio.run(_contend(("p1: Pikachu", "p1: Eevee"), "t3", "t4"))

    state = repository.get(BATTLE_ID)
    assert state is not None
    assert state.battle_nonce == "t4"
