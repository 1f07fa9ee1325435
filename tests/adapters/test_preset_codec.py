from __future__ import annotations

import pytest

from battlesync.adapters.preset_codec import dehydrate_preset, hydrate_preset
from battlesync.domain.model import AltValue, PresetSource, RosterPreset


def _usage_preset() -> RosterPreset:
    return RosterPreset(
        identity_key="b7c1",
        species_forme="Breloom",
        source=PresetSource.USAGE,
        name="Showdown Usage",
        format="gen9ou",
        usage=0.4213,
        level=100,
        gender="M",
        tera_types=[AltValue("Fighting", 0.61), AltValue("Fire", 0.2)],
        shiny=False,
        happiness=255,
        alt_abilities=[AltValue("Technician", 0.77), AltValue("Poison Heal", 0.23)],
        alt_items=[AltValue("Focus Sash", 0.5), AltValue("King's Rock")],
        alt_moves=[
            AltValue("Bullet Seed", 1.0),
            AltValue("Mach Punch", 1.0),
            AltValue("Rock Tomb", 0.8303),
            AltValue("Spore", 0.5994),
            AltValue("Swords Dance", 0.5703),
        ],
        nature="Jolly",
        ivs={"hp": 31, "atk": 31, "def": 31, "spa": 31, "spd": 31, "spe": 31},
        evs={"atk": 252, "spd": 4, "spe": 252},
    )


def test_dehydrate_emits_opcodes_in_order() -> None:
    text = dehydrate_preset(_usage_preset())

    assert text is not None
    chunks = text.split(",")
    assert chunks[:4] == ["cid~b7c1", "src~usage", "nom~Showdown Usage", "fmt~gen9ou"]
    assert "shy~n" in chunks
    assert (
        "mov~Bullet Seed@1.0/Mach Punch@1.0/Rock Tomb@0.8303/Spore@0.5994/Swords Dance@0.5703"
        in chunks
    )
    assert "ivs~31/31/31/31/31/31" in chunks
    assert "evs~/252///4/252" in chunks
    assert "pln~" not in text


def test_hydrate_restores_encoded_attributes() -> None:
    original = _usage_preset()

    hydrated = hydrate_preset(dehydrate_preset(original) or "")

    assert hydrated.identity_key == original.identity_key
    assert hydrated.species_forme == original.species_forme
    assert hydrated.source is PresetSource.USAGE
    assert hydrated.format == "gen9ou"
    assert hydrated.gen == 9
    assert hydrated.usage == pytest.approx(0.4213)
    assert hydrated.shiny is False
    assert hydrated.happiness == 255
    assert hydrated.tera_types == original.tera_types
    assert hydrated.alt_abilities == original.alt_abilities
    assert hydrated.alt_items == original.alt_items
    assert hydrated.alt_moves == original.alt_moves
    assert hydrated.ivs == original.ivs
    assert hydrated.evs == original.evs
    assert hydrated.nature == "Jolly"


def test_hydrate_derives_definite_values_from_alts() -> None:
    hydrated = hydrate_preset(dehydrate_preset(_usage_preset()) or "")

    assert hydrated.ability == "Technician"
    assert hydrated.item == "Focus Sash"
    assert hydrated.moves == ["Bullet Seed", "Mach Punch", "Rock Tomb", "Spore"]


def test_empty_alts_fall_back_to_definite_values() -> None:
    preset = RosterPreset(
        identity_key="p1",
        species_forme="Pikachu",
        source=PresetSource.SERVER,
        ability="Static",
        item="Light Ball",
        moves=["Thunderbolt", "Surf"],
        gigantamax=True,
    )

    text = dehydrate_preset(preset, delimiter="|")

    assert text is not None
    chunks = text.split("|")
    assert "abl~Static" in chunks
    assert "itm~Light Ball" in chunks
    assert "mov~Thunderbolt/Surf" in chunks
    assert "gmx~y" in chunks
    assert not any(chunk.startswith("trt~") for chunk in chunks)

    hydrated = hydrate_preset(text, delimiter="|")
    assert hydrated.ability == "Static"
    assert hydrated.item == "Light Ball"
    assert hydrated.moves == ["Thunderbolt", "Surf"]
    assert hydrated.gigantamax is True


def test_dehydrate_requires_identity_and_species() -> None:
    assert dehydrate_preset(RosterPreset(identity_key="", species_forme="Pikachu")) is None
    assert dehydrate_preset(RosterPreset(identity_key="p1", species_forme="")) is None


def test_hydrate_ignores_unknown_opcodes() -> None:
    hydrated = hydrate_preset("cid~p1,zzz~nope,fme~Eevee,lvl~50,noise")

    assert hydrated.species_forme == "Eevee"
    assert hydrated.level == 50


def test_hydrate_rejects_missing_identity() -> None:
    with pytest.raises(ValueError, match="identity key"):
        hydrate_preset("fme~Eevee")
