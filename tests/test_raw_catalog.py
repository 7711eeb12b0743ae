from __future__ import annotations

import logging
import random

import pytest

from depths.raws import (
    FactionInfo,
    ItemDefinition,
    MasterTable,
    MobDefinition,
    PropDefinition,
    RandomTable,
    RawCatalog,
    Raws,
    Reaction,
    SpawnTableEntry,
    SpawnType,
    Wearable,
)


def make_raws(**overrides: object) -> Raws:
    raws = Raws(
        items=[ItemDefinition(name="Rations"), ItemDefinition(name="Health Potion")],
        mobs=[MobDefinition(name="Goblin")],
        props=[PropDefinition(name="Bear Trap")],
        spawn_table=[
            SpawnTableEntry(name="Goblin", weight=10, min_depth=1, max_depth=3),
            SpawnTableEntry(name="Rations", weight=0, min_depth=0, max_depth=100, add_map_depth_to_weight=True),
            SpawnTableEntry(name="Bear Trap", weight=2, min_depth=2, max_depth=100),
        ],
        faction_table=[FactionInfo(name="Goblins", responses={"Default": "attack", "Goblins": "ignore"})],
    )
    for key, value in overrides.items():
        setattr(raws, key, value)
    return raws


def test_duplicate_names_warn_and_last_wins(caplog: pytest.LogCaptureFixture) -> None:
    raws = make_raws(items=[ItemDefinition(name="Torch", base_value=1.0), ItemDefinition(name="Torch", base_value=2.0)])
    with caplog.at_level(logging.WARNING):
        catalog = RawCatalog.from_raws(raws)

    assert "Duplicate item name in raws [Torch]" in caplog.text
    assert catalog.get_item("Torch").base_value == 2.0
    assert len(catalog.items) == 2


def test_names_are_unique_across_entity_kinds(caplog: pytest.LogCaptureFixture) -> None:
    raws = make_raws(props=[PropDefinition(name="Goblin")])
    with caplog.at_level(logging.WARNING):
        RawCatalog.from_raws(raws)
    assert "Duplicate prop name in raws [Goblin]" in caplog.text


def test_unknown_spawn_names_warn(caplog: pytest.LogCaptureFixture) -> None:
    raws = make_raws()
    raws.spawn_table.append(SpawnTableEntry(name="Dragon", weight=1, min_depth=1, max_depth=2))
    with caplog.at_level(logging.WARNING):
        catalog = RawCatalog.from_raws(raws)
    assert "Spawn table references unspecified entity Dragon" in caplog.text
    assert len(catalog.spawn_table) == 4


def test_spawn_type_and_depth_table() -> None:
    catalog = RawCatalog.from_raws(make_raws())
    assert catalog.spawn_type_by_name("Goblin") is SpawnType.MOB
    assert catalog.spawn_type_by_name("Rations") is SpawnType.ITEM
    assert catalog.spawn_type_by_name("Bear Trap") is SpawnType.PROP

    depth_one = catalog.get_spawn_table_for_depth(1)
    assert depth_one.tables[SpawnType.MOB].entries() == {"Goblin": 10}
    assert depth_one.tables[SpawnType.ITEM].entries() == {"Rations": 1}
    assert len(depth_one.tables[SpawnType.PROP]) == 0

    depth_five = catalog.get_spawn_table_for_depth(5)
    assert len(depth_five.tables[SpawnType.MOB]) == 0
    assert depth_five.tables[SpawnType.ITEM].entries() == {"Rations": 5}
    assert depth_five.tables[SpawnType.PROP].entries() == {"Bear Trap": 2}


def test_faction_lookup() -> None:
    catalog = RawCatalog.from_raws(make_raws())
    assert catalog.faction_reaction("Goblins", "Goblins") is Reaction.IGNORE
    assert catalog.faction_reaction("Goblins", "Player") is Reaction.ATTACK
    assert catalog.faction_reaction("Unknown", "Goblins") is Reaction.IGNORE
    assert Reaction.parse("flee") is Reaction.FLEE
    assert Reaction.parse("anything") is Reaction.ATTACK


def test_append_item_keeps_existing_indices() -> None:
    catalog = RawCatalog.from_raws(make_raws())
    before = catalog.items.index_of("Rations")
    index = catalog.append_item(ItemDefinition(name="Lantern"))
    assert index == len(catalog.items) - 1
    assert catalog.items.index_of("Rations") == before
    assert catalog.items.at(index).name == "Lantern"


def test_unknown_wearable_slot_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    raws = make_raws(items=[ItemDefinition(name="Odd Hat", wearable=Wearable(armor_class=1.0, slot="Tail"))])
    catalog = RawCatalog.from_raws(raws)
    with caplog.at_level(logging.WARNING):
        assert catalog.equipment_slot_for("Odd Hat") == "Melee"
    assert "Unknown equipment slot type [Tail]" in caplog.text


def test_random_table_ignores_non_positive_weights() -> None:
    table = RandomTable()
    table.add("Nothing", 0)
    table.add("Less", -3)
    assert table.roll(random.Random(1)) is None
    table.add("Goblin", 4)
    assert table.total_weight == 4
    assert table.roll(random.Random(1)) == "Goblin"


def test_master_table_category_rolls() -> None:
    table = MasterTable()
    table.add("Goblin", 1, SpawnType.MOB)
    table.add("Rations", 1, SpawnType.ITEM)
    table.add("Bear Trap", 1, SpawnType.PROP)
    rng = random.Random(11)
    results = {table.roll(rng) for _ in range(200)}
    assert results == {"Goblin", "Rations", "Bear Trap", None}
