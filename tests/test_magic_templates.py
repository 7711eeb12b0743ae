from __future__ import annotations

import logging

import pytest

from depths.raws import (
    ItemDefinition,
    MagicTemplate,
    RawCatalog,
    Raws,
    SpawnTableEntry,
    TemplateExpansionError,
    Weapon,
    WeaponTrait,
    Wearable,
    expand_magic_templates,
    rarity_for_bonus,
)
from depths.raws.templater import bonus_levels


def make_longsword(*, include_cursed: bool = True, bonus_min: int = 1, bonus_max: int = 2) -> ItemDefinition:
    return ItemDefinition(
        name="Longsword",
        weapon=Weapon(range="melee", attribute="Might", base_damage="1d8", hit_bonus=0),
        initiative_penalty=2.0,
        base_value=15.0,
        vendor_category="weapon",
        template=MagicTemplate(
            unidentified_name="Unidentified Longsword",
            bonus_min=bonus_min,
            bonus_max=bonus_max,
            include_cursed=include_cursed,
        ),
    )


def make_catalog(*items: ItemDefinition, traits: tuple[WeaponTrait, ...] = ()) -> RawCatalog:
    return RawCatalog.from_raws(Raws(items=list(items), weapon_traits=list(traits)))


def spawn_row(catalog: RawCatalog, name: str) -> SpawnTableEntry:
    rows = catalog.spawn_entries_for(name)
    assert len(rows) == 1, name
    return rows[0]


@pytest.mark.parametrize(
    ("bonus", "rarity"),
    [(-1, "common"), (1, "common"), (2, "rare"), (3, "rare"), (4, "rare"), (5, "legendary"), (6, "common")],
)
def test_rarity_for_bonus(bonus: int, rarity: str) -> None:
    assert rarity_for_bonus(bonus) == rarity


def test_longsword_expands_into_bonus_and_cursed_variants() -> None:
    catalog = make_catalog(make_longsword())
    original_index = catalog.items.index_of("Longsword")

    variants = expand_magic_templates(catalog)

    assert [variant.item.name for variant in variants] == ["Longsword +1", "Longsword +2", "Longsword -1"]
    assert len(catalog.items) == 4
    assert catalog.items.index_of("Longsword") == original_index
    assert catalog.get_item("Longsword").template is not None

    plus_two = catalog.get_item("Longsword +2")
    assert plus_two.weapon is not None
    assert plus_two.weapon.base_damage == "1d8+2"
    assert plus_two.weapon.hit_bonus == 2
    assert plus_two.initiative_penalty == 0.0
    assert plus_two.base_value == 15.0 + 150
    assert plus_two.magic is not None
    assert plus_two.magic.rarity_class == "rare"
    assert plus_two.magic.naming == "Unidentified Longsword"
    assert not plus_two.magic.cursed
    assert plus_two.template is None

    cursed = catalog.get_item("Longsword -1")
    assert cursed.weapon is not None
    assert cursed.weapon.base_damage == "1d8-1"
    assert cursed.weapon.hit_bonus == -1
    assert cursed.initiative_penalty == 3.0
    assert cursed.base_value == 15.0
    assert cursed.magic is not None and cursed.magic.cursed
    assert cursed.magic.rarity_class == "common"


def test_variant_spawn_rows_use_depth_weighting() -> None:
    catalog = make_catalog(make_longsword())
    expand_magic_templates(catalog)

    plus_one = spawn_row(catalog, "Longsword +1")
    assert (plus_one.weight, plus_one.min_depth, plus_one.max_depth) == (9, 1, 100)
    plus_two = spawn_row(catalog, "Longsword +2")
    assert (plus_two.weight, plus_two.min_depth, plus_two.max_depth) == (8, 4, 100)
    cursed = spawn_row(catalog, "Longsword -1")
    assert (cursed.weight, cursed.min_depth, cursed.max_depth) == (9, 7, 100)


def test_traits_apply_to_positive_weapon_variants_only() -> None:
    freezing = WeaponTrait(name="Freezing", effects={"damage_over_time": "2", "duration": "4"})
    catalog = make_catalog(make_longsword(), traits=(freezing,))
    expand_magic_templates(catalog)

    assert catalog.contains("Freezing Longsword +1")
    assert catalog.contains("Freezing Longsword +2")
    assert not catalog.contains("Freezing Longsword -1")

    traited = catalog.get_item("Freezing Longsword +2")
    assert traited.weapon is not None
    assert traited.weapon.proc_chance == 0.25
    assert traited.weapon.proc_target == "Target"
    assert dict(traited.weapon.proc_effects or {}) == {"damage_over_time": "2", "duration": "4"}
    assert traited.weapon.base_damage == "1d8+2"
    assert traited.base_value == (15.0 + 150) * 2

    row = spawn_row(catalog, "Freezing Longsword +2")
    assert (row.weight, row.min_depth, row.max_depth) == (7, 5, 100)
    row = spawn_row(catalog, "Freezing Longsword +1")
    assert (row.weight, row.min_depth) == (8, 2)


def test_wearable_variants_move_armor_class_and_skip_traits() -> None:
    mail = ItemDefinition(
        name="Chain Mail",
        wearable=Wearable(armor_class=3.0, slot="Torso"),
        base_value=50.0,
        template=MagicTemplate(unidentified_name="Unidentified Armor", bonus_min=1, bonus_max=3),
    )
    catalog = make_catalog(mail, traits=(WeaponTrait(name="Freezing"),))
    variants = expand_magic_templates(catalog)

    assert len(variants) == 3
    assert catalog.get_item("Chain Mail +3").wearable == Wearable(armor_class=6.0, slot="Torso")
    assert catalog.get_item("Chain Mail +3").magic is not None
    assert not any(name.startswith("Freezing") for name in catalog.items.names())


def test_variant_count_follows_range_and_curse_flag() -> None:
    assert bonus_levels(make_longsword(include_cursed=False, bonus_min=1, bonus_max=5)) == [1, 2, 3, 4, 5]
    assert bonus_levels(make_longsword(include_cursed=True, bonus_min=1, bonus_max=1)) == [1, -1]
    assert bonus_levels(make_longsword(include_cursed=True, bonus_min=-1, bonus_max=1)) == [-1, 0, 1]


def test_cursed_level_inside_range_is_expanded_once() -> None:
    catalog = make_catalog(make_longsword(include_cursed=True, bonus_min=-1, bonus_max=1))
    variants = expand_magic_templates(catalog)

    names = [variant.item.name for variant in variants]
    assert names == ["Longsword -1", "Longsword +0", "Longsword +1"]
    assert len(catalog.items) == 4
    assert spawn_row(catalog, "Longsword -1").weight == 9
    cursed = catalog.get_item("Longsword -1")
    assert cursed.magic is not None
    assert cursed.magic.cursed


def test_template_on_non_equipment_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    rock = ItemDefinition(
        name="Odd Rock",
        base_value=1.0,
        template=MagicTemplate(unidentified_name="Rock", bonus_min=1, bonus_max=2),
    )
    catalog = make_catalog(rock)
    with caplog.at_level(logging.WARNING):
        variants = expand_magic_templates(catalog)

    assert variants == []
    assert len(catalog.items) == 1
    assert "Odd Rock" in caplog.text


def test_expansion_runs_once_per_catalog() -> None:
    catalog = make_catalog(make_longsword())
    expand_magic_templates(catalog)
    with pytest.raises(TemplateExpansionError):
        expand_magic_templates(catalog)
    assert len(catalog.items) == 4


def test_catalog_without_templates_is_unchanged() -> None:
    catalog = make_catalog(ItemDefinition(name="Rations"))
    assert expand_magic_templates(catalog) == []
    assert len(catalog.items) == 1
    assert catalog.spawn_table == []
