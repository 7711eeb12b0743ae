"""Expansion of templated items into concrete magic variants."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Sequence

from .catalog import RawCatalog
from .dice import parse_dice_string
from .models import ItemDefinition, MagicBlock, SpawnTableEntry, Weapon, WeaponTrait

__all__ = [
    "CURSED_BONUS",
    "TRAIT_PROC_CHANCE",
    "BonusVariant",
    "TemplateExpansionError",
    "apply_bonus",
    "apply_trait",
    "bonus_levels",
    "expand_magic_templates",
    "rarity_for_bonus",
]

log = logging.getLogger(__name__)

CURSED_BONUS = -1
TRAIT_PROC_CHANCE = 0.25
MAX_SPAWN_DEPTH = 100


class TemplateExpansionError(RuntimeError):
    """Raised when templates are expanded more than once for a catalog."""


@dataclass(frozen=True)
class BonusVariant:
    """A pass-one variant together with the bonus that produced it."""

    item: ItemDefinition
    bonus: int


def rarity_for_bonus(bonus: int) -> str:
    if bonus in (2, 3, 4):
        return "rare"
    if bonus == 5:
        return "legendary"
    return "common"


def bonus_levels(item: ItemDefinition) -> list[int]:
    """Return the bonus levels ``item``'s template expands into, in order."""

    template = item.template
    if template is None:
        return []
    levels = list(range(template.bonus_min, template.bonus_max + 1))
    if template.include_cursed and CURSED_BONUS not in levels:
        levels.append(CURSED_BONUS)
    return levels


def _variant_name(base: str, bonus: int) -> str:
    if bonus < 0:
        return f"{base} {bonus}"
    return f"{base} +{bonus}"


def apply_bonus(item: ItemDefinition, bonus: int) -> ItemDefinition:
    """Clone ``item`` as its ``bonus`` variant.

    Dice count and die size are never touched; only the flat damage modifier,
    hit bonus, armor class, initiative penalty and value move with the bonus.
    """

    template = item.template
    naming = template.unidentified_name if template is not None else "Unidentified"
    weapon = item.weapon
    if weapon is not None:
        damage = parse_dice_string(weapon.base_damage).with_bonus(bonus)
        weapon = replace(weapon, base_damage=str(damage), hit_bonus=weapon.hit_bonus + bonus)
    wearable = item.wearable
    if wearable is not None:
        wearable = replace(wearable, armor_class=wearable.armor_class + bonus)
    return replace(
        item,
        name=_variant_name(item.name, bonus),
        magic=MagicBlock(
            rarity_class=rarity_for_bonus(bonus),
            naming=naming,
            cursed=bonus == CURSED_BONUS,
        ),
        initiative_penalty=(item.initiative_penalty or 0.0) - bonus,
        base_value=(item.base_value or 0.0) + (bonus + 1) * 50,
        weapon=weapon,
        wearable=wearable,
        template=None,
    )


def apply_trait(variant: ItemDefinition, trait: WeaponTrait) -> ItemDefinition:
    """Clone a magical weapon variant with ``trait``'s on-hit effects attached."""

    if variant.weapon is None:
        raise ValueError(f"Item '{variant.name}' is not a weapon")
    weapon: Weapon = replace(
        variant.weapon,
        proc_chance=TRAIT_PROC_CHANCE,
        proc_target="Target",
        proc_effects=dict(trait.effects),
    )
    return replace(
        variant,
        name=f"{trait.name} {variant.name}",
        base_value=(variant.base_value or 0.0) * 2.0,
        weapon=weapon,
    )


def _expand_bonuses(catalog: RawCatalog) -> list[BonusVariant]:
    variants: list[BonusVariant] = []
    for item in catalog.items.values():
        if item.template is None:
            continue
        if not item.is_equipment:
            log.warning("Item %s has a magic template but is neither weapon nor wearable", item.name)
            continue
        for bonus in bonus_levels(item):
            variant = apply_bonus(item, bonus)
            catalog.append_item(variant)
            catalog.add_spawn_entry(
                SpawnTableEntry(
                    name=variant.name,
                    weight=10 - abs(bonus),
                    min_depth=1 + abs((bonus - 1) * 3),
                    max_depth=MAX_SPAWN_DEPTH,
                )
            )
            variants.append(BonusVariant(item=variant, bonus=bonus))
    return variants


def _expand_traits(catalog: RawCatalog, variants: Sequence[BonusVariant]) -> int:
    traits = catalog.weapon_traits.values()
    created = 0
    for variant in variants:
        if variant.item.weapon is None or variant.bonus <= 0:
            continue
        for trait in traits:
            traited = apply_trait(variant.item, trait)
            catalog.append_item(traited)
            catalog.add_spawn_entry(
                SpawnTableEntry(
                    name=traited.name,
                    weight=9 - abs(variant.bonus),
                    min_depth=2 + abs((variant.bonus - 1) * 3),
                    max_depth=MAX_SPAWN_DEPTH,
                )
            )
            created += 1
    return created


def expand_magic_templates(catalog: RawCatalog) -> list[BonusVariant]:
    """Expand every templated item in ``catalog`` in place.

    Pass one derives bonus and cursed variants from templated weapons and
    wearables. Pass two crosses the positive-bonus weapon variants from pass
    one with every weapon trait. Returns the pass-one variants.
    """

    if catalog.templates_expanded:
        raise TemplateExpansionError("Magic templates have already been expanded for this catalog")
    catalog.templates_expanded = True
    variants = _expand_bonuses(catalog)
    traited = _expand_traits(catalog, variants)
    log.info("Expanded magic templates: %d bonus variants, %d trait variants", len(variants), traited)
    return variants
