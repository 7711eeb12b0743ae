"""Raw catalog: the process-wide index over every declarative definition."""

from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, Sequence

from .models import (
    FactionInfo,
    ItemDefinition,
    LootTable,
    MobDefinition,
    PropDefinition,
    Raws,
    Reaction,
    SpawnTableEntry,
    SpellDefinition,
    WeaponTrait,
)
from .random_table import MasterTable, RandomTable, SpawnType
from .registry import IndexedRegistry

__all__ = ["EQUIPMENT_SLOTS", "RawCatalog"]

log = logging.getLogger(__name__)

EQUIPMENT_SLOTS = ("Melee", "Shield", "Head", "Torso", "Legs", "Feet", "Hands")


class RawCatalog:
    """Name-indexed arenas of items, mobs, props and the tables around them.

    The catalog is built once from :class:`Raws`, grown only by
    :meth:`append_item` and :meth:`add_spawn_entry` while templates are
    expanded, and read-only afterwards.
    """

    def __init__(self) -> None:
        self.items: IndexedRegistry[ItemDefinition] = IndexedRegistry("item")
        self.mobs: IndexedRegistry[MobDefinition] = IndexedRegistry("mob")
        self.props: IndexedRegistry[PropDefinition] = IndexedRegistry("prop")
        self.loot_tables: IndexedRegistry[LootTable] = IndexedRegistry("loot table")
        self.spells: IndexedRegistry[SpellDefinition] = IndexedRegistry("spell")
        self.weapon_traits: IndexedRegistry[WeaponTrait] = IndexedRegistry("weapon trait")
        self.spawn_table: list[SpawnTableEntry] = []
        self.factions: Dict[str, Dict[str, Reaction]] = {}
        self.templates_expanded = False
        self._used_names: set[str] = set()

    # -- loading -----------------------------------------------------------
    @classmethod
    def from_raws(cls, raws: Raws) -> "RawCatalog":
        catalog = cls()
        catalog.load(raws)
        return catalog

    def load(self, raws: Raws) -> None:
        for item in raws.items:
            self._register_entity(self.items, item.name, item)
        for mob in raws.mobs:
            self._register_entity(self.mobs, mob.name, mob)
        for prop in raws.props:
            self._register_entity(self.props, prop.name, prop)

        for spawn in raws.spawn_table:
            if spawn.name not in self._used_names:
                log.warning("Spawn table references unspecified entity %s", spawn.name)
            self.spawn_table.append(spawn)

        for loot in raws.loot_tables:
            self.loot_tables.append(loot.name, loot)
        for faction in raws.faction_table:
            self.add_faction(faction)
        for spell in raws.spells:
            self.spells.append(spell.name, spell)
        for trait in raws.weapon_traits:
            self.weapon_traits.append(trait.name, trait)

        log.info(
            "Loaded raws: %d items, %d mobs, %d props, %d spawn entries",
            len(self.items),
            len(self.mobs),
            len(self.props),
            len(self.spawn_table),
        )

    def _register_entity(self, registry: IndexedRegistry, name: str, entry: object) -> int:
        if name in self._used_names:
            log.warning("Duplicate %s name in raws [%s]", registry.kind, name)
        self._used_names.add(name)
        return registry.append(name, entry)

    def add_faction(self, faction: FactionInfo) -> None:
        reactions = {other: Reaction.parse(response) for other, response in faction.responses.items()}
        self.factions[faction.name] = reactions

    # -- growth used by the templater --------------------------------------
    def append_item(self, item: ItemDefinition) -> int:
        """Append ``item`` to the item arena and return its stable index."""

        return self._register_entity(self.items, item.name, item)

    def add_spawn_entry(self, entry: SpawnTableEntry) -> None:
        if entry.name not in self._used_names:
            log.warning("Spawn table references unspecified entity %s", entry.name)
        self.spawn_table.append(entry)

    # -- lookups -----------------------------------------------------------
    def contains(self, name: str) -> bool:
        return name in self._used_names

    def get_item(self, name: str) -> ItemDefinition:
        return self.items.get(name)

    def get_mob(self, name: str) -> MobDefinition:
        return self.mobs.get(name)

    def get_prop(self, name: str) -> PropDefinition:
        return self.props.get(name)

    def spawn_type_by_name(self, name: str) -> SpawnType:
        if name in self.items:
            return SpawnType.ITEM
        if name in self.mobs:
            return SpawnType.MOB
        return SpawnType.PROP

    def faction_reaction(self, my_faction: str, their_faction: str) -> Reaction:
        reactions = self.factions.get(my_faction)
        if reactions is None:
            return Reaction.IGNORE
        if their_faction in reactions:
            return reactions[their_faction]
        return reactions.get("Default", Reaction.IGNORE)

    def get_spawn_table_for_depth(self, depth: int) -> MasterTable:
        table = MasterTable()
        for entry in self.spawn_table:
            if entry.available_at(depth):
                table.add(entry.name, entry.weight_at(depth), self.spawn_type_by_name(entry.name))
        return table

    def spawn_entries_for(self, name: str) -> Sequence[SpawnTableEntry]:
        return tuple(entry for entry in self.spawn_table if entry.name == name)

    def get_item_drop(self, rng: random.Random, table: str) -> str | None:
        if table not in self.loot_tables:
            return None
        drops = RandomTable()
        for drop in self.loot_tables.get(table).drops:
            drops.add(drop.name, drop.weight)
        return drops.roll(rng)

    def get_vendor_items(self, categories: Iterable[str]) -> list[tuple[str, float]]:
        wanted = set(categories)
        return [
            (item.name, item.base_value)
            for item in self.items
            if item.vendor_category in wanted and item.base_value is not None
        ]

    def _tags_named(self, naming: str) -> list[str]:
        return [item.name for item in self.items if item.magic is not None and item.magic.naming == naming]

    def get_scroll_tags(self) -> list[str]:
        return self._tags_named("scroll")

    def get_potion_tags(self) -> list[str]:
        return self._tags_named("potion")

    def is_tag_magic(self, name: str) -> bool:
        return name in self.items and self.items.get(name).magic is not None

    def equipment_slot_for(self, name: str) -> str:
        """Return the slot ``name`` equips into; raises for unknown or non-equipment items."""

        item = self.items.get(name)
        if item.weapon is not None:
            return "Melee"
        if item.wearable is not None:
            if item.wearable.slot not in EQUIPMENT_SLOTS:
                log.warning("Unknown equipment slot type [%s]", item.wearable.slot)
                return "Melee"
            return item.wearable.slot
        raise ValueError(f"Item '{name}' has no equipment slot")
