"""Schema models for raw entity definitions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Mapping, MutableMapping, Sequence

__all__ = [
    "Consumable",
    "FactionInfo",
    "ItemAttributeBonus",
    "ItemDefinition",
    "LootDrop",
    "LootTable",
    "MagicBlock",
    "MagicTemplate",
    "MobDefinition",
    "NaturalAttack",
    "PropDefinition",
    "Raws",
    "Reaction",
    "SchemaError",
    "SpawnTableEntry",
    "SpellDefinition",
    "Weapon",
    "WeaponTrait",
    "Wearable",
]


class SchemaError(ValueError):
    """Raised when raw data fails validation."""


def _coerce_mapping(name: str, value: object) -> MutableMapping[str, object]:
    if isinstance(value, MutableMapping):
        return value
    if isinstance(value, Mapping):
        return dict(value)
    raise SchemaError(f"{name} must be a mapping")


def _coerce_sequence(name: str, value: object) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return value
    raise SchemaError(f"{name} must be a sequence")


def _require_name(kind: str, mapping: Mapping[str, object]) -> str:
    name = mapping.get("name")
    if not isinstance(name, str) or not name.strip():
        raise SchemaError(f"{kind} entries require a non-empty name")
    return name


def _optional_float(mapping: Mapping[str, object], key: str) -> float | None:
    value = mapping.get(key)
    return float(value) if value is not None else None


def _optional_int(mapping: Mapping[str, object], key: str) -> int | None:
    value = mapping.get(key)
    return int(value) if value is not None else None


def _optional_bool(mapping: Mapping[str, object], key: str) -> bool | None:
    value = mapping.get(key)
    return bool(value) if value is not None else None


def _effects(name: str, value: object) -> dict[str, str]:
    if not value:
        return {}
    return {str(key): str(effect) for key, effect in _coerce_mapping(name, value).items()}


def _strings(name: str, value: object) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(str(entry) for entry in _coerce_sequence(name, value))


@dataclass(frozen=True)
class Consumable:
    effects: Mapping[str, str] = field(default_factory=dict)
    charges: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "Consumable":
        mapping = _coerce_mapping("consumable", data)
        return cls(
            effects=_effects("consumable.effects", mapping.get("effects")),
            charges=_optional_int(mapping, "charges"),
        )


@dataclass(frozen=True)
class Weapon:
    """Melee or ranged weapon capability block."""

    range: str = "melee"
    attribute: str = "Might"
    base_damage: str = "1d4"
    hit_bonus: int = 0
    proc_chance: float | None = None
    proc_target: str | None = None
    proc_effects: Mapping[str, str] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "Weapon":
        mapping = _coerce_mapping("weapon", data)
        proc_raw = mapping.get("proc_effects")
        proc_target = mapping.get("proc_target")
        return cls(
            range=str(mapping.get("range", "melee")),
            attribute=str(mapping.get("attribute", "Might")),
            base_damage=str(mapping.get("base_damage", "1d4")),
            hit_bonus=int(mapping.get("hit_bonus", 0)),
            proc_chance=_optional_float(mapping, "proc_chance"),
            proc_target=str(proc_target) if proc_target is not None else None,
            proc_effects=_effects("weapon.proc_effects", proc_raw) if proc_raw is not None else None,
        )


@dataclass(frozen=True)
class Wearable:
    armor_class: float
    slot: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "Wearable":
        mapping = _coerce_mapping("wearable", data)
        return cls(
            armor_class=float(mapping.get("armor_class", 0.0)),
            slot=str(mapping.get("slot", "Torso")),
        )


@dataclass(frozen=True)
class MagicBlock:
    """Magic item metadata: rarity class, unidentified naming and curse."""

    rarity_class: str
    naming: str
    cursed: bool | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "MagicBlock":
        mapping = _coerce_mapping("magic", data)
        rarity = mapping.get("class", mapping.get("rarity_class", "common"))
        return cls(
            rarity_class=str(rarity),
            naming=str(mapping.get("naming", "Unidentified")),
            cursed=_optional_bool(mapping, "cursed"),
        )


@dataclass(frozen=True)
class ItemAttributeBonus:
    might: int | None = None
    fitness: int | None = None
    quickness: int | None = None
    intelligence: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "ItemAttributeBonus":
        mapping = _coerce_mapping("attributes", data)
        return cls(
            might=_optional_int(mapping, "might"),
            fitness=_optional_int(mapping, "fitness"),
            quickness=_optional_int(mapping, "quickness"),
            intelligence=_optional_int(mapping, "intelligence"),
        )


@dataclass(frozen=True)
class MagicTemplate:
    """Rules for expanding an item into bonus and cursed variants."""

    unidentified_name: str
    bonus_min: int
    bonus_max: int
    include_cursed: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "MagicTemplate":
        mapping = _coerce_mapping("template_magic", data)
        bonus_min = int(mapping.get("bonus_min", 1))
        bonus_max = int(mapping.get("bonus_max", bonus_min))
        if bonus_max < bonus_min:
            raise SchemaError("template_magic bonus_max must not be below bonus_min")
        return cls(
            unidentified_name=str(mapping.get("unidentified_name", "Unidentified")),
            bonus_min=bonus_min,
            bonus_max=bonus_max,
            include_cursed=bool(mapping.get("include_cursed", False)),
        )


@dataclass(frozen=True)
class ItemDefinition:
    """Declarative description of an item."""

    name: str
    consumable: Consumable | None = None
    weapon: Weapon | None = None
    wearable: Wearable | None = None
    initiative_penalty: float | None = None
    weight_lbs: float | None = None
    base_value: float | None = None
    vendor_category: str | None = None
    magic: MagicBlock | None = None
    attributes: ItemAttributeBonus | None = None
    template: MagicTemplate | None = None

    @property
    def is_equipment(self) -> bool:
        return self.weapon is not None or self.wearable is not None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "ItemDefinition":
        mapping = _coerce_mapping("item", data)
        name = _require_name("item", mapping)
        consumable_raw = mapping.get("consumable")
        weapon_raw = mapping.get("weapon")
        wearable_raw = mapping.get("wearable")
        magic_raw = mapping.get("magic")
        attributes_raw = mapping.get("attributes")
        template_raw = mapping.get("template_magic", mapping.get("template"))
        vendor = mapping.get("vendor_category")
        return cls(
            name=name,
            consumable=Consumable.from_mapping(consumable_raw) if consumable_raw is not None else None,
            weapon=Weapon.from_mapping(weapon_raw) if weapon_raw is not None else None,
            wearable=Wearable.from_mapping(wearable_raw) if wearable_raw is not None else None,
            initiative_penalty=_optional_float(mapping, "initiative_penalty"),
            weight_lbs=_optional_float(mapping, "weight_lbs"),
            base_value=_optional_float(mapping, "base_value"),
            vendor_category=str(vendor) if vendor is not None else None,
            magic=MagicBlock.from_mapping(magic_raw) if magic_raw is not None else None,
            attributes=(
                ItemAttributeBonus.from_mapping(attributes_raw) if attributes_raw is not None else None
            ),
            template=MagicTemplate.from_mapping(template_raw) if template_raw is not None else None,
        )


@dataclass(frozen=True)
class NaturalAttack:
    name: str
    hit_bonus: int
    damage: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "NaturalAttack":
        mapping = _coerce_mapping("natural attack", data)
        return cls(
            name=str(mapping.get("name", "Bite")),
            hit_bonus=int(mapping.get("hit_bonus", 0)),
            damage=str(mapping.get("damage", "1d4")),
        )


@dataclass(frozen=True)
class MobDefinition:
    """Static data describing a creature."""

    name: str
    level: int = 1
    blocks_tile: bool = True
    vision_range: int = 8
    movement: str = "static"
    faction: str | None = None
    loot_table: str | None = None
    gold: str | None = None
    armor_class: int | None = None
    natural_attacks: Sequence[NaturalAttack] = field(default_factory=tuple)
    equipped: Sequence[str] = field(default_factory=tuple)
    attributes: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "MobDefinition":
        mapping = _coerce_mapping("mob", data)
        name = _require_name("mob", mapping)
        attributes: dict[str, int] = {}
        attributes_raw = mapping.get("attributes")
        if attributes_raw:
            for attribute, score in _coerce_mapping("attributes", attributes_raw).items():
                if score is not None:
                    attributes[str(attribute)] = int(score)
        armor_class = None
        attacks: tuple[NaturalAttack, ...] = ()
        natural_raw = mapping.get("natural")
        if natural_raw:
            natural = _coerce_mapping("natural", natural_raw)
            armor_class = _optional_int(natural, "armor_class")
            attacks_raw = natural.get("attacks")
            if attacks_raw:
                attacks = tuple(
                    NaturalAttack.from_mapping(attack)
                    for attack in _coerce_sequence("natural.attacks", attacks_raw)
                )
        faction = mapping.get("faction")
        loot = mapping.get("loot_table")
        gold = mapping.get("gold")
        return cls(
            name=name,
            level=int(mapping.get("level", 1)),
            blocks_tile=bool(mapping.get("blocks_tile", True)),
            vision_range=int(mapping.get("vision_range", 8)),
            movement=str(mapping.get("movement", "static")),
            faction=str(faction) if faction is not None else None,
            loot_table=str(loot) if loot is not None else None,
            gold=str(gold) if gold is not None else None,
            armor_class=armor_class,
            natural_attacks=attacks,
            equipped=_strings("equipped", mapping.get("equipped")),
            attributes=attributes,
        )


@dataclass(frozen=True)
class PropDefinition:
    name: str
    hidden: bool | None = None
    blocks_tile: bool | None = None
    blocks_visibility: bool | None = None
    door_open: bool | None = None
    entry_trigger: Mapping[str, str] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "PropDefinition":
        mapping = _coerce_mapping("prop", data)
        trigger_raw = mapping.get("entry_trigger")
        trigger = None
        if trigger_raw is not None:
            trigger = _effects("entry_trigger.effects", _coerce_mapping("entry_trigger", trigger_raw).get("effects"))
        return cls(
            name=_require_name("prop", mapping),
            hidden=_optional_bool(mapping, "hidden"),
            blocks_tile=_optional_bool(mapping, "blocks_tile"),
            blocks_visibility=_optional_bool(mapping, "blocks_visibility"),
            door_open=_optional_bool(mapping, "door_open"),
            entry_trigger=trigger,
        )


@dataclass(frozen=True)
class SpawnTableEntry:
    """Weighted, depth-ranged spawn table row."""

    name: str
    weight: int
    min_depth: int
    max_depth: int
    add_map_depth_to_weight: bool | None = None

    def available_at(self, depth: int) -> bool:
        return self.min_depth <= depth <= self.max_depth

    def weight_at(self, depth: int) -> int:
        weight = self.weight
        if self.add_map_depth_to_weight:
            weight += depth
        return max(1, weight)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "SpawnTableEntry":
        mapping = _coerce_mapping("spawn_table", data)
        return cls(
            name=_require_name("spawn_table", mapping),
            weight=int(mapping.get("weight", 1)),
            min_depth=int(mapping.get("min_depth", 0)),
            max_depth=int(mapping.get("max_depth", 100)),
            add_map_depth_to_weight=_optional_bool(mapping, "add_map_depth_to_weight"),
        )


@dataclass(frozen=True)
class LootDrop:
    name: str
    weight: int


@dataclass(frozen=True)
class LootTable:
    name: str
    drops: Sequence[LootDrop] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "LootTable":
        mapping = _coerce_mapping("loot_table", data)
        drops: list[LootDrop] = []
        for raw in _coerce_sequence("drops", mapping.get("drops", ())):
            drop = _coerce_mapping("drop", raw)
            drops.append(LootDrop(name=_require_name("drop", drop), weight=int(drop.get("weight", 1))))
        return cls(name=_require_name("loot_table", mapping), drops=tuple(drops))


class Reaction(enum.Enum):
    IGNORE = "ignore"
    ATTACK = "attack"
    FLEE = "flee"

    @classmethod
    def parse(cls, value: str) -> "Reaction":
        if value == "ignore":
            return cls.IGNORE
        if value == "flee":
            return cls.FLEE
        return cls.ATTACK


@dataclass(frozen=True)
class FactionInfo:
    name: str
    responses: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "FactionInfo":
        mapping = _coerce_mapping("faction", data)
        return cls(
            name=_require_name("faction", mapping),
            responses=_effects("faction.responses", mapping.get("responses")),
        )


@dataclass(frozen=True)
class SpellDefinition:
    name: str
    mana_cost: int
    effects: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "SpellDefinition":
        mapping = _coerce_mapping("spell", data)
        return cls(
            name=_require_name("spell", mapping),
            mana_cost=int(mapping.get("mana_cost", 0)),
            effects=_effects("spell.effects", mapping.get("effects")),
        )


@dataclass(frozen=True)
class WeaponTrait:
    """Named on-hit effect bundle applied to magical weapons."""

    name: str
    effects: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "WeaponTrait":
        mapping = _coerce_mapping("weapon_trait", data)
        return cls(
            name=_require_name("weapon_trait", mapping),
            effects=_effects("weapon_trait.effects", mapping.get("effects")),
        )


@dataclass
class Raws:
    """Bundle of every declaratively defined entity, in declaration order."""

    items: list[ItemDefinition] = field(default_factory=list)
    mobs: list[MobDefinition] = field(default_factory=list)
    props: list[PropDefinition] = field(default_factory=list)
    spawn_table: list[SpawnTableEntry] = field(default_factory=list)
    loot_tables: list[LootTable] = field(default_factory=list)
    faction_table: list[FactionInfo] = field(default_factory=list)
    spells: list[SpellDefinition] = field(default_factory=list)
    weapon_traits: list[WeaponTrait] = field(default_factory=list)
