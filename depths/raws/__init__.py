"""Raw entity definitions, the catalog that indexes them and magic templating."""

from .catalog import RawCatalog
from .dice import DiceExpression, parse_dice_string
from .loader import ContentLoadError, load_raws, read_raws
from .models import (
    FactionInfo,
    ItemDefinition,
    LootTable,
    MagicBlock,
    MagicTemplate,
    MobDefinition,
    PropDefinition,
    Raws,
    Reaction,
    SchemaError,
    SpawnTableEntry,
    SpellDefinition,
    Weapon,
    WeaponTrait,
    Wearable,
)
from .random_table import MasterTable, RandomTable, SpawnType
from .templater import TemplateExpansionError, expand_magic_templates, rarity_for_bonus

__all__ = [
    "ContentLoadError",
    "DiceExpression",
    "FactionInfo",
    "ItemDefinition",
    "LootTable",
    "MagicBlock",
    "MagicTemplate",
    "MasterTable",
    "MobDefinition",
    "PropDefinition",
    "RandomTable",
    "RawCatalog",
    "Raws",
    "Reaction",
    "SchemaError",
    "SpawnTableEntry",
    "SpawnType",
    "SpellDefinition",
    "TemplateExpansionError",
    "Weapon",
    "WeaponTrait",
    "Wearable",
    "expand_magic_templates",
    "load_raws",
    "parse_dice_string",
    "rarity_for_bonus",
    "read_raws",
]
