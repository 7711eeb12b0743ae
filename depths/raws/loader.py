"""Structured raw loading helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Iterable, Mapping, MutableMapping, Sequence

import yaml

from .catalog import RawCatalog
from .models import (
    FactionInfo,
    ItemDefinition,
    LootTable,
    MobDefinition,
    PropDefinition,
    Raws,
    SchemaError,
    SpawnTableEntry,
    SpellDefinition,
    WeaponTrait,
)
from .templater import expand_magic_templates

__all__ = ["ContentLoadError", "load_raws", "read_raws"]

SUPPORTED_EXTENSIONS = (".json", ".yaml", ".yml")


class ContentLoadError(RuntimeError):
    """Raised when raws could not be loaded from disk."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        if path is not None:
            message = f"{message} (source: {path})"
        super().__init__(message)
        self.path = path


CATEGORIES: Mapping[str, Callable[[Mapping[str, object]], object]] = {
    "items": ItemDefinition.from_mapping,
    "mobs": MobDefinition.from_mapping,
    "props": PropDefinition.from_mapping,
    "spawn_table": SpawnTableEntry.from_mapping,
    "loot_tables": LootTable.from_mapping,
    "faction_table": FactionInfo.from_mapping,
    "spells": SpellDefinition.from_mapping,
    "weapon_traits": WeaponTrait.from_mapping,
}

# Directory names accepted for each category in addition to the category key.
DIRECTORY_ALIASES: Mapping[str, str] = {
    "factions": "faction_table",
}


def load_raws(path: Path) -> RawCatalog:
    """Load raws from ``path``, build the catalog and expand magic templates once."""

    raws = read_raws(path)
    catalog = RawCatalog.from_raws(raws)
    expand_magic_templates(catalog)
    return catalog


def read_raws(path: Path) -> Raws:
    """Read raw definitions from a directory tree or a single document."""

    return _RawLoader(Path(path)).load()


class _RawLoader:
    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path

    # -- public entrypoint -------------------------------------------------
    def load(self) -> Raws:
        if self.base_path.is_file():
            return self._load_document(self.base_path)
        if not self.base_path.is_dir():
            raise ContentLoadError("Raw content path does not exist", path=self.base_path)
        raws = Raws()
        for category in CATEGORIES:
            target: list = getattr(raws, category)
            for file_path, entry in self._iter_entries(self._category_dirs(category)):
                target.append(self._build(category, file_path, entry))
        return raws

    # -- concrete loaders --------------------------------------------------
    def _load_document(self, file_path: Path) -> Raws:
        raw = self._load_structured(file_path)
        if not isinstance(raw, MutableMapping):
            raise ContentLoadError("Raw document must be a mapping of categories", path=file_path)
        raws = Raws()
        for key, value in raw.items():
            category = DIRECTORY_ALIASES.get(str(key), str(key))
            if category not in CATEGORIES:
                raise ContentLoadError(f"Unknown raw category '{key}'", path=file_path)
            target: list = getattr(raws, category)
            for entry in self._entries_from(file_path, category, value):
                target.append(self._build(category, file_path, entry))
        return raws

    def _build(self, category: str, file_path: Path, entry: Mapping[str, object]) -> object:
        try:
            return CATEGORIES[category](entry)
        except SchemaError as exc:
            raise ContentLoadError(str(exc), path=file_path) from exc
        except (TypeError, ValueError) as exc:
            raise ContentLoadError(f"Invalid {category} entry: {exc}", path=file_path) from exc

    # -- helpers -----------------------------------------------------------
    def _category_dirs(self, category: str) -> list[Path]:
        names = [category] + [alias for alias, target in DIRECTORY_ALIASES.items() if target == category]
        return [self.base_path / name for name in names]

    def _iter_entries(self, directories: Iterable[Path]) -> Iterable[tuple[Path, MutableMapping[str, object]]]:
        entries: list[tuple[Path, MutableMapping[str, object]]] = []
        for path in directories:
            if not path.exists():
                continue
            files = sorted(
                file_path
                for file_path in path.iterdir()
                if file_path.is_file() and file_path.suffix.lower() in SUPPORTED_EXTENSIONS
            )
            for file_path in files:
                raw = self._load_structured(file_path)
                for entry in self._entries_from(file_path, path.name, raw):
                    entries.append((file_path, entry))
        return entries

    def _entries_from(self, file_path: Path, category: str, raw: object) -> list[MutableMapping[str, object]]:
        if raw is None:
            return []
        if isinstance(raw, MutableMapping):
            return [dict(raw)]
        if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
            entries: list[MutableMapping[str, object]] = []
            for element in raw:
                if not isinstance(element, MutableMapping):
                    raise ContentLoadError(
                        f"Expected mapping entries in {category} definition",
                        path=file_path,
                    )
                entries.append(dict(element))
            return entries
        raise ContentLoadError(
            f"Unsupported structure in {category} content: expected mapping or list of mappings",
            path=file_path,
        )

    def _load_structured(self, file_path: Path) -> object:
        try:
            text = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ContentLoadError("Unable to read content file", path=file_path) from exc
        suffix = file_path.suffix.lower()
        try:
            if suffix == ".json":
                return json.loads(text)
            if suffix in {".yaml", ".yml"}:
                return yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ContentLoadError("Failed to parse structured content", path=file_path) from exc
        raise ContentLoadError(
            f"Unsupported file extension '{file_path.suffix}' for content file",
            path=file_path,
        )
