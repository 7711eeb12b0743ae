"""Weighted random tables used for spawning and loot drops."""

from __future__ import annotations

import enum
import random
from typing import Mapping

__all__ = ["MasterTable", "RandomTable", "SpawnType"]


class SpawnType(enum.Enum):
    ITEM = "item"
    MOB = "mob"
    PROP = "prop"


class RandomTable:
    """Weighted table that rolls a single entry name."""

    def __init__(self, entries: Mapping[str, int] | None = None) -> None:
        self._names: list[str] = []
        self._weights: list[int] = []
        for name, weight in (entries or {}).items():
            self.add(name, weight)

    def add(self, name: str, weight: int) -> None:
        weight = int(weight)
        if weight > 0:
            self._names.append(str(name))
            self._weights.append(weight)

    @property
    def total_weight(self) -> int:
        return sum(self._weights)

    def entries(self) -> Mapping[str, int]:
        totals: dict[str, int] = {}
        for name, weight in zip(self._names, self._weights):
            totals[name] = totals.get(name, 0) + weight
        return totals

    def roll(self, rng: random.Random) -> str | None:
        if not self._names:
            return None
        return rng.choices(self._names, weights=self._weights, k=1)[0]

    def __len__(self) -> int:
        return len(self._names)


class MasterTable:
    """Spawn table split by entity category.

    A roll first picks a category with 1d4 (item, prop, mob, or nothing) and
    then rolls the matching table.
    """

    def __init__(self) -> None:
        self.tables: dict[SpawnType, RandomTable] = {kind: RandomTable() for kind in SpawnType}

    def add(self, name: str, weight: int, kind: SpawnType) -> None:
        self.tables[kind].add(name, weight)

    def roll(self, rng: random.Random) -> str | None:
        category = rng.randint(1, 4)
        if category == 1:
            return self.tables[SpawnType.ITEM].roll(rng)
        if category == 2:
            return self.tables[SpawnType.PROP].roll(rng)
        if category == 3:
            return self.tables[SpawnType.MOB].roll(rng)
        return None

    def __len__(self) -> int:
        return sum(len(table) for table in self.tables.values())
