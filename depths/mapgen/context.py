"""Shared state threaded through the stages of one build."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, TYPE_CHECKING

from .map import Map

if TYPE_CHECKING:
    from depths.raws.catalog import RawCatalog

__all__ = [
    "BuildContext",
    "GenerationError",
    "OverlayBoundsError",
    "PatternSynthesisError",
]


class GenerationError(RuntimeError):
    """Raised when a stage cannot produce a consistent map."""


class PatternSynthesisError(GenerationError):
    """Raised when pattern synthesis fails to resolve within its retry bound."""


class OverlayBoundsError(GenerationError):
    """Raised when a literal overlay does not fit inside the map."""


@dataclass
class BuildContext:
    """The map under construction together with its rng and build metadata."""

    map: Map
    rng: random.Random
    catalog: "RawCatalog | None" = None
    distances: Dict[int, int] = field(default_factory=dict)
    candidate_starts: List[int] = field(default_factory=list)
    candidate_exits: List[int] = field(default_factory=list)

    @property
    def width(self) -> int:
        return self.map.width

    @property
    def height(self) -> int:
        return self.map.height

    @property
    def depth(self) -> int:
        return self.map.depth

    def require_start(self) -> int:
        start = self.map.starting_index()
        if start is None:
            raise GenerationError("Stage requires a starting position but none has been chosen")
        return start

    def entity_known(self, name: str) -> bool:
        """Return whether spawning ``name`` can be resolved; always true without a catalog."""

        return self.catalog is None or self.catalog.contains(name)
