"""Builder chain: a starting stage followed by ordered meta stages."""

from __future__ import annotations

import abc
import logging
import random
from dataclasses import dataclass
from typing import List, Sequence, Tuple, TYPE_CHECKING

from .context import BuildContext
from .map import Map

if TYPE_CHECKING:
    from depths.raws.catalog import RawCatalog

__all__ = ["BuilderChain", "BuiltLevel", "ChainConfigurationError", "MapStage"]

log = logging.getLogger(__name__)


class ChainConfigurationError(RuntimeError):
    """Raised when a builder chain is assembled incorrectly."""


class MapStage(abc.ABC):
    """A single generation step operating on a :class:`BuildContext`."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abc.abstractmethod
    def run(self, context: BuildContext) -> None:
        """Mutate ``context`` in place."""


@dataclass(frozen=True)
class BuiltLevel:
    """A finished map and the spawn requests placed on it."""

    map: Map
    spawn_list: Sequence[Tuple[int, str]]


class BuilderChain:
    """Owns one starting stage and the stages that refine its output."""

    def __init__(
        self,
        depth: int,
        width: int,
        height: int,
        name: str,
        catalog: "RawCatalog | None" = None,
    ) -> None:
        self.depth = depth
        self.width = width
        self.height = height
        self.name = name
        self.catalog = catalog
        self._starter: MapStage | None = None
        self._stages: List[MapStage] = []

    @property
    def stages(self) -> Sequence[MapStage]:
        head = [self._starter] if self._starter is not None else []
        return tuple(head + self._stages)

    def start_with(self, stage: MapStage) -> "BuilderChain":
        if self._starter is not None:
            raise ChainConfigurationError("You can only have one starting builder.")
        self._starter = stage
        return self

    def with_stage(self, stage: MapStage) -> "BuilderChain":
        self._stages.append(stage)
        return self

    def build(self, rng: random.Random) -> BuiltLevel:
        if self._starter is None:
            raise ChainConfigurationError("Cannot run a map builder chain without a starting build system")
        game_map = Map.filled(self.depth, self.width, self.height, self.name)
        context = BuildContext(map=game_map, rng=rng, catalog=self.catalog)
        for stage in self.stages:
            log.debug("Running stage %s for %s (depth %d)", stage.name, self.name, self.depth)
            stage.run(context)
        log.debug(
            "Built %s: %d spawns, start=%s",
            self.name,
            len(game_map.spawn_list),
            game_map.starting_position,
        )
        return BuiltLevel(map=game_map, spawn_list=tuple(game_map.spawn_list))
