"""Cellular-automata cave carving."""

from __future__ import annotations

from .chain import MapStage
from .context import BuildContext
from .tiles import TileType

__all__ = ["CellularAutomata"]

FLOOR_CHANCE = 55
ITERATIONS = 15


class CellularAutomata(MapStage):
    """Randomise the interior, then repeatedly apply the neighbour rule.

    A cell becomes wall when more than four, or none, of its eight neighbours
    are walls. The outer border is never touched.
    """

    def __init__(self, iterations: int = ITERATIONS, *, seed_map: bool = True) -> None:
        self.iterations = iterations
        self.seed_map = seed_map

    @classmethod
    def smoothing(cls) -> "CellularAutomata":
        """A single pass over an existing map, for use after another starter."""

        return cls(iterations=1, seed_map=False)

    def run(self, context: BuildContext) -> None:
        if self.seed_map:
            self._randomise(context)
        for _ in range(self.iterations):
            self._apply_iteration(context)

    def _randomise(self, context: BuildContext) -> None:
        game_map = context.map
        for y in range(1, game_map.height - 1):
            for x in range(1, game_map.width - 1):
                roll = context.rng.randint(1, 100)
                idx = game_map.xy_idx(x, y)
                game_map.tiles[idx] = TileType.FLOOR if roll > FLOOR_CHANCE else TileType.WALL

    def _apply_iteration(self, context: BuildContext) -> None:
        game_map = context.map
        old = game_map.tiles
        new_tiles = list(old)
        width = game_map.width
        for y in range(1, game_map.height - 1):
            for x in range(1, width - 1):
                idx = game_map.xy_idx(x, y)
                walls = sum(
                    1
                    for offset in (-1, 1, -width, width, -width - 1, -width + 1, width - 1, width + 1)
                    if old[idx + offset] is TileType.WALL
                )
                new_tiles[idx] = TileType.WALL if walls > 4 or walls == 0 else TileType.FLOOR
        game_map.tiles = new_tiles
