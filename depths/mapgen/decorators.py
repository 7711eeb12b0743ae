"""Cosmetic passes that dress up a finished layout."""

from __future__ import annotations

from .chain import MapStage
from .context import BuildContext
from .tiles import TileType

__all__ = ["CaveDecorator"]


class CaveDecorator(MapStage):
    """Scatter gravel and pools on floors; water and stalactites among walls."""

    def run(self, context: BuildContext) -> None:
        game_map = context.map
        rng = context.rng
        old = list(game_map.tiles)
        width, height = game_map.width, game_map.height
        for idx, tile in enumerate(old):
            if tile is TileType.FLOOR:
                if rng.randint(1, 6) == 1:
                    game_map.tiles[idx] = TileType.GRAVEL
                elif rng.randint(1, 10) == 1:
                    game_map.tiles[idx] = TileType.SHALLOW_WATER
            elif tile is TileType.WALL:
                x, y = game_map.idx_xy(idx)
                walls = 0
                if x > 0 and old[idx - 1] is TileType.WALL:
                    walls += 1
                if x < width - 1 and old[idx + 1] is TileType.WALL:
                    walls += 1
                if y > 0 and old[idx - width] is TileType.WALL:
                    walls += 1
                if y < height - 1 and old[idx + width] is TileType.WALL:
                    walls += 1
                if walls == 2:
                    game_map.tiles[idx] = TileType.DEEP_WATER
                elif walls == 1:
                    roll = rng.randint(1, 4)
                    if roll == 1:
                        game_map.tiles[idx] = TileType.STALACTITE
                    elif roll == 2:
                        game_map.tiles[idx] = TileType.STALAGMITE
