"""Drunkard's-walk carving."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .chain import MapStage
from .context import BuildContext, GenerationError
from .tiles import TileType

__all__ = ["DrunkSpawnMode", "DrunkardSettings", "DrunkardsWalk"]

MAX_DIGGERS = 10_000


class DrunkSpawnMode(enum.Enum):
    STARTING_POINT = "starting_point"
    RANDOM = "random"


@dataclass(frozen=True)
class DrunkardSettings:
    spawn_mode: DrunkSpawnMode
    lifetime: int
    floor_percent: float
    brush_size: int = 1


class DrunkardsWalk(MapStage):
    """Release diggers that stagger about until enough of the map is floor."""

    def __init__(self, settings: DrunkardSettings) -> None:
        self.settings = settings

    @classmethod
    def open_area(cls) -> "DrunkardsWalk":
        return cls(DrunkardSettings(DrunkSpawnMode.STARTING_POINT, lifetime=400, floor_percent=0.5))

    @classmethod
    def open_halls(cls) -> "DrunkardsWalk":
        return cls(DrunkardSettings(DrunkSpawnMode.RANDOM, lifetime=400, floor_percent=0.5))

    @classmethod
    def winding_passages(cls) -> "DrunkardsWalk":
        return cls(DrunkardSettings(DrunkSpawnMode.RANDOM, lifetime=100, floor_percent=0.4))

    @classmethod
    def fat_passages(cls) -> "DrunkardsWalk":
        return cls(DrunkardSettings(DrunkSpawnMode.RANDOM, lifetime=100, floor_percent=0.4, brush_size=2))

    def run(self, context: BuildContext) -> None:
        game_map = context.map
        rng = context.rng
        start_x, start_y = game_map.width // 2, game_map.height // 2
        game_map.tiles[game_map.xy_idx(start_x, start_y)] = TileType.FLOOR

        desired = int(self.settings.floor_percent * game_map.size)
        floor_count = game_map.count(TileType.FLOOR)
        diggers = 0
        while floor_count < desired:
            if diggers >= MAX_DIGGERS:
                raise GenerationError(
                    f"Drunkard's walk gave up after {diggers} diggers ({floor_count}/{desired} floor tiles)"
                )
            if self.settings.spawn_mode is DrunkSpawnMode.STARTING_POINT or diggers == 0:
                x, y = start_x, start_y
            else:
                x = rng.randint(1, game_map.width - 3) + 1
                y = rng.randint(1, game_map.height - 3) + 1

            for _ in range(self.settings.lifetime):
                self._paint(context, x, y)
                direction = rng.randint(1, 4)
                if direction == 1 and x > 2:
                    x -= 1
                elif direction == 2 and x < game_map.width - 2:
                    x += 1
                elif direction == 3 and y > 2:
                    y -= 1
                elif direction == 4 and y < game_map.height - 2:
                    y += 1

            diggers += 1
            floor_count = game_map.count(TileType.FLOOR)

    def _paint(self, context: BuildContext, x: int, y: int) -> None:
        game_map = context.map
        if self.settings.brush_size == 1:
            game_map.tiles[game_map.xy_idx(x, y)] = TileType.FLOOR
            return
        half = self.settings.brush_size // 2
        for brush_y in range(y - half, y + half + 1):
            for brush_x in range(x - half, x + half + 1):
                if 0 < brush_x < game_map.width - 1 and 0 < brush_y < game_map.height - 1:
                    game_map.tiles[game_map.xy_idx(brush_x, brush_y)] = TileType.FLOOR
