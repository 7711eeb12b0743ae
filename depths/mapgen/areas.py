"""Stages that choose starting and ending positions."""

from __future__ import annotations

import enum
from typing import List, Tuple

from .chain import MapStage
from .context import BuildContext, GenerationError
from .cull import flood_distances
from .tiles import TileType, tile_walkable

__all__ = [
    "AreaEndingPosition",
    "AreaStartingPosition",
    "DistantExit",
    "XStart",
    "YStart",
    "nearest_walkable",
]


class XStart(enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class YStart(enum.Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


def anchor_point(width: int, height: int, x: XStart, y: YStart) -> Tuple[int, int]:
    seed_x = {XStart.LEFT: 1, XStart.CENTER: width // 2, XStart.RIGHT: width - 2}[x]
    seed_y = {YStart.TOP: 1, YStart.CENTER: height // 2, YStart.BOTTOM: height - 2}[y]
    return seed_x, seed_y


def nearest_walkable(context: BuildContext, seed_x: int, seed_y: int) -> int:
    """Return the walkable cell closest to the seed; ties go to the first in scan order."""

    game_map = context.map
    available: List[Tuple[int, int]] = []
    for idx, tile in enumerate(game_map.tiles):
        if tile_walkable(tile):
            x, y = game_map.idx_xy(idx)
            available.append((idx, (x - seed_x) ** 2 + (y - seed_y) ** 2))
    if not available:
        raise GenerationError("No valid floors to start on")
    available.sort(key=lambda entry: entry[1])
    return available[0][0]


class AreaStartingPosition(MapStage):
    def __init__(self, x: XStart, y: YStart) -> None:
        self.x = x
        self.y = y

    def run(self, context: BuildContext) -> None:
        seed = anchor_point(context.width, context.height, self.x, self.y)
        idx = nearest_walkable(context, *seed)
        context.map.set_starting_position(*context.map.idx_xy(idx))
        context.candidate_starts.append(idx)


class AreaEndingPosition(MapStage):
    """Place down stairs on the walkable cell nearest an anchor."""

    def __init__(self, x: XStart, y: YStart) -> None:
        self.x = x
        self.y = y

    def run(self, context: BuildContext) -> None:
        seed = anchor_point(context.width, context.height, self.x, self.y)
        idx = nearest_walkable(context, *seed)
        context.map.tiles[idx] = TileType.DOWN_STAIRS
        context.map.add_exit(idx)
        context.candidate_exits.append(idx)


class DistantExit(MapStage):
    """Place down stairs on the reachable floor cell furthest from the start."""

    def run(self, context: BuildContext) -> None:
        start = context.require_start()
        distances = flood_distances(context.map, start)
        context.distances = distances
        best: Tuple[int, int] | None = None
        for idx, tile in enumerate(context.map.tiles):
            if tile is not TileType.FLOOR or idx not in distances:
                continue
            if best is None or distances[idx] > best[1]:
                best = (idx, distances[idx])
        if best is None:
            raise GenerationError("No reachable floor to place an exit on")
        context.map.tiles[best[0]] = TileType.DOWN_STAIRS
        context.map.add_exit(best[0])
        context.candidate_exits.append(best[0])
