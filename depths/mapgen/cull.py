"""Reachability analysis and pruning."""

from __future__ import annotations

from collections import deque
from typing import Dict

from .chain import MapStage
from .context import BuildContext
from .map import Map
from .tiles import TileType

__all__ = ["CullUnreachable", "flood_distances"]


def flood_distances(game_map: Map, start: int) -> Dict[int, int]:
    """Breadth-first step counts from ``start`` over walkable tiles, 8-way."""

    distances = {start: 0}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for neighbour in game_map.neighbours(current):
            if neighbour in distances or not game_map.is_walkable(neighbour):
                continue
            distances[neighbour] = distances[current] + 1
            queue.append(neighbour)
    return distances


class CullUnreachable(MapStage):
    """Turn floor the start cannot reach into wall, dropping spawns placed there."""

    def run(self, context: BuildContext) -> None:
        start = context.require_start()
        distances = flood_distances(context.map, start)
        game_map = context.map
        culled = set()
        for idx, tile in enumerate(game_map.tiles):
            if tile is TileType.FLOOR and idx not in distances:
                game_map.tiles[idx] = TileType.WALL
                culled.add(idx)
        if culled:
            game_map.spawn_list = [spawn for spawn in game_map.spawn_list if spawn[0] not in culled]
        context.distances = distances
