"""Region-biased spawning over Voronoi cells of the floor."""

from __future__ import annotations

import logging
from typing import Dict, List, TYPE_CHECKING

from .chain import MapStage
from .context import BuildContext
from .tiles import TileType

if TYPE_CHECKING:
    from depths.raws.random_table import MasterTable

__all__ = ["VoronoiSpawning", "spawn_region", "voronoi_regions"]

log = logging.getLogger(__name__)

SEED_COUNT = 32
REGION_DIE = 7


def voronoi_regions(context: BuildContext, seed_count: int) -> Dict[int, List[int]]:
    """Group interior floor cells by their nearest seed (lowest seed on ties)."""

    game_map = context.map
    floors = [
        game_map.xy_idx(x, y)
        for y in range(1, game_map.height - 1)
        for x in range(1, game_map.width - 1)
        if game_map.tiles[game_map.xy_idx(x, y)] is TileType.FLOOR
    ]
    if not floors:
        return {}
    seeds = [game_map.idx_xy(idx) for idx in context.rng.sample(floors, min(seed_count, len(floors)))]

    regions: Dict[int, List[int]] = {}
    for idx in floors:
        x, y = game_map.idx_xy(idx)
        nearest = min(
            range(len(seeds)),
            key=lambda seed: ((seeds[seed][0] - x) ** 2 + (seeds[seed][1] - y) ** 2, seed),
        )
        regions.setdefault(nearest, []).append(idx)
    return regions


def spawn_region(context: BuildContext, area: List[int], table: MasterTable) -> int:
    """Roll spawns for one region; returns how many requests were placed."""

    rng = context.rng
    wanted = rng.randint(1, REGION_DIE) + context.depth - 4 + len(area) // 64
    count = max(0, min(len(area), wanted))
    placed = 0
    for idx in rng.sample(area, count):
        name = table.roll(rng)
        if name is None:
            continue
        if not context.entity_known(name):
            log.warning("Spawn table references unknown entity %s at %s", name, context.map.idx_xy(idx))
            continue
        context.map.add_spawn(idx, name)
        placed += 1
    return placed


class VoronoiSpawning(MapStage):
    def __init__(self, seed_count: int = SEED_COUNT) -> None:
        if seed_count <= 0:
            raise ValueError("seed_count must be positive")
        self.seed_count = seed_count

    def run(self, context: BuildContext) -> None:
        if context.catalog is None:
            log.debug("No raw catalog attached; skipping region spawning")
            return
        table = context.catalog.get_spawn_table_for_depth(context.depth)
        regions = voronoi_regions(context, self.seed_count)
        placed = sum(spawn_region(context, regions[key], table) for key in sorted(regions))
        log.debug("Region spawning placed %d entities across %d regions", placed, len(regions))
