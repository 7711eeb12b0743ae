"""Chunk-based wave-function-collapse synthesis.

The existing map is cut into square chunks which become the pattern library.
Each pattern records which edge cells are open, and two patterns are
compatible across an edge when their open cells line up. A fresh map is then
filled chunk by chunk with patterns compatible with every placed neighbour.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .areas import nearest_walkable
from .chain import MapStage
from .context import BuildContext, PatternSynthesisError
from .map import Map
from .tiles import TileType

__all__ = [
    "MapChunk",
    "Solver",
    "WaveformCollapse",
    "build_patterns",
    "patterns_to_constraints",
]

log = logging.getLogger(__name__)

CHUNK_SIZE = 8
MAX_ATTEMPTS = 10

NORTH, SOUTH, WEST, EAST = 0, 1, 2, 3
OPPOSITE = {NORTH: SOUTH, SOUTH: NORTH, WEST: EAST, EAST: WEST}

Pattern = Tuple[TileType, ...]


@dataclass
class MapChunk:
    """A pattern plus its open edges and the patterns that may border it."""

    pattern: Pattern
    exits: List[List[bool]]
    has_exits: bool
    compatible_with: List[List[int]] = field(default_factory=lambda: [[], [], [], []])


def _chunk_cell(chunk_size: int, x: int, y: int) -> int:
    return y * chunk_size + x


def build_patterns(
    game_map: Map,
    chunk_size: int,
    *,
    include_flipping: bool = True,
    dedupe: bool = True,
) -> List[Pattern]:
    """Slice ``game_map`` into chunk patterns in scan order.

    Deduplication keeps the first occurrence of each pattern so the library
    order depends only on the map.
    """

    chunks_x = game_map.width // chunk_size
    chunks_y = game_map.height // chunk_size
    patterns: List[Pattern] = []

    def read(start_x: int, start_y: int, flip_x: bool, flip_y: bool) -> Pattern:
        cells = []
        for y in range(chunk_size):
            for x in range(chunk_size):
                source_x = start_x + (chunk_size - 1 - x if flip_x else x)
                source_y = start_y + (chunk_size - 1 - y if flip_y else y)
                cells.append(game_map.tiles[game_map.xy_idx(source_x, source_y)])
        return tuple(cells)

    for cy in range(chunks_y):
        for cx in range(chunks_x):
            start_x, start_y = cx * chunk_size, cy * chunk_size
            patterns.append(read(start_x, start_y, False, False))
            if include_flipping:
                patterns.append(read(start_x, start_y, True, False))
                patterns.append(read(start_x, start_y, False, True))
                patterns.append(read(start_x, start_y, True, True))

    if dedupe:
        before = len(patterns)
        patterns = list(dict.fromkeys(patterns))
        log.debug("Deduplicated %d chunk patterns down to %d", before, len(patterns))
    return patterns


def patterns_to_constraints(patterns: Sequence[Pattern], chunk_size: int) -> List[MapChunk]:
    """Derive edge exits and the per-direction compatibility lists."""

    constraints: List[MapChunk] = []
    for pattern in patterns:
        exits = [[False] * chunk_size for _ in range(4)]
        for i in range(chunk_size):
            exits[NORTH][i] = pattern[_chunk_cell(chunk_size, i, 0)] is TileType.FLOOR
            exits[SOUTH][i] = pattern[_chunk_cell(chunk_size, i, chunk_size - 1)] is TileType.FLOOR
            exits[WEST][i] = pattern[_chunk_cell(chunk_size, 0, i)] is TileType.FLOOR
            exits[EAST][i] = pattern[_chunk_cell(chunk_size, chunk_size - 1, i)] is TileType.FLOOR
        has_exits = any(any(side) for side in exits)
        constraints.append(MapChunk(pattern=pattern, exits=exits, has_exits=has_exits))

    for chunk in constraints:
        for j, candidate in enumerate(constraints):
            if not chunk.has_exits or not candidate.has_exits:
                for direction in range(4):
                    chunk.compatible_with[direction].append(j)
                continue
            for direction, side in enumerate(chunk.exits):
                other = candidate.exits[OPPOSITE[direction]]
                if any(side):
                    if any(mine and theirs for mine, theirs in zip(side, other)):
                        chunk.compatible_with[direction].append(j)
                elif not any(other):
                    # A sealed edge only meets another sealed edge.
                    chunk.compatible_with[direction].append(j)
    return constraints


class Solver:
    """Places one chunk per :meth:`iteration` until done or contradicted."""

    def __init__(self, constraints: Sequence[MapChunk], chunk_size: int, game_map: Map) -> None:
        self.constraints = constraints
        self.chunk_size = chunk_size
        self.chunks_x = game_map.width // chunk_size
        self.chunks_y = game_map.height // chunk_size
        self.chunks: List[int | None] = [None] * (self.chunks_x * self.chunks_y)
        self.remaining: List[Tuple[int, int]] = [(i, 0) for i in range(len(self.chunks))]
        self.possible = True

    def _placed_neighbours(self, chunk_x: int, chunk_y: int) -> List[Tuple[int, int]]:
        """Return ``(pattern, direction-to-use)`` for each placed neighbour."""

        found = []
        if chunk_x > 0:
            placed = self.chunks[self._chunk_idx(chunk_x - 1, chunk_y)]
            if placed is not None:
                found.append((placed, EAST))
        if chunk_x < self.chunks_x - 1:
            placed = self.chunks[self._chunk_idx(chunk_x + 1, chunk_y)]
            if placed is not None:
                found.append((placed, WEST))
        if chunk_y > 0:
            placed = self.chunks[self._chunk_idx(chunk_x, chunk_y - 1)]
            if placed is not None:
                found.append((placed, SOUTH))
        if chunk_y < self.chunks_y - 1:
            placed = self.chunks[self._chunk_idx(chunk_x, chunk_y + 1)]
            if placed is not None:
                found.append((placed, NORTH))
        return found

    def _chunk_idx(self, x: int, y: int) -> int:
        return y * self.chunks_x + x

    def iteration(self, game_map: Map, rng: random.Random) -> bool:
        """Place one chunk; return ``True`` once finished or impossible."""

        if not self.remaining:
            return True

        counted = []
        neighbours_exist = False
        for idx, _ in self.remaining:
            count = len(self._placed_neighbours(idx % self.chunks_x, idx // self.chunks_x))
            neighbours_exist = neighbours_exist or count > 0
            counted.append((idx, count))
        counted.sort(key=lambda entry: entry[1], reverse=True)
        self.remaining = counted

        position = rng.randrange(len(self.remaining)) if not neighbours_exist else 0
        chunk_index, _ = self.remaining.pop(position)
        chunk_x, chunk_y = chunk_index % self.chunks_x, chunk_index // self.chunks_x

        neighbours = self._placed_neighbours(chunk_x, chunk_y)
        if not neighbours:
            choice = rng.randrange(len(self.constraints))
        else:
            option_lists = [self.constraints[placed].compatible_with[direction] for placed, direction in neighbours]
            allowed = set(option_lists[0]).intersection(*option_lists[1:])
            possible = sorted(allowed)
            if not possible:
                log.debug("Chunk %d has no compatible pattern", chunk_index)
                self.possible = False
                return True
            choice = possible[0] if len(possible) == 1 else possible[rng.randrange(len(possible))]

        self.chunks[chunk_index] = choice
        self._render(game_map, chunk_x, chunk_y, self.constraints[choice].pattern)
        return False

    def _render(self, game_map: Map, chunk_x: int, chunk_y: int, pattern: Pattern) -> None:
        i = 0
        for y in range(chunk_y * self.chunk_size, (chunk_y + 1) * self.chunk_size):
            for x in range(chunk_x * self.chunk_size, (chunk_x + 1) * self.chunk_size):
                game_map.tiles[game_map.xy_idx(x, y)] = pattern[i]
                i += 1


class WaveformCollapse(MapStage):
    """Rebuild the current map out of its own chunks.

    Stairs are cleared to floor before sampling. Contradictions restart the
    solve on a fresh all-wall map; after ``max_attempts`` failures the build
    is aborted with :class:`PatternSynthesisError`. A starting position set
    by an earlier stage survives, moved to the nearest walkable cell if the
    new layout buries it.
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE, max_attempts: int = MAX_ATTEMPTS) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self.chunk_size = chunk_size
        self.max_attempts = max_attempts

    def run(self, context: BuildContext) -> None:
        source = context.map
        source.tiles = [TileType.FLOOR if tile is TileType.DOWN_STAIRS else tile for tile in source.tiles]

        patterns = build_patterns(source, self.chunk_size)
        if not patterns:
            raise PatternSynthesisError(
                f"No {self.chunk_size}x{self.chunk_size} patterns fit a {source.width}x{source.height} map"
            )
        constraints = patterns_to_constraints(patterns, self.chunk_size)

        for attempt in range(1, self.max_attempts + 1):
            candidate = Map.filled(source.depth, source.width, source.height, source.name)
            solver = Solver(constraints, self.chunk_size, candidate)
            while not solver.iteration(candidate, context.rng):
                pass
            if solver.possible:
                source.tiles = candidate.tiles
                source.spawn_list.clear()
                source.exits.clear()
                context.distances = {}
                self._keep_start_walkable(context)
                log.debug("Pattern synthesis resolved on attempt %d", attempt)
                return
            log.debug("Pattern synthesis attempt %d/%d hit a contradiction", attempt, self.max_attempts)

        raise PatternSynthesisError(f"Pattern synthesis failed after {self.max_attempts} attempts")

    @staticmethod
    def _keep_start_walkable(context: BuildContext) -> None:
        game_map = context.map
        if game_map.starting_position is None:
            return
        if game_map.is_walkable(game_map.starting_index()):
            return
        idx = nearest_walkable(context, *game_map.starting_position)
        log.debug(
            "Moved starting position %s to %s after synthesis",
            game_map.starting_position,
            game_map.idx_xy(idx),
        )
        game_map.set_starting_position(*game_map.idx_xy(idx))
