"""Grid map produced by a builder chain."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from .tiles import TileType, tile_glyph, tile_walkable

__all__ = ["Map"]


@dataclass
class Map:
    """Row-major tile grid plus the spawn requests placed on it.

    Every index stored on the map (exits, spawn cells, the starting position)
    lies inside ``width * height``.
    """

    depth: int
    width: int
    height: int
    name: str = ""
    tiles: List[TileType] = field(default_factory=list)
    starting_position: Tuple[int, int] | None = None
    exits: List[int] = field(default_factory=list)
    spawn_list: List[Tuple[int, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Map dimensions must be positive")
        if not self.tiles:
            self.tiles = [TileType.WALL] * (self.width * self.height)
        elif len(self.tiles) != self.width * self.height:
            raise ValueError("Tile count does not match map dimensions")

    @classmethod
    def filled(cls, depth: int, width: int, height: int, name: str = "") -> "Map":
        return cls(depth=depth, width=width, height=height, name=name)

    @property
    def size(self) -> int:
        return self.width * self.height

    def xy_idx(self, x: int, y: int) -> int:
        return y * self.width + x

    def idx_xy(self, idx: int) -> Tuple[int, int]:
        return idx % self.width, idx // self.width

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def neighbours(self, idx: int) -> Iterator[int]:
        """Yield the in-bounds cells surrounding ``idx`` (8-way)."""

        x, y = self.idx_xy(idx)
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                nx, ny = x + dx, y + dy
                if self.in_bounds(nx, ny):
                    yield self.xy_idx(nx, ny)

    def is_walkable(self, idx: int) -> bool:
        return tile_walkable(self.tiles[idx])

    def count(self, tile: TileType) -> int:
        return sum(1 for existing in self.tiles if existing is tile)

    def set_starting_position(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Starting position ({x}, {y}) is outside the map")
        self.starting_position = (x, y)

    def starting_index(self) -> int | None:
        if self.starting_position is None:
            return None
        return self.xy_idx(*self.starting_position)

    def add_exit(self, idx: int) -> None:
        self._check_index(idx)
        if idx not in self.exits:
            self.exits.append(idx)

    def remove_exit(self, idx: int) -> None:
        if idx in self.exits:
            self.exits.remove(idx)

    def add_spawn(self, idx: int, name: str) -> None:
        self._check_index(idx)
        self.spawn_list.append((idx, name))

    def clear_spawns_at(self, idx: int) -> None:
        self.spawn_list = [spawn for spawn in self.spawn_list if spawn[0] != idx]

    def _check_index(self, idx: int) -> None:
        if not 0 <= idx < self.size:
            raise IndexError(f"Cell index {idx} is outside a {self.width}x{self.height} map")

    def to_ascii(self) -> str:
        """Render the grid as text, marking the starting position with ``@``."""

        start = self.starting_index()
        rows = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                idx = self.xy_idx(x, y)
                row.append("@" if idx == start else tile_glyph(self.tiles[idx]))
            rows.append("".join(row))
        return "\n".join(rows)
