"""Tile kinds used by generated maps."""

from __future__ import annotations

import enum

__all__ = ["TileType", "tile_glyph", "tile_opaque", "tile_walkable"]


class TileType(enum.Enum):
    WALL = "wall"
    STALACTITE = "stalactite"
    STALAGMITE = "stalagmite"
    FLOOR = "floor"
    DOWN_STAIRS = "down_stairs"
    ROAD = "road"
    GRASS = "grass"
    SHALLOW_WATER = "shallow_water"
    DEEP_WATER = "deep_water"
    WOOD_FLOOR = "wood_floor"
    BRIDGE = "bridge"
    GRAVEL = "gravel"
    UP_STAIRS = "up_stairs"


_WALKABLE = frozenset(
    {
        TileType.FLOOR,
        TileType.DOWN_STAIRS,
        TileType.ROAD,
        TileType.GRASS,
        TileType.SHALLOW_WATER,
        TileType.WOOD_FLOOR,
        TileType.BRIDGE,
        TileType.GRAVEL,
        TileType.UP_STAIRS,
    }
)

_OPAQUE = frozenset({TileType.WALL, TileType.STALACTITE, TileType.STALAGMITE})

# Debug glyphs only; presentation belongs to the renderer.
_GLYPHS = {
    TileType.WALL: "#",
    TileType.STALACTITE: "|",
    TileType.STALAGMITE: "!",
    TileType.FLOOR: ".",
    TileType.DOWN_STAIRS: ">",
    TileType.ROAD: "=",
    TileType.GRASS: '"',
    TileType.SHALLOW_WATER: "~",
    TileType.DEEP_WATER: "≈",
    TileType.WOOD_FLOOR: "_",
    TileType.BRIDGE: "+",
    TileType.GRAVEL: ",",
    TileType.UP_STAIRS: "<",
}


def tile_walkable(tile: TileType) -> bool:
    return tile in _WALKABLE


def tile_opaque(tile: TileType) -> bool:
    return tile in _OPAQUE


def tile_glyph(tile: TileType) -> str:
    return _GLYPHS[tile]
