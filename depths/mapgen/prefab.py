"""Hand-authored sections stamped onto a generated map."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Tuple

from .chain import MapStage
from .context import BuildContext, OverlayBoundsError
from .tiles import TileType

__all__ = [
    "DROW_ENTRY",
    "ENTITY_GLYPHS",
    "ORC_CAMP",
    "TILE_GLYPHS",
    "UNDERGROUND_FORT",
    "HorizontalPlacement",
    "PrefabBuilder",
    "PrefabSection",
    "VerticalPlacement",
]

log = logging.getLogger(__name__)

TILE_GLYPHS: Mapping[str, TileType] = {
    " ": TileType.FLOOR,
    "#": TileType.WALL,
    ">": TileType.DOWN_STAIRS,
    "≈": TileType.DEEP_WATER,
}

ENTITY_GLYPHS: Mapping[str, str] = {
    "g": "Goblin",
    "o": "Orc",
    "O": "Orc Leader",
    "e": "Dark Elf",
    "^": "Bear Trap",
    "%": "Rations",
    "!": "Health Potion",
    "☼": "Watch Fire",
}

START_GLYPH = "@"


class HorizontalPlacement(enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VerticalPlacement(enum.Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class PrefabSection:
    """A fixed-size character grid and where it sits on the map."""

    template: str
    width: int
    height: int
    placement: Tuple[HorizontalPlacement, VerticalPlacement]
    glyphs: Mapping[str, str] = field(default_factory=lambda: dict(ENTITY_GLYPHS))

    def rows(self) -> List[str]:
        """Template rows padded or cut to exactly ``width`` x ``height``."""

        lines = self.template.replace("\r", "").replace("\u00a0", " ").split("\n")
        if lines and lines[0] == "":
            lines = lines[1:]
        rows = [line[: self.width].ljust(self.width) for line in lines[: self.height]]
        while len(rows) < self.height:
            rows.append(" " * self.width)
        return rows

    def origin(self, map_width: int, map_height: int) -> Tuple[int, int]:
        horizontal, vertical = self.placement
        if horizontal is HorizontalPlacement.LEFT:
            x = 0
        elif horizontal is HorizontalPlacement.CENTER:
            x = map_width // 2 - self.width // 2
        else:
            x = map_width - 1 - self.width
        if vertical is VerticalPlacement.TOP:
            y = 0
        elif vertical is VerticalPlacement.CENTER:
            y = map_height // 2 - self.height // 2
        else:
            y = map_height - 1 - self.height
        return x, y


class PrefabBuilder(MapStage):
    """Overlay a :class:`PrefabSection` onto whatever earlier stages built.

    Cells on the outer edge of the map are left alone so the map stays sealed.
    """

    def __init__(self, section: PrefabSection) -> None:
        self.section = section

    @classmethod
    def sectional(cls, section: PrefabSection) -> "PrefabBuilder":
        return cls(section)

    def run(self, context: BuildContext) -> None:
        section = self.section
        game_map = context.map
        chunk_x, chunk_y = section.origin(game_map.width, game_map.height)
        if (
            chunk_x < 0
            or chunk_y < 0
            or chunk_x + section.width > game_map.width
            or chunk_y + section.height > game_map.height
        ):
            raise OverlayBoundsError(
                f"A {section.width}x{section.height} section at ({chunk_x}, {chunk_y}) "
                f"does not fit a {game_map.width}x{game_map.height} map"
            )

        for ty, row in enumerate(section.rows()):
            for tx, glyph in enumerate(row):
                x, y = chunk_x + tx, chunk_y + ty
                if x <= 0 or y <= 0 or x >= game_map.width - 1 or y >= game_map.height - 1:
                    continue
                self._apply_glyph(context, glyph, game_map.xy_idx(x, y))

    def _apply_glyph(self, context: BuildContext, glyph: str, idx: int) -> None:
        game_map = context.map
        if glyph in TILE_GLYPHS:
            game_map.tiles[idx] = TILE_GLYPHS[glyph]
            if not game_map.is_walkable(idx):
                game_map.clear_spawns_at(idx)
            if game_map.tiles[idx] is TileType.DOWN_STAIRS:
                game_map.add_exit(idx)
            else:
                game_map.remove_exit(idx)
        elif glyph == START_GLYPH:
            game_map.tiles[idx] = TileType.FLOOR
            game_map.remove_exit(idx)
            game_map.set_starting_position(*game_map.idx_xy(idx))
        elif glyph in self.section.glyphs:
            name = self.section.glyphs[glyph]
            game_map.tiles[idx] = TileType.FLOOR
            game_map.remove_exit(idx)
            game_map.clear_spawns_at(idx)
            if context.entity_known(name):
                game_map.add_spawn(idx, name)
            else:
                log.warning("Prefab references unknown entity %s at %s", name, game_map.idx_xy(idx))
        else:
            log.warning("Unknown glyph %r in prefab at %s", glyph, game_map.idx_xy(idx))


UNDERGROUND_FORT = PrefabSection(
    template="""
     #
  #######
  #     #
  #     #######
  #  g        #
  #     #######
  #     #
  ### ###
    # #
    # #
    # ##
    ^
    ^
    # ##
    # #
    # #
    # #
    # #
  ### ###
  #     #
  #     #
  #  g  #
  #     #
  #     #
  ### ###
    # #
    # #
    # #
    # ##
    ^
    ^
    # ##
    # #
    # #
    # #
  ### ###
  #     #
  #     #######
  #  g        #
  #     #######
  #     #
  #######
     #
""",
    width=15,
    height=43,
    placement=(HorizontalPlacement.RIGHT, VerticalPlacement.TOP),
)

ORC_CAMP = PrefabSection(
    template="""

 ##########
 ≈☼      ☼≈
 ≈ g      ≈
 ≈        ≈
 ≈    g   ≈
 o   O    o
 ≈        ≈
 ≈ g      ≈
 ≈    g   ≈
 ≈☼      ☼≈
 ≈≈≈≈o≈≈≈≈≈

""",
    width=12,
    height=12,
    placement=(HorizontalPlacement.CENTER, VerticalPlacement.CENTER),
)

DROW_ENTRY = PrefabSection(
    template="""

 ##########
 #        #
 #   >    #
 #        #
 #e       #
    e     #
 #e       #
 ##########

""",
    width=12,
    height=10,
    placement=(HorizontalPlacement.CENTER, VerticalPlacement.CENTER),
)
