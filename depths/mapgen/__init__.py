"""Builder chains and the stages that generate dungeon levels."""

from .areas import AreaEndingPosition, AreaStartingPosition, DistantExit, XStart, YStart
from .cellular import CellularAutomata
from .chain import BuilderChain, BuiltLevel, ChainConfigurationError, MapStage
from .context import BuildContext, GenerationError, OverlayBoundsError, PatternSynthesisError
from .cull import CullUnreachable
from .decorators import CaveDecorator
from .drunkard import DrunkardsWalk
from .levels import LEVELS, build_level, chain_for
from .map import Map
from .prefab import (
    DROW_ENTRY,
    ORC_CAMP,
    UNDERGROUND_FORT,
    HorizontalPlacement,
    PrefabBuilder,
    PrefabSection,
    VerticalPlacement,
)
from .tiles import TileType, tile_opaque, tile_walkable
from .voronoi import VoronoiSpawning
from .waveform import WaveformCollapse

__all__ = [
    "AreaEndingPosition",
    "AreaStartingPosition",
    "BuildContext",
    "BuilderChain",
    "BuiltLevel",
    "CaveDecorator",
    "CellularAutomata",
    "ChainConfigurationError",
    "CullUnreachable",
    "DROW_ENTRY",
    "DistantExit",
    "DrunkardsWalk",
    "GenerationError",
    "HorizontalPlacement",
    "LEVELS",
    "Map",
    "MapStage",
    "ORC_CAMP",
    "OverlayBoundsError",
    "PatternSynthesisError",
    "PrefabBuilder",
    "PrefabSection",
    "TileType",
    "UNDERGROUND_FORT",
    "VerticalPlacement",
    "VoronoiSpawning",
    "WaveformCollapse",
    "XStart",
    "YStart",
    "build_level",
    "chain_for",
    "tile_opaque",
    "tile_walkable",
]
