"""Named level recipes and the retrying level builder."""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, TYPE_CHECKING

from .areas import AreaEndingPosition, AreaStartingPosition, DistantExit, XStart, YStart
from .cellular import CellularAutomata
from .chain import BuilderChain, BuiltLevel
from .context import GenerationError
from .cull import CullUnreachable
from .decorators import CaveDecorator
from .drunkard import DrunkardsWalk
from .prefab import ORC_CAMP, PrefabBuilder
from .voronoi import VoronoiSpawning
from .waveform import WaveformCollapse

if TYPE_CHECKING:
    from depths.raws.catalog import RawCatalog

__all__ = ["LEVELS", "build_level", "chain_for"]

log = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 5

ChainFactory = Callable[[int, int, int, "RawCatalog | None"], BuilderChain]


def limestone_cavern(depth: int, width: int, height: int, catalog: "RawCatalog | None" = None) -> BuilderChain:
    chain = BuilderChain(depth, width, height, "Limestone Caverns", catalog)
    chain.start_with(DrunkardsWalk.winding_passages())
    chain.with_stage(AreaStartingPosition(XStart.CENTER, YStart.CENTER))
    chain.with_stage(CullUnreachable())
    chain.with_stage(AreaStartingPosition(XStart.LEFT, YStart.CENTER))
    chain.with_stage(VoronoiSpawning())
    chain.with_stage(DistantExit())
    chain.with_stage(CaveDecorator())
    return chain


def limestone_deep_cavern(depth: int, width: int, height: int, catalog: "RawCatalog | None" = None) -> BuilderChain:
    chain = BuilderChain(depth, width, height, "Deep Limestone Caverns", catalog)
    chain.start_with(DrunkardsWalk.open_area())
    chain.with_stage(AreaStartingPosition(XStart.LEFT, YStart.TOP))
    chain.with_stage(CullUnreachable())
    chain.with_stage(VoronoiSpawning())
    chain.with_stage(CaveDecorator())
    chain.with_stage(PrefabBuilder.sectional(ORC_CAMP))
    chain.with_stage(DistantExit())
    return chain


def cellular_caves(depth: int, width: int, height: int, catalog: "RawCatalog | None" = None) -> BuilderChain:
    chain = BuilderChain(depth, width, height, "Cellular Caves", catalog)
    chain.start_with(CellularAutomata())
    chain.with_stage(AreaStartingPosition(XStart.CENTER, YStart.CENTER))
    chain.with_stage(CullUnreachable())
    chain.with_stage(VoronoiSpawning())
    chain.with_stage(DistantExit())
    return chain


def waveform_caves(depth: int, width: int, height: int, catalog: "RawCatalog | None" = None) -> BuilderChain:
    chain = BuilderChain(depth, width, height, "Waveform Caves", catalog)
    chain.start_with(CellularAutomata())
    chain.with_stage(WaveformCollapse())
    chain.with_stage(AreaStartingPosition(XStart.CENTER, YStart.CENTER))
    chain.with_stage(CullUnreachable())
    chain.with_stage(VoronoiSpawning())
    chain.with_stage(DistantExit())
    return chain


def orc_camp_caves(depth: int, width: int, height: int, catalog: "RawCatalog | None" = None) -> BuilderChain:
    chain = BuilderChain(depth, width, height, "Orc Camp", catalog)
    chain.start_with(CellularAutomata())
    chain.with_stage(AreaStartingPosition(XStart.CENTER, YStart.CENTER))
    chain.with_stage(CullUnreachable())
    chain.with_stage(PrefabBuilder.sectional(ORC_CAMP))
    chain.with_stage(AreaStartingPosition(XStart.LEFT, YStart.CENTER))
    chain.with_stage(CullUnreachable())
    chain.with_stage(VoronoiSpawning())
    chain.with_stage(AreaEndingPosition(XStart.RIGHT, YStart.CENTER))
    return chain


LEVELS: Dict[str, ChainFactory] = {
    "limestone_cavern": limestone_cavern,
    "limestone_deep_cavern": limestone_deep_cavern,
    "cellular_caves": cellular_caves,
    "waveform_caves": waveform_caves,
    "orc_camp_caves": orc_camp_caves,
}


def chain_for(
    name: str,
    depth: int,
    width: int,
    height: int,
    catalog: "RawCatalog | None" = None,
) -> BuilderChain:
    try:
        factory = LEVELS[name]
    except KeyError:
        known = ", ".join(sorted(LEVELS))
        raise KeyError(f"Unknown level '{name}' (known levels: {known})") from None
    return factory(depth, width, height, catalog)


def build_level(
    name: str,
    depth: int,
    width: int,
    height: int,
    catalog: "RawCatalog | None" = None,
    seed: int | None = None,
    attempts: int = DEFAULT_ATTEMPTS,
) -> BuiltLevel:
    """Build the named level, retrying with ``seed + attempt`` on generation errors.

    The last :class:`GenerationError` is re-raised once ``attempts`` builds
    have failed.
    """

    if attempts <= 0:
        raise ValueError("attempts must be positive")
    base_seed = seed if seed is not None else random.randrange(1 << 32)
    attempt = 0
    while True:
        chain = chain_for(name, depth, width, height, catalog)
        try:
            level = chain.build(random.Random(base_seed + attempt))
        except GenerationError as exc:
            log.warning(
                "Level %s (depth %d) failed on attempt %d/%d with seed %d: %s",
                name,
                depth,
                attempt + 1,
                attempts,
                base_seed + attempt,
                exc,
            )
            attempt += 1
            if attempt >= attempts:
                raise
            continue
        log.info("Built level %s (depth %d) with seed %d", name, depth, base_seed + attempt)
        return level
