from __future__ import annotations

import random

import pytest

from depths.mapgen import (
    AreaStartingPosition,
    BuildContext,
    CellularAutomata,
    Map,
    PatternSynthesisError,
    TileType,
    WaveformCollapse,
    XStart,
    YStart,
    tile_walkable,
)
from depths.mapgen import waveform
from depths.mapgen.waveform import build_patterns, patterns_to_constraints


def make_context(width: int, height: int, tile: TileType = TileType.WALL, *, seed: int = 1) -> BuildContext:
    game_map = Map(depth=1, width=width, height=height, tiles=[tile] * (width * height))
    return BuildContext(map=game_map, rng=random.Random(seed))


def synthesis_outcome(seed: int) -> object:
    context = make_context(48, 32, seed=seed)
    CellularAutomata().run(context)
    try:
        WaveformCollapse().run(context)
    except PatternSynthesisError:
        return "failed"
    return list(context.map.tiles)


def test_patterns_are_deduplicated_in_first_seen_order() -> None:
    game_map = Map.filled(1, 16, 8)
    game_map.tiles[game_map.xy_idx(9, 0)] = TileType.FLOOR
    patterns = build_patterns(game_map, 8)

    solid = tuple([TileType.WALL] * 64)
    assert patterns[0] == solid
    assert len(patterns) == len(set(patterns))
    # Solid chunk plus the four orientations of the chunk with one floor cell.
    assert len(patterns) == 5


def test_sealed_patterns_are_compatible_with_everything() -> None:
    solid = tuple([TileType.WALL] * 4)
    open_pattern = tuple([TileType.FLOOR] * 4)
    constraints = patterns_to_constraints([solid, open_pattern], 2)

    assert not constraints[0].has_exits
    assert constraints[1].has_exits
    assert all(options == [0, 1] for options in constraints[0].compatible_with)
    assert all(options == [0, 1] for options in constraints[1].compatible_with)


def test_sealed_edge_only_meets_sealed_edge() -> None:
    floor, wall = TileType.FLOOR, TileType.WALL
    north_door = (wall, floor, wall, wall, wall, wall, wall, wall, wall)
    south_door = (wall, wall, wall, wall, wall, wall, wall, floor, wall)
    constraints = patterns_to_constraints([north_door, south_door], 3)

    north, south, west, east = 0, 1, 2, 3
    assert constraints[0].compatible_with[north] == [1]
    assert constraints[0].compatible_with[south] == [1]
    assert constraints[0].compatible_with[west] == [0, 1]
    assert constraints[1].compatible_with[north] == [0]
    assert constraints[1].compatible_with[south] == [0]
    assert constraints[1].compatible_with[east] == [0, 1]


def seal_first_chunk(context: BuildContext, chunk_size: int = 8) -> None:
    game_map = context.map
    for y in range(chunk_size):
        for x in range(chunk_size):
            game_map.tiles[game_map.xy_idx(x, y)] = TileType.WALL


def test_synthesis_is_deterministic_for_a_seed() -> None:
    assert synthesis_outcome(21) == synthesis_outcome(21)


def test_stairs_are_cleared_before_sampling() -> None:
    context = make_context(16, 16, TileType.FLOOR)
    context.map.tiles[context.map.xy_idx(3, 3)] = TileType.DOWN_STAIRS
    context.map.add_spawn(5, "Goblin")

    WaveformCollapse().run(context)

    assert context.map.count(TileType.DOWN_STAIRS) == 0
    assert all(tile is TileType.FLOOR for tile in context.map.tiles)
    assert context.map.spawn_list == []


def test_empty_pattern_library_fails() -> None:
    context = make_context(6, 6)
    with pytest.raises(PatternSynthesisError):
        WaveformCollapse().run(context)


def test_repeated_contradictions_abort_after_max_attempts(monkeypatch: pytest.MonkeyPatch) -> None:
    attempts: list[int] = []

    def contradiction(self: waveform.Solver, game_map: Map, rng: random.Random) -> bool:
        attempts.append(1)
        self.possible = False
        return True

    monkeypatch.setattr(waveform.Solver, "iteration", contradiction)
    context = make_context(16, 16)
    before = list(context.map.tiles)

    with pytest.raises(PatternSynthesisError):
        WaveformCollapse(max_attempts=3).run(context)

    assert len(attempts) == 3
    assert context.map.tiles == before


def test_sealed_chunk_in_library_always_resolves() -> None:
    # A pattern without exits borders anything, so no placement can contradict.
    context = make_context(48, 32, seed=21)
    CellularAutomata().run(context)
    seal_first_chunk(context)

    WaveformCollapse(max_attempts=1).run(context)

    assert context.map.count(TileType.FLOOR) > 0


def test_starting_position_survives_synthesis() -> None:
    context = make_context(48, 32, seed=21)
    CellularAutomata().run(context)
    seal_first_chunk(context)
    AreaStartingPosition(XStart.CENTER, YStart.CENTER).run(context)

    WaveformCollapse().run(context)

    game_map = context.map
    assert game_map.starting_position is not None
    assert tile_walkable(game_map.tiles[game_map.starting_index()])


def test_walkable_start_is_left_in_place() -> None:
    context = make_context(16, 16, TileType.FLOOR)
    context.map.set_starting_position(3, 3)

    WaveformCollapse().run(context)

    assert context.map.starting_position == (3, 3)
