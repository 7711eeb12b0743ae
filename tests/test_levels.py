from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import generate
from depths.mapgen import (
    BuildContext,
    BuilderChain,
    GenerationError,
    MapStage,
    TileType,
    build_level,
    tile_walkable,
)
from depths.mapgen import levels
from depths.raws import RawCatalog, load_raws


@pytest.fixture(scope="module")
def catalog() -> RawCatalog:
    return load_raws(ROOT / "data")


class FlakyStage(MapStage):
    """Fails until it has been run ``failures`` times."""

    def __init__(self, journal: list[int], failures: int) -> None:
        self.journal = journal
        self.failures = failures

    def run(self, context: BuildContext) -> None:
        self.journal.append(context.rng.randrange(1_000_000))
        if len(self.journal) <= self.failures:
            raise GenerationError(f"failure {len(self.journal)}")
        context.map.tiles[context.map.xy_idx(1, 1)] = TileType.FLOOR


def register_flaky(monkeypatch: pytest.MonkeyPatch, journal: list[int], failures: int) -> None:
    def factory(depth: int, width: int, height: int, catalog: RawCatalog | None = None) -> BuilderChain:
        return BuilderChain(depth, width, height, "Flaky", catalog).start_with(FlakyStage(journal, failures))

    monkeypatch.setitem(levels.LEVELS, "flaky", factory)


def assert_consistent(level, catalog: RawCatalog) -> None:
    game_map = level.map
    assert game_map.starting_position is not None
    assert tile_walkable(game_map.tiles[game_map.starting_index()])
    assert game_map.exits
    for idx in game_map.exits:
        assert game_map.tiles[idx] is TileType.DOWN_STAIRS
    for idx, name in level.spawn_list:
        assert 0 <= idx < game_map.size
        assert tile_walkable(game_map.tiles[idx])
        assert catalog.contains(name)


@pytest.mark.parametrize("name", ["limestone_cavern", "limestone_deep_cavern", "cellular_caves", "orc_camp_caves"])
def test_named_levels_build_consistent_maps(name: str, catalog: RawCatalog) -> None:
    level = build_level(name, depth=3, width=80, height=50, catalog=catalog, seed=7)
    assert_consistent(level, catalog)


def test_waveform_level_builds_consistent_map(catalog: RawCatalog) -> None:
    level = build_level("waveform_caves", depth=2, width=80, height=48, catalog=catalog, seed=11, attempts=10)
    assert_consistent(level, catalog)
    assert level.map.name == "Waveform Caves"


def test_same_seed_builds_same_level(catalog: RawCatalog) -> None:
    first = build_level("limestone_cavern", depth=2, width=60, height=40, catalog=catalog, seed=99)
    second = build_level("limestone_cavern", depth=2, width=60, height=40, catalog=catalog, seed=99)
    assert first.map.tiles == second.map.tiles
    assert first.spawn_list == second.spawn_list


def test_build_level_retries_with_next_seed(monkeypatch: pytest.MonkeyPatch) -> None:
    journal: list[int] = []
    register_flaky(monkeypatch, journal, failures=2)

    level = build_level("flaky", depth=1, width=5, height=5, seed=40, attempts=5)

    assert len(journal) == 3
    assert len(set(journal)) == 3
    assert level.map.tiles[level.map.xy_idx(1, 1)] is TileType.FLOOR


def test_build_level_reraises_last_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    journal: list[int] = []
    register_flaky(monkeypatch, journal, failures=10)

    with pytest.raises(GenerationError, match="failure 3"):
        build_level("flaky", depth=1, width=5, height=5, seed=1, attempts=3)
    assert len(journal) == 3


def test_unknown_level_name() -> None:
    with pytest.raises(KeyError):
        build_level("sky_castle", depth=1, width=20, height=20)


def test_generate_cli_prints_map_and_spawns(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DEPTHS_SEED", raising=False)
    exit_code = generate.main(
        ["--data", str(ROOT / "data"), "--level", "cellular_caves", "--width", "40", "--height", "30", "--seed", "3"]
    )
    output = capsys.readouterr().out.splitlines()

    assert exit_code == 0
    assert output[0] == "Cellular Caves"
    map_rows = output[1:31]
    assert all(len(row) == 40 for row in map_rows)
    assert any("@" in row for row in map_rows)


def test_generate_cli_reports_missing_data(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DEPTHS_SEED", raising=False)
    assert generate.main(["--data", str(tmp_path / "nowhere"), "--seed", "1"]) == 1
