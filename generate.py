import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from depths.mapgen import LEVELS, GenerationError, build_level
from depths.raws import ContentLoadError, load_raws

DEFAULT_DATA_PATH = "data"
DEFAULT_LEVEL = "limestone_cavern"
DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 64


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def load_environment() -> dict[str, str | None]:
    load_dotenv()
    return {
        "data": os.getenv("DEPTHS_DATA_PATH", DEFAULT_DATA_PATH),
        "log_level": os.getenv("DEPTHS_LOG_LEVEL", "INFO"),
        "seed": os.getenv("DEPTHS_SEED"),
    }


def parse_seed(value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise RuntimeError(f"DEPTHS_SEED must be an integer, got {value!r}") from exc


def build_parser(environment: dict[str, str | None]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a dungeon level and print it as ASCII.")
    parser.add_argument("--level", choices=sorted(LEVELS), default=DEFAULT_LEVEL, help="Level recipe to build")
    parser.add_argument("--depth", type=int, default=1, help="Dungeon depth of the level")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="Map width in cells")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="Map height in cells")
    parser.add_argument("--seed", type=int, default=parse_seed(environment["seed"]), help="Random seed")
    parser.add_argument("--data", type=Path, default=Path(environment["data"] or DEFAULT_DATA_PATH), help="Raw data directory")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    environment = load_environment()
    configure_logging(environment["log_level"] or "INFO")
    args = build_parser(environment).parse_args(argv)

    try:
        catalog = load_raws(args.data)
        level = build_level(
            args.level,
            depth=args.depth,
            width=args.width,
            height=args.height,
            catalog=catalog,
            seed=args.seed,
        )
    except ContentLoadError:
        logging.exception("Unable to load raws from %s", args.data)
        return 1
    except GenerationError:
        logging.exception("Unable to generate level %s", args.level)
        return 1

    print(level.map.name)
    print(level.map.to_ascii())
    for idx, name in level.spawn_list:
        x, y = level.map.idx_xy(idx)
        print(f"{x:>3},{y:>3}  {name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
