from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config import GameConfig
from .dungeon.generator import LevelGenerator
from .exceptions import ConfigError
from .map.level import Level
from .rng import RandomSource

logger = logging.getLogger(__name__)


def _seed(raw: Optional[str]) -> Optional[int | str]:
    if raw is None:
        return None
    return int(raw) if raw.lstrip("-").isdigit() else raw


def _summary(level: Level, seed: Optional[int | str]) -> Dict[str, Any]:
    return {
        "seed": seed,
        "width": level.width,
        "height": level.height,
        "density": level.density,
        "wall": level.wall_symbol,
        "locked": level.locked,
        "player_start": list(level.player_start),
        "exit": list(level.exit.position) if level.exit else None,
        "boss": (
            {
                "position": list(level.boss.position),
                "monster": level.boss.monster,
                "health": level.boss.health,
                "attack_bonus": level.boss.attack_bonus,
            }
            if level.boss
            else None
        ),
        "loot": {"position": list(level.loot.position), "item": level.loot.item} if level.loot else None,
        "free_cells": len(level.free_cells),
        "signature": level.grid.signature(),
        "rows": level.rows(show_secrets=True),
    }


def _cmd_generate(args: argparse.Namespace) -> int:
    try:
        config = GameConfig.load(Path(args.config) if args.config else None).apply_env()
    except ConfigError as e:
        print(f"INVALID: {args.config or 'defaults'}\n{e.to_human()}", file=sys.stderr)
        return 1

    seed = _seed(args.seed) if args.seed is not None else config.seed
    generator = LevelGenerator(config, RandomSource(seed))
    level = generator.generate(width=args.width, height=args.height, density=args.density)

    if args.json:
        print(json.dumps(_summary(level, seed), indent=2, sort_keys=True, ensure_ascii=False))
    else:
        for row in level.rows(show_secrets=True):
            print(row)
    return 0


def _cmd_validate_config(args: argparse.Namespace) -> int:
    try:
        GameConfig.load(Path(args.path))
    except ConfigError as e:
        print(f"INVALID: {args.path}\n{e.to_human()}")
        return 1
    print(f"OK: {args.path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gloomcrawl", description="Gloomcrawl dungeon tools")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate a level and print it with every secret shown")
    g.add_argument("--width", type=int, default=None, help="Grid width (including border)")
    g.add_argument("--height", type=int, default=None, help="Grid height (including border)")
    g.add_argument("--density", type=float, default=None, help="Initial wall probability in [0, 1]")
    g.add_argument("--seed", default=None, help="Deterministic seed (int or string)")
    g.add_argument("--config", default=None, help="Optional YAML file merged over the defaults")
    g.add_argument("--json", action="store_true", help="Print a JSON summary instead of rows")
    g.add_argument("--debug", action="store_true", default=argparse.SUPPRESS, help="Enable debug logging")
    g.set_defaults(func=_cmd_generate)

    v = sub.add_parser("validate-config", help="Validate a YAML config file against the schema")
    v.add_argument("path", help="Path to the YAML config file")
    v.set_defaults(func=_cmd_validate_config)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
