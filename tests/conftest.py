import sys
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from gloomcrawl.config import GameConfig  # noqa: E402
from gloomcrawl.map import BossCell, ExitCell, Grid, Level, LootCell, Palette  # noqa: E402
from gloomcrawl.rng import RandomDraws  # noqa: E402


class ZeroSource(RandomDraws):
    """Always draws 0.0: every chance succeeds and every index is 0."""

    def __init__(self) -> None:
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return 0.0


@pytest.fixture
def config() -> GameConfig:
    return GameConfig.load()


@pytest.fixture
def strict(monkeypatch):
    monkeypatch.setenv("GLOOMCRAWL_STRICT", "1")


@pytest.fixture
def lenient(monkeypatch):
    monkeypatch.setenv("GLOOMCRAWL_STRICT", "0")


@pytest.fixture
def make_level(config):
    """Build a Level from ASCII rows.

    Legend: '+' border, '#' first wall, '.' hidden floor, ' ' revealed floor,
    'D' door, 'C' chest, 'K' first key. Any other character is kept verbatim
    when passed through ``symbols``.
    """
    rosters = config.rosters

    def factory(
        rows: Iterable[str],
        exit: Optional[Tuple[int, int]] = None,
        boss: Optional[BossCell] = None,
        loot: Optional[LootCell] = None,
        locked: bool = False,
        symbols: Optional[dict] = None,
    ) -> Level:
        legend = {
            "+": rosters.border,
            "#": rosters.walls[0],
            ".": rosters.hidden,
            " ": rosters.revealed,
            "D": rosters.door,
            "C": rosters.chest,
            "K": rosters.keys[0],
        }
        legend.update(symbols or {})
        cells: List[List[str]] = [[legend.get(c, c) for c in row] for row in rows]
        grid = Grid.from_rows(cells, border=rosters.border)
        free = [
            (x, y)
            for y in range(grid.height)
            for x in range(grid.width)
            if grid.get(x, y) in (rosters.hidden, rosters.revealed)
        ]
        return Level(
            grid=grid,
            palette=Palette.from_rosters(rosters),
            wall_symbol=rosters.walls[0],
            free_cells=free,
            exit=ExitCell(exit, rosters.door) if exit is not None else None,
            boss=boss,
            loot=loot,
            locked=locked,
        )

    return factory


@pytest.fixture
def zero_source() -> ZeroSource:
    return ZeroSource()
