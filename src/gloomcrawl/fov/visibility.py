from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from ..config import GameConfig
from ..contracts import expect
from ..map.cells import CellKind
from ..map.grid import Coord
from ..map.level import Level
from ..player.player import Player
from ..rng import RandomDraws

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    """Inclusive rectangle of grid coordinates; may extend past the grid."""

    start_x: int
    start_y: int
    end_x: int
    end_y: int

    @classmethod
    def around(cls, x: int, y: int, radius: int) -> "Rect":
        return cls(x - radius, y - radius, x + radius, y + radius)

    def cells(self) -> Iterator[Coord]:
        for x in range(self.start_x, self.end_x + 1):
            for y in range(self.start_y, self.end_y + 1):
                yield x, y


@dataclass(frozen=True)
class CellChange:
    """A cell whose displayed symbol changed; consumed by the render adapter."""

    x: int
    y: int
    symbol: str
    kind: CellKind
    exit_locked: bool = False


class VisibilityEngine:
    """
    Reveals hidden cells of a level.

    - ``reveal`` turns a hidden special (boss, loot, exit) into its manifest form.
    - ``cast_light`` reveals a Chebyshev square around a point as empty floor.
    - ``cast_anything`` reveals a rectangle and fills it from an item pool
      (treasure fountains), optionally dropping the items onto the grid.

    Only cells still holding the hidden symbol are touched, so every operation
    is idempotent.
    """

    def __init__(self, config: GameConfig, rng: RandomDraws) -> None:
        self.config = config
        self.rng = rng

    def reveal(self, level: Level, x: int, y: int) -> bool:
        if not expect(level.exit is not None, "reveal() requires a level with an exit cell"):
            return False
        hidden = level.palette.hidden
        if level.grid.get(x, y) != hidden:
            return False
        # priority: boss, then loot, then exit
        if level.boss is not None and level.boss.position == (x, y):
            level.grid.set(x, y, level.boss.monster)
            logger.debug("Revealed boss %s at (%d,%d)", level.boss.monster, x, y)
            return True
        if level.loot is not None and level.loot.position == (x, y):
            level.grid.set(x, y, level.palette.chest)
            logger.debug("Revealed loot chest at (%d,%d)", x, y)
            return True
        if level.exit.position == (x, y):
            level.grid.set(x, y, level.exit.symbol)
            logger.debug("Revealed exit at (%d,%d) locked=%s", x, y, level.locked)
            return True
        return False

    def light_radius(self, player: Player) -> int:
        darkness = self.config.rosters.curse("darkness")
        return 1 if darkness in player.curses else player.light_range

    def cast_light(self, level: Level, player: Player, origin: Optional[Coord] = None) -> List[CellChange]:
        ox, oy = origin if origin is not None else player.position
        rect = Rect.around(ox, oy, self.light_radius(player))
        return self.cast_anything(level, rect, [level.palette.revealed], drop=False)

    def cast_anything(self, level: Level, area: Rect, pool: Sequence[str], drop: bool) -> List[CellChange]:
        if not pool:
            raise ValueError("cast_anything() requires a non-empty item pool")
        changes: List[CellChange] = []
        hidden = level.palette.hidden
        for x, y in area.cells():
            if level.grid.get(x, y) != hidden:
                continue
            if self.reveal(level, x, y):
                changes.append(self.change_for(level, x, y, level.grid.get(x, y)))
                continue
            symbol = pool[0] if len(pool) == 1 else self.rng.choice(pool)
            if drop:
                level.drop_item(x, y, symbol)
            else:
                level.grid.set(x, y, level.palette.revealed)
            changes.append(self.change_for(level, x, y, symbol))
        if changes:
            logger.debug("Revealed %d cells in %s (drop=%s)", len(changes), area, drop)
        return changes

    def reveal_all(self, level: Level) -> List[CellChange]:
        return [self.change_for(level, x, y, symbol) for (x, y), symbol in level.reveal_all_secrets()]

    @staticmethod
    def change_for(level: Level, x: int, y: int, symbol: str) -> CellChange:
        kind = level.palette.classify(symbol)
        return CellChange(x, y, symbol, kind, exit_locked=kind == CellKind.DOOR and level.locked)


__all__ = ["CellChange", "Rect", "VisibilityEngine"]
