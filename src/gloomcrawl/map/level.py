from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .cells import CellKind, Palette
from .grid import Coord, Grid

logger = logging.getLogger(__name__)


@dataclass
class ExitCell:
    position: Coord
    symbol: str


@dataclass
class BossCell:
    position: Coord
    monster: str
    health: int
    attack_bonus: int


@dataclass
class LootCell:
    position: Coord
    item: str


@dataclass
class Level:
    """One dungeon floor.

    Special cells (exit, boss, loot) are stored in the grid in hidden form, so
    they look like plain hidden floor until revealed. ``free_cells`` lists floor
    coordinates not assigned to any special; its first entry is the player start.
    """

    grid: Grid
    palette: Palette
    wall_symbol: str
    free_cells: List[Coord] = field(default_factory=list)
    exit: Optional[ExitCell] = None
    boss: Optional[BossCell] = None
    loot: Optional[LootCell] = None
    locked: bool = False
    density: float = 0.0

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def player_start(self) -> Coord:
        return self.free_cells[0]

    def kind(self, x: int, y: int) -> CellKind:
        return self.palette.classify(self.grid.get(x, y))

    def is_boss(self, x: int, y: int) -> bool:
        return self.kind(x, y) == CellKind.MONSTER

    def is_chest(self, x: int, y: int) -> bool:
        return self.kind(x, y) == CellKind.CHEST

    def is_item(self, x: int, y: int) -> bool:
        return self.kind(x, y) == CellKind.ITEM

    def is_key(self, x: int, y: int) -> bool:
        return self.kind(x, y) == CellKind.KEY

    def is_exit(self, x: int, y: int) -> bool:
        return self.kind(x, y) == CellKind.DOOR

    def hides_special(self, x: int, y: int) -> bool:
        """True while a boss, loot chest or exit still sits unrevealed at (x, y)."""
        if self.kind(x, y) != CellKind.HIDDEN:
            return False
        return any(position == (x, y) for position, _ in self.manifest())

    def is_passable(self, x: int, y: int) -> bool:
        kind = self.kind(x, y)
        if kind in (CellKind.BORDER, CellKind.WALL):
            return False
        if self.hides_special(x, y):
            # only an unlocked exit may be entered before it is revealed
            return self.exit is not None and self.exit.position == (x, y) and not self.locked
        if kind == CellKind.DOOR and self.locked:
            return False
        return kind not in (CellKind.MONSTER, CellKind.CHEST, CellKind.ITEM, CellKind.KEY)

    def defeat_boss(self) -> None:
        if self.boss is None:
            return
        x, y = self.boss.position
        self.grid.set(x, y, self.palette.revealed)
        logger.info("Boss %s at %s defeated", self.boss.monster, self.boss.position)
        self.boss = None

    def loot_dropped(self) -> None:
        if self.loot is None:
            return
        x, y = self.loot.position
        self.grid.set(x, y, self.palette.revealed)
        self.loot = None

    def drop_item(self, x: int, y: int, symbol: str) -> None:
        self.grid.set(x, y, symbol)

    def collect_key(self) -> None:
        if self.locked:
            logger.info("Key collected; exit unlocked")
        self.locked = False

    def manifest(self) -> List[Tuple[Coord, str]]:
        """Special cells paired with the symbol they show once revealed."""
        out: List[Tuple[Coord, str]] = []
        if self.boss is not None:
            out.append((self.boss.position, self.boss.monster))
        if self.loot is not None:
            out.append((self.loot.position, self.palette.chest))
        if self.exit is not None:
            out.append((self.exit.position, self.exit.symbol))
        return out

    def reveal_all_secrets(self) -> List[Tuple[Coord, str]]:
        """Show every still-hidden special cell; returns what changed."""
        changed: List[Tuple[Coord, str]] = []
        for (x, y), symbol in self.manifest():
            if self.grid.get(x, y) == self.palette.hidden:
                self.grid.set(x, y, symbol)
                changed.append(((x, y), symbol))
        logger.debug("Revealed %d secrets", len(changed))
        return changed

    def rows(self, show_secrets: bool = False) -> List[str]:
        if not show_secrets:
            return self.grid.rows()
        preview = self.grid.copy()
        for (x, y), symbol in self.manifest():
            if preview.get(x, y) == self.palette.hidden:
                preview.set(x, y, symbol)
        return preview.rows()
