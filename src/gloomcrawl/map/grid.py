from __future__ import annotations

import hashlib
import logging
from typing import Iterator, List, Sequence, Tuple

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]


class Grid:
    """
    Fixed-size grid of cell symbols, stored as ``cells[y][x]``.

    Coordinates are (x, y) with (0, 0) at top-left. Reads outside the grid return
    the border symbol and writes outside the grid are ignored, so callers probing
    past the edge see an impassable, non-special cell.
    """

    def __init__(self, width: int, height: int, fill: str, border: str) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Grid width/height must be > 0")
        self.width = width
        self.height = height
        self.border = border
        self._cells: List[List[str]] = [[fill for _ in range(width)] for _ in range(height)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> str:
        if not self.in_bounds(x, y):
            return self.border
        return self._cells[y][x]

    def set(self, x: int, y: int, symbol: str) -> None:
        if not self.in_bounds(x, y):
            logger.debug("Ignoring write outside grid at (%d,%d)", x, y)
            return
        self._cells[y][x] = symbol

    def coords(self) -> Iterator[Coord]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def coords_of(self, symbol: str) -> List[Coord]:
        return [(x, y) for x, y in self.coords() if self._cells[y][x] == symbol]

    def rows(self) -> List[str]:
        return ["".join(row) for row in self._cells]

    def signature(self) -> str:
        """Deterministic digest of the grid content."""
        raw = "\n".join(self.rows()).encode("utf-8")
        return hashlib.blake2b(raw, digest_size=16).hexdigest()

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[str]], border: str) -> "Grid":
        """Build a grid from rows of symbols (strings or lists of multi-char symbols)."""
        if not rows:
            raise ValueError("rows must not be empty")
        width = len(rows[0])
        for r in rows:
            if len(r) != width:
                raise ValueError("All rows must be same width")
        grid = cls(width, len(rows), fill=border, border=border)
        for y, row in enumerate(rows):
            for x, symbol in enumerate(row):
                grid._cells[y][x] = symbol
        return grid

    def copy(self) -> "Grid":
        clone = Grid(self.width, self.height, fill=self.border, border=self.border)
        clone._cells = [row[:] for row in self._cells]
        return clone

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height})"
