from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Tuple

from ..rng import RandomDraws

logger = logging.getLogger(__name__)


class CellularAutomaton:
    """Cellular automaton noise over a rectangular area.

    Algorithm:
    - ``randomize(p)`` marks each cell alive with probability ``p``.
    - ``step()`` applies one generation using the 8-neighbour (Moore) rule:
      a dead cell is born when its alive-neighbour count is in ``born``; an alive
      cell survives when its count is in ``survive``. Neighbours outside the area
      count as dead.
    """

    def __init__(
        self,
        width: int,
        height: int,
        born: Iterable[int] = (5, 6, 7, 8),
        survive: Iterable[int] = (4, 5, 6, 7, 8),
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("CellularAutomaton width/height must be > 0")
        self.width = width
        self.height = height
        self.born = frozenset(int(n) for n in born)
        self.survive = frozenset(int(n) for n in survive)
        self._alive: List[List[bool]] = [[False for _ in range(width)] for _ in range(height)]

    def randomize(self, probability: float, rng: RandomDraws) -> None:
        # column-major draw order keeps seeded layouts stable
        for x in range(self.width):
            for y in range(self.height):
                self._alive[y][x] = rng.random() < probability

    def alive_neighbours(self, x: int, y: int) -> int:
        count = 0
        for ny in (y - 1, y, y + 1):
            for nx in (x - 1, x, x + 1):
                if nx == x and ny == y:
                    continue
                if 0 <= nx < self.width and 0 <= ny < self.height and self._alive[ny][nx]:
                    count += 1
        return count

    def step(self) -> None:
        new_alive = [row[:] for row in self._alive]
        for y in range(self.height):
            for x in range(self.width):
                n = self.alive_neighbours(x, y)
                if self._alive[y][x]:
                    new_alive[y][x] = n in self.survive
                else:
                    new_alive[y][x] = n in self.born
        self._alive = new_alive

    def is_alive(self, x: int, y: int) -> bool:
        return self._alive[y][x]

    def cells(self) -> Iterator[Tuple[int, int, bool]]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, self._alive[y][x]

    def alive_count(self) -> int:
        return sum(1 for _, _, alive in self.cells() if alive)
