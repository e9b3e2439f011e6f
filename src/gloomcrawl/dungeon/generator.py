from __future__ import annotations

import logging
from typing import AbstractSet, List, Optional

from ..config import GameConfig, Rosters
from ..contracts import expect
from ..map.cells import Palette
from ..map.grid import Coord, Grid
from ..map.level import BossCell, ExitCell, Level, LootCell
from ..rng import RandomDraws
from .cellular import CellularAutomaton

logger = logging.getLogger(__name__)

MIN_SIZE = 4


def random_treasure(rosters: Rosters, rng: RandomDraws, held: AbstractSet[str] = frozenset()) -> str:
    """Pick a treasure symbol the player does not already hold as an enchantment."""
    candidates = [s for s in rosters.treasures if s not in held]
    if not candidates:
        filler = next((s for s, kind in rosters.treasures.items() if kind == "gold"), next(iter(rosters.treasures)))
        logger.warning("Every treasure is already held; filling with %s", filler)
        return filler
    return rng.choice(candidates)


class LevelGenerator:
    """Builds dungeon levels from cellular automaton noise.

    Algorithm:
    - Fill the grid with border cells, run the automaton over the interior and
      classify alive cells as walls and dead cells as hidden floor.
    - Collect the floor cells into the free list; index 0 is the player start.
    - Place the exit (always), then a boss and a loot chest (each by chance),
      removing each chosen cell from the free list.
    - If a boss or loot exists, flip a coin for a locked exit.

    When a map is too cramped to place the exit, the level is rebuilt with a
    lower density. The last attempt uses an empty automaton, which always leaves
    enough floor on a grid of at least 4x4.
    """

    def __init__(self, config: GameConfig, rng: RandomDraws) -> None:
        self.config = config
        self.rng = rng
        self.palette = Palette.from_rosters(config.rosters)

    def generate(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        density: Optional[float] = None,
        held: AbstractSet[str] = frozenset(),
    ) -> Level:
        width = self.config.grid.width if width is None else int(width)
        height = self.config.grid.height if height is None else int(height)
        density = self.config.generation.density if density is None else float(density)

        if not expect(width >= MIN_SIZE and height >= MIN_SIZE, f"level must be at least {MIN_SIZE}x{MIN_SIZE}, got {width}x{height}"):
            width, height = max(width, MIN_SIZE), max(height, MIN_SIZE)
        if not expect(0.0 <= density <= 1.0, f"density must be within [0, 1], got {density}"):
            density = min(1.0, max(0.0, density))

        gen = self.config.generation
        attempts = max(1, gen.max_relaxations)
        current = density
        for attempt in range(attempts + 1):
            final = attempt == attempts
            if final:
                current = 0.0
            level = self._build(width, height, current, held, final=final)
            if level is not None:
                logger.info(
                    "Generated %dx%d level (density=%.3f, free=%d, boss=%s, loot=%s, locked=%s)",
                    width,
                    height,
                    current,
                    len(level.free_cells),
                    level.boss is not None,
                    level.loot is not None,
                    level.locked,
                )
                return level
            relaxed = current * gen.relax_factor
            logger.warning(
                "Degenerate level at density %.3f (attempt %d/%d); relaxing to %.3f",
                current,
                attempt + 1,
                attempts,
                relaxed,
            )
            current = relaxed
        # the final attempt forces an exit, so this is never reached
        raise RuntimeError("level generation failed on an empty automaton")  # pragma: no cover

    def _build(
        self,
        width: int,
        height: int,
        density: float,
        held: AbstractSet[str],
        final: bool = False,
    ) -> Optional[Level]:
        rosters = self.config.rosters
        gen = self.config.generation
        grid = Grid(width, height, fill=rosters.border, border=rosters.border)

        automaton = CellularAutomaton(width - 2, height - 2, born=gen.born, survive=gen.survive)
        automaton.randomize(density, self.rng)
        wall = self.rng.choice(rosters.walls)
        if not final:
            for _ in range(gen.smooth_steps):
                automaton.step()

        free: List[Coord] = []
        for x, y, alive in automaton.cells():
            if alive:
                grid.set(x + 1, y + 1, wall)
            else:
                grid.set(x + 1, y + 1, rosters.hidden)
                free.append((x + 1, y + 1))

        if len(free) < 2:
            logger.debug("Only %d free cells at density %.3f", len(free), density)
            return None

        level = Level(grid=grid, palette=self.palette, wall_symbol=wall, density=density)
        if not self._place_exit(level, free, force=final):
            return None
        self._place_boss(level, free)
        self._place_loot(level, free, held)
        level.free_cells = free

        if level.boss is not None or level.loot is not None:
            level.locked = self.rng.chance(gen.lock_chance)
        return level

    def _place_exit(self, level: Level, free: List[Coord], force: bool = False) -> bool:
        # index 0 is the player start, so a draw landing there is rejected
        for attempt in range(self.config.generation.exit_attempts):
            idx = self.rng.index(len(free))
            if idx == 0:
                logger.debug("Exit draw %d hit the player start; resampling", attempt + 1)
                continue
            self._set_exit(level, free.pop(idx))
            return True
        logger.warning("Exit placement exhausted %d attempts", self.config.generation.exit_attempts)
        if force:
            self._set_exit(level, free.pop())
            return True
        return False

    def _set_exit(self, level: Level, position: Coord) -> None:
        level.exit = ExitCell(position=position, symbol=self.config.rosters.door)
        level.grid.set(*position, self.config.rosters.hidden)
        logger.debug("Exit placed at %s", position)

    def _sample_special(self, free: List[Coord]) -> Optional[Coord]:
        if len(free) < 2:
            return None
        return free.pop(1 + self.rng.index(len(free) - 1))

    def _place_boss(self, level: Level, free: List[Coord]) -> None:
        gen = self.config.generation
        if not self.rng.chance(gen.boss_chance):
            return
        position = self._sample_special(free)
        if position is None:
            logger.debug("No room left for a boss")
            return
        monster = self.rng.choice(self.config.rosters.monsters)
        attack = self.rng.randint(*gen.boss_attack)
        health = self.rng.randint(*gen.boss_health)
        level.boss = BossCell(position=position, monster=monster, health=health, attack_bonus=attack)
        level.grid.set(*position, self.config.rosters.hidden)
        logger.debug("Boss %s placed at %s (hp=%d, atk=%d)", monster, position, health, attack)

    def _place_loot(self, level: Level, free: List[Coord], held: AbstractSet[str]) -> None:
        if not self.rng.chance(self.config.generation.loot_chance):
            return
        position = self._sample_special(free)
        if position is None:
            logger.debug("No room left for loot")
            return
        item = random_treasure(self.config.rosters, self.rng, held)
        level.loot = LootCell(position=position, item=item)
        level.grid.set(*position, self.config.rosters.hidden)
        logger.debug("Loot %s placed at %s", item, position)
