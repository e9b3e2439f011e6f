from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Set, Tuple

from ..config import GameConfig, ProgressionConfig
from ..rng import RandomDraws
from . import effects

logger = logging.getLogger(__name__)


@dataclass
class Player:
    """The hero: stats, held enchantments, afflicting curses and progression.

    Enchantments and curses are sets of symbols; adding a held symbol or
    removing an absent one changes nothing. The player outlives levels; only
    position and transient movement state are reset by ``init``.
    """

    position: Tuple[int, int] = (0, 0)
    health: int = 20
    attack_bonus: int = 1
    armour_class: int = 1
    light_range: int = 2
    gold: int = 0
    experience: int = 0
    alive: bool = True
    just_moved: bool = False
    enchantments: Set[str] = field(default_factory=set)
    curses: Set[str] = field(default_factory=set)

    @classmethod
    def from_config(cls, progression: ProgressionConfig) -> "Player":
        return cls(
            health=progression.start_health,
            attack_bonus=progression.start_attack_bonus,
            armour_class=progression.start_armour_class,
            light_range=progression.start_light_range,
        )

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]

    def init(self, position: Tuple[int, int]) -> None:
        self.position = position
        self.alive = True
        self.just_moved = False

    def add_enchantment(self, symbol: str) -> bool:
        if symbol in self.enchantments:
            return False
        self.enchantments.add(symbol)
        logger.debug("Enchantment gained: %s", symbol)
        return True

    def remove_enchantment(self, symbol: str) -> bool:
        if symbol not in self.enchantments:
            return False
        self.enchantments.discard(symbol)
        logger.debug("Enchantment lost: %s", symbol)
        return True

    def add_curse(self, symbol: str) -> bool:
        if symbol in self.curses:
            return False
        self.curses.add(symbol)
        logger.debug("Curse inflicted: %s", symbol)
        return True

    def cure(self, symbol: str) -> bool:
        if symbol not in self.curses:
            return False
        self.curses.discard(symbol)
        logger.debug("Curse cured: %s", symbol)
        return True

    def take_damage(self, amount: int) -> int:
        """Lower health by ``amount`` (not below zero); returns damage dealt."""
        if amount < 0:
            raise ValueError("damage cannot be negative")
        before = self.health
        self.health = max(0, self.health - amount)
        return before - self.health

    def power_up(self, item: str, config: GameConfig, rng: RandomDraws) -> effects.PowerUpResult:
        return effects.power_up(self, item, config, rng)

    def power_down(self, since_level: int, config: GameConfig, rng: RandomDraws) -> effects.PowerDownResult:
        return effects.power_down(self, since_level, config, rng)

    def step_vitality(self, config: GameConfig, rng: RandomDraws) -> int:
        """Slow regeneration on movement, or slow decline while poisoned."""
        poisoned = config.rosters.curse("poison") in self.curses
        delta = 0
        if rng.chance(config.progression.vitality_chance):
            delta = -1 if poisoned else 1
            self.health += delta
        self.alive = self.health > 0
        return delta

    def grant_debug(self, config: GameConfig) -> None:
        self.enchantments = set(config.rosters.enchantments.values())
        self.curses = set()
        logger.info("Debug grant: all enchantments, curses cleared")
