from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ..config import GameConfig
from ..contracts import expect
from ..map.level import BossCell
from ..player.player import Player
from ..rng import RandomDraws
from .mitigation import MitigationStrategy, build_mitigation

logger = logging.getLogger(__name__)


class CombatState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    CONCLUDED = "concluded"


class CombatResult(str, Enum):
    ONGOING = "ongoing"
    MONSTER_DEFEATED = "monster defeated"
    PLAYER_DEFEATED = "player defeated"


@dataclass
class Monster:
    type: str
    health: int
    attack_bonus: int
    position: Tuple[int, int] = (0, 0)

    @classmethod
    def from_boss(cls, boss: BossCell) -> "Monster":
        return cls(type=boss.monster, health=boss.health, attack_bonus=boss.attack_bonus, position=boss.position)


@dataclass(frozen=True)
class StrikeSummary:
    """One side's blow. ``raw`` is the damage before armour; ``damage`` is what landed."""

    hit: bool
    damage: int = 0
    fatal: bool = False
    raw: int = 0


@dataclass(frozen=True)
class ExchangeOutcome:
    """Everything one exchange produced, for adapters to display.

    ``monster`` is None when the monster fell before it could retaliate.
    """

    hero: StrikeSummary
    monster: Optional[StrikeSummary]
    hero_health: int
    monster_health: int
    curses: List[str]
    inflicted: List[str]
    state: CombatState
    result: CombatResult

    @property
    def hero_message(self) -> str:
        # the rolled damage, even when a kill or the one-shot bow changes what landed
        if not self.hero.hit:
            return "Missed"
        return f"Hit: {self.hero.raw}" + (" (*)" if self.hero.fatal else "")

    @property
    def monster_message(self) -> str:
        if self.monster is None:
            return ""
        if not self.monster.hit:
            return "Dodge"
        return f"Dam: {self.monster.damage}" + (" (X)" if self.monster.fatal else "")


class CombatResolver:
    """Resolves a fight one exchange at a time.

    Each ``exchange()`` is the hero's strike followed, if the monster still
    stands, by the monster's strike. The caller re-invokes on each attack intent
    until ``state`` is CONCLUDED.

    Hit chance: a strike lands when ``random() > base_hit_chance -
    hit_per_attack_point * attack_bonus``. Hero damage is
    ``floor(random() * attack_bonus * hero_damage_scale)`` (the full remaining
    monster health with the one-shot enchantment); monster damage is
    ``floor(random() * attack_bonus)`` reduced by the configured mitigation.
    """

    def __init__(
        self,
        player: Player,
        monster: Monster,
        config: GameConfig,
        rng: RandomDraws,
        mitigation: Optional[MitigationStrategy] = None,
    ) -> None:
        self.player = player
        self.monster = monster
        self.config = config
        self.rng = rng
        self.mitigation = mitigation or build_mitigation(config.combat)
        self.state = CombatState.IDLE
        self.result = CombatResult.ONGOING
        self.history: List[ExchangeOutcome] = []

    @property
    def concluded(self) -> bool:
        return self.state == CombatState.CONCLUDED

    def exchange(self) -> ExchangeOutcome:
        if not expect(not self.concluded, "exchange() called on a concluded combat"):
            return self._outcome(StrikeSummary(hit=False), None, [])
        if not expect(self.monster.health > 0, f"exchange() called on a monster with health {self.monster.health}"):
            return self._outcome(StrikeSummary(hit=False), None, [])

        self.state = CombatState.RESOLVING
        hero = self._hero_strike()
        monster: Optional[StrikeSummary] = None
        inflicted: List[str] = []

        if self.monster.health <= 0:
            self._conclude(CombatResult.MONSTER_DEFEATED)
        else:
            monster, inflicted = self._monster_strike()
            if self.player.health <= 0:
                self.player.alive = False
                self._conclude(CombatResult.PLAYER_DEFEATED)

        outcome = self._outcome(hero, monster, inflicted)
        self.history.append(outcome)
        logger.debug("Exchange: H[%s] M[%s]", outcome.hero_message, outcome.monster_message or "-")
        return outcome

    def _hit_threshold(self, attack_bonus: int) -> float:
        combat = self.config.combat
        return combat.base_hit_chance - combat.hit_per_attack_point * attack_bonus

    def _hero_strike(self) -> StrikeSummary:
        atk = self.player.attack_bonus
        if not self.rng.random() > self._hit_threshold(atk):
            return StrikeSummary(hit=False)
        damage = max(0, int(self.rng.random() * atk * self.config.combat.hero_damage_scale))
        raw = damage
        if self.config.rosters.enchantment("one_shot") in self.player.enchantments:
            damage = self.monster.health
        before = self.monster.health
        self.monster.health = max(0, self.monster.health - damage)
        return StrikeSummary(hit=True, damage=before - self.monster.health, fatal=self.monster.health <= 0, raw=raw)

    def _monster_strike(self) -> Tuple[StrikeSummary, List[str]]:
        atk = self.monster.attack_bonus
        if not self.rng.random() > self._hit_threshold(atk):
            return StrikeSummary(hit=False), []
        raw = max(0, int(self.rng.random() * atk))
        damage = self.mitigation.apply(raw, self.player.armour_class)
        inflicted = self._inflict()
        dealt = self.player.take_damage(damage)
        return StrikeSummary(hit=True, damage=dealt, fatal=self.player.health <= 0, raw=raw), inflicted

    def _inflict(self) -> List[str]:
        inflicted: List[str] = []
        for curse, monster_types in self.config.rosters.status_effects.items():
            if self.monster.type not in monster_types:
                continue
            # one roll per matching effect, cursed or not
            if self.rng.chance(self.config.combat.effect_chance) and self.player.add_curse(curse):
                inflicted.append(curse)
        return inflicted

    def _conclude(self, result: CombatResult) -> None:
        self.state = CombatState.CONCLUDED
        self.result = result
        logger.info("Combat with %s concluded: %s", self.monster.type, result.value)

    def _outcome(self, hero: StrikeSummary, monster: Optional[StrikeSummary], inflicted: List[str]) -> ExchangeOutcome:
        return ExchangeOutcome(
            hero=hero,
            monster=monster,
            hero_health=self.player.health,
            monster_health=self.monster.health,
            curses=sorted(self.player.curses),
            inflicted=inflicted,
            state=self.state,
            result=self.result,
        )
