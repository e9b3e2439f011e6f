"""Turn processing: one intent in, one batch of outcome events out.

The session owns the level, the player, the active combat and the visibility
engine. Nothing else mutates them, and an intent is fully resolved before
``handle`` returns.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..combat.resolver import CombatResolver, CombatResult, Monster
from ..config import GameConfig
from ..dungeon.generator import LevelGenerator, random_treasure
from ..fov.visibility import CellChange, Rect, VisibilityEngine
from ..map.grid import Coord
from ..map.level import Level
from ..player.player import Player
from ..rng import RandomDraws, RandomSource
from .events import EventBus, EventKind, GameEvent
from .intents import DIRECTIONS, Intent

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    accepted: bool
    events: List[GameEvent] = field(default_factory=list)
    game_over: bool = False
    won: bool = False


class GameSession:
    """Drives a single game from the first floor to death or victory."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[RandomDraws] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.config = config or GameConfig.load()
        self.rng = rng if rng is not None else RandomSource(self.config.seed)
        self.bus = bus or EventBus()
        self.generator = LevelGenerator(self.config, self.rng)
        self.visibility = VisibilityEngine(self.config, self.rng)
        self.player = Player.from_config(self.config.progression)
        self.level: Optional[Level] = None
        self.combat: Optional[CombatResolver] = None
        self.game_over = False
        self.won = False
        self._pending: List[GameEvent] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def start(self) -> TurnResult:
        """Build the first floor, place the player and light their surroundings."""
        self._pending = []
        self._new_level()
        self._cast_light()
        return self._result(accepted=True)

    def handle(self, intent: Intent) -> TurnResult:
        if self.game_over:
            logger.debug("Ignoring %s after game over", intent.name)
            return TurnResult(accepted=False, game_over=True, won=self.won)
        if self.level is None:
            raise RuntimeError("GameSession.start() must be called before handle()")

        self._pending = []
        if intent in DIRECTIONS:
            accepted = self._move(*DIRECTIONS[intent])
        elif intent == Intent.REGENERATE:
            logger.info("Regenerating floor on request")
            self._new_level()
            accepted = True
        elif intent == Intent.DEBUG_GRANT:
            self._debug_grant()
            accepted = True
        else:  # pragma: no cover - exhaustive over Intent
            raise ValueError(f"Unhandled intent: {intent!r}")

        if accepted:
            self._after_turn()
        return self._result(accepted=accepted)

    # ------------------------------------------------------------------
    # Floors
    # ------------------------------------------------------------------
    def _new_level(self) -> None:
        level = self.generator.generate(held=frozenset(self.player.enchantments))
        self.level = level
        self.combat = None
        self.player.init(level.player_start)
        self._emit(
            EventKind.LEVEL_GENERATED,
            width=level.width,
            height=level.height,
            locked=level.locked,
            wall=level.wall_symbol,
            rows=level.rows(),
            level=level,
        )
        self._emit(EventKind.LOCK_STATUS, status="")

        result = self.player.power_down(self.player.experience, self.config, self.rng)
        if result.lost:
            self._emit(EventKind.ENCHANTMENTS_LOST, lost=list(result.lost))
        if result.reveal_secrets:
            self._reveal_all()
        self._emit(EventKind.PLAYER_MOVED, position=self.player.position, alive=self.player.alive)
        self._emit_stats()

    def _after_turn(self) -> None:
        player = self.player
        if not player.alive:
            self._finish(won=False)
            return
        if self.level.is_exit(*player.position):
            player.experience += 1
            logger.info("Reached the exit; floor %d cleared", player.experience)
            self._emit(EventKind.FLOOR_REACHED, experience=player.experience)
            if player.experience >= self.config.progression.win_floor:
                self._finish(won=True)
                return
            self._new_level()
        self._cast_light()

    def _finish(self, won: bool) -> None:
        self.game_over = True
        self.won = won
        if not won:
            self.player.alive = False
        logger.info("Game over (%s) at level %d", "won" if won else "died", self.player.experience)
        self._emit(EventKind.GAME_OVER, won=won, experience=self.player.experience)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _move(self, dx: int, dy: int) -> bool:
        level = self.level
        tx, ty = self.player.x + dx, self.player.y + dy
        if level.hides_special(tx, ty) and self.visibility.reveal(level, tx, ty):
            self._emit_cells([self.visibility.change_for(level, tx, ty, level.grid.get(tx, ty))])
        if level.is_passable(tx, ty):
            self._step_to(tx, ty)
            return True
        if level.is_boss(tx, ty):
            self._fight(tx, ty)
            return True
        if level.is_chest(tx, ty):
            self._open_chest(tx, ty)
            return True
        if level.is_item(tx, ty):
            self._pickup_item(tx, ty)
            return True
        if level.is_key(tx, ty):
            self._pickup_key(tx, ty)
            return True
        logger.debug("Move to (%d,%d) blocked by %r", tx, ty, level.grid.get(tx, ty))
        self._emit(EventKind.BLOCKED, target=(tx, ty))
        return False

    def _step_to(self, x: int, y: int) -> None:
        self.player.position = (x, y)
        self.player.just_moved = True
        delta = self.player.step_vitality(self.config, self.rng)
        self._emit(EventKind.PLAYER_MOVED, position=self.player.position, alive=self.player.alive)
        if delta:
            self._emit_stats()

    def _fight(self, x: int, y: int) -> None:
        level = self.level
        if self.combat is None or self.combat.monster.position != (x, y):
            self.combat = CombatResolver(self.player, Monster.from_boss(level.boss), self.config, self.rng)
            logger.info("Combat started with %s at (%d,%d)", level.boss.monster, x, y)
        combat = self.combat
        outcome = combat.exchange()
        if level.boss is not None:
            level.boss.health = combat.monster.health
        self._emit(EventKind.COMBAT_EXCHANGE, outcome=outcome)
        self._emit_stats()
        if not combat.concluded:
            return

        self.combat = None
        self._emit(EventKind.COMBAT_CONCLUDED, result=combat.result, monster=combat.monster.type)
        if combat.result == CombatResult.MONSTER_DEFEATED:
            origin = self.player.position
            level.defeat_boss()
            self._step_to(x, y)
            drop = self.config.rosters.keys[0] if level.locked else self.config.rosters.chest
            level.drop_item(*origin, drop)
            self._emit_cells([self.visibility.change_for(level, origin[0], origin[1], drop)])

    def _open_chest(self, x: int, y: int) -> None:
        level = self.level
        rosters = self.config.rosters
        origin = self.player.position
        level.drop_item(x, y, rosters.revealed)
        self._step_to(x, y)

        treasure = random_treasure(rosters, self.rng, self.player.enchantments)
        if level.loot is not None and level.loot.position == (x, y):
            treasure = level.loot.item
            level.loot_dropped()
        elif level.locked:
            treasure = rosters.keys[0]

        # chest content lands on the previous cell even when a fountain follows
        level.drop_item(*origin, treasure)
        self._emit(EventKind.CHEST_OPENED, position=origin, item=treasure)
        self._emit_cells([self.visibility.change_for(level, origin[0], origin[1], treasure)])

        if self.rng.chance(self.config.progression.fountain_chance):
            area = Rect.around(origin[0], origin[1], 1)
            changes = self.visibility.cast_anything(level, area, list(rosters.treasures), drop=True)
            logger.info("Treasure fountain around %s filled %d cells", origin, len(changes))
            self._emit(EventKind.FOUNTAIN, changes=changes)

    def _pickup_item(self, x: int, y: int) -> None:
        level = self.level
        item = level.grid.get(x, y)
        level.drop_item(x, y, self.config.rosters.revealed)
        self._step_to(x, y)
        result = self.player.power_up(item, self.config, self.rng)
        self._emit(EventKind.ITEM_PICKED, item=item, result=result)
        if result.reveal_secrets:
            self._reveal_all()
        self._emit_stats()

    def _pickup_key(self, x: int, y: int) -> None:
        level = self.level
        level.drop_item(x, y, self.config.rosters.revealed)
        self._step_to(x, y)
        level.collect_key()
        self._emit(EventKind.KEY_COLLECTED, position=(x, y))
        self._emit(EventKind.LOCK_STATUS, status="unlocked")

    def _debug_grant(self) -> None:
        self.player.grant_debug(self.config)
        result = self.player.power_down(0, self.config, self.rng)
        if result.reveal_secrets:
            self._reveal_all()
        self._emit_stats()

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------
    def _cast_light(self) -> None:
        changes = self.visibility.cast_light(self.level, self.player)
        self._emit_cells(changes)

    def _reveal_all(self) -> None:
        self._emit_cells(self.visibility.reveal_all(self.level))

    def _emit_cells(self, changes: List[CellChange]) -> None:
        if not changes:
            return
        self._emit(EventKind.CELLS_REVEALED, changes=changes)
        if any(c.exit_locked for c in changes):
            self._emit(EventKind.LOCK_STATUS, status="locked")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def _emit(self, kind: EventKind, **payload: Any) -> None:
        event = GameEvent(kind, payload)
        self._pending.append(event)
        self.bus.publish(event)

    def _emit_stats(self) -> None:
        p = self.player
        self._emit(
            EventKind.STATS_CHANGED,
            health=p.health,
            armour_class=p.armour_class,
            attack_bonus=p.attack_bonus,
            gold=p.gold,
            experience=p.experience,
            enchantments=sorted(p.enchantments),
            curses=sorted(p.curses),
        )

    def _result(self, accepted: bool) -> TurnResult:
        return TurnResult(accepted=accepted, events=list(self._pending), game_over=self.game_over, won=self.won)

    @property
    def position(self) -> Coord:
        return self.player.position


__all__ = ["GameSession", "TurnResult"]
