import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, DefaultDict, Dict, List

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Outcome event names emitted by the game session.

    Payload keys per kind:
        LEVEL_GENERATED: width, height, locked, wall, rows, level (the live Level)
        PLAYER_MOVED: position, alive
        BLOCKED: target
        STATS_CHANGED: health, armour_class, attack_bonus, gold, experience,
            enchantments, curses
        CELLS_REVEALED: changes (list of CellChange)
        LOCK_STATUS: status ("locked", "unlocked" or "")
        COMBAT_EXCHANGE: outcome (ExchangeOutcome)
        COMBAT_CONCLUDED: result, monster
        CHEST_OPENED: position, item
        FOUNTAIN: changes
        ITEM_PICKED: item, result (PowerUpResult)
        KEY_COLLECTED: position
        ENCHANTMENTS_LOST: lost
        FLOOR_REACHED: experience
        GAME_OVER: won, experience
    """

    LEVEL_GENERATED = "level.generated"
    PLAYER_MOVED = "player.moved"
    BLOCKED = "player.blocked"
    STATS_CHANGED = "player.stats"
    CELLS_REVEALED = "cells.revealed"
    LOCK_STATUS = "level.lock"
    COMBAT_EXCHANGE = "combat.exchange"
    COMBAT_CONCLUDED = "combat.concluded"
    CHEST_OPENED = "chest.opened"
    FOUNTAIN = "chest.fountain"
    ITEM_PICKED = "item.picked"
    KEY_COLLECTED = "key.collected"
    ENCHANTMENTS_LOST = "player.enchantments_lost"
    FLOOR_REACHED = "floor.reached"
    GAME_OVER = "game.over"


@dataclass(frozen=True)
class GameEvent:
    """Generic event container.

    Attributes:
        kind: Event type from EventKind.
        payload: Data associated with the event.
    """

    kind: EventKind
    payload: Dict[str, Any] = field(default_factory=dict)


class EventBus:
    """A lightweight publish/subscribe event bus.

    Subscribers register callbacks per event kind and receive events in
    registration order. The game is single-threaded, so no locking is done.
    """

    def __init__(self) -> None:
        self._subs: DefaultDict[EventKind, List[Callable[[GameEvent], None]]] = defaultdict(list)
        self._wildcard: List[Callable[[GameEvent], None]] = []

    def subscribe(self, kind: EventKind, callback: Callable[[GameEvent], None]) -> None:
        if not callable(callback):
            raise TypeError("callback must be callable")
        self._subs[kind].append(callback)
        logger.debug("Subscribed %s to '%s'", getattr(callback, "__name__", str(callback)), kind.value)

    def subscribe_all(self, callback: Callable[[GameEvent], None]) -> None:
        if not callable(callback):
            raise TypeError("callback must be callable")
        self._wildcard.append(callback)

    def unsubscribe(self, kind: EventKind, callback: Callable[[GameEvent], None]) -> None:
        if callback in self._subs.get(kind, []):
            self._subs[kind].remove(callback)
            logger.debug("Unsubscribed %s from '%s'", getattr(callback, "__name__", str(callback)), kind.value)

    def publish(self, event: GameEvent) -> None:
        subs = list(self._subs.get(event.kind, [])) + list(self._wildcard)
        logger.debug("Publishing '%s' to %d subscribers", event.kind.value, len(subs))
        for cb in subs:
            try:
                cb(event)
            except Exception:
                logger.exception("Unhandled exception in event subscriber for '%s'", event.kind.value)


__all__ = ["EventBus", "EventKind", "GameEvent"]
