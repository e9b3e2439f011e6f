"""Turns session events into text for a named-channel message sink."""
from __future__ import annotations

import logging
from typing import Dict, Protocol, Tuple

from ..engine.events import EventBus, EventKind, GameEvent

logger = logging.getLogger(__name__)

CHANNELS: Tuple[str, ...] = (
    "coordinates",
    "HP",
    "AC",
    "Attack",
    "Gold",
    "Experience",
    "enchantments",
    "curses",
    "lockStatus",
    "heroCombat",
    "monsterCombat",
    "gameOver",
)


class MessageSink(Protocol):
    def message(self, channel: str, text: str) -> None:  # pragma: no cover - Protocol
        ...


class MessageAdapter:
    """Formats events for a ``MessageSink`` and remembers the last text per channel."""

    def __init__(self, sink: MessageSink) -> None:
        self.sink = sink
        self.last: Dict[str, str] = {}

    def attach(self, bus: EventBus) -> None:
        bus.subscribe_all(self.handle)

    def send(self, channel: str, text: str) -> None:
        if channel not in CHANNELS:
            raise ValueError(f"Unknown message channel: {channel!r}")
        self.last[channel] = text
        self.sink.message(channel, text)

    def handle(self, event: GameEvent) -> None:
        p = event.payload
        kind = event.kind
        if kind == EventKind.PLAYER_MOVED:
            x, y = p["position"]
            self.send("coordinates", f"({x}, {y})")
        elif kind == EventKind.STATS_CHANGED:
            self.send("HP", f"HP: {p['health']}")
            self.send("AC", f"AC: {p['armour_class']}")
            self.send("Attack", f"Att: {p['attack_bonus']}")
            self.send("Gold", f"$$: {p['gold']}")
            self.send("Experience", f"Exp: {p['experience']}")
            self.send("enchantments", "".join(p["enchantments"]))
            self.send("curses", "".join(p["curses"]))
        elif kind == EventKind.LEVEL_GENERATED:
            self.send("heroCombat", "")
            self.send("monsterCombat", "")
        elif kind == EventKind.LOCK_STATUS:
            self.send("lockStatus", p["status"])
        elif kind == EventKind.COMBAT_EXCHANGE:
            outcome = p["outcome"]
            self.send("heroCombat", f"H: {outcome.hero_message}")
            monster = outcome.monster_message
            self.send("monsterCombat", f"M: {monster}" if monster else "")
        elif kind == EventKind.GAME_OVER:
            verb = "win" if p["won"] else "died"
            self.send("gameOver", f"You {verb}, level: {p['experience']}")


__all__ = ["CHANNELS", "MessageAdapter", "MessageSink"]
