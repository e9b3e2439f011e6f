from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Protocol

from ..engine.events import EventBus, EventKind, GameEvent
from ..fov.visibility import CellChange
from ..map.grid import Coord
from ..map.level import Level
from ..player.player import Player

logger = logging.getLogger(__name__)

FALLBACK_COLOR = "red"
ITEM_COLOR = "black"


class Renderer(Protocol):
    def draw(self, x: int, y: int, symbol: str, color: str) -> None:  # pragma: no cover - Protocol
        ...

    def clear(self) -> None:  # pragma: no cover - Protocol
        ...


class RenderAdapter:
    """
    Forwards what changed to a ``Renderer``.

    Floor and border symbols use the roster colours; anything without a colour
    entry is drawn in red. Dropped items and the hero are drawn in black.
    """

    def __init__(self, renderer: Renderer, colors: Optional[Mapping[str, str]] = None) -> None:
        self.renderer = renderer
        self.colors = dict(colors or {})
        self.hero = "🧙"
        self.dead = "☠️"
        self.level: Optional[Level] = None
        self.position: Optional[Coord] = None
        self.alive = True

    @classmethod
    def for_symbols(cls, renderer: Renderer, colors: Mapping[str, str], symbols: Mapping[str, str]) -> "RenderAdapter":
        adapter = cls(renderer, colors)
        adapter.hero = symbols.get("hero", adapter.hero)
        adapter.dead = symbols.get("dead", adapter.dead)
        return adapter

    def color_for(self, symbol: str) -> str:
        return self.colors.get(symbol, FALLBACK_COLOR)

    def draw_level(self, level: Level) -> None:
        self.renderer.clear()
        for x, y in level.grid.coords():
            symbol = level.grid.get(x, y)
            self.renderer.draw(x, y, symbol, self.color_for(symbol))

    def draw_changes(self, changes: Iterable[CellChange], items: bool = False) -> None:
        for c in changes:
            color = ITEM_COLOR if items else self.color_for(c.symbol)
            self.renderer.draw(c.x, c.y, c.symbol, color)

    def draw_player(self, player: Player) -> None:
        self._draw_hero(player.x, player.y, player.alive)

    def _draw_hero(self, x: int, y: int, alive: bool) -> None:
        self.renderer.draw(x, y, self.hero if alive else self.dead, ITEM_COLOR)

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(EventKind.LEVEL_GENERATED, self._on_level)
        bus.subscribe(EventKind.PLAYER_MOVED, self._on_moved)
        bus.subscribe(EventKind.CELLS_REVEALED, self._on_cells)
        bus.subscribe(EventKind.FOUNTAIN, self._on_fountain)
        bus.subscribe(EventKind.GAME_OVER, self._on_game_over)

    def _on_level(self, event: GameEvent) -> None:
        self.level = event.payload["level"]
        self.position = None
        self.alive = True
        self.draw_level(self.level)

    def _on_moved(self, event: GameEvent) -> None:
        previous = self.position
        self.position = tuple(event.payload["position"])
        self.alive = event.payload.get("alive", True)
        if previous is not None and previous != self.position and self.level is not None:
            symbol = self.level.grid.get(*previous)
            self.renderer.draw(previous[0], previous[1], symbol, self.color_for(symbol))
        self._redraw_hero()

    def _on_cells(self, event: GameEvent) -> None:
        self.draw_changes(event.payload["changes"])
        self._redraw_hero()

    def _on_fountain(self, event: GameEvent) -> None:
        self.draw_changes(event.payload["changes"], items=True)
        self._redraw_hero()

    def _on_game_over(self, event: GameEvent) -> None:
        if not event.payload["won"]:
            self.alive = False
        self._redraw_hero()

    def _redraw_hero(self) -> None:
        # keep the hero above redrawn cells
        if self.position is not None:
            self._draw_hero(self.position[0], self.position[1], self.alive)


__all__ = ["FALLBACK_COLOR", "RenderAdapter", "Renderer"]
