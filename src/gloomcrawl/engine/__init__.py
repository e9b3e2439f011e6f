from .events import EventBus, EventKind, GameEvent
from .intents import DIRECTIONS, Intent
from .session import GameSession, TurnResult

__all__ = ["DIRECTIONS", "EventBus", "EventKind", "GameEvent", "GameSession", "Intent", "TurnResult"]
