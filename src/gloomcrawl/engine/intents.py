from __future__ import annotations

from enum import Enum, auto
from typing import Dict, Tuple


class Intent(Enum):
    """Discrete player intents; one is processed per turn."""

    MOVE_UP = auto()
    MOVE_RIGHT = auto()
    MOVE_DOWN = auto()
    MOVE_LEFT = auto()
    REGENERATE = auto()
    DEBUG_GRANT = auto()


DIRECTIONS: Dict[Intent, Tuple[int, int]] = {
    Intent.MOVE_UP: (0, -1),
    Intent.MOVE_RIGHT: (1, 0),
    Intent.MOVE_DOWN: (0, 1),
    Intent.MOVE_LEFT: (-1, 0),
}


__all__ = ["DIRECTIONS", "Intent"]
