from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Protocol

from ..engine.intents import Intent

logger = logging.getLogger(__name__)

# Browser-style key codes
KEY_BACKSPACE = 8
KEY_LEFT, KEY_UP, KEY_RIGHT, KEY_DOWN = 37, 38, 39, 40
KEY_A, KEY_D, KEY_S, KEY_W, KEY_X = 65, 68, 83, 87, 88


class InputSource(Protocol):
    """Yields the next intent, or None when input is exhausted."""

    def next_intent(self) -> Optional[Intent]:  # pragma: no cover - Protocol
        ...


class InputMapper:
    """Rebindable mapping from physical keys to intents.

    Keys are names (case-insensitive, e.g. ``"w"``, ``"UP"``) or integer key
    codes. Codes are normalized to their decimal string, so ``87`` and ``"87"``
    are the same key.

    Example usage:
        mapper = InputMapper.default()
        mapper.translate_key("w")  # -> Intent.MOVE_UP
        mapper.translate_key(8)    # -> Intent.REGENERATE
    """

    def __init__(self, bindings: Optional[Dict[str, Intent]] = None) -> None:
        self._bindings: Dict[str, Intent] = {}
        self._aliases: Dict[str, str] = {}
        if bindings:
            for key, intent in bindings.items():
                self.bind(key, intent)

    @staticmethod
    def _normalize(key: str | int) -> Optional[str]:
        if key is None or isinstance(key, bool):
            return None
        if isinstance(key, int):
            return str(key)
        if not isinstance(key, str):
            return None
        k = key.strip()
        if not k:
            return None
        return k.upper()

    def bind(self, key: str | int, intent: Intent) -> None:
        nk = self._normalize(key)
        if nk is None:
            logger.warning("Attempted to bind invalid key: %r", key)
            return
        self._bindings[nk] = intent

    def bind_many(self, keys: Iterable[str | int], intent: Intent) -> None:
        for k in keys:
            self.bind(k, intent)

    def unbind(self, key: str | int) -> None:
        nk = self._normalize(key)
        if nk is not None:
            self._bindings.pop(nk, None)

    def set_alias(self, physical: str | int, canonical_name: str | int) -> None:
        """Make a backend-specific key behave like ``canonical_name``."""
        nk = self._normalize(physical)
        cn = self._normalize(canonical_name)
        if nk and cn:
            self._aliases[nk] = cn

    def translate_key(self, key: str | int) -> Optional[Intent]:
        nk = self._normalize(key)
        if nk is None:
            return None
        canonical = self._aliases.get(nk, nk)
        return self._bindings.get(canonical)

    @classmethod
    def default(cls) -> "InputMapper":
        """WASD and arrows move, Backspace regenerates the floor, X grants everything."""
        mapper = cls()
        mapper.bind_many(["W", "UP", KEY_W, KEY_UP], Intent.MOVE_UP)
        mapper.bind_many(["D", "RIGHT", KEY_D, KEY_RIGHT], Intent.MOVE_RIGHT)
        mapper.bind_many(["S", "DOWN", KEY_S, KEY_DOWN], Intent.MOVE_DOWN)
        mapper.bind_many(["A", "LEFT", KEY_A, KEY_LEFT], Intent.MOVE_LEFT)
        mapper.bind_many(["BACKSPACE", KEY_BACKSPACE], Intent.REGENERATE)
        mapper.bind_many(["X", KEY_X], Intent.DEBUG_GRANT)
        mapper.set_alias("ARROWUP", "UP")
        mapper.set_alias("ARROWRIGHT", "RIGHT")
        mapper.set_alias("ARROWDOWN", "DOWN")
        mapper.set_alias("ARROWLEFT", "LEFT")
        return mapper


__all__ = ["InputMapper", "InputSource"]
