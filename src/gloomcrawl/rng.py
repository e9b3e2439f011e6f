from __future__ import annotations

import logging
import random
from typing import Any, Iterable, List, Optional, Protocol, Sequence

from .exceptions import ScriptExhausted

logger = logging.getLogger(__name__)


class Random(Protocol):
    """Anything that yields uniform floats in [0, 1)."""

    def random(self) -> float:  # pragma: no cover - Protocol
        ...


class RandomDraws:
    """Derived draws built only on ``random()`` so scripted streams control everything."""

    def random(self) -> float:  # pragma: no cover - overridden
        raise NotImplementedError

    def index(self, n: int) -> int:
        if n <= 0:
            raise ValueError("index() requires a positive length")
        return min(n - 1, int(self.random() * n))

    def randint(self, a: int, b: int) -> int:
        if b < a:
            raise ValueError(f"randint() empty range [{a}, {b}]")
        return a + self.index(b - a + 1)

    def choice(self, seq: Iterable[Any]) -> Any:
        seq_list = seq if isinstance(seq, Sequence) else list(seq)
        if not seq_list:
            raise ValueError("choice() received an empty sequence")
        return seq_list[self.index(len(seq_list))]

    def chance(self, p: float) -> bool:
        return self.random() < p


class RandomSource(RandomDraws):
    """
    A thin wrapper around random.Random to:
    - centralize RNG handling
    - support optional deterministic seeding for tests
    - keep every draw going through one ``random()`` primitive
    """

    def __init__(self, seed: Optional[int | str] = None) -> None:
        self.seed = seed
        if seed is not None:
            self._rng = random.Random(seed)
            logger.debug("Initialized RandomSource with deterministic seed=%s", seed)
        else:
            self._rng = random.Random()
            logger.debug("Initialized RandomSource with non-deterministic seed")

    def random(self) -> float:
        return self._rng.random()

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed!r})"


class ScriptedSource(RandomDraws):
    """Replays a fixed list of floats, then defers to ``fallback`` or raises.

    Useful for forcing exact hits, misses and placements in tests and replays.
    """

    def __init__(self, values: Iterable[float], fallback: Optional[Random] = None) -> None:
        self._values: List[float] = [float(v) for v in values]
        for v in self._values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"scripted value {v} outside [0, 1)")
        self._pos = 0
        self.fallback = fallback

    @property
    def remaining(self) -> int:
        return len(self._values) - self._pos

    def random(self) -> float:
        if self._pos < len(self._values):
            value = self._values[self._pos]
            self._pos += 1
            return value
        if self.fallback is not None:
            return self.fallback.random()
        raise ScriptExhausted(f"scripted stream exhausted after {len(self._values)} values")


__all__ = ["Random", "RandomDraws", "RandomSource", "ScriptedSource"]
