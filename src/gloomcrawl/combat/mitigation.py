"""Armour mitigation strategies.

Two models are supported and exactly one is selected per game through
``combat.mitigation``:

- ``percentage``: each armour point removes ``percentage_per_armour`` of the raw
  damage, ``reduced = raw - floor(raw * min(1, factor * armour))``.
- ``deflection``: armour deflects a flat amount,
  ``reduced = raw - floor(armour * deflection_per_armour)``.

Both are clamped to ``[0, raw]``.
"""
from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod

from ..config import CombatConfig

logger = logging.getLogger(__name__)


class MitigationStrategy(ABC):
    name: str = ""

    @abstractmethod
    def deflected(self, raw: int, armour: int) -> int:
        """Amount of ``raw`` absorbed by ``armour`` before clamping."""
        raise NotImplementedError

    def apply(self, raw: int, armour: int) -> int:
        if raw <= 0:
            return 0
        armour = max(0, armour)
        absorbed = self.deflected(raw, armour)
        return max(0, min(raw, raw - absorbed))


class PercentageMitigation(MitigationStrategy):
    name = "percentage"

    def __init__(self, per_armour: float = 0.05) -> None:
        if per_armour < 0:
            raise ValueError("per_armour must be >= 0")
        self.per_armour = float(per_armour)

    def deflected(self, raw: int, armour: int) -> int:
        return math.floor(raw * min(1.0, self.per_armour * armour))


class DeflectionMitigation(MitigationStrategy):
    name = "deflection"

    def __init__(self, per_armour: float = 0.5) -> None:
        if per_armour < 0:
            raise ValueError("per_armour must be >= 0")
        self.per_armour = float(per_armour)

    def deflected(self, raw: int, armour: int) -> int:
        return math.floor(armour * self.per_armour)


def build_mitigation(config: CombatConfig) -> MitigationStrategy:
    name = (config.mitigation or "percentage").lower()
    if name == "percentage":
        return PercentageMitigation(config.percentage_per_armour)
    if name == "deflection":
        return DeflectionMitigation(config.deflection_per_armour)
    raise ValueError(f"Unknown mitigation strategy: {config.mitigation!r}")
