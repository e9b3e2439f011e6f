from .mitigation import DeflectionMitigation, MitigationStrategy, PercentageMitigation, build_mitigation
from .resolver import CombatResolver, CombatResult, CombatState, ExchangeOutcome, Monster, StrikeSummary

__all__ = [
    "CombatResolver",
    "CombatResult",
    "CombatState",
    "DeflectionMitigation",
    "ExchangeOutcome",
    "MitigationStrategy",
    "Monster",
    "PercentageMitigation",
    "StrikeSummary",
    "build_mitigation",
]
