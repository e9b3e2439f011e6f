from .effects import EFFECTS, PowerDownResult, PowerUpResult
from .player import Player

__all__ = ["EFFECTS", "Player", "PowerDownResult", "PowerUpResult"]
