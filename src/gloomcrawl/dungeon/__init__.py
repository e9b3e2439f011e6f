from .cellular import CellularAutomaton
from .generator import LevelGenerator, random_treasure

__all__ = ["CellularAutomaton", "LevelGenerator", "random_treasure"]
