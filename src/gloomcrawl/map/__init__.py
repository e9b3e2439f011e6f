from .cells import CellKind, Palette
from .grid import Coord, Grid
from .level import BossCell, ExitCell, Level, LootCell

__all__ = ["BossCell", "CellKind", "Coord", "ExitCell", "Grid", "Level", "LootCell", "Palette"]
