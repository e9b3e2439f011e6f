from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable

from ..config import Rosters


class CellKind(str, Enum):
    """What a stored cell symbol means. Hidden and revealed floor are distinct values."""

    BORDER = "border"
    WALL = "wall"
    HIDDEN = "hidden"
    REVEALED = "revealed"
    DOOR = "door"
    CHEST = "chest"
    ITEM = "item"
    KEY = "key"
    MONSTER = "monster"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Palette:
    """Maps rendering symbols to cell kinds for one roster."""

    border: str
    hidden: str
    revealed: str
    door: str
    chest: str
    kinds: Dict[str, CellKind]

    @classmethod
    def from_rosters(cls, rosters: Rosters) -> "Palette":
        kinds: Dict[str, CellKind] = {}

        def register(symbols: Iterable[str], kind: CellKind) -> None:
            for s in symbols:
                kinds.setdefault(s, kind)

        register([rosters.border], CellKind.BORDER)
        register([rosters.hidden], CellKind.HIDDEN)
        register([rosters.revealed], CellKind.REVEALED)
        register([rosters.door], CellKind.DOOR)
        register([rosters.chest], CellKind.CHEST)
        register(rosters.walls, CellKind.WALL)
        register(rosters.keys, CellKind.KEY)
        register(rosters.monsters, CellKind.MONSTER)
        register(rosters.treasures, CellKind.ITEM)
        return cls(
            border=rosters.border,
            hidden=rosters.hidden,
            revealed=rosters.revealed,
            door=rosters.door,
            chest=rosters.chest,
            kinds=kinds,
        )

    def classify(self, symbol: str) -> CellKind:
        return self.kinds.get(symbol, CellKind.UNKNOWN)
