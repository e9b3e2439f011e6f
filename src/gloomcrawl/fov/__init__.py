from .visibility import CellChange, Rect, VisibilityEngine

__all__ = ["CellChange", "Rect", "VisibilityEngine"]
