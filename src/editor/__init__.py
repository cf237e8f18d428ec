from .shapes import HANDLES, MIN_SIZE, ShapeEditor

__all__ = ["HANDLES", "MIN_SIZE", "ShapeEditor"]
