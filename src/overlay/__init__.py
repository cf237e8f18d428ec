"""
Screen-space overlay: geometry mapping and rendering.
"""

from .geometry import map_box_to_screen, map_rect_to_screen
from .renderer import OverlayElement, OverlayRenderer

__all__ = ["map_box_to_screen", "map_rect_to_screen", "OverlayElement", "OverlayRenderer"]
