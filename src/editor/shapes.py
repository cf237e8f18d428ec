"""
Shape editor for user-drawn rectangles.

Rectangles are kept in an ordered id -> Rectangle mapping that is replaced as a
whole on every edit, so a change is visible as a new mapping and readers never
observe a half-updated record. At most one rectangle is selected.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from models.shape import Rectangle
from runtime.errors import ResizeRejected

MIN_SIZE = 5.0

HANDLES = (
    "top-left",
    "top",
    "top-right",
    "right",
    "bottom-right",
    "bottom",
    "bottom-left",
    "left",
)


class ShapeEditor:
    def __init__(self, shapes: Iterable[Rectangle] = (), min_size: float = MIN_SIZE):
        self.min_size = min_size
        self._shapes: Mapping[str, Rectangle] = MappingProxyType({})
        self._selected_id: Optional[str] = None
        self.revision = 0
        for rect in shapes:
            self.add(rect)

    @property
    def shapes(self) -> Tuple[Rectangle, ...]:
        return tuple(self._shapes.values())

    @property
    def mapping(self) -> Mapping[str, Rectangle]:
        return self._shapes

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def get(self, shape_id: str) -> Rectangle:
        return self._shapes[shape_id]

    def _commit(self, shapes: Dict[str, Rectangle]) -> None:
        self._shapes = MappingProxyType(shapes)
        self.revision += 1

    def _replace(self, rect: Rectangle) -> None:
        if rect.id not in self._shapes:
            raise KeyError(rect.id)
        updated = dict(self._shapes)
        updated[rect.id] = rect
        self._commit(updated)

    def add(self, rect: Rectangle) -> Rectangle:
        if rect.id in self._shapes:
            raise ValueError(f"Shape id already exists: {rect.id}")
        updated = dict(self._shapes)
        updated[rect.id] = rect
        self._commit(updated)
        return rect

    def remove(self, shape_id: str) -> Rectangle:
        rect = self._shapes[shape_id]
        updated = dict(self._shapes)
        del updated[shape_id]
        if self._selected_id == shape_id:
            self._selected_id = None
        self._commit(updated)
        return rect

    # Selection

    def select_by_id(self, shape_id: str) -> None:
        if shape_id not in self._shapes:
            raise KeyError(shape_id)
        self._selected_id = shape_id

    def deselect(self) -> None:
        self._selected_id = None

    def hit_test(self, x: float, y: float) -> Optional[Rectangle]:
        """Topmost (last added) rectangle containing the point."""
        for rect in reversed(self.shapes):
            if rect.contains(x, y):
                return rect
        return None

    def pointer_down(self, x: float, y: float) -> Optional[str]:
        """Select the shape under the pointer, or deselect on a background hit."""
        rect = self.hit_test(x, y)
        if rect is None:
            self.deselect()
            return None
        self.select_by_id(rect.id)
        return rect.id

    # Geometry

    def move(self, shape_id: str, dx: float, dy: float) -> Rectangle:
        rect = self._shapes[shape_id]
        return self.move_to(shape_id, rect.x + dx, rect.y + dy)

    def move_to(self, shape_id: str, x: float, y: float) -> Rectangle:
        rect = self._shapes[shape_id].moved_to(x, y)
        self._replace(rect)
        return rect

    def resize(
        self,
        shape_id: str,
        new_width: float,
        new_height: float,
        new_x: Optional[float] = None,
        new_y: Optional[float] = None,
    ) -> bool:
        """
        Commit new size and position together.

        Returns False, leaving the rectangle untouched, when either side would
        drop below ``min_size``.
        """
        rect = self._shapes[shape_id]
        try:
            self._check_size(shape_id, new_width, new_height)
        except ResizeRejected as e:
            logging.debug(str(e))
            return False

        x = rect.x if new_x is None else new_x
        y = rect.y if new_y is None else new_y
        self._replace(rect.with_geometry(x, y, new_width, new_height))
        return True

    def _check_size(self, shape_id: str, width: float, height: float) -> None:
        if width < self.min_size or height < self.min_size:
            raise ResizeRejected(shape_id, width, height, self.min_size)

    def drag_handle(self, shape_id: str, handle: str, dx: float, dy: float) -> bool:
        """Resize by dragging one handle; the opposite side stays put."""
        if handle not in HANDLES:
            raise ValueError(f"Unknown handle: {handle}")
        rect = self._shapes[shape_id]
        x, y, w, h = rect.geometry()

        if "left" in handle:
            x, w = x + dx, w - dx
        elif "right" in handle:
            w = w + dx
        if handle.startswith("top"):
            y, h = y + dy, h - dy
        elif handle.startswith("bottom"):
            h = h + dy

        return self.resize(shape_id, w, h, x, y)

    def handles(self, shape_id: str) -> List[Tuple[str, float, float]]:
        """Handle anchor points (name, x, y); only the selected shape has any."""
        if shape_id != self._selected_id:
            return []
        rect = self._shapes[shape_id]
        left, top = rect.x, rect.y
        right, bottom = rect.x + rect.width, rect.y + rect.height
        cx, cy = left + rect.width / 2, top + rect.height / 2
        points = {
            "top-left": (left, top),
            "top": (cx, top),
            "top-right": (right, top),
            "right": (right, cy),
            "bottom-right": (right, bottom),
            "bottom": (cx, bottom),
            "bottom-left": (left, bottom),
            "left": (left, cy),
        }
        return [(name, *points[name]) for name in HANDLES]
