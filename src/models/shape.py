"""
User-drawn annotation rectangles and screen-space geometry.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class ShapeStyle:
    fill: str = "red"
    stroke: str = "black"
    stroke_width: float = 1.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ShapeStyle":
        return cls(
            fill=d.get("fill", "red"),
            stroke=d.get("stroke", "black"),
            stroke_width=d.get("stroke_width", 1.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"fill": self.fill, "stroke": self.stroke, "stroke_width": self.stroke_width}


@dataclass(frozen=True)
class Rectangle:
    """
    A user rectangle in screen-space pixels.

    Records are immutable; edits produce a new Rectangle with the same id.
    """
    id: str
    x: float
    y: float
    width: float
    height: float
    style: ShapeStyle = field(default_factory=ShapeStyle)

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height

    def moved_to(self, x: float, y: float) -> "Rectangle":
        return replace(self, x=x, y=y)

    def with_geometry(self, x: float, y: float, width: float, height: float) -> "Rectangle":
        return replace(self, x=x, y=y, width=width, height=height)

    def geometry(self) -> Tuple[float, float, float, float]:
        """Return (x, y, width, height)."""
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Rectangle":
        """Adapter: Create from a config/API dictionary."""
        return cls(
            id=str(d["id"]),
            x=float(d.get("x", 0)),
            y=float(d.get("y", 0)),
            width=float(d.get("width", 0)),
            height=float(d.get("height", 0)),
            style=ShapeStyle.from_dict(d.get("style") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "style": self.style.to_dict(),
        }


@dataclass(frozen=True)
class ViewportSize:
    """Drawable size of the display container. Zero in either axis means not measured yet."""
    width: float = 0
    height: float = 0

    @property
    def ready(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class ScreenBox:
    """A box in screen-space pixels, ready for absolute positioning."""
    left: float
    top: float
    width: float
    height: float

    def as_int_xyxy(self) -> Tuple[int, int, int, int]:
        return (
            int(round(self.left)),
            int(round(self.top)),
            int(round(self.left + self.width)),
            int(round(self.top + self.height)),
        )
