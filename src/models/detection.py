"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np


UNKNOWN_LABEL = "unknown"


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in source-frame pixel coordinates.

    Attributes:
        origin_x: Left edge x coordinate.
        origin_y: Top edge y coordinate.
        width: Box width.
        height: Box height.
    """
    origin_x: float
    origin_y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.origin_x + self.width

    @property
    def bottom(self) -> float:
        return self.origin_y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.origin_x, self.origin_y, self.right, self.bottom)

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Create from corner coordinates; inverted corners give a zero-size box."""
        return cls(
            origin_x=float(x1),
            origin_y=float(y1),
            width=max(0.0, float(x2) - float(x1)),
            height=max(0.0, float(y2) - float(y1)),
        )


@dataclass(frozen=True)
class Category:
    """A ranked class guess for a detection."""
    category_name: str
    score: float


@dataclass(frozen=True)
class Detection:
    """
    A single detection from an object detector.

    Attributes:
        bounding_box: Box in source-frame pixel coordinates.
        categories: Class guesses ordered by score; the first is the primary label.
    """
    bounding_box: BoundingBox
    categories: Tuple[Category, ...] = ()

    @property
    def primary(self) -> Optional[Category]:
        return self.categories[0] if self.categories else None

    @property
    def label(self) -> str:
        primary = self.primary
        return primary.category_name if primary else UNKNOWN_LABEL

    @property
    def score(self) -> float:
        primary = self.primary
        return primary.score if primary else 0.0

    @classmethod
    def from_xyxy(
        cls,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        score: float = 1.0,
        category_name: str = UNKNOWN_LABEL,
    ) -> "Detection":
        """Create a single-category Detection from corner coordinates."""
        return cls(
            bounding_box=BoundingBox.from_xyxy(x1, y1, x2, y2),
            categories=(Category(category_name=category_name, score=float(score)),),
        )

    @classmethod
    def from_numpy_row(cls, row: np.ndarray, names: Optional[dict] = None) -> "Detection":
        """
        Adapter: Convert a row [x1, y1, x2, y2, score, class_id] to a Detection.
        """
        score = float(row[4]) if len(row) > 4 else 1.0
        name = UNKNOWN_LABEL
        if len(row) > 5:
            class_id = int(row[5])
            name = (names or {}).get(class_id) or str(class_id)
        return cls.from_xyxy(row[0], row[1], row[2], row[3], score=score, category_name=name)


@dataclass(frozen=True)
class DetectionSet:
    """
    Detections produced by one inference call.

    A new set replaces the previous one as a whole; sets are never merged.
    """
    detections: Tuple[Detection, ...] = ()
    timestamp_ms: Optional[float] = None

    def __len__(self) -> int:
        return len(self.detections)

    def __iter__(self) -> Iterator[Detection]:
        return iter(self.detections)

    def above(self, threshold: float) -> "DetectionSet":
        """Return a copy without detections scoring below threshold."""
        kept = tuple(d for d in self.detections if d.score >= threshold)
        return DetectionSet(detections=kept, timestamp_ms=self.timestamp_ms)

    @classmethod
    def of(cls, detections: Sequence[Detection], timestamp_ms: Optional[float] = None) -> "DetectionSet":
        return cls(detections=tuple(detections), timestamp_ms=timestamp_ms)


EMPTY_DETECTIONS = DetectionSet()


def detections_from_numpy(arr: np.ndarray, names: Optional[dict] = None) -> List[Detection]:
    """
    Adapter: Convert numpy array of detections to list of Detection objects.

    Args:
        arr: Array of shape (N, 4+) where each row is [x1, y1, x2, y2, ...].
        names: Optional class id to class name mapping.
    """
    if arr is None or len(arr) == 0:
        return []
    return [Detection.from_numpy_row(row, names) for row in arr]
