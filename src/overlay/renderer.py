"""
Overlay renderer.

Projects the current detection set and the user rectangles into positioned
overlay elements for the viewport, and can burn the same boxes into a frame
for JPEG snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from editor.shapes import ShapeEditor
from models.detection import EMPTY_DETECTIONS, DetectionSet
from models.shape import ScreenBox, ViewportSize
from viewport.tracker import ViewportTracker
from .geometry import DEFAULT_LABEL_PAD, map_box_to_screen, map_rect_to_screen

# Colors (BGR)
COLOR_BOX = (0, 255, 0)
COLOR_TEXT = (255, 255, 255)


@dataclass(frozen=True)
class OverlayElement:
    kind: str
    key: str
    label: str
    box: ScreenBox
    score_text: Optional[str] = None
    selected: bool = False
    handles: Tuple[Tuple[str, float, float], ...] = ()


def format_score(score: float) -> str:
    return f"{score:.2f}"


class OverlayRenderer:
    """
    Keeps one overlay element per current detection.

    Re-renders when a new detection set arrives or the viewport changes size.
    """

    def __init__(
        self,
        viewport: ViewportTracker,
        mirrored: bool = True,
        label_pad: float = DEFAULT_LABEL_PAD,
        show_scores: bool = True,
    ):
        self.viewport = viewport
        self.mirrored = mirrored
        self.label_pad = label_pad
        self.show_scores = show_scores
        self.source_size: Optional[Tuple[float, float]] = None
        self.version = 0
        self._detections: DetectionSet = EMPTY_DETECTIONS
        self._elements: Tuple[OverlayElement, ...] = ()
        self._unsubscribe = viewport.subscribe(self._on_resize)

    @property
    def detections(self) -> DetectionSet:
        return self._detections

    @property
    def elements(self) -> Tuple[OverlayElement, ...]:
        return self._elements

    def set_detections(self, detections: DetectionSet) -> None:
        """Replace the shown detections with a newer set."""
        self._detections = detections
        self.render()

    def clear(self) -> None:
        self.set_detections(EMPTY_DETECTIONS)

    def _on_resize(self, size: ViewportSize) -> None:
        self.render()

    def render(self) -> Tuple[OverlayElement, ...]:
        size = self.viewport.size
        elements: List[OverlayElement] = []
        for i, det in enumerate(self._detections):
            box = map_box_to_screen(
                det.bounding_box,
                size,
                mirrored=self.mirrored,
                label_pad=self.label_pad,
                source_size=self.source_size,
            )
            if box is None:
                break
            elements.append(
                OverlayElement(
                    kind="detection",
                    key=f"det-{i}",
                    label=det.label,
                    box=box,
                    score_text=format_score(det.score) if self.show_scores else None,
                )
            )
        self._elements = tuple(elements)
        self.version += 1
        return self._elements

    def shape_elements(self, editor: ShapeEditor) -> Tuple[OverlayElement, ...]:
        size = self.viewport.size
        elements: List[OverlayElement] = []
        for rect in editor.shapes:
            box = map_rect_to_screen(rect, size)
            if box is None:
                break
            selected = rect.id == editor.selected_id
            elements.append(
                OverlayElement(
                    kind="shape",
                    key=rect.id,
                    label=rect.id,
                    box=box,
                    selected=selected,
                    handles=tuple(editor.handles(rect.id)),
                )
            )
        return tuple(elements)

    def draw(self, frame: np.ndarray) -> np.ndarray:
        """
        Draw detections on a copy of the frame as the viewer sees it.

        The frame is flipped first when the feed is mirrored, and boxes are
        mapped against the frame's own size.
        """
        out = cv2.flip(frame, 1) if self.mirrored else frame.copy()
        h, w = out.shape[:2]
        size = ViewportSize(width=w, height=h)
        font = cv2.FONT_HERSHEY_SIMPLEX

        for det in self._detections:
            box = map_box_to_screen(
                det.bounding_box, size, mirrored=self.mirrored, label_pad=self.label_pad
            )
            if box is None:
                continue
            x1, y1, x2, y2 = box.as_int_xyxy()
            cv2.rectangle(out, (x1, y1), (x2, y2), COLOR_BOX, 2)

            label = det.label
            if self.show_scores:
                label += f" {format_score(det.score)}"
            (tw, th), _ = cv2.getTextSize(label, font, 0.5, 1)
            cv2.rectangle(out, (x1, y1 - th - 6), (x1 + tw + 4, y1), COLOR_BOX, -1)
            cv2.putText(out, label, (x1 + 2, y1 - 4), font, 0.5, COLOR_TEXT, 1)

        return out

    def close(self) -> None:
        self._unsubscribe()
