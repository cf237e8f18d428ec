"""
Source-frame to screen-space mapping.

Detections arrive in the pixel space of the frame the engine saw. The feed is
usually shown mirrored (selfie view), so the left edge of an overlay has to be
recomputed from the right edge of the unflipped box. The vertical axis is
never mirrored.
"""

from __future__ import annotations

from typing import Optional, Tuple

from models.detection import BoundingBox
from models.shape import Rectangle, ScreenBox, ViewportSize

DEFAULT_LABEL_PAD = 10.0


def scale_factors(
    viewport: ViewportSize,
    source_size: Optional[Tuple[float, float]] = None,
) -> Tuple[float, float]:
    """
    Return (sx, sy) from source pixels to viewport pixels.

    Without a usable source size the two spaces are assumed to coincide.
    """
    if not source_size:
        return 1.0, 1.0
    src_w, src_h = source_size
    if src_w <= 0 or src_h <= 0:
        return 1.0, 1.0
    return viewport.width / src_w, viewport.height / src_h


def map_box_to_screen(
    box: BoundingBox,
    viewport: Optional[ViewportSize],
    mirrored: bool,
    label_pad: float = DEFAULT_LABEL_PAD,
    source_size: Optional[Tuple[float, float]] = None,
) -> Optional[ScreenBox]:
    """
    Map a detection box to screen space.

    Args:
        box: Box in source-frame pixels.
        viewport: Current drawable size.
        mirrored: Whether the feed is displayed horizontally flipped.
        label_pad: Pixels shaved off the width so the label text stays inside.
        source_size: Optional (width, height) of the frame the box came from.

    Returns:
        The screen box, or None while the viewport has not been measured.
    """
    if viewport is None or not viewport.ready:
        return None

    sx, sy = scale_factors(viewport, source_size)
    width = max(0.0, box.width) * sx
    height = max(0.0, box.height) * sy

    if mirrored:
        left = viewport.width - width - box.origin_x * sx
    else:
        left = box.origin_x * sx

    return ScreenBox(
        left=left,
        top=box.origin_y * sy,
        width=max(0.0, width - label_pad),
        height=height,
    )


def map_rect_to_screen(rect: Rectangle, viewport: Optional[ViewportSize]) -> Optional[ScreenBox]:
    """User rectangles already live in screen space: no pad, no mirroring."""
    if viewport is None or not viewport.ready:
        return None
    return ScreenBox(
        left=rect.x,
        top=rect.y,
        width=max(0.0, rect.width),
        height=max(0.0, rect.height),
    )
