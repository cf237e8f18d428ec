"""
Typed models for the live detection overlay.

These models are immutable where the runtime replaces them wholesale
(detections, rectangles, sizes) and mutable only for configuration.
"""

from .frame import FrameData
from .detection import BoundingBox, Category, Detection, DetectionSet, EMPTY_DETECTIONS
from .shape import Rectangle, ShapeStyle, ScreenBox, ViewportSize
from .config import (
    Config,
    CameraConfig,
    DetectorConfig,
    OverlayConfig,
    EditorConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "BoundingBox",
    "Category",
    "Detection",
    "DetectionSet",
    "EMPTY_DETECTIONS",
    # Shapes / geometry
    "Rectangle",
    "ShapeStyle",
    "ScreenBox",
    "ViewportSize",
    # Config
    "Config",
    "CameraConfig",
    "DetectorConfig",
    "OverlayConfig",
    "EditorConfig",
    "WebConfig",
]
