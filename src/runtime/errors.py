"""
Error taxonomy.

Every error here is recovered locally; none of them should stop the process.
"""

from __future__ import annotations


class OverlayError(Exception):
    """Base class for overlay runtime errors."""


class InitializationError(OverlayError):
    """The inference engine could not be constructed (model fetch, unsupported target, ...)."""


class CameraPermissionError(OverlayError, PermissionError):
    """Camera access was denied or the device could not be opened."""


class TransientFrameError(OverlayError):
    """A single detect call failed; the frame is skipped."""


class ResizeRejected(OverlayError):
    """A resize would shrink a rectangle below the minimum size."""

    def __init__(self, shape_id: str, width: float, height: float, min_size: float):
        super().__init__(
            f"Resize of {shape_id} to {width}x{height} is below minimum {min_size}"
        )
        self.shape_id = shape_id
        self.width = width
        self.height = height
        self.min_size = min_size
