"""
Pipeline module for the live detection overlay.

The continuous inference loop polls the frame source once per display tick
and publishes detections only for frames that actually advanced.
"""

from .loop import InferenceLoop, LoopState, LoopStats
from .scheduler import AsyncioFrameScheduler, FrameScheduler, ManualScheduler

__all__ = [
    "InferenceLoop",
    "LoopState",
    "LoopStats",
    "AsyncioFrameScheduler",
    "FrameScheduler",
    "ManualScheduler",
]
