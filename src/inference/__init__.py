"""
Inference engines and the detection feed adapter.
"""

from .adapter import DetectionFeed, FeedState, ImageMode, VideoMode
from .engine import EngineOptions, ExecutionTarget, InferenceEngine, RunningMode

__all__ = [
    "DetectionFeed",
    "FeedState",
    "ImageMode",
    "VideoMode",
    "EngineOptions",
    "ExecutionTarget",
    "InferenceEngine",
    "RunningMode",
]
