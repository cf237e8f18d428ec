"""
Frame sources behind the viewport.

This layer abstracts where frames come from (webcam, RTSP stream, video file)
from the inference loop. Each source implements the FrameSource interface and
returns FrameData objects.
"""

from .base import FrameSource, SourceConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig, create_source_from_config

__all__ = [
    "FrameSource",
    "SourceConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "create_source_from_config",
]
