"""
Detection feed adapter.

Owns one inference engine and hides its running mode behind a single
``detect(frame)`` call. The engine is built asynchronously; until it is ready
``detect`` refuses to run, so callers gate on ``ready``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from models.detection import DetectionSet
from models.frame import FrameData
from runtime.errors import InitializationError
from .engine import EngineFactory, EngineOptions, InferenceEngine, RunningMode


class FeedState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ImageMode:
    """Single-shot stills: the frame timestamp is ignored."""

    def run(self, engine: InferenceEngine, frame: FrameData) -> DetectionSet:
        return engine.detect(frame.frame)


@dataclass(frozen=True)
class VideoMode:
    """Continuous stream: the engine sees the frame's media timestamp."""

    def run(self, engine: InferenceEngine, frame: FrameData) -> DetectionSet:
        return engine.detect_for_video(frame.frame, frame.timestamp_ms)


Mode = Union[ImageMode, VideoMode]


def mode_for(running_mode: RunningMode) -> Mode:
    return ImageMode() if running_mode is RunningMode.IMAGE else VideoMode()


class DetectionFeed:
    """
    Uniform detection source over an image- or video-mode engine.

    Example:
        feed = DetectionFeed(EngineOptions.from_config(cfg), UltralyticsEngine)
        await feed.initialize()
        if feed.ready:
            detections = feed.detect(frame_data)
    """

    def __init__(self, options: EngineOptions, engine_factory: EngineFactory):
        self.options = options
        self.mode: Mode = mode_for(options.running_mode)
        self._engine_factory = engine_factory
        self._engine: Optional[InferenceEngine] = None
        self._state = FeedState.PENDING
        self.last_error: Optional[InitializationError] = None

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state is FeedState.READY

    async def initialize(self) -> bool:
        """
        Build the engine off the event loop.

        Returns True when the feed is ready. A failed construction leaves the
        feed unavailable and is recorded in ``last_error``; calling again retries.
        """
        self._state = FeedState.PENDING
        logging.info(
            f"Loading detector: model={self.options.model_source}, "
            f"target={self.options.execution_target.value}, mode={self.options.running_mode.value}"
        )
        try:
            engine = await asyncio.to_thread(self._engine_factory, self.options)
        except Exception as e:
            self._engine = None
            self._state = FeedState.UNAVAILABLE
            self.last_error = InitializationError(f"Detector construction failed: {e}")
            self.last_error.__cause__ = e
            logging.error(f"Detector unavailable: {e}")
            return False

        self._engine = engine
        self._state = FeedState.READY
        self.last_error = None
        logging.info("Detector ready")
        return True

    def detect(self, frame: FrameData) -> DetectionSet:
        """
        Run inference on one frame.

        Raises:
            InitializationError: If the engine is not ready.
        """
        if not self.ready or self._engine is None:
            raise InitializationError(f"Detector is {self._state.value}")
        result = self.mode.run(self._engine, frame)
        if result.timestamp_ms is None:
            result = DetectionSet(detections=result.detections, timestamp_ms=frame.timestamp_ms)
        return result.above(self.options.score_threshold)
