"""
Continuous inference loop.

Polls the attached frame source once per display tick and runs inference only
when the frame has actually advanced, so the inference rate is bounded by the
camera frame rate rather than the refresh rate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from inference.adapter import DetectionFeed
from models.detection import DetectionSet
from observation.base import FrameSource
from runtime.errors import TransientFrameError
from .scheduler import FrameScheduler


class LoopState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class LoopStats:
    """Runtime statistics for the loop."""
    ticks: int = 0
    inferences: int = 0
    duplicate_frames: int = 0
    failed_frames: int = 0


class InferenceLoop:
    """
    Frame-synchronised driver for a DetectionFeed.

    Example:
        loop = InferenceLoop(feed, AsyncioFrameScheduler(60), renderer.set_detections)
        loop.attach_source(source)
        ...
        loop.detach_source()
    """

    def __init__(
        self,
        feed: DetectionFeed,
        scheduler: FrameScheduler,
        on_detections: Callable[[DetectionSet], None],
    ):
        self.feed = feed
        self.scheduler = scheduler
        self.on_detections = on_detections
        self.stats = LoopStats()
        self._state = LoopState.IDLE
        self._source: Optional[FrameSource] = None
        self._handle: Any = None
        self._last_timestamp: Optional[float] = None

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def source(self) -> Optional[FrameSource]:
        return self._source

    def attach_source(self, source: FrameSource) -> None:
        """Attach a playing frame source and start if the detector is ready."""
        if self._source is not None and self._source is not source:
            self.detach_source()
        self._source = source
        self._maybe_start()

    def detach_source(self) -> None:
        """Stop ticking; the pending tick is cancelled and nothing is rescheduled."""
        self._source = None
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None
        if self._state is LoopState.RUNNING:
            logging.info(
                f"Inference loop stopped: ticks={self.stats.ticks}, "
                f"inferences={self.stats.inferences}, failed={self.stats.failed_frames}"
            )
        self._state = LoopState.IDLE

    def notify_ready(self) -> None:
        """Call after the feed finished initializing."""
        self._maybe_start()

    def _maybe_start(self) -> None:
        if self._state is LoopState.RUNNING:
            return
        if self._source is None or not self.feed.ready:
            return
        self._state = LoopState.RUNNING
        self._last_timestamp = None
        logging.info(f"Inference loop started: source={self._source.source_id}")
        self._handle = self.scheduler.call_on_next_frame(self._tick)

    def _tick(self) -> None:
        self._handle = None
        if self._state is not LoopState.RUNNING or self._source is None:
            return
        self.stats.ticks += 1

        try:
            self._process(self._source)
        except TransientFrameError as e:
            self.stats.failed_frames += 1
            logging.warning(f"Skipping frame: {e}")
        finally:
            if self._state is LoopState.RUNNING and self._source is not None:
                self._handle = self.scheduler.call_on_next_frame(self._tick)

    def _process(self, source: FrameSource) -> None:
        frame_data = source.read()
        if frame_data is None:
            return
        if frame_data.timestamp_ms == self._last_timestamp:
            self.stats.duplicate_frames += 1
            return
        self._last_timestamp = frame_data.timestamp_ms

        try:
            detections = self.feed.detect(frame_data)
        except Exception as e:
            raise TransientFrameError(f"detect failed at t={frame_data.timestamp_ms}: {e}") from e

        self.stats.inferences += 1
        logging.debug(f"frame t={frame_data.timestamp_ms} detections={len(detections)}")
        self.on_detections(detections)
