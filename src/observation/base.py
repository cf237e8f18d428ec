"""
FrameSource interface for camera and video inputs.

A frame source is the live feed behind the viewport. The loop reads its
latest frame once per display tick; the capture button takes a still from it.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from models.frame import FrameData
from runtime.errors import CameraPermissionError


@dataclass
class SourceConfig:
    """
    Base configuration for frame sources.

    Attributes:
        source_id: Unique identifier for this source (e.g., "webcam").
        resolution: Requested resolution as (width, height). None = device default.
        fps: Requested frames per second. None = device default.
        metadata: Additional source-specific configuration.
    """
    source_id: str = "default"
    resolution: Optional[tuple[int, int]] = None
    fps: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class FrameSource(ABC):
    """
    Abstract base class for frame sources.

    Lifecycle:
        1. Create instance with config
        2. await request_access() (or open()) to acquire the device
        3. Call read() once per tick to get the latest frame
        4. Call close() to release resources
    """

    def __init__(self, config: SourceConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0
        self._latest: Optional[FrameData] = None

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @property
    def latest(self) -> Optional[FrameData]:
        """Most recent frame returned by read(), if any."""
        return self._latest

    async def request_access(self) -> None:
        """
        Acquire the device without blocking the event loop.

        Raises:
            CameraPermissionError: If access is denied or the device cannot be opened.
        """
        try:
            await asyncio.to_thread(self.open)
        except CameraPermissionError:
            raise
        except Exception as e:
            logging.error(f"Camera access failed for {self.source_id}: {e}")
            raise CameraPermissionError(f"Camera access failed: {e}") from e

    @abstractmethod
    def open(self) -> None:
        """
        Open/initialize the source.

        Raises:
            RuntimeError: If the source cannot be opened.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """
        Return the current frame.

        Returns None if no frame is available. Must not wait on the device:
        it runs on the event loop once per tick. Reading twice without the
        underlying frame advancing returns the same timestamp.
        """

    async def wait_for_frame(self, timeout_s: float = 2.0, poll_s: float = 0.01) -> Optional[FrameData]:
        """Yield to the event loop until the first frame arrives or timeout_s passes."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_s
        frame_data = self.read()
        while frame_data is None and self.is_open and loop.time() < deadline:
            await asyncio.sleep(poll_s)
            frame_data = self.read()
        return frame_data

    def capture_still(self) -> Optional[FrameData]:
        """Return an independent copy of the current frame."""
        frame_data = self.read()
        if frame_data is None:
            return None
        return FrameData(
            frame=frame_data.frame.copy(),
            width=frame_data.width,
            height=frame_data.height,
            timestamp_ms=frame_data.timestamp_ms,
            frame_index=frame_data.frame_index,
            source=frame_data.source,
        )

    @abstractmethod
    def close(self) -> None:
        """Release the device. Safe to call multiple times."""

    def __enter__(self) -> "FrameSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
