"""
OpenCV-based frame source.

Supports:
- USB webcams (device_id as int, e.g., 0)
- RTSP/IP cameras (device_id as str URL)
- Video files (device_id as file path)
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlparse, urlunparse

import cv2

from models.config import CameraConfig
from models.frame import FrameData
from runtime.errors import CameraPermissionError
from .base import FrameSource, SourceConfig


def sanitize_url(device_id: Union[int, str]) -> str:
    """Strip credentials from a stream URL before logging it."""
    if not isinstance(device_id, str) or "://" not in device_id:
        return str(device_id)
    parsed = urlparse(device_id)
    if not parsed.username and not parsed.password:
        return device_id
    host = parsed.hostname or ""
    if parsed.port:
        host = f"{host}:{parsed.port}"
    return urlunparse(parsed._replace(netloc=f"***@{host}"))


@dataclass
class OpenCVSourceConfig(SourceConfig):
    """
    Configuration for OpenCV-based sources.

    Attributes:
        device_id: Camera index (int), RTSP URL (str), or file path (str).
        buffer_size: OpenCV capture buffer size (reduces latency for live feeds).
        max_retries: Maximum attempts to open the device.
        retry_delay_s: Pause after a failed grab on a live device.
    """
    device_id: Union[int, str] = 0
    buffer_size: int = 1
    max_retries: int = 3
    retry_delay_s: float = 0.05

    @classmethod
    def from_camera_config(cls, camera_cfg: CameraConfig, source_id: str = "webcam") -> "OpenCVSourceConfig":
        """Adapter: Create OpenCVSourceConfig from the typed camera config."""
        resolution = tuple(camera_cfg.resolution) if camera_cfg.resolution else None
        return cls(
            source_id=source_id,
            resolution=resolution,
            fps=camera_cfg.fps,
            device_id=camera_cfg.device_id,
        )


class OpenCVSource(FrameSource):
    """
    Wraps cv2.VideoCapture to provide frames as FrameData objects.

    A background thread grabs frames as the device produces them and keeps
    the newest one; read() hands that frame out without touching the device.
    Files are stamped with their media position and released at their media
    rate; live devices are stamped with the milliseconds elapsed since open.
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None
        self._start_time: float = 0.0
        self._file_mode = False
        self._frame_lock = threading.Lock()
        self._stop_grab = threading.Event()
        self._grab_thread: Optional[threading.Thread] = None

    @property
    def device_id(self) -> Union[int, str]:
        return self._opencv_config.device_id

    @property
    def is_rtsp(self) -> bool:
        return isinstance(self.device_id, str) and (
            self.device_id.startswith("rtsp://") or
            self.device_id.startswith("rtsps://")
        )

    @property
    def is_file(self) -> bool:
        return (
            isinstance(self.device_id, str) and
            not self.is_rtsp and
            os.path.exists(self.device_id)
        )

    def open(self) -> None:
        if self._is_open:
            return

        self._initialize()
        self._is_open = True
        self._frame_index = 0
        self._file_mode = self.is_file
        self._latest = None
        self._start_time = time.monotonic()
        self._stop_grab.clear()
        self._grab_thread = threading.Thread(target=self._grab_worker, name=f"grab-{self.source_id}")
        self._grab_thread.daemon = True
        self._grab_thread.start()

        logging.info(
            f"OpenCVSource opened: source_id={self.source_id}, "
            f"device={sanitize_url(self.device_id)}, resolution={self._opencv_config.resolution}"
        )

    def _initialize(self) -> None:
        for attempt in range(1, self._opencv_config.max_retries + 1):
            self._cap = cv2.VideoCapture(self.device_id)
            if self._cap.isOpened():
                break
            self._cap.release()
            self._cap = None
            logging.warning(
                f"Failed to open device {sanitize_url(self.device_id)} "
                f"(attempt {attempt}/{self._opencv_config.max_retries})"
            )
        else:
            raise CameraPermissionError(
                f"Could not open device {sanitize_url(self.device_id)}; "
                "check that it exists and access is allowed"
            )

        if isinstance(self.device_id, int) and self._opencv_config.resolution:
            w, h = self._opencv_config.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            if self._opencv_config.fps:
                self._cap.set(cv2.CAP_PROP_FPS, self._opencv_config.fps)
            self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self._opencv_config.buffer_size)

            logging.info(
                f"Camera actual settings - Resolution: "
                f"({self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)}x{self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)}), "
                f"FPS: {self._cap.get(cv2.CAP_PROP_FPS)}"
            )

    def _grab_worker(self) -> None:
        """Pull frames off the device and keep the newest one."""
        cap = self._cap
        failures = 0
        while not self._stop_grab.is_set():
            ret, frame = cap.read()
            if not ret or frame is None:
                if self._file_mode:
                    logging.info("End of video file reached")
                    return
                if failures == 0:
                    logging.warning(f"Failed to read frame from {self.source_id}")
                failures += 1
                self._stop_grab.wait(self._opencv_config.retry_delay_s)
                continue
            failures = 0

            if self._file_mode:
                timestamp_ms = float(cap.get(cv2.CAP_PROP_POS_MSEC))
                # Hold file frames until their media time comes up on the wall clock
                delay = self._start_time + timestamp_ms / 1000.0 - time.monotonic()
                if delay > 0 and self._stop_grab.wait(delay):
                    return
            else:
                timestamp_ms = (time.monotonic() - self._start_time) * 1000.0

            with self._frame_lock:
                self._frame_index += 1
                self._latest = FrameData.from_numpy(
                    frame,
                    timestamp_ms=timestamp_ms,
                    frame_index=self._frame_index,
                    source=self.source_id,
                )

    def read(self) -> Optional[FrameData]:
        """Return the newest grabbed frame without waiting on the device."""
        if not self._is_open:
            return None
        with self._frame_lock:
            return self._latest

    def close(self) -> None:
        self._stop_grab.set()
        if self._grab_thread is not None:
            self._grab_thread.join(timeout=2.0)
            self._grab_thread = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"OpenCVSource closed: source_id={self.source_id}")
        self._is_open = False


def create_source_from_config(camera_cfg: CameraConfig, source_id: str = "webcam") -> OpenCVSource:
    """Factory: build the configured camera source."""
    return OpenCVSource(OpenCVSourceConfig.from_camera_config(camera_cfg, source_id=source_id))
