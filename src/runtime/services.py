from __future__ import annotations

import logging
from typing import Optional

from inference.engine import RunningMode
from models.detection import DetectionSet
from runtime.context import RuntimeContext
from runtime.errors import InitializationError


class DetectorService:
    """Loads the detector and lets the inference loop start once it is ready."""

    def __init__(self, ctx: RuntimeContext):
        self.ctx = ctx

    async def start(self) -> bool:
        ready = await self.ctx.feed.initialize()
        if ready:
            self.ctx.loop.notify_ready()
        return ready

    def status(self) -> str:
        return self.ctx.feed.state.value


class CameraService:
    """
    Acquires the camera and hands it to the inference loop.

    In IMAGE mode the camera only feeds the capture button; the continuous
    loop runs in VIDEO mode.
    """

    def __init__(self, ctx: RuntimeContext):
        self.ctx = ctx

    async def enable(self) -> None:
        """
        Raises:
            InitializationError: The detector is not loaded yet or unavailable.
            CameraPermissionError: Camera access was denied.
        """
        if not self.ctx.feed.ready:
            raise InitializationError(f"Detector is {self.ctx.feed.state.value}; wait for it to load")
        if self.ctx.camera is not None and self.ctx.camera.is_open:
            return

        source = self.ctx.source_factory(self.ctx.config.camera)
        await source.request_access()
        if self.ctx.camera is not None and self.ctx.camera.is_open:
            # Another enable finished while this one was waiting on the device
            if self.ctx.camera is not source:
                source.close()
            return
        self.ctx.camera = source

        first = await source.wait_for_frame()
        if self.ctx.camera is not source:
            return
        if first is not None:
            self.ctx.renderer.source_size = first.size
            logging.info(f"Camera playing at {first.width}x{first.height}")

        if self.ctx.feed.options.running_mode is RunningMode.VIDEO:
            self.ctx.loop.attach_source(source)

    def disable(self) -> None:
        self.ctx.loop.detach_source()
        if self.ctx.camera is not None:
            self.ctx.camera.close()
            self.ctx.camera = None
        self.ctx.renderer.clear()


class CaptureService:
    """Single-shot path: take a still, detect once, replace the overlay."""

    def __init__(self, ctx: RuntimeContext):
        self.ctx = ctx

    def capture(self) -> Optional[DetectionSet]:
        """
        Returns the new detection set, or None when no still is available or a
        capture is already running.

        Raises:
            InitializationError: The detector is not ready.
        """
        ctx = self.ctx
        if not ctx.feed.ready:
            raise InitializationError(f"Detector is {ctx.feed.state.value}")
        if ctx.camera is None or ctx.capture_in_flight:
            return None

        ctx.capture_in_flight = True
        try:
            still = ctx.camera.capture_still()
            if still is None:
                logging.warning("Capture failed: no frame available")
                return None
            detections = ctx.feed.detect(still)
        except InitializationError:
            raise
        except Exception as e:
            logging.warning(f"Capture detection failed, keeping previous overlay: {e}")
            return None
        finally:
            ctx.capture_in_flight = False

        ctx.last_capture = still
        ctx.renderer.source_size = still.size
        ctx.renderer.set_detections(detections)
        logging.info(f"Captured still: detections={len(detections)}")
        return detections
