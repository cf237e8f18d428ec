from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from editor.shapes import ShapeEditor
from inference.adapter import DetectionFeed
from inference.engine import EngineFactory, EngineOptions
from models.config import CameraConfig, Config
from models.frame import FrameData
from models.shape import Rectangle
from observation.base import FrameSource
from overlay.renderer import OverlayRenderer
from pipeline.loop import InferenceLoop
from pipeline.scheduler import AsyncioFrameScheduler, FrameScheduler
from viewport.tracker import ViewportTracker

SourceFactory = Callable[[CameraConfig], FrameSource]


@dataclass
class RuntimeContext:
    """Holds runtime state and service references; avoids global singletons."""

    config: Config
    feed: DetectionFeed
    viewport: ViewportTracker
    renderer: OverlayRenderer
    editor: ShapeEditor
    loop: InferenceLoop
    source_factory: SourceFactory
    camera: Optional[FrameSource] = None

    # Most recent single-shot capture
    last_capture: Optional[FrameData] = None
    capture_in_flight: bool = False

    # Observability
    system_stats: dict = field(default_factory=dict)

    def get_system_stats_copy(self) -> dict:
        stats = dict(self.system_stats)
        stats.update(
            ticks=self.loop.stats.ticks,
            inferences=self.loop.stats.inferences,
            duplicate_frames=self.loop.stats.duplicate_frames,
            failed_frames=self.loop.stats.failed_frames,
        )
        return stats


def build_context(
    config: Config,
    engine_factory: EngineFactory,
    source_factory: SourceFactory,
    scheduler: Optional[FrameScheduler] = None,
) -> RuntimeContext:
    """Wire the overlay components from config. The detector is not loaded here."""
    viewport = ViewportTracker(chrome_height=config.overlay.chrome_height)
    renderer = OverlayRenderer(
        viewport,
        mirrored=config.camera.mirrored,
        label_pad=config.overlay.label_pad,
        show_scores=config.overlay.show_scores,
    )
    editor = ShapeEditor(
        (Rectangle.from_dict(d) for d in config.editor.shapes),
        min_size=config.editor.min_size,
    )
    feed = DetectionFeed(EngineOptions.from_config(config.detector), engine_factory)
    loop = InferenceLoop(
        feed,
        scheduler or AsyncioFrameScheduler(config.overlay.refresh_hz),
        renderer.set_detections,
    )
    return RuntimeContext(
        config=config,
        feed=feed,
        viewport=viewport,
        renderer=renderer,
        editor=editor,
        loop=loop,
        source_factory=source_factory,
    )
