"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.config import Config  # noqa: E402
from models.detection import Detection, DetectionSet  # noqa: E402
from models.frame import FrameData  # noqa: E402
from observation.base import FrameSource, SourceConfig  # noqa: E402
from pipeline.scheduler import ManualScheduler  # noqa: E402
from runtime.context import build_context  # noqa: E402
from runtime.errors import CameraPermissionError  # noqa: E402


class FakeEngine:
    """Engine returning a fixed detection set and recording calls."""

    def __init__(self, options=None, detections=None):
        self.options = options
        self.detections = list(detections or [])
        self.image_calls = []
        self.video_calls = []
        self.fail_next = 0

    def _result(self, timestamp_ms):
        if self.fail_next:
            self.fail_next -= 1
            raise RuntimeError("inference blew up")
        return DetectionSet.of(self.detections, timestamp_ms=timestamp_ms)

    def detect(self, image):
        self.image_calls.append(image)
        return self._result(None)

    def detect_for_video(self, image, timestamp_ms):
        self.video_calls.append(timestamp_ms)
        return self._result(timestamp_ms)


class FakeSource(FrameSource):
    """Frame source whose current timestamp is set by the test."""

    def __init__(self, size=(640, 480), deny=False, source_id="fake-cam"):
        super().__init__(SourceConfig(source_id=source_id))
        self.width, self.height = size
        self.deny = deny
        self.timestamp_ms = 0.0
        self.reads = 0

    def open(self):
        if self.deny:
            raise CameraPermissionError("Permission denied")
        self._is_open = True

    def read(self):
        if not self._is_open:
            return None
        self.reads += 1
        self._frame_index += 1
        self._latest = FrameData.from_numpy(
            np.zeros((self.height, self.width, 3), dtype=np.uint8),
            timestamp_ms=self.timestamp_ms,
            frame_index=self._frame_index,
            source=self.source_id,
        )
        return self._latest

    def close(self):
        self._is_open = False


@pytest.fixture
def person():
    return Detection.from_xyxy(100, 50, 300, 200, score=0.87, category_name="person")


@pytest.fixture
def fake_engine(person):
    return FakeEngine(detections=[person])


@pytest.fixture
def engine_factory(fake_engine):
    def factory(options):
        fake_engine.options = options
        return fake_engine
    return factory


@pytest.fixture
def failing_factory():
    def factory(options):
        raise ConnectionError("model download failed")
    return factory


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [640, 480],
            "fps": 30,
            "mirrored": True,
        },
        "detector": {
            "model_source": "yolov8n.pt",
            "execution_target": "CPU",
            "score_threshold": 0.5,
            "running_mode": "VIDEO",
        },
        "overlay": {"label_pad": 10, "refresh_hz": 60},
        "editor": {
            "min_size": 5,
            "shapes": [
                {"id": "rect1", "x": 10, "y": 10, "width": 100, "height": 100},
                {"id": "rect2", "x": 150, "y": 150, "width": 100, "height": 100},
            ],
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    (config_dir / "default.yaml").write_text("""
camera:
  device_id: 0
  resolution: [640, 480]
  fps: 30
  mirrored: true

detector:
  model_source: "yolov8n.pt"
  score_threshold: 0.5

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def make_ctx(engine_factory, scheduler, valid_config):
    """Build a RuntimeContext wired to fakes; pass source/engine factories to override."""
    def make(source=None, factory=None, **detector_overrides):
        raw = dict(valid_config)
        raw["detector"] = {**valid_config["detector"], **detector_overrides}
        src = source or FakeSource()
        return build_context(
            Config.from_dict(raw),
            engine_factory=factory or engine_factory,
            source_factory=lambda camera_cfg: src,
            scheduler=scheduler,
        )
    return make
