"""
Tests for the detection feed adapter.
"""

import asyncio

import numpy as np
import pytest

from conftest import FakeEngine
from inference.adapter import DetectionFeed, FeedState, ImageMode, VideoMode
from inference.engine import EngineOptions, ExecutionTarget, RunningMode
from models.config import DetectorConfig
from models.detection import Detection
from models.frame import FrameData
from runtime.errors import InitializationError


def _frame(ts=33.0):
    return FrameData.from_numpy(np.zeros((480, 640, 3), dtype=np.uint8), timestamp_ms=ts)


def _feed(engine, mode=RunningMode.VIDEO, threshold=0.5):
    options = EngineOptions(model_source="model.pt", score_threshold=threshold, running_mode=mode)
    return DetectionFeed(options, lambda opts: engine)


class TestEngineOptions:
    def test_from_config(self):
        cfg = DetectorConfig.from_dict({"execution_target": "gpu", "running_mode": "image"})
        options = EngineOptions.from_config(cfg)
        assert options.execution_target is ExecutionTarget.GPU
        assert options.running_mode is RunningMode.IMAGE
        assert options.score_threshold == 0.5

    def test_threshold_out_of_range(self):
        with pytest.raises(ValueError):
            EngineOptions(model_source="m", score_threshold=1.5)


class TestDetectionFeed:
    def test_starts_pending(self, fake_engine):
        feed = _feed(fake_engine)
        assert feed.state is FeedState.PENDING
        assert not feed.ready

    def test_detect_before_ready_raises(self, fake_engine):
        feed = _feed(fake_engine)
        with pytest.raises(InitializationError):
            feed.detect(_frame())
        assert fake_engine.video_calls == []

    def test_initialize_makes_ready(self, fake_engine):
        feed = _feed(fake_engine)
        assert asyncio.run(feed.initialize()) is True
        assert feed.state is FeedState.READY

    def test_construction_failure_is_unavailable(self, failing_factory):
        options = EngineOptions(model_source="https://example.invalid/model.pt")
        feed = DetectionFeed(options, failing_factory)

        assert asyncio.run(feed.initialize()) is False
        assert feed.state is FeedState.UNAVAILABLE
        assert isinstance(feed.last_error, InitializationError)
        with pytest.raises(InitializationError):
            feed.detect(_frame())

    def test_retry_after_failure(self, fake_engine):
        attempts = []

        def flaky(options):
            attempts.append(options)
            if len(attempts) == 1:
                raise OSError("network down")
            return fake_engine

        feed = DetectionFeed(EngineOptions(model_source="m"), flaky)
        assert asyncio.run(feed.initialize()) is False
        assert asyncio.run(feed.initialize()) is True
        assert feed.ready
        assert feed.last_error is None

    def test_video_mode_passes_timestamp(self, fake_engine):
        feed = _feed(fake_engine, RunningMode.VIDEO)
        asyncio.run(feed.initialize())
        assert isinstance(feed.mode, VideoMode)

        result = feed.detect(_frame(ts=66.0))
        assert fake_engine.video_calls == [66.0]
        assert fake_engine.image_calls == []
        assert result.timestamp_ms == 66.0

    def test_image_mode_uses_still_entry_point(self, fake_engine):
        feed = _feed(fake_engine, RunningMode.IMAGE)
        asyncio.run(feed.initialize())
        assert isinstance(feed.mode, ImageMode)

        result = feed.detect(_frame(ts=10.0))
        assert len(fake_engine.image_calls) == 1
        assert fake_engine.video_calls == []
        assert result.timestamp_ms == 10.0

    def test_nothing_below_threshold(self):
        engine = FakeEngine(detections=[
            Detection.from_xyxy(0, 0, 10, 10, score=0.9, category_name="cup"),
            Detection.from_xyxy(0, 0, 10, 10, score=0.49, category_name="cat"),
            Detection.from_xyxy(0, 0, 10, 10, score=0.5, category_name="dog"),
        ])
        feed = _feed(engine, threshold=0.5)
        asyncio.run(feed.initialize())

        labels = [d.label for d in feed.detect(_frame())]
        assert labels == ["cup", "dog"]
