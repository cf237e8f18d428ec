"""
Tests for the continuous inference loop.
"""

import asyncio
import logging

import pytest

from conftest import FakeSource
from inference.adapter import DetectionFeed
from inference.engine import EngineOptions
from pipeline.loop import InferenceLoop, LoopState
from pipeline.scheduler import AsyncioFrameScheduler, ManualScheduler


@pytest.fixture
def published():
    return []


@pytest.fixture
def feed(engine_factory):
    return DetectionFeed(EngineOptions(model_source="m"), engine_factory)


@pytest.fixture
def loop(feed, scheduler, published):
    return InferenceLoop(feed, scheduler, published.append)


def _ready(feed):
    asyncio.run(feed.initialize())


def _opened(source):
    source.open()
    return source


class TestLoopTransitions:
    def test_idle_without_source(self, loop, feed, scheduler):
        _ready(feed)
        loop.notify_ready()
        assert loop.state is LoopState.IDLE
        assert scheduler.pending == 0

    def test_idle_until_detector_ready(self, loop, feed, scheduler):
        loop.attach_source(FakeSource())
        assert loop.state is LoopState.IDLE
        assert scheduler.pending == 0

        _ready(feed)
        loop.notify_ready()
        assert loop.state is LoopState.RUNNING
        assert scheduler.pending == 1

    def test_detach_stops_within_one_tick(self, loop, feed, scheduler, published):
        _ready(feed)
        source = FakeSource()
        loop.attach_source(source)
        scheduler.run_pending()
        reads = source.reads

        loop.detach_source()
        assert loop.state is LoopState.IDLE
        assert scheduler.pending == 0
        assert scheduler.run_pending() == 0
        assert source.reads == reads

    def test_unavailable_detector_never_runs(self, failing_factory, scheduler, published):
        feed = DetectionFeed(EngineOptions(model_source="m"), failing_factory)
        loop = InferenceLoop(feed, scheduler, published.append)
        _ready(feed)
        loop.attach_source(FakeSource())
        loop.notify_ready()

        assert loop.state is LoopState.IDLE
        assert scheduler.run_pending() == 0
        assert published == []


class TestLoopTicks:
    def test_same_timestamp_detected_once(self, loop, feed, scheduler, published, fake_engine):
        _ready(feed)
        source = FakeSource()
        source.open()
        source.timestamp_ms = 100.0
        loop.attach_source(source)

        for _ in range(5):
            scheduler.run_pending()

        assert len(published) == 1
        assert fake_engine.video_calls == [100.0]
        assert loop.stats.duplicate_frames == 4

    def test_advancing_frames_detected_each(self, loop, feed, scheduler, published):
        _ready(feed)
        source = FakeSource()
        source.open()
        loop.attach_source(source)

        for ts in (0.0, 33.0, 33.0, 66.0):
            source.timestamp_ms = ts
            scheduler.run_pending()

        assert [d.timestamp_ms for d in published] == [0.0, 33.0, 66.0]

    def test_rearms_after_every_tick(self, loop, feed, scheduler):
        _ready(feed)
        loop.attach_source(_opened(FakeSource()))
        for _ in range(3):
            assert scheduler.run_pending() == 1
        assert scheduler.pending == 1
        assert loop.stats.ticks == 3

    def test_failed_detect_keeps_previous_and_continues(self, loop, feed, scheduler, published, fake_engine):
        _ready(feed)
        source = FakeSource()
        source.open()
        loop.attach_source(source)

        source.timestamp_ms = 1.0
        scheduler.run_pending()
        fake_engine.fail_next = 1
        source.timestamp_ms = 2.0
        scheduler.run_pending()
        source.timestamp_ms = 3.0
        scheduler.run_pending()

        assert [d.timestamp_ms for d in published] == [1.0, 3.0]
        assert loop.stats.failed_frames == 1
        assert loop.state is LoopState.RUNNING

    def test_failed_detect_is_logged_as_transient(self, loop, feed, scheduler, fake_engine, caplog):
        _ready(feed)
        source = FakeSource()
        source.open()
        source.timestamp_ms = 7.0
        loop.attach_source(source)
        fake_engine.fail_next = 1

        with caplog.at_level(logging.WARNING):
            scheduler.run_pending()

        assert "Skipping frame: detect failed at t=7.0" in caplog.text
        assert scheduler.pending == 1

    def test_detach_from_callback(self, feed, scheduler):
        loop = InferenceLoop(feed, scheduler, lambda detections: loop.detach_source())
        _ready(feed)
        loop.attach_source(_opened(FakeSource()))
        scheduler.run_pending()
        assert loop.state is LoopState.IDLE
        assert scheduler.pending == 0


class TestSchedulers:
    def test_manual_cancel(self):
        scheduler = ManualScheduler()
        calls = []
        handle = scheduler.call_on_next_frame(lambda: calls.append(1))
        scheduler.cancel(handle)
        assert scheduler.run_pending() == 0
        assert calls == []

    def test_asyncio_scheduler_runs_and_cancels(self):
        async def scenario():
            scheduler = AsyncioFrameScheduler(refresh_hz=1000)
            calls = []
            scheduler.call_on_next_frame(lambda: calls.append("a"))
            cancelled = scheduler.call_on_next_frame(lambda: calls.append("b"))
            scheduler.cancel(cancelled)
            await asyncio.sleep(0.05)
            return calls

        assert asyncio.run(scenario()) == ["a"]

    def test_asyncio_scheduler_rejects_bad_rate(self):
        with pytest.raises(ValueError):
            AsyncioFrameScheduler(refresh_hz=0)
