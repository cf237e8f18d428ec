"""
Tests for viewport size tracking.
"""

from models.shape import ViewportSize
from viewport.tracker import ViewportTracker


class TestViewportTracker:
    def test_not_ready_before_mount(self):
        tracker = ViewportTracker()
        assert tracker.size == ViewportSize()
        assert not tracker.ready

    def test_mount_resize_and_playing_publish(self):
        tracker = ViewportTracker()
        seen = []
        tracker.subscribe(seen.append)

        tracker.mount(800, 600)
        tracker.resize(1024, 768)
        tracker.source_playing(640, 480)

        assert seen == [
            ViewportSize(800, 600),
            ViewportSize(1024, 768),
            ViewportSize(640, 480),
        ]
        assert tracker.ready

    def test_chrome_height_excluded(self):
        tracker = ViewportTracker(chrome_height=40)
        assert tracker.mount(640, 520) == ViewportSize(640, 480)

    def test_chrome_taller_than_container(self):
        tracker = ViewportTracker(chrome_height=40)
        size = tracker.mount(640, 30)
        assert size.height == 0
        assert not tracker.ready

    def test_unchanged_size_not_republished(self):
        tracker = ViewportTracker()
        seen = []
        tracker.subscribe(seen.append)
        tracker.mount(640, 480)
        tracker.resize(640, 480)
        assert len(seen) == 1

    def test_unsubscribe(self):
        tracker = ViewportTracker()
        seen = []
        unsubscribe = tracker.subscribe(seen.append)
        unsubscribe()
        tracker.mount(640, 480)
        assert seen == []
