"""
Smoke tests for typed models and adapters.
"""

import numpy as np

from models.detection import BoundingBox, Detection, DetectionSet, detections_from_numpy
from models.frame import FrameData
from models.shape import Rectangle, ShapeStyle


class TestBoundingBox:
    def test_from_xyxy(self):
        bbox = BoundingBox.from_xyxy(100, 50, 300, 200)
        assert (bbox.origin_x, bbox.origin_y, bbox.width, bbox.height) == (100, 50, 200, 150)
        assert bbox.as_xyxy() == (100, 50, 300, 200)
        assert bbox.area == 30000

    def test_inverted_corners_give_empty_box(self):
        bbox = BoundingBox.from_xyxy(50, 50, 40, 40)
        assert bbox.width == 0
        assert bbox.height == 0


class TestDetection:
    def test_primary_label(self):
        det = Detection.from_xyxy(0, 0, 10, 10, score=0.75, category_name="bottle")
        assert det.label == "bottle"
        assert det.score == 0.75

    def test_from_numpy_row_with_names(self):
        det = Detection.from_numpy_row(np.array([1, 2, 11, 22, 0.6, 3]), names={3: "car"})
        assert det.label == "car"
        assert det.bounding_box.width == 10

    def test_detections_from_numpy_empty(self):
        assert detections_from_numpy(np.array([])) == []


class TestDetectionSet:
    def test_above_keeps_order_and_timestamp(self):
        a = Detection.from_xyxy(0, 0, 1, 1, score=0.9, category_name="a")
        b = Detection.from_xyxy(0, 0, 1, 1, score=0.1, category_name="b")
        c = Detection.from_xyxy(0, 0, 1, 1, score=0.6, category_name="c")
        filtered = DetectionSet.of([a, b, c], timestamp_ms=12.0).above(0.5)
        assert [d.label for d in filtered] == ["a", "c"]
        assert filtered.timestamp_ms == 12.0


class TestRectangle:
    def test_from_dict_defaults_style(self):
        rect = Rectangle.from_dict({"id": 7, "x": 1, "y": 2, "width": 3, "height": 4})
        assert rect.id == "7"
        assert rect.style == ShapeStyle()

    def test_contains_edges(self):
        rect = Rectangle(id="r", x=10, y=10, width=10, height=10)
        assert rect.contains(10, 10)
        assert rect.contains(20, 20)
        assert not rect.contains(21, 15)

    def test_to_dict(self):
        rect = Rectangle(id="r", x=1, y=2, width=3, height=4, style=ShapeStyle(fill="green"))
        assert rect.to_dict()["style"]["fill"] == "green"


class TestFrameData:
    def test_from_numpy(self):
        fd = FrameData.from_numpy(np.zeros((480, 640, 3), dtype=np.uint8), timestamp_ms=5.0)
        assert fd.size == (640, 480)
        assert fd.timestamp_ms == 5.0
