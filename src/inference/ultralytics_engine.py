"""
Ultralytics YOLO inference engine.

The model source may be a local path or an http(s) URL; Ultralytics fetches
and caches remote weights on first load, which is why construction is slow and
runs off the event loop.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import numpy as np

from models.detection import BoundingBox, Category, Detection, DetectionSet
from .engine import EngineOptions, ExecutionTarget, InferenceEngine


class UltralyticsEngine(InferenceEngine):
    def __init__(self, options: EngineOptions):
        self.options = options
        try:
            from ultralytics import YOLO  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "Ultralytics is not installed. Install with `pip install ultralytics`."
            ) from e

        self._device = self._resolve_device(options.execution_target)
        self._model = YOLO(options.model_source)
        self._names: Dict[int, str] = dict(getattr(self._model, "names", None) or {})

    @staticmethod
    def _resolve_device(target: ExecutionTarget) -> str:
        if target is ExecutionTarget.CPU:
            return "cpu"
        import torch  # type: ignore

        if not torch.cuda.is_available():
            raise RuntimeError("GPU execution requested but CUDA is not available")
        return "cuda"

    def detect(self, image: np.ndarray) -> DetectionSet:
        return self._predict(image, timestamp_ms=None)

    def detect_for_video(self, image: np.ndarray, timestamp_ms: float) -> DetectionSet:
        return self._predict(image, timestamp_ms=timestamp_ms)

    def _predict(self, image: np.ndarray, timestamp_ms: Optional[float]) -> DetectionSet:
        results = self._model.predict(
            source=image,
            conf=self.options.score_threshold,
            device=self._device,
            verbose=False,
        )
        if not results:
            return DetectionSet(timestamp_ms=timestamp_ms)

        r0 = results[0]
        names = getattr(r0, "names", None) or self._names
        boxes = getattr(r0, "boxes", None)
        if boxes is None:
            return DetectionSet(timestamp_ms=timestamp_ms)

        xyxy = boxes.xyxy.cpu().numpy() if hasattr(boxes.xyxy, "cpu") else np.asarray(boxes.xyxy)
        conf = boxes.conf.cpu().numpy() if hasattr(boxes.conf, "cpu") else np.asarray(boxes.conf)
        cls = boxes.cls.cpu().numpy() if hasattr(boxes.cls, "cpu") else np.asarray(boxes.cls)

        out: List[Detection] = []
        for (x1, y1, x2, y2), c, k in zip(xyxy, conf, cls):
            class_id = int(k)
            out.append(
                Detection(
                    bounding_box=BoundingBox.from_xyxy(x1, y1, x2, y2),
                    categories=(Category(category_name=names.get(class_id) or str(class_id), score=float(c)),),
                )
            )

        return DetectionSet.of(out, timestamp_ms=timestamp_ms)
