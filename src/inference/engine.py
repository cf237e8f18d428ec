"""
Inference engine interface.

Engines return pixel-space detections in the original frame coordinate system.
An engine is configured once for either still images or a timestamped video
stream; the two entry points mirror that.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

import numpy as np

from models.config import DetectorConfig
from models.detection import DetectionSet


class ExecutionTarget(str, Enum):
    CPU = "CPU"
    GPU = "GPU"


class RunningMode(str, Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


@dataclass(frozen=True)
class EngineOptions:
    model_source: str
    execution_target: ExecutionTarget = ExecutionTarget.CPU
    score_threshold: float = 0.5
    running_mode: RunningMode = RunningMode.VIDEO

    def __post_init__(self):
        if not 0.0 <= self.score_threshold <= 1.0:
            raise ValueError(f"score_threshold must be in [0, 1], got {self.score_threshold}")

    @classmethod
    def from_config(cls, cfg: DetectorConfig) -> "EngineOptions":
        return cls(
            model_source=cfg.model_source,
            execution_target=ExecutionTarget(cfg.execution_target),
            score_threshold=float(cfg.score_threshold),
            running_mode=RunningMode(cfg.running_mode),
        )


class InferenceEngine(Protocol):
    def detect(self, image: np.ndarray) -> DetectionSet:
        ...

    def detect_for_video(self, image: np.ndarray, timestamp_ms: float) -> DetectionSet:
        ...


EngineFactory = Callable[[EngineOptions], InferenceEngine]
