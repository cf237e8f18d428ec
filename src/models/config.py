"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


def _default_shapes() -> List[Dict[str, Any]]:
    return [
        {"id": "rect1", "x": 10, "y": 10, "width": 100, "height": 100,
         "style": {"fill": "red"}},
        {"id": "rect2", "x": 150, "y": 150, "width": 100, "height": 100,
         "style": {"fill": "green"}},
    ]


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [640, 480])
    fps: int = 30
    mirrored: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [640, 480]),
            fps=d.get("fps", 30),
            mirrored=d.get("mirrored", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "mirrored": self.mirrored,
        }


@dataclass
class DetectorConfig:
    """Inference engine configuration."""
    model_source: str = "yolov8n.pt"
    execution_target: str = "CPU"
    score_threshold: float = 0.5
    running_mode: str = "VIDEO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectorConfig":
        return cls(
            model_source=d.get("model_source", "yolov8n.pt"),
            execution_target=str(d.get("execution_target", "CPU")).upper(),
            score_threshold=d.get("score_threshold", 0.5),
            running_mode=str(d.get("running_mode", "VIDEO")).upper(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model_source": self.model_source,
            "execution_target": self.execution_target,
            "score_threshold": self.score_threshold,
            "running_mode": self.running_mode,
        }


@dataclass
class OverlayConfig:
    """Overlay rendering configuration."""
    label_pad: float = 10.0
    show_scores: bool = True
    chrome_height: float = 0.0
    refresh_hz: float = 60.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OverlayConfig":
        return cls(
            label_pad=d.get("label_pad", 10.0),
            show_scores=d.get("show_scores", True),
            chrome_height=d.get("chrome_height", 0.0),
            refresh_hz=d.get("refresh_hz", 60.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label_pad": self.label_pad,
            "show_scores": self.show_scores,
            "chrome_height": self.chrome_height,
            "refresh_hz": self.refresh_hz,
        }


@dataclass
class EditorConfig:
    """Shape editor configuration and seeded rectangles."""
    min_size: float = 5.0
    shapes: List[Dict[str, Any]] = field(default_factory=_default_shapes)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EditorConfig":
        shapes = d.get("shapes")
        return cls(
            min_size=d.get("min_size", 5.0),
            shapes=list(shapes) if shapes is not None else _default_shapes(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"min_size": self.min_size, "shapes": self.shapes}


@dataclass
class WebConfig:
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(host=d.get("host", "127.0.0.1"), port=d.get("port", 8000))

    def to_dict(self) -> Dict[str, Any]:
        return {"host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/overlay.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            detector=DetectorConfig.from_dict(d.get("detector", {}) or {}),
            overlay=OverlayConfig.from_dict(d.get("overlay", {}) or {}),
            editor=EditorConfig.from_dict(d.get("editor", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/overlay.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or logging the effective config)."""
        return {
            "camera": self.camera.to_dict(),
            "detector": self.detector.to_dict(),
            "overlay": self.overlay.to_dict(),
            "editor": self.editor.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
