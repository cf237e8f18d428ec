from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from models.shape import Rectangle, ShapeStyle
from overlay.renderer import OverlayElement


class BoxModel(BaseModel):
    left: float
    top: float
    width: float
    height: float


class HandleModel(BaseModel):
    name: str
    x: float
    y: float


class OverlayElementModel(BaseModel):
    kind: str
    key: str
    label: str
    box: BoxModel
    score_text: Optional[str] = None
    selected: bool = False
    handles: List[HandleModel] = Field(default_factory=list)

    @classmethod
    def from_element(cls, el: OverlayElement) -> "OverlayElementModel":
        return cls(
            kind=el.kind,
            key=el.key,
            label=el.label,
            box=BoxModel(left=el.box.left, top=el.box.top, width=el.box.width, height=el.box.height),
            score_text=el.score_text,
            selected=el.selected,
            handles=[HandleModel(name=n, x=x, y=y) for n, x, y in el.handles],
        )


class OverlayResponse(BaseModel):
    version: int
    viewport_ready: bool
    detections: List[OverlayElementModel]
    shapes: List[OverlayElementModel]


class StatusResponse(BaseModel):
    detector: str = Field(..., description="pending|ready|unavailable")
    detector_error: Optional[str] = None
    loop: str = Field(..., description="idle|running")
    camera_open: bool
    running_mode: str
    viewport: Dict[str, float]
    detection_count: int
    stats: Dict[str, float]


class ViewportRequest(BaseModel):
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    event: Literal["mount", "resize", "playing"] = "resize"


class StyleModel(BaseModel):
    fill: str = "red"
    stroke: str = "black"
    stroke_width: float = 1.0


class ShapeModel(BaseModel):
    id: str
    x: float
    y: float
    width: float
    height: float
    style: StyleModel = Field(default_factory=StyleModel)

    @classmethod
    def from_rect(cls, rect: Rectangle) -> "ShapeModel":
        return cls(
            id=rect.id,
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            style=StyleModel(**rect.style.to_dict()),
        )

    def to_rect(self) -> Rectangle:
        return Rectangle(
            id=self.id,
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
            style=ShapeStyle(**self.style.model_dump()),
        )


class ShapesResponse(BaseModel):
    shapes: List[ShapeModel]
    selected_id: Optional[str] = None
    revision: int


class PointerRequest(BaseModel):
    x: float
    y: float


class MoveRequest(BaseModel):
    dx: Optional[float] = None
    dy: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None


class ResizeRequest(BaseModel):
    width: Optional[float] = None
    height: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None
    handle: Optional[str] = None
    dx: float = 0.0
    dy: float = 0.0


class ResizeResponse(BaseModel):
    accepted: bool
    shape: ShapeModel


class CaptureResponse(BaseModel):
    captured: bool
    detection_count: int
