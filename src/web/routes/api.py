from __future__ import annotations

import logging

import cv2
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from runtime.context import RuntimeContext
from runtime.errors import CameraPermissionError, InitializationError
from runtime.services import CameraService, CaptureService
from ..api_models import (
    CaptureResponse,
    MoveRequest,
    OverlayElementModel,
    OverlayResponse,
    PointerRequest,
    ResizeRequest,
    ResizeResponse,
    ShapeModel,
    ShapesResponse,
    StatusResponse,
    ViewportRequest,
)

router = APIRouter()


def get_ctx(request: Request) -> RuntimeContext:
    return request.app.state.ctx


def _shapes_response(ctx: RuntimeContext) -> ShapesResponse:
    return ShapesResponse(
        shapes=[ShapeModel.from_rect(r) for r in ctx.editor.shapes],
        selected_id=ctx.editor.selected_id,
        revision=ctx.editor.revision,
    )


def _require_shape(ctx: RuntimeContext, shape_id: str) -> None:
    if shape_id not in ctx.editor.mapping:
        raise HTTPException(status_code=404, detail=f"Unknown shape: {shape_id}")


@router.get("/status", response_model=StatusResponse)
async def status(ctx: RuntimeContext = Depends(get_ctx)):
    """
    Aggregate runtime status for the UI.
    Fields:
    - detector: pending|ready|unavailable ("unavailable" means detection is off)
    - loop: idle|running
    - viewport: last reported drawable size
    """
    size = ctx.viewport.size
    error = ctx.feed.last_error
    return StatusResponse(
        detector=ctx.feed.state.value,
        detector_error=str(error) if error else None,
        loop=ctx.loop.state.value,
        camera_open=ctx.camera is not None and ctx.camera.is_open,
        running_mode=ctx.feed.options.running_mode.value,
        viewport={"width": size.width, "height": size.height},
        detection_count=len(ctx.renderer.detections),
        stats=ctx.get_system_stats_copy(),
    )


@router.post("/viewport")
async def report_viewport(body: ViewportRequest, ctx: RuntimeContext = Depends(get_ctx)):
    handlers = {
        "mount": ctx.viewport.mount,
        "resize": ctx.viewport.resize,
        "playing": ctx.viewport.source_playing,
    }
    size = handlers[body.event](body.width, body.height)
    return {"width": size.width, "height": size.height, "ready": size.ready}


@router.get("/overlay", response_model=OverlayResponse)
async def overlay(ctx: RuntimeContext = Depends(get_ctx)):
    renderer = ctx.renderer
    return OverlayResponse(
        version=renderer.version,
        viewport_ready=ctx.viewport.ready,
        detections=[OverlayElementModel.from_element(e) for e in renderer.elements],
        shapes=[OverlayElementModel.from_element(e) for e in renderer.shape_elements(ctx.editor)],
    )


@router.post("/camera/enable")
async def enable_camera(ctx: RuntimeContext = Depends(get_ctx)):
    try:
        await CameraService(ctx).enable()
    except InitializationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CameraPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"camera_open": True, "loop": ctx.loop.state.value}


@router.post("/camera/disable")
async def disable_camera(ctx: RuntimeContext = Depends(get_ctx)):
    CameraService(ctx).disable()
    return {"camera_open": False, "loop": ctx.loop.state.value}


@router.post("/capture", response_model=CaptureResponse)
async def capture(ctx: RuntimeContext = Depends(get_ctx)):
    try:
        detections = CaptureService(ctx).capture()
    except InitializationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if detections is None:
        return CaptureResponse(captured=False, detection_count=len(ctx.renderer.detections))
    return CaptureResponse(captured=True, detection_count=len(detections))


@router.get("/snapshot.jpg")
async def snapshot(ctx: RuntimeContext = Depends(get_ctx)):
    frame_data = ctx.last_capture
    if ctx.camera is not None and ctx.camera.latest is not None:
        frame_data = ctx.camera.latest
    if frame_data is None:
        raise HTTPException(status_code=404, detail="No frame available")

    ok, buf = cv2.imencode(".jpg", ctx.renderer.draw(frame_data.frame))
    if not ok:
        logging.warning("Failed to encode snapshot JPEG")
        raise HTTPException(status_code=500, detail="Failed to encode JPEG")
    return Response(content=buf.tobytes(), media_type="image/jpeg")


@router.get("/shapes", response_model=ShapesResponse)
async def list_shapes(ctx: RuntimeContext = Depends(get_ctx)):
    return _shapes_response(ctx)


@router.post("/shapes", response_model=ShapesResponse)
async def add_shape(body: ShapeModel, ctx: RuntimeContext = Depends(get_ctx)):
    try:
        ctx.editor.add(body.to_rect())
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _shapes_response(ctx)


@router.post("/shapes/deselect", response_model=ShapesResponse)
async def deselect(ctx: RuntimeContext = Depends(get_ctx)):
    ctx.editor.deselect()
    return _shapes_response(ctx)


@router.delete("/shapes/{shape_id}", response_model=ShapesResponse)
async def remove_shape(shape_id: str, ctx: RuntimeContext = Depends(get_ctx)):
    _require_shape(ctx, shape_id)
    ctx.editor.remove(shape_id)
    return _shapes_response(ctx)


@router.post("/shapes/{shape_id}/select", response_model=ShapesResponse)
async def select_shape(shape_id: str, ctx: RuntimeContext = Depends(get_ctx)):
    _require_shape(ctx, shape_id)
    ctx.editor.select_by_id(shape_id)
    return _shapes_response(ctx)


@router.post("/pointer", response_model=ShapesResponse)
async def pointer_down(body: PointerRequest, ctx: RuntimeContext = Depends(get_ctx)):
    ctx.editor.pointer_down(body.x, body.y)
    return _shapes_response(ctx)


@router.post("/shapes/{shape_id}/move", response_model=ShapeModel)
async def move_shape(shape_id: str, body: MoveRequest, ctx: RuntimeContext = Depends(get_ctx)):
    _require_shape(ctx, shape_id)
    if body.x is not None and body.y is not None:
        rect = ctx.editor.move_to(shape_id, body.x, body.y)
    elif body.dx is not None or body.dy is not None:
        rect = ctx.editor.move(shape_id, body.dx or 0.0, body.dy or 0.0)
    else:
        raise HTTPException(status_code=422, detail="Provide x and y, or dx/dy")
    return ShapeModel.from_rect(rect)


@router.post("/shapes/{shape_id}/resize", response_model=ResizeResponse)
async def resize_shape(shape_id: str, body: ResizeRequest, ctx: RuntimeContext = Depends(get_ctx)):
    _require_shape(ctx, shape_id)
    editor = ctx.editor
    if body.handle is not None:
        try:
            accepted = editor.drag_handle(shape_id, body.handle, body.dx, body.dy)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    elif body.width is not None and body.height is not None:
        accepted = editor.resize(shape_id, body.width, body.height, body.x, body.y)
    else:
        raise HTTPException(status_code=422, detail="Provide width and height, or a handle drag")
    return ResizeResponse(accepted=accepted, shape=ShapeModel.from_rect(editor.get(shape_id)))
