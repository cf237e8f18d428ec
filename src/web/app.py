"""
FastAPI application factory for the live detection overlay.

Routes:
- /api/* -> REST API used by the viewport page
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runtime.context import RuntimeContext
from runtime.services import CameraService, DetectorService
from .routes import api


def create_app(ctx: RuntimeContext, load_detector: bool = True) -> FastAPI:
    """
    Create the FastAPI app around an already wired RuntimeContext.

    With load_detector the detector is built in the background at startup;
    requests are served while it loads.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if load_detector:
            task = asyncio.create_task(DetectorService(ctx).start())
        try:
            yield
        finally:
            if task is not None and not task.done():
                task.cancel()
            CameraService(ctx).disable()
            ctx.renderer.close()
            logging.info("Overlay service stopped")

    app = FastAPI(
        title="Live Detection Overlay",
        version="0.1.0",
        description="Detection overlay and annotation rectangles for a live camera view",
        lifespan=lifespan,
    )
    app.state.ctx = ctx

    # CORS for development (Vite dev server)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")
    return app
