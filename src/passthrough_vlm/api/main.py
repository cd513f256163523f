"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional, Union

from fastapi import FastAPI

from .routers import capture, credentials, camera, health
from ..models.config import build_pipeline, load_config
from ..pipeline.capture.orchestrator import CapturePipeline

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(pipeline: Optional[CapturePipeline] = None, config_path: Union[Path, str, None] = None) -> FastAPI:
    """
    Factory function to create and configure the FastAPI application.

    An injected pipeline is used as-is and left open on shutdown; otherwise one
    is built from config at startup and closed again at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        owned = getattr(app.state, "pipeline", None) is None
        if owned:
            config = load_config(config_path)
            if config.debug:
                logging.getLogger("passthrough_vlm").setLevel(logging.DEBUG)
            app.state.pipeline = build_pipeline(config)
        logger.info("API server ready to accept requests")

        yield

        logger.info("Shutting down capture API server...")
        if owned:
            await app.state.pipeline.aclose()
            app.state.pipeline = None

    app = FastAPI(
        title="Passthrough VLM API",
        description="Capture frames and describe them with a multimodal model",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.pipeline = pipeline

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(capture.router, prefix="/api/v1/capture", tags=["capture"])
    app.include_router(credentials.router, prefix="/api/v1/credentials", tags=["credentials"])
    app.include_router(camera.router, prefix="/api/v1/camera", tags=["camera"])

    @app.get("/")
    async def root():
        """Root endpoint with basic API information."""
        return {
            "name": "Passthrough VLM API",
            "version": API_VERSION,
            "status": "operational",
            "endpoints": {
                "health": "/health",
                "capture": "/api/v1/capture",
                "credentials": "/api/v1/credentials",
                "camera": "/api/v1/camera",
                "docs": "/docs",
            },
        }

    return app


app = create_app()
