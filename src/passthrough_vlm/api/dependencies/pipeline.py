"""
Pipeline dependency.

The pipeline is built once per application (see main.create_app) and kept on
app.state; endpoints receive it through get_pipeline rather than a module global.
"""

from fastapi import HTTPException, Request

from ...pipeline.capture.orchestrator import CapturePipeline


def get_pipeline(request: Request) -> CapturePipeline:
    """FastAPI dependency to get the capture pipeline from app state."""
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Capture pipeline not initialized")
    return pipeline
