"""
Health check endpoints.
"""

import time
from fastapi import APIRouter, Depends

from ..models.common import HealthStatus, ReadinessStatus
from ..dependencies.pipeline import get_pipeline
from ...pipeline.capture.orchestrator import CapturePipeline

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()

@router.get("/", response_model=HealthStatus)
async def health_check(pipeline: CapturePipeline = Depends(get_pipeline)):
    """Status of the API, the pipeline and its collaborators."""
    from ..main import API_VERSION

    dependencies = {}
    dependencies["credentials"] = "available" if pipeline.has_api_key() else "missing api key"

    if pipeline.source is None:
        dependencies["image_source"] = "not configured"
    elif pipeline.source.is_available():
        dependencies["image_source"] = f"{pipeline.source.name} enabled"
    else:
        dependencies["image_source"] = f"{pipeline.source.name} disabled"

    return HealthStatus(
        status="healthy",
        version=API_VERSION,
        uptime=time.time() - _server_start_time,
        pipeline_state=pipeline.state.value,
        dependencies=dependencies,
    )

@router.get("/ready", response_model=ReadinessStatus)
async def readiness_check(pipeline: CapturePipeline = Depends(get_pipeline)):
    """Ready once an API key is present and the pipeline is idle."""
    if not pipeline.has_api_key():
        return ReadinessStatus(ready=False, reason="API key not set")
    if pipeline.is_busy:
        return ReadinessStatus(ready=False, reason=f"Pipeline {pipeline.state.value}")
    return ReadinessStatus(ready=True)
