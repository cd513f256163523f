"""
Image source controls and a preview of the current frame.
"""
import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..models.capture import CameraStatus
from ..dependencies.pipeline import get_pipeline
from ...pipeline.capture.orchestrator import CapturePipeline
from ...utils.image_converter import encode_png

router = APIRouter()


def _status(pipeline: CapturePipeline, message: Optional[str] = None) -> CameraStatus:
    source = pipeline.source
    return CameraStatus(
        success=source is not None,
        message=message,
        source=source.name if source else None,
        enabled=bool(source and source.is_available()),
    )


@router.get("", response_model=CameraStatus)
async def camera_status(pipeline: CapturePipeline = Depends(get_pipeline)):
    return _status(pipeline)


@router.post("/start", response_model=CameraStatus)
async def start_camera(pipeline: CapturePipeline = Depends(get_pipeline)):
    if not pipeline.start_camera():
        raise HTTPException(status_code=404, detail="No image source configured")
    return _status(pipeline, "Camera access enabled")


@router.post("/stop", response_model=CameraStatus)
async def stop_camera(pipeline: CapturePipeline = Depends(get_pipeline)):
    if not pipeline.stop_camera():
        raise HTTPException(status_code=404, detail="No image source configured")
    return _status(pipeline, "Camera access disabled")


@router.get("/preview")
async def preview(pipeline: CapturePipeline = Depends(get_pipeline)):
    try:
        frame = await asyncio.to_thread(pipeline.preview_frame)
    except OSError as e:
        raise HTTPException(status_code=503, detail=f"Could not read frame: {e}")
    if frame is None:
        raise HTTPException(status_code=404, detail="No frame available")
    data = await asyncio.to_thread(encode_png, frame)
    return Response(content=data, media_type="image/png")
