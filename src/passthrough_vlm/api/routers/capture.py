"""
Capture endpoints: one pipeline run per request.
"""
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..models.capture import CaptureRequestBody, TextPromptBody, CaptureResponse, CaptureData
from ..dependencies.pipeline import get_pipeline
from ...pipeline.capture.orchestrator import CapturePipeline
from ...pipeline.capture.types import RunResult, BusyError, PreconditionError, CaptureError, TransportError

router = APIRouter()

# most specific first: BusyError is a PreconditionError
_ERROR_STATUS = (
    (BusyError, 409),
    (PreconditionError, 400),
    (CaptureError, 500),
    (TransportError, 502),
)


def _to_response(result: RunResult, started: float) -> CaptureResponse:
    if not result.ok:
        status_code = next((code for exc_type, code in _ERROR_STATUS if isinstance(result.error, exc_type)), 500)
        raise HTTPException(status_code=status_code, detail=result.message)
    return CaptureResponse(
        success=True,
        message="Response received",
        data=CaptureData(text=result.message, processing_time=time.time() - started, metadata=result.meta),
    )


@router.post("", response_model=CaptureResponse)
async def capture_and_send(body: Optional[CaptureRequestBody] = None, pipeline: CapturePipeline = Depends(get_pipeline)):
    started = time.time()
    result = await pipeline.capture_and_send(body.prompt if body else None)
    return _to_response(result, started)


@router.post("/text", response_model=CaptureResponse)
async def send_text(body: TextPromptBody, pipeline: CapturePipeline = Depends(get_pipeline)):
    started = time.time()
    result = await pipeline.send_prompt(body.prompt)
    return _to_response(result, started)
