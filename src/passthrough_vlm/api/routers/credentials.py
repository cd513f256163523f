"""
API key management.
"""
from fastapi import APIRouter, Depends, HTTPException

from ..models.capture import ApiKeyBody, CredentialStatus
from ..dependencies.pipeline import get_pipeline
from ...pipeline.capture.orchestrator import CapturePipeline

router = APIRouter()


@router.get("", response_model=CredentialStatus)
async def credential_status(pipeline: CapturePipeline = Depends(get_pipeline)):
    return CredentialStatus(success=True, has_api_key=pipeline.has_api_key())


@router.put("", response_model=CredentialStatus)
async def set_api_key(body: ApiKeyBody, pipeline: CapturePipeline = Depends(get_pipeline)):
    try:
        pipeline.set_api_key(body.api_key)
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Could not save API key: {e}")
    return CredentialStatus(success=True, message="API key saved", has_api_key=pipeline.has_api_key())
