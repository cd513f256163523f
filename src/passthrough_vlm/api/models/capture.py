"""
API models for the capture, credentials and camera endpoints.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional

from .common import APIResponse


class CaptureRequestBody(BaseModel):
    prompt: Optional[str] = Field(None, description="Prompt sent with the frame; server default when omitted")

class TextPromptBody(BaseModel):
    prompt: str = Field(..., description="Prompt for a text-only request")

    @field_validator('prompt')
    @classmethod
    def validate_prompt(cls, v):
        if not v or v.strip() == "":
            raise ValueError("Prompt cannot be empty")
        return v

class CaptureData(BaseModel):
    text: str = Field(..., description="Model reply, or the raw response body when no reply could be extracted")
    processing_time: float = Field(..., description="Pipeline run time in seconds")
    metadata: Dict[str, Any] = Field(default_factory=dict)

class CaptureResponse(APIResponse):
    data: Optional[CaptureData] = None


class ApiKeyBody(BaseModel):
    api_key: str = Field(..., description="OpenRouter API key")

    @field_validator('api_key')
    @classmethod
    def validate_key(cls, v):
        if not v or v.strip() == "":
            raise ValueError("API key cannot be empty")
        return v.strip()

class CredentialStatus(APIResponse):
    has_api_key: bool


class CameraStatus(APIResponse):
    source: Optional[str] = None
    enabled: bool = False
