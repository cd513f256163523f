"""
Response models shared by every endpoint group.
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class APIResponse(BaseModel):
    """Base response wrapper for all API endpoints."""
    success: bool = Field(..., description="Whether the request was successful")
    message: Optional[str] = Field(None, description="Human-readable response message")
    timestamp: datetime = Field(default_factory=_utcnow)

class HealthStatus(BaseModel):
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    uptime: float = Field(..., description="Uptime in seconds")
    pipeline_state: str = Field(..., description="idle, capturing or processing")
    dependencies: Dict[str, str] = Field(..., description="Credential and image source status")

class ReadinessStatus(BaseModel):
    ready: bool
    reason: Optional[str] = Field(None, description="Why a capture would currently be refused")
