from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Union

DEFAULT_PROMPT = "Analyze this image and describe what you see."


#unified pipeline errors
class PipelineError(RuntimeError): ...
class PreconditionError(PipelineError): ...
class BusyError(PreconditionError): ...
class CaptureError(PipelineError): ...

class TransportError(PipelineError):
    def __init__(self, status_description: str, raw_body: str):
        super().__init__(f"Error: {status_description} - {raw_body}")
        self.status_description = status_description
        self.raw_body = raw_body


class PipelineState(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    PROCESSING = "processing"


@dataclass
class EncodedImage:
    width: int
    height: int
    data: bytes #png encoded
    base64: str


# Transport outcomes
@dataclass(frozen=True)
class Success:
    raw_body: str

@dataclass(frozen=True)
class Failure:
    status_description: str
    raw_body: str

TransportOutcome = Union[Success, Failure]


# Extraction results
@dataclass(frozen=True)
class Text:
    value: str

@dataclass(frozen=True)
class NullContent:
    pass

@dataclass(frozen=True)
class NotFound:
    pass

ExtractionResult = Union[Text, NullContent, NotFound]


@dataclass
class RunResult:
    """Terminal outcome of one trigger, mirrored by the emitted notification."""
    kind: Literal["response", "error", "rejected"]
    message: str
    error: Optional[PipelineError] = None
    meta: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.kind == "response"
