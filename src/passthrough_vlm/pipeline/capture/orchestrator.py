from __future__ import annotations
import logging
import threading
from typing import Optional

from PIL import Image

from .encoder import FrameEncoder
from .events import EventChannel
from .payload import build_payload
from .scanner import extract_reply
from .sources import ImageSource
from .types import (
    DEFAULT_PROMPT, PipelineState, RunResult, Failure, Text,
    PipelineError, PreconditionError, BusyError, TransportError,
)
from ...models.providers.base import Transport
from ...models.secrets import CredentialStore, PLACEHOLDER_KEY

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "google/gemma-3-27b-it:free"
BUSY_MESSAGE = "Already capturing, please wait..."


class CapturePipeline:
    """
    Capture -> encode -> build -> send -> extract, one run at a time.

    Every accepted trigger ends in exactly one response_received or
    error_occurred notification; triggers arriving while a run is in flight
    are rejected on the busy channel and never reach the encoder.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        transport: Transport,
        source: Optional[ImageSource] = None,
        *,
        model: str = DEFAULT_MODEL,
        capture_width: int = 1280,
        capture_height: int = 960,
        default_prompt: str = DEFAULT_PROMPT,
        encoder: Optional[FrameEncoder] = None,
    ):
        self.credentials = credentials
        self.transport = transport
        self.source = source
        self.model = model
        self.capture_width = capture_width
        self.capture_height = capture_height
        self.default_prompt = default_prompt
        self.encoder = encoder or FrameEncoder()

        self.response_received = EventChannel("response_received")
        self.error_occurred = EventChannel("error_occurred")
        self.busy = EventChannel("busy")

        self._state = PipelineState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state is not PipelineState.IDLE

    def _try_enter(self, state: PipelineState) -> bool:
        with self._lock:
            if self._state is not PipelineState.IDLE:
                return False
            self._state = state
            return True

    def _set_state(self, state: PipelineState) -> None:
        with self._lock:
            self._state = state

    async def capture_and_send(self, prompt: Optional[str] = None) -> RunResult:
        """Capture the current frame and send it with prompt."""
        if not self._try_enter(PipelineState.CAPTURING):
            return self._reject()
        try:
            result = await self._run(prompt or self.default_prompt, capture=True)
        finally:
            self._set_state(PipelineState.IDLE)
        self._publish(result)
        return result

    async def send_prompt(self, prompt: str) -> RunResult:
        """Text-only request, no capture stage."""
        if not self._try_enter(PipelineState.PROCESSING):
            return self._reject()
        try:
            result = await self._run(prompt, capture=False)
        finally:
            self._set_state(PipelineState.IDLE)
        self._publish(result)
        return result

    async def _run(self, prompt: str, capture: bool) -> RunResult:
        try:
            api_key = self.credentials.get()
            if not api_key or api_key == PLACEHOLDER_KEY:
                raise PreconditionError("API key not set")

            image_base64 = None
            if capture:
                if self.source is None:
                    raise PreconditionError("No image source available")
                image = await self.encoder.capture_and_encode(self.source, self.capture_width, self.capture_height)
                image_base64 = image.base64
                self._set_state(PipelineState.PROCESSING)

            wire_text = build_payload(self.model, prompt, image_base64)
            image_base64 = None

            outcome = await self.transport.send(wire_text, api_key)
            if isinstance(outcome, Failure):
                raise TransportError(outcome.status_description, outcome.raw_body)
            return self._to_response(outcome.raw_body)
        except PipelineError as e:
            logger.error(f"Pipeline run failed: {e}")
            return RunResult("error", str(e), error=e)
        except Exception as e:
            logger.exception("Unexpected error in capture pipeline")
            err = PipelineError(f"Unexpected error: {e}")
            return RunResult("error", str(err), error=err)

    def _to_response(self, body: str) -> RunResult:
        extracted = extract_reply(body)
        if isinstance(extracted, Text):
            logger.debug(f"Model response: {extracted.value}")
            return RunResult("response", extracted.value)

        # no usable content field: hand back the whole body rather than drop a successful call
        logger.warning(f"Could not extract reply ({type(extracted).__name__}), returning raw response body")
        return RunResult("response", body, meta={"extraction": type(extracted).__name__})

    def _reject(self) -> RunResult:
        logger.warning(BUSY_MESSAGE)
        self.busy.emit(BUSY_MESSAGE)
        return RunResult("rejected", BUSY_MESSAGE, error=BusyError(BUSY_MESSAGE))

    def _publish(self, result: RunResult) -> None:
        if result.kind == "response":
            self.response_received.emit(result.message)
        elif result.kind == "error":
            self.error_occurred.emit(result.message)

    # Credentials and camera controls
    def set_api_key(self, api_key: str) -> None:
        self.credentials.set(api_key)
        logger.debug("API key set and saved securely")

    def has_api_key(self) -> bool:
        return self.credentials.has_key()

    def start_camera(self) -> bool:
        if self.source is None:
            logger.warning("No image source configured")
            return False
        self.source.enabled = True
        logger.debug(f"{self.source.name} enabled")
        return True

    def stop_camera(self) -> bool:
        if self.source is None:
            return False
        self.source.enabled = False
        logger.debug(f"{self.source.name} disabled")
        return True

    def preview_frame(self) -> Optional[Image.Image]:
        if self.source is None:
            return None
        return self.source.preview()

    async def aclose(self) -> None:
        for channel in (self.response_received, self.error_occurred, self.busy):
            channel.clear()
        await self.transport.aclose()
