import asyncio
from typing import List, Optional, Tuple

import pytest
from PIL import Image

from passthrough_vlm.models.providers.base import Transport, TransportOutcome, Success
from passthrough_vlm.models.secrets import CredentialStore
from passthrough_vlm.pipeline.capture.sources import StaticImageSource

OPENROUTER_REPLY = """{
    "id": "gen-123",
    "model": "google/gemma-3-27b-it:free",
    "created": 1234567890,
    "choices": [
        {
            "index": 0,
            "message": {
                "role": "assistant",
                "content": "I can see a red pixel in this image."
            },
            "finish_reason": "stop"
        }
    ],
    "usage": {"prompt_tokens": 100, "completion_tokens": 20, "total_tokens": 120}
}"""


class FakeTransport(Transport):
    """Records every send; optionally holds the request open until released."""

    def __init__(self, outcome: Optional[TransportOutcome] = None, hold: bool = False, error: Optional[Exception] = None):
        self.outcome = outcome or Success(OPENROUTER_REPLY)
        self.error = error
        self.calls: List[Tuple[str, str]] = []
        self.hold = hold
        self.closed = False
        self._entered: Optional[asyncio.Event] = None
        self._release: Optional[asyncio.Event] = None

    def _events(self):
        if self._entered is None:
            self._entered = asyncio.Event()
            self._release = asyncio.Event()
        return self._entered, self._release

    async def wait_entered(self):
        entered, _ = self._events()
        await entered.wait()

    def release(self):
        _, release = self._events()
        release.set()

    async def send(self, wire_text: str, auth_token: str) -> TransportOutcome:
        self.calls.append((wire_text, auth_token))
        if self.hold:
            entered, release = self._events()
            entered.set()
            await release.wait()
        if self.error is not None:
            raise self.error
        return self.outcome

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def openrouter_reply():
    return OPENROUTER_REPLY


@pytest.fixture
def fake_transport_cls():
    return FakeTransport


@pytest.fixture
def red_pixel():
    return Image.new('RGB', (1, 1), color='red')


@pytest.fixture
def red_pixel_source(red_pixel):
    return StaticImageSource(red_pixel)


@pytest.fixture
def credentials(tmp_path, monkeypatch):
    """Credential store holding a test key, isolated from the real environment."""
    monkeypatch.delenv("PVLM_TEST_API_KEY", raising=False)
    store = CredentialStore(tmp_path / "secrets.json", env_var="PVLM_TEST_API_KEY")
    store.set("sk-or-test-key")
    return store


@pytest.fixture
def empty_credentials(tmp_path, monkeypatch):
    monkeypatch.delenv("PVLM_TEST_API_KEY", raising=False)
    return CredentialStore(tmp_path / "empty" / "secrets.json", env_var="PVLM_TEST_API_KEY")
