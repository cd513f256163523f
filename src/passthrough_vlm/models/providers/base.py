from __future__ import annotations
from abc import ABC, abstractmethod

from ...pipeline.capture.types import TransportOutcome, Success, Failure

__all__ = ["Transport", "TransportOutcome", "Success", "Failure"]


class Transport(ABC):
    @abstractmethod
    async def send(self, wire_text: str, auth_token: str) -> TransportOutcome:
        """Issue one request; classify on the transport status only, body uninterpreted."""
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
