from __future__ import annotations
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


class EventChannel:
    """Single-argument text notification with an explicit subscriber list."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Add listener; returns a callable that removes it again."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        try:
            self._listeners.remove(listener)
            return True
        except ValueError:
            return False

    def emit(self, message: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception as e:
                logger.error(f"Listener on '{self.name}' failed: {e}")

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
