"""Broadcast of incoming server text to every connected subscriber."""

from __future__ import annotations

from collections.abc import Callable
from itertools import count

Subscriber = Callable[[str], None]


class EventBus:
    """Fans each published string out to all connected callbacks."""

    def __init__(self) -> None:
        self._subscribers: dict[int, Subscriber] = {}
        self._ids = count()

    def connect(self, callback: Subscriber) -> int:
        """Register a callback and return its handler id."""
        handler_id = next(self._ids)
        self._subscribers[handler_id] = callback
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        """Remove a subscriber; unknown ids are ignored."""
        self._subscribers.pop(handler_id, None)

    def publish(self, text: str) -> None:
        """Deliver text to every current subscriber."""
        for callback in list(self._subscribers.values()):
            callback(text)

    def __len__(self) -> int:
        return len(self._subscribers)