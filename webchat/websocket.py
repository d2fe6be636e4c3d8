"""Websocket connection that queues outgoing text and publishes incoming text."""

from __future__ import annotations

import asyncio
import logging

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError

from webchat.event_bus import EventBus

DEFAULT_URL = "ws://127.0.0.1:8080"
DEFAULT_CAPACITY = 1000

log = logging.getLogger(__name__)


def decode_frame(frame: str | bytes) -> str | None:
    """Return a frame's text, or None for binary frames that are not UTF-8."""
    if isinstance(frame, str):
        return frame
    try:
        return bytes(frame).decode("utf-8")
    except UnicodeDecodeError:
        return None


class WebsocketService:
    """Connection to the chat server bridged to an event bus."""

    def __init__(
        self,
        bus: EventBus,
        url: str = DEFAULT_URL,
        capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self.bus = bus
        self.url = url
        self._outgoing: asyncio.Queue[str] = asyncio.Queue(maxsize=capacity)
        self._connection = None
        self._writer: asyncio.Task | None = None
        self._reader: asyncio.Task | None = None
        self._closed = False

    async def start(self) -> None:
        """Open the connection and begin forwarding in both directions."""
        if self._closed:
            raise RuntimeError("service is closed")
        if self._connection is not None:
            raise RuntimeError("service already started")
        self._connection = await websockets.connect(self.url)
        self._writer = asyncio.create_task(self._write())
        self._reader = asyncio.create_task(self._read())

    def send(self, text: str) -> None:
        """Queue text for sending without waiting.

        Raises RuntimeError once closed and asyncio.QueueFull when the queue is full.
        """
        if self._closed:
            raise RuntimeError("service is closed")
        self._outgoing.put_nowait(text)

    async def close(self) -> None:
        """Stop forwarding and close the connection."""
        self._closed = True
        if self._writer is not None:
            self._writer.cancel()
        if self._connection is not None:
            await self._connection.close()
        tasks = [task for task in (self._writer, self._reader) if task is not None]
        await asyncio.gather(*tasks, return_exceptions=True)

    async def __aenter__(self) -> WebsocketService:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _write(self) -> None:
        while True:
            text = await self._outgoing.get()
            log.debug("got event from channel! %s", text)
            try:
                await self._connection.send(text)
            except ConnectionClosed as exc:
                log.error("ws: %r", exc)
                return

    async def _read(self) -> None:
        try:
            async for frame in self._connection:
                text = decode_frame(frame)
                if text is None:
                    continue
                log.debug("from websocket: %s", text)
                self.bus.publish(text)
        except ConnectionClosedError as exc:
            log.error("ws: %r", exc)
        log.debug("WebSocket Closed")