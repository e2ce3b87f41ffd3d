"""WebSocket client that feeds a MessageReconciler."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

import pydantic
import websockets
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from chat_relay.application.exceptions import TransportError
from chat_relay.application.ports.clock import Clock
from chat_relay.client.event_log import EventLog
from chat_relay.client.reconciler import MessageReconciler
from chat_relay.config import settings
from chat_relay.domain.entities.message import ChatEntry
from chat_relay.domain.value_objects.enums import ConnectionStatus, LogEntryType
from chat_relay.infrastructure.ws.mappers import wire_to_message
from chat_relay.infrastructure.ws.protocol import (
    CHAT_MESSAGE,
    ERROR,
    PONG,
    WsInbound,
    WsOutbound,
)

logger = logging.getLogger(__name__)

StatusListener = Callable[[ConnectionStatus], None]


class ChatClient:
    """One chat session for ``username``.

    Exposes the reconciled message sequence, the connection status and a
    diagnostic event log. There is no reconnect: once the socket closes the
    status stays ``disconnected``.
    """

    def __init__(
        self,
        username: str,
        url: str | None = None,
        *,
        event_log_size: int | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._url = url or settings.CHAT_SERVER_URL
        self.event_log = EventLog(event_log_size or settings.EVENT_LOG_SIZE, clock=clock)
        self.reconciler = MessageReconciler(username, clock=clock, event_log=self.event_log)
        self._status = ConnectionStatus.CONNECTING
        self._status_listeners: list[StatusListener] = []
        self._ws: Any = None
        self._outbox: asyncio.Queue[str] | None = None

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    def on_status(self, listener: StatusListener) -> Callable[[], None]:
        self._status_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._status_listeners:
                self._status_listeners.remove(listener)

        return unsubscribe

    def submit(self, text: str) -> ChatEntry | None:
        return self.reconciler.submit(text)

    def send(self, payload: dict[str, Any]) -> None:
        """Queue a chat message for the writer task."""
        if self._status != ConnectionStatus.CONNECTED or self._outbox is None:
            raise TransportError("Not connected")
        frame = WsInbound(type=CHAT_MESSAGE, data=payload).model_dump_json()
        self._outbox.put_nowait(frame)

    async def run(self) -> None:
        """Connect, then dispatch frames until the socket closes."""
        self._set_status(ConnectionStatus.CONNECTING)
        try:
            self._ws = await websockets.connect(self._url)
        except (OSError, InvalidHandshake, InvalidURI, asyncio.TimeoutError) as exc:
            logger.error("Connection error: %s", exc)
            self.event_log.add(LogEntryType.ERROR, "Connection error", str(exc))
            self._set_status(ConnectionStatus.ERROR)
            return

        async with self._ws as ws:
            self._opened()
            writer = asyncio.create_task(self._write_loop(), name="chat-client-writer")
            try:
                async for frame in ws:
                    self.handle_frame(frame)
            except ConnectionClosed as exc:
                logger.info("Connection closed: %s", exc)
            finally:
                writer.cancel()
                await asyncio.gather(writer, return_exceptions=True)
                self._closed()

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()

    def handle_frame(self, raw: str | bytes) -> None:
        try:
            envelope = WsOutbound.model_validate_json(raw)
        except pydantic.ValidationError:
            logger.warning("Ignoring malformed frame")
            self.event_log.add(LogEntryType.ERROR, "Malformed frame from server")
            return

        if envelope.type == CHAT_MESSAGE:
            self.event_log.add(LogEntryType.RECEIVE, "Message received from server", envelope.data)
            self.reconciler.on_incoming(wire_to_message(envelope.data))
        elif envelope.type == ERROR:
            logger.warning("Server error: %s", envelope.data)
            self.event_log.add(LogEntryType.ERROR, "Server reported an error", envelope.data)
        elif envelope.type != PONG:
            logger.debug("Ignoring event %s", envelope.type)

    def _opened(self) -> None:
        self._outbox = asyncio.Queue()
        self.reconciler.attach(self)
        self.event_log.add(LogEntryType.CONNECT, f"Connected to {self._url}")
        self._set_status(ConnectionStatus.CONNECTED)

    def _closed(self) -> None:
        self.reconciler.detach()
        self._outbox = None
        self.event_log.add(LogEntryType.DISCONNECT, "Disconnected from server")
        self._set_status(ConnectionStatus.DISCONNECTED)

    async def _write_loop(self) -> None:
        assert self._outbox is not None
        while True:
            frame = await self._outbox.get()
            await self._ws.send(frame)

    def _set_status(self, status: ConnectionStatus) -> None:
        if status == self._status:
            return
        self._status = status
        for listener in list(self._status_listeners):
            listener(status)
