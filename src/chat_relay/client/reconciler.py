"""Client-side message sequence with optimistic sends."""
from __future__ import annotations

from typing import Callable, Sequence

from chat_relay.application.exceptions import ConflictError, ValidationError
from chat_relay.application.ports.clock import Clock, SystemClock, format_clock_time
from chat_relay.application.ports.transport import OutboundTransport
from chat_relay.client.event_log import EventLog
from chat_relay.domain.entities.message import ChatEntry, ChatMessage
from chat_relay.domain.value_objects.enums import EntryStatus, LogEntryType, MessageOrigin
from chat_relay.infrastructure.ws.mappers import message_to_wire
from chat_relay.services.correlation import new_correlation_token

Listener = Callable[[Sequence[ChatEntry]], None]


class MessageReconciler:
    """Ordered message list of one client.

    ``submit`` appends a ``sending`` entry before the server has seen it.
    When the relay echoes that message back with the same correlation token
    and the local sender, ``on_incoming`` swaps the entry in place for the
    confirmed copy. Everything else is appended in arrival order.

    Not thread-safe: sends and incoming events must be delivered from one
    event loop, one at a time.
    """

    def __init__(
        self,
        local_sender: str,
        *,
        transport: OutboundTransport | None = None,
        token_factory: Callable[[], str] = new_correlation_token,
        clock: Clock | None = None,
        event_log: EventLog | None = None,
    ) -> None:
        self._local_sender = local_sender
        self._transport = transport
        self._token_factory = token_factory
        self._clock = clock or SystemClock()
        self._log = event_log or EventLog(clock=self._clock)
        self._entries: list[ChatEntry] = []
        # correlation token -> position in _entries, own messages only
        self._index: dict[str, int] = {}
        self._listeners: list[Listener] = []

    @property
    def local_sender(self) -> str:
        return self._local_sender

    @property
    def entries(self) -> tuple[ChatEntry, ...]:
        return tuple(self._entries)

    def entry_for(self, token: str) -> ChatEntry | None:
        index = self._index.get(token)
        return None if index is None else self._entries[index]

    def attach(self, transport: OutboundTransport) -> None:
        self._transport = transport

    def detach(self) -> None:
        self._transport = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def submit(self, text: str, sender: str | None = None) -> ChatEntry | None:
        """Append a pending entry and hand the message to the transport.

        Returns ``None`` without doing anything when the text is blank or no
        transport is attached. Raises ``ValidationError`` for a sender other
        than the local one.
        """
        if sender is not None and sender != self._local_sender:
            raise ValidationError(
                f"Cannot submit as {sender!r}, this client is {self._local_sender!r}"
            )
        if not text or not text.strip() or self._transport is None:
            return None

        token = self._token_factory()
        if token in self._index:
            raise ConflictError(f"Correlation token {token!r} already used")

        message = ChatMessage(
            sender=self._local_sender,
            text=text,
            correlation_token=token,
        )
        entry = ChatEntry(
            message=message,
            origin=MessageOrigin.LOCAL_PENDING,
            is_mine=True,
            status=EntryStatus.SENDING,
            local_time=format_clock_time(self._clock.now()),
        )
        self._index[token] = len(self._entries)
        self._entries.append(entry)
        self._notify()

        payload = message_to_wire(message)
        self._log.add(LogEntryType.SEND, "Sending message to server", payload)
        self._transport.send(payload)
        return entry

    def on_incoming(self, message: ChatMessage) -> ChatEntry:
        is_mine = message.sender == self._local_sender
        entry = ChatEntry(
            message=message,
            origin=(
                MessageOrigin.SYNTHETIC if message.is_synthetic
                else MessageOrigin.SERVER_CONFIRMED
            ),
            is_mine=is_mine,
            status=EntryStatus.DELIVERED,
        )

        token = message.correlation_token
        if token is not None and is_mine and not message.is_synthetic:
            index = self._index.get(token)
            if index is not None:
                self._entries[index] = entry
                self._log.add(LogEntryType.UPDATE, "Updated local message with server response")
                self._notify()
                return entry
            # sent from another session under the same name
            self._index[token] = len(self._entries)

        self._entries.append(entry)
        self._log.add(LogEntryType.MESSAGE, f"New message from {message.sender}")
        self._notify()
        return entry

    def _notify(self) -> None:
        snapshot = self.entries
        for listener in list(self._listeners):
            listener(snapshot)
