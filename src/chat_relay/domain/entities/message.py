from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chat_relay.domain.value_objects.enums import EntryStatus, MessageOrigin


@dataclass(frozen=True, slots=True)
class ChatMessage:
    sender: str
    text: str
    correlation_token: str | None = None
    server_time: str | None = None
    server_processed_at: str | None = None
    processed_by: str | None = None
    is_synthetic: bool = False
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ChatEntry:
    """One row of a client's message sequence."""

    message: ChatMessage
    origin: MessageOrigin
    is_mine: bool
    status: EntryStatus | None = None
    local_time: str | None = None

    @property
    def correlation_token(self) -> str | None:
        return self.message.correlation_token
