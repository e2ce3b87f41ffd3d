from __future__ import annotations

from typing import Any

from chat_relay.domain.entities.message import ChatMessage
from chat_relay.infrastructure.ws.protocol import WireMessage


def wire_to_message(data: dict[str, Any]) -> ChatMessage:
    wire = WireMessage.model_validate(data)
    return ChatMessage(
        sender=wire.sender,
        text=wire.text,
        correlation_token=wire.correlation_token,
        server_time=wire.server_time,
        server_processed_at=wire.server_processed_at,
        processed_by=wire.processed_by,
        is_synthetic=wire.is_synthetic,
        extra=dict(wire.model_extra or {}),
    )


def message_to_wire(message: ChatMessage) -> dict[str, Any]:
    """Camel-cased dict; optional fields are left out while unset."""
    wire = WireMessage(
        sender=message.sender,
        text=message.text,
        correlation_token=message.correlation_token,
        server_time=message.server_time,
        server_processed_at=message.server_processed_at,
        processed_by=message.processed_by,
        is_synthetic=message.is_synthetic,
    )
    data = {**message.extra, **wire.model_dump(by_alias=True, exclude_none=True)}
    if not message.is_synthetic:
        data.pop("isSynthetic", None)
    return data
