"""WebSocket message envelope models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

CHAT_MESSAGE = "chat.message"
PING = "ping"
PONG = "pong"
ERROR = "error"


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # chat.message | ping
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # chat.message | pong | error
    data: dict[str, Any] = {}


class WireMessage(BaseModel):
    """Data of a ``chat.message`` event as seen by a client.

    The relay never validates what it forwards, so every field is lenient.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sender: str = ""
    text: str = ""
    correlation_token: str | None = Field(default=None, alias="correlationToken")
    server_time: str | None = Field(default=None, alias="serverTime")
    server_processed_at: str | None = Field(default=None, alias="serverProcessedAt")
    processed_by: str | None = Field(default=None, alias="processedBy")
    is_synthetic: bool = Field(default=False, alias="isSynthetic")

    @field_validator("sender", "text", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("correlation_token", mode="before")
    @classmethod
    def coerce_token(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("is_synthetic", mode="before")
    @classmethod
    def coerce_flag(cls, value: Any) -> bool:
        return bool(value)
