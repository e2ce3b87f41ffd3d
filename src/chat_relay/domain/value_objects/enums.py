from __future__ import annotations

from enum import StrEnum


class EntryStatus(StrEnum):
    SENDING = "sending"
    DELIVERED = "delivered"


class MessageOrigin(StrEnum):
    LOCAL_PENDING = "local-pending"
    SERVER_CONFIRMED = "server-confirmed"
    SYNTHETIC = "synthetic"


class ConnectionStatus(StrEnum):
    """Client-side connection status shown to the presentation layer."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class ConnectionState(StrEnum):
    """Server-side lifecycle of one relay connection."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class LogEntryType(StrEnum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    ERROR = "error"
    SEND = "send"
    RECEIVE = "receive"
    UPDATE = "update"
    MESSAGE = "message"
