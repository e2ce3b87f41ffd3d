from __future__ import annotations

from typing import Any, Protocol


class OutboundTransport(Protocol):
    """Client side: hands a wire payload to the connection."""

    def send(self, payload: dict[str, Any]) -> None: ...


class Broadcaster(Protocol):
    """Server side: delivers events to live connections."""

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> None: ...

    async def send_to(
        self, connection_id: str, event_type: str, data: dict[str, Any]
    ) -> bool: ...
