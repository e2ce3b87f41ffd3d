"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from fastapi import WebSocket

from chat_relay.domain.entities.connection import RelayConnection
from chat_relay.domain.value_objects.enums import ConnectionState
from chat_relay.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Slot:
    connection: RelayConnection
    socket: WebSocket


class ConnectionManager:
    """Live connection set of the single room. Implements ``Broadcaster``.

    Connections are only ever added or removed; each send is independent, so
    fan-out works on a snapshot of the set and needs no lock.
    """

    def __init__(self) -> None:
        self._slots: dict[str, _Slot] = {}

    @property
    def count(self) -> int:
        return len(self._slots)

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._slots

    async def connect(self, ws: WebSocket) -> RelayConnection:
        connection = RelayConnection(id=uuid.uuid4().hex)
        await ws.accept()
        connection.advance(ConnectionState.CONNECTED)
        self._slots[connection.id] = _Slot(connection, ws)
        logger.debug("WS connected: %s (total=%d)", connection.id, len(self._slots))
        return connection

    def disconnect(self, connection_id: str) -> None:
        slot = self._slots.pop(connection_id, None)
        if slot is None:
            return
        slot.connection.advance(ConnectionState.DISCONNECTED)
        logger.debug("WS disconnected: %s (total=%d)", connection_id, len(self._slots))

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> None:
        """Send one event to every live connection, the originator included."""
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        dead: list[str] = []
        for connection_id, slot in list(self._slots.items()):
            try:
                await slot.socket.send_text(raw)
            except Exception:
                dead.append(connection_id)
        for connection_id in dead:
            logger.warning("Dropping unreachable connection %s", connection_id)
            self.disconnect(connection_id)

    async def send_to(
        self,
        connection_id: str,
        event_type: str,
        data: dict[str, Any],
    ) -> bool:
        """Send to one connection. Returns False if it is gone or unreachable."""
        slot = self._slots.get(connection_id)
        if slot is None:
            return False
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        try:
            await slot.socket.send_text(raw)
        except Exception:
            logger.warning("Dropping unreachable connection %s", connection_id)
            self.disconnect(connection_id)
            return False
        return True
