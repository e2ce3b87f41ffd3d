from __future__ import annotations

import asyncio
import logging

import pydantic
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from chat_relay.infrastructure.ws.manager import ConnectionManager
from chat_relay.infrastructure.ws.protocol import (
    CHAT_MESSAGE,
    ERROR,
    PING,
    PONG,
    WsInbound,
    WsOutbound,
)
from chat_relay.services.relay_service import BroadcastRelay

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


@router.websocket("/ws/chat")
async def ws_chat(websocket: WebSocket) -> None:
    manager: ConnectionManager = websocket.app.state.manager
    relay: BroadcastRelay = websocket.app.state.relay
    interval = websocket.app.state.settings.WS_HEARTBEAT_SECONDS

    connection = await manager.connect(websocket)
    relay.on_connect(connection.id)

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket, interval), name=f"ws-heartbeat-{connection.id}",
    )
    try:
        await _read_loop(websocket, connection.id, relay)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", connection.id)
    finally:
        heartbeat_task.cancel()
        manager.disconnect(connection.id)
        relay.on_disconnect(connection.id)


async def _heartbeat(ws: WebSocket, interval: float) -> None:
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(WsOutbound(type=PONG, data={}).model_dump_json())
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Heartbeat stopped", exc_info=True)


async def _read_loop(ws: WebSocket, connection_id: str, relay: BroadcastRelay) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except pydantic.ValidationError:
            await ws.send_text(
                WsOutbound(type=ERROR, data={"code": "invalid_payload"}).model_dump_json()
            )
            continue

        if msg.type == PING:
            await ws.send_text(WsOutbound(type=PONG, data={}).model_dump_json())

        elif msg.type == CHAT_MESSAGE:
            await relay.on_message(connection_id, msg.data)

        else:
            await ws.send_text(
                WsOutbound(type=ERROR, data={"code": "unknown_type", "type": msg.type}).model_dump_json()
            )
