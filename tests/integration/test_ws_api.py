"""End-to-end tests through the ASGI app with FastAPI's TestClient."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from chat_relay.app import create_app
from chat_relay.client.reconciler import MessageReconciler
from chat_relay.config import Settings
from chat_relay.domain.value_objects.enums import EntryStatus, MessageOrigin
from chat_relay.infrastructure.ws.mappers import wire_to_message
from tests.conftest import FakeTransport

BOT = "🤖 ChatBot"


@pytest.fixture
def app():
    return create_app(Settings(
        BOT_NAME=BOT,
        WELCOME_DELAY_SECONDS=0,
        REPLY_DELAY_MIN_SECONDS=0,
        REPLY_DELAY_MAX_SECONDS=0,
        WS_HEARTBEAT_SECONDS=3600,
    ))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def _welcome(ws) -> dict:
    event = ws.receive_json()
    assert event["type"] == "chat.message"
    assert event["data"]["isSynthetic"] is True
    return event["data"]


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_readyz_reports_connections(client):
    resp = client.get("/readyz", headers={"X-Request-ID": "req-1"})
    assert resp.status_code == 200
    assert resp.json()["connections"] == 0
    assert resp.headers["X-Request-ID"] == "req-1"


def test_request_id_generated_when_missing(client):
    resp = client.get("/healthz")
    assert len(resp.headers["X-Request-ID"]) == 32


def test_welcome_sent_on_connect(client):
    with client.websocket_connect("/ws/chat") as ws:
        welcome = _welcome(ws)

    assert welcome["sender"] == BOT
    assert welcome["text"].startswith("Welcome to the chat!")
    assert welcome["processedBy"] == "server"
    assert "correlationToken" not in welcome


def test_message_echoed_then_answered(client):
    with client.websocket_connect("/ws/chat") as ws:
        _welcome(ws)
        ws.send_json({"type": "chat.message", "data": {"sender": "Ann", "text": "hi", "correlationToken": "t1"}})

        echo = ws.receive_json()["data"]
        reply = ws.receive_json()["data"]

    assert echo["correlationToken"] == "t1"
    assert echo["sender"] == "Ann"
    assert echo["processedBy"] == "server"
    assert "serverTime" in echo and "serverProcessedAt" in echo
    assert reply["sender"] == BOT
    assert reply["isSynthetic"] is True
    assert "correlationToken" not in reply


def test_ping_and_bad_frames(client):
    with client.websocket_connect("/ws/chat") as ws:
        _welcome(ws)

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong", "data": {}}

        ws.send_text("{nope")
        assert ws.receive_json() == {"type": "error", "data": {"code": "invalid_payload"}}

        ws.send_json({"type": "typing", "data": {}})
        assert ws.receive_json()["data"] == {"code": "unknown_type", "type": "typing"}


def test_two_clients_scenario(client):
    outbound = FakeTransport()
    ann = MessageReconciler("Ann", transport=outbound)
    bob = MessageReconciler("Bob")

    with client.websocket_connect("/ws/chat") as ann_ws, \
            client.websocket_connect("/ws/chat") as bob_ws:
        ann.on_incoming(wire_to_message(_welcome(ann_ws)))
        bob.on_incoming(wire_to_message(_welcome(bob_ws)))

        pending = ann.submit("hi")
        ann_ws.send_json({"type": "chat.message", "data": outbound.sent[0]})

        for ws, reconciler in ((ann_ws, ann), (bob_ws, bob)):
            reconciler.on_incoming(wire_to_message(ws.receive_json()["data"]))
            reconciler.on_incoming(wire_to_message(ws.receive_json()["data"]))

    ann_entries = ann.entries
    assert len(ann_entries) == 3
    assert ann_entries[1].correlation_token == pending.correlation_token
    assert ann_entries[1].status == EntryStatus.DELIVERED
    assert ann_entries[2].origin == MessageOrigin.SYNTHETIC
    assert ann_entries[2].correlation_token is None

    bob_entries = bob.entries
    assert len(bob_entries) == 3
    assert bob_entries[1].message.sender == "Ann"
    assert bob_entries[1].is_mine is False
    assert all(e.status != EntryStatus.SENDING for e in bob_entries)
