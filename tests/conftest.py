"""Shared test fixtures."""
from __future__ import annotations

import itertools
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import pytest

from chat_relay.client.reconciler import MessageReconciler
from chat_relay.domain.entities.message import ChatMessage

FIXED_NOW = datetime(2024, 5, 17, 15, 4, 5, tzinfo=timezone.utc)


@dataclass
class FakeClock:
    moment: datetime = FIXED_NOW
    reads: int = 0

    def now(self) -> datetime:
        self.reads += 1
        return self.moment


@dataclass
class FakeTransport:
    sent: list[dict[str, Any]] = field(default_factory=list)

    def send(self, payload: dict[str, Any]) -> None:
        self.sent.append(payload)


@dataclass
class FakeBroadcaster:
    connected: set[str] = field(default_factory=set)
    broadcasts: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    direct: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> None:
        self.broadcasts.append((event_type, data))

    async def send_to(self, connection_id: str, event_type: str, data: dict[str, Any]) -> bool:
        if connection_id not in self.connected:
            return False
        self.direct.append((connection_id, event_type, data))
        return True


@dataclass
class FakeWebSocket:
    fail: bool = False
    accepted: bool = False
    sent: list[str] = field(default_factory=list)

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, raw: str) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(raw)

    def events(self) -> list[dict[str, Any]]:
        return [json.loads(raw) for raw in self.sent]


class FakeRng:
    """Stands in for random.Random: records uniform() bounds, always picks first."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.uniform_calls: list[tuple[float, float]] = []

    def uniform(self, a: float, b: float) -> float:
        self.uniform_calls.append((a, b))
        return self.delay

    def choice(self, seq):
        return seq[0]


def sequential_tokens(prefix: str = "tok"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def make_echo(
    sender: str,
    text: str,
    token: str | None,
    *,
    is_synthetic: bool = False,
) -> ChatMessage:
    """A message as it comes back from the relay."""
    return ChatMessage(
        sender=sender,
        text=text,
        correlation_token=token,
        server_time="3:04:05 PM",
        server_processed_at=FIXED_NOW.isoformat(),
        processed_by="server",
        is_synthetic=is_synthetic,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def reconciler(transport, clock) -> MessageReconciler:
    return MessageReconciler(
        "Ann",
        transport=transport,
        token_factory=sequential_tokens(),
        clock=clock,
    )


@pytest.fixture
def broadcaster() -> FakeBroadcaster:
    return FakeBroadcaster()
