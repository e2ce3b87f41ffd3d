from __future__ import annotations

from dataclasses import dataclass

from chat_relay.application.exceptions import InvalidTransitionError
from chat_relay.domain.value_objects.enums import ConnectionState

_ALLOWED: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.CONNECTING: frozenset(
        {ConnectionState.CONNECTED, ConnectionState.DISCONNECTED}
    ),
    ConnectionState.CONNECTED: frozenset({ConnectionState.DISCONNECTED}),
    ConnectionState.DISCONNECTED: frozenset(),
}


@dataclass(slots=True)
class RelayConnection:
    """Lifecycle of a single socket held by the relay. Owns no messages."""

    id: str
    state: ConnectionState = ConnectionState.CONNECTING

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def advance(self, new_state: ConnectionState) -> None:
        if new_state not in _ALLOWED[self.state]:
            raise InvalidTransitionError(
                f"Connection {self.id}: {self.state} -> {new_state} is not allowed"
            )
        self.state = new_state
