"""Bounded diagnostic log of connection and message events."""
from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass
from typing import Any

from chat_relay.application.ports.clock import Clock, SystemClock, format_clock_time
from chat_relay.domain.value_objects.enums import LogEntryType


@dataclass(frozen=True, slots=True)
class LogEntry:
    timestamp: str
    type: LogEntryType
    message: str
    data: str | None = None


class EventLog:
    def __init__(self, size: int = 50, *, clock: Clock | None = None) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=size)
        self._clock = clock or SystemClock()

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, type_: LogEntryType, message: str, data: Any = None) -> LogEntry:
        entry = LogEntry(
            timestamp=format_clock_time(self._clock.now()),
            type=type_,
            message=message,
            data=None if data is None else json.dumps(data, indent=2, ensure_ascii=False, default=str),
        )
        self._entries.append(entry)
        return entry

    def clear(self) -> None:
        self._entries.clear()
