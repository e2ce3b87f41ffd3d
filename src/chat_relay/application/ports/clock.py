from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Default wall-clock implementation."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def format_clock_time(moment: datetime) -> str:
    """Human-readable local time, e.g. ``3:04:05 PM``."""
    local = moment.astimezone()
    return f"{local.hour % 12 or 12}:{local:%M:%S %p}"
