from __future__ import annotations

from typing import NewType

CorrelationToken = NewType("CorrelationToken", str)
