from __future__ import annotations

import uuid

from chat_relay.domain.value_objects.ids import CorrelationToken


def new_correlation_token() -> CorrelationToken:
    """Opaque per-message token the origin client uses to spot its own echo."""
    return CorrelationToken(uuid.uuid4().hex)
