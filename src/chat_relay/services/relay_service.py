"""Single-room broadcast relay with a delayed simulated participant."""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable

from chat_relay.application.ports.clock import Clock, SystemClock, format_clock_time
from chat_relay.application.ports.transport import Broadcaster
from chat_relay.domain.entities.message import ChatMessage
from chat_relay.infrastructure.ws.mappers import message_to_wire
from chat_relay.infrastructure.ws.protocol import CHAT_MESSAGE
from chat_relay.services.responder_service import ResponderPolicy

logger = logging.getLogger(__name__)

PROCESSED_BY = "server"


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


class BroadcastRelay:
    """Stamps inbound messages, fans them out and schedules bot replies.

    The relay keeps no message history. Its only state is the set of delayed
    tasks in flight, each tagged with the connection that caused it.
    """

    def __init__(
        self,
        broadcaster: Broadcaster,
        responder: ResponderPolicy,
        *,
        bot_name: str,
        welcome_text: str,
        welcome_delay: float = 0.5,
        reply_delay: tuple[float, float] = (1.0, 3.0),
        cancel_replies_on_disconnect: bool = False,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._broadcaster = broadcaster
        self._responder = responder
        self._bot_name = bot_name
        self._welcome_text = welcome_text
        self._welcome_delay = welcome_delay
        self._reply_delay = reply_delay
        self._cancel_on_disconnect = cancel_replies_on_disconnect
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()
        self._tasks: dict[asyncio.Task[None], str] = {}

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def stamp(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Copy of ``raw`` with server time and provenance; other keys untouched."""
        now = self._clock.now()
        return {
            **raw,
            "serverTime": format_clock_time(now),
            "serverProcessedAt": now.isoformat(),
            "processedBy": PROCESSED_BY,
        }

    def synthetic_message(self, text: str) -> dict[str, Any]:
        now = self._clock.now()
        message = ChatMessage(
            sender=self._bot_name,
            text=text,
            server_time=format_clock_time(now),
            server_processed_at=now.isoformat(),
            processed_by=PROCESSED_BY,
            is_synthetic=True,
        )
        return message_to_wire(message)

    def on_connect(self, connection_id: str) -> None:
        self._schedule(
            connection_id,
            self._welcome_delay,
            lambda: self._send_welcome(connection_id),
            label="welcome",
        )

    async def on_message(self, connection_id: str, raw: dict[str, Any]) -> None:
        sender = _as_text(raw.get("sender"))
        text = _as_text(raw.get("text"))
        logger.info("Received message from %r on %s", sender, connection_id)

        await self._broadcaster.broadcast(CHAT_MESSAGE, self.stamp(raw))

        low, high = self._reply_delay
        self._schedule(
            connection_id,
            self._rng.uniform(low, high),
            lambda: self._send_reply(text, sender),
            label="reply",
        )

    def on_disconnect(self, connection_id: str) -> None:
        if not self._cancel_on_disconnect:
            return
        owned = [task for task, owner in self._tasks.items() if owner == connection_id]
        for task in owned:
            task.cancel()
        if owned:
            logger.debug("Cancelled %d delayed task(s) of %s", len(owned), connection_id)

    async def drain(self) -> None:
        """Wait until every delayed task has finished."""
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    async def shutdown(self, grace: float) -> None:
        if not self._tasks:
            return
        _done, pending = await asyncio.wait(set(self._tasks), timeout=grace)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        if pending:
            logger.info("Cancelled %d delayed task(s) at shutdown", len(pending))

    def _schedule(
        self,
        owner: str,
        delay: float,
        action: Callable[[], Awaitable[None]],
        *,
        label: str,
    ) -> None:
        task = asyncio.create_task(
            self._run_later(delay, action, label), name=f"relay-{label}-{owner}",
        )
        self._tasks[task] = owner
        task.add_done_callback(self._forget)

    def _forget(self, task: asyncio.Task[None]) -> None:
        self._tasks.pop(task, None)

    async def _run_later(
        self,
        delay: float,
        action: Callable[[], Awaitable[None]],
        label: str,
    ) -> None:
        await asyncio.sleep(delay)
        try:
            await action()
        except Exception:
            logger.exception("Delayed %s failed", label)

    async def _send_welcome(self, connection_id: str) -> None:
        delivered = await self._broadcaster.send_to(
            connection_id, CHAT_MESSAGE, self.synthetic_message(self._welcome_text),
        )
        if not delivered:
            logger.debug("Welcome skipped, %s already gone", connection_id)

    async def _send_reply(self, text: str, sender: str) -> None:
        reply = self._responder.reply(text, sender)
        logger.info("Responding: %s", reply)
        await self._broadcaster.broadcast(CHAT_MESSAGE, self.synthetic_message(reply))
