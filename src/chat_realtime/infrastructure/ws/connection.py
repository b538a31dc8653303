"""A live socket bound to one actor, with its own outbound queue.

Fan-out only ever enqueues; a dedicated writer task per connection does the
network I/O, so a slow client never delays delivery to anyone else.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Protocol
from uuid import UUID

from chat_realtime.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)

# Close code used when a client cannot keep up with its queue
TRY_AGAIN_LATER = 1013


class Transport(Protocol):
    async def accept(self) -> None: ...
    async def send_text(self, data: str) -> None: ...
    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


class Connection:
    def __init__(self, transport: Transport, actor_id: UUID, *, queue_size: int = 256) -> None:
        self.id = uuid.uuid4().hex
        self.actor_id = actor_id
        self._transport = transport
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._writer: asyncio.Task[None] | None = None
        self._abort_task: asyncio.Task[None] | None = None
        self._closed = False

    def __repr__(self) -> str:
        return f"<Connection {self.id} actor={self.actor_id}>"

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        self._writer = asyncio.create_task(self._drain(), name=f"ws-writer-{self.id}")

    def send(self, event_type: str, data: dict[str, Any]) -> bool:
        """Queue an event for delivery. Returns False if it was dropped."""
        if self._closed:
            return False
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        try:
            self._queue.put_nowait(raw)
        except asyncio.QueueFull:
            logger.warning(
                "Send queue full for %s (actor=%s), closing slow connection",
                self.id, self.actor_id,
            )
            self._closed = True
            self._abort_task = asyncio.create_task(self._abort(), name=f"ws-abort-{self.id}")
            return False
        return True

    async def flush(self) -> None:
        """Wait until everything queued so far has been written."""
        await self._queue.join()

    async def close(self) -> None:
        self._closed = True
        if self._writer:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None
        self._discard_pending()

    async def _drain(self) -> None:
        while True:
            raw = await self._queue.get()
            try:
                await self._transport.send_text(raw)
            except Exception:
                logger.debug("Write to %s failed, stopping writer", self.id, exc_info=True)
                self._closed = True
                self._discard_pending()
                return
            finally:
                self._queue.task_done()

    def _discard_pending(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

    async def _abort(self) -> None:
        try:
            await self._transport.close(code=TRY_AGAIN_LATER, reason="Too slow")
        except Exception:
            logger.debug("Closing slow connection %s failed", self.id, exc_info=True)
