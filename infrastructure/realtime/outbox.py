"""Per-connection send queue.

Wraps a transport so that writers only enqueue; a dedicated sender task
drains the queue into the real connection. A peer that stops reading
therefore backs up its own queue instead of the broadcaster.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from application.ports.transport import TextTransport, TransportClosedError
from shared.codes import ChatErrorCode
from core.logging_config import get_logger


logger = get_logger(__name__)


OVERFLOW_POLICIES = {"drop_oldest", "drop_new", "disconnect"}


class QueuedTransport(TextTransport):
    """Bounded FIFO in front of a transport, one sender task per connection.

    Frames are written in enqueue order. When the queue is full the
    overflow policy applies: ``drop_oldest`` (default) discards the oldest
    pending frame, ``drop_new`` discards the incoming one, ``disconnect``
    closes the connection with 1013.
    """

    def __init__(
        self,
        inner: TextTransport,
        *,
        session_id: str,
        maxsize: int = 100,
        overflow_policy: str = "drop_oldest",
    ) -> None:
        self._inner = inner
        self._session_id = session_id
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max(1, int(maxsize)))
        policy = (overflow_policy or "drop_oldest").lower()
        if policy not in OVERFLOW_POLICIES:
            logger.warning("chat_send_queue_policy_invalid", policy=policy, fallback="drop_oldest")
            policy = "drop_oldest"
        self._policy = policy
        self._task: Optional[asyncio.Task] = None
        self._dead = False
        self._closed = False

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._sender_loop())

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def is_open(self) -> bool:
        return not (self._closed or self._dead) and self._inner.is_open()

    async def send_text(self, text: str) -> None:
        if self._closed or self._dead:
            raise TransportClosedError(f"session {self._session_id} send queue is closed")
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            await self._overflow(text)

    async def drain(self) -> None:
        """Wait until every queued frame has been written or discarded."""
        await self._queue.join()

    async def close(self, code: int = 1000) -> None:
        if self._closed:
            return
        self._closed = True
        if self._task is not None:
            self._task.cancel()
        self._discard_pending()
        await self._inner.close(code)

    async def _overflow(self, text: str) -> None:
        if self._policy == "drop_new":
            logger.warning("chat_send_queue_drop_new", session_id=self._session_id)
            return
        if self._policy == "disconnect":
            logger.warning("chat_send_queue_disconnect", session_id=self._session_id)
            await self.close(code=1013)
            raise TransportClosedError(f"session {self._session_id} send queue overflow")
        # drop_oldest
        self._queue.get_nowait()
        self._queue.task_done()
        self._queue.put_nowait(text)
        logger.warning("chat_send_queue_drop_oldest", session_id=self._session_id)

    async def _sender_loop(self) -> None:
        try:
            while True:
                text = await self._queue.get()
                try:
                    await self._inner.send_text(text)
                except Exception as exc:
                    self._dead = True
                    logger.warning(
                        "chat_send_failed",
                        session_id=self._session_id,
                        code=int(ChatErrorCode.TRANSPORT_CLOSED),
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                    return
                finally:
                    self._queue.task_done()
        except asyncio.CancelledError:  # graceful exit
            return
        finally:
            if self._dead:
                self._discard_pending()

    def _discard_pending(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._queue.task_done()


__all__ = ["QueuedTransport", "OVERFLOW_POLICIES"]
