"""Application service assembling the chat engine.

One engine per application instance holds the shared registry and room
directory and hands each accepted connection its own protocol. The
engine is built in the app lifespan and injected via ``app.state``;
tests construct a fresh one per app.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

from application.ports.transport import TextTransport
from application.services.broadcast_service import BroadcastService
from application.services.chat_protocol import ChatProtocol
from domain.chat.session import ChatSession, new_session_id
from infrastructure.realtime.outbox import QueuedTransport
from infrastructure.realtime.registry import SessionRegistry
from infrastructure.realtime.room_directory import RoomDirectory
from core.logging_config import get_logger


logger = get_logger(__name__)


class ChatEngine:
    def __init__(
        self,
        *,
        default_room: str = "public",
        registry: Optional[SessionRegistry] = None,
        rooms: Optional[RoomDirectory] = None,
        send_queue_max: int = 100,
        overflow_policy: str = "drop_oldest",
        drain_timeout: float = 2.0,
    ) -> None:
        self.default_room = default_room
        self.registry = registry or SessionRegistry()
        self.rooms = rooms or RoomDirectory()
        self.broadcaster = BroadcastService(rooms=self.rooms)
        self._send_queue_max = send_queue_max
        self._overflow_policy = overflow_policy
        self._drain_timeout = drain_timeout
        # every protocol not yet closed, including awaiting-login ones
        self._open: Dict[ChatProtocol, QueuedTransport] = {}

    def open_session(self, transport: TextTransport) -> ChatProtocol:
        """Create the session for an accepted connection, in awaiting-login.

        Must be called from a running event loop: the session's sender
        task is started here.
        """
        session_id = new_session_id()
        outbox = QueuedTransport(
            transport,
            session_id=session_id,
            maxsize=self._send_queue_max,
            overflow_policy=self._overflow_policy,
        )
        outbox.start()
        protocol = ChatProtocol(
            ChatSession(outbox, session_id=session_id),
            registry=self.registry,
            rooms=self.rooms,
            broadcaster=self.broadcaster,
            default_room=self.default_room,
            on_closed=self._forget,
        )
        self._open[protocol] = outbox
        return protocol

    def _forget(self, protocol: ChatProtocol) -> None:
        self._open.pop(protocol, None)

    async def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for every open session's send queue to empty.

        Returns False if ``timeout`` expired first.
        """
        waiters = [outbox.drain() for outbox in list(self._open.values())]
        if not waiters:
            return True
        try:
            await asyncio.wait_for(asyncio.gather(*waiters), timeout)
        except asyncio.TimeoutError:
            logger.warning("chat_drain_timeout", timeout=timeout)
            return False
        return True

    async def shutdown(self) -> None:
        """Flush pending frames, then close every open session with 1001.

        Sessions still awaiting login are closed too. Registry and room
        cleanup stays with each connection's own close path.
        """
        await self.drain(timeout=self._drain_timeout)
        protocols = list(self._open)
        for protocol in protocols:
            try:
                await protocol.session.close(code=1001)
            except Exception as exc:
                logger.warning("chat_shutdown_close_failed", session_id=protocol.session.id, error=str(exc))
        logger.info("chat_engine_shutdown", closed=len(protocols))


__all__ = ["ChatEngine"]
