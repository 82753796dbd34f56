"""Per-connection chat protocol.

Interprets inbound frames for one session: awaiting-login -> active ->
closed. Frames for one connection are handled one at a time by the
transport read loop; concurrency only exists across connections.
"""
from __future__ import annotations

from typing import Callable, Optional

from application.ports.transport import TransportClosedError
from application.services.broadcast_service import BroadcastService
from domain.chat import messages
from domain.chat.session import ChatSession, SessionState
from domain.common.exceptions import ChatException, LoginEmptyException, LoginTakenException
from infrastructure.realtime.registry import SessionRegistry
from infrastructure.realtime.room_directory import RoomDirectory
from core.logging_config import get_logger


logger = get_logger(__name__)


class ChatProtocol:
    def __init__(
        self,
        session: ChatSession,
        *,
        registry: SessionRegistry,
        rooms: RoomDirectory,
        broadcaster: BroadcastService,
        default_room: str,
        on_closed: Optional[Callable[["ChatProtocol"], None]] = None,
    ) -> None:
        self.session = session
        self._registry = registry
        self._rooms = rooms
        self._broadcaster = broadcaster
        self._default_room = default_room
        self._on_closed = on_closed
        self._finished = False

    @property
    def state(self) -> SessionState:
        return self.session.state

    async def start(self) -> None:
        """Entry into awaiting-login: prompt for a name."""
        logger.info("chat_session_opened", session_id=self.session.id)
        await self._reply(messages.LOGIN_PROMPT)

    async def handle_frame(self, frame: str) -> None:
        state = self.session.state
        if state is SessionState.AWAITING_LOGIN:
            await self._handle_login_frame(frame)
        elif state is SessionState.ACTIVE:
            await self._handle_chat_frame(frame)
        else:
            logger.debug("chat_frame_after_close", session_id=self.session.id)

    async def handle_error(self, exc: BaseException) -> None:
        """Transport error callback: close if still open, no partial recovery."""
        logger.error(
            "chat_transport_error",
            session_id=self.session.id,
            name=self.session.name,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        await self.close(code=1011)

    async def close(self, code: int = 1000) -> None:
        """Terminal transition; drops registry and room references, then the transport.

        Idempotent. Departure is announced only for sessions that had
        logged in.
        """
        if self._finished:
            return
        self._finished = True
        session = self.session
        # The session may already be closed by someone else (shutdown);
        # cleanup still has to run once.
        session.mark_closed()
        name, room = session.name, session.room
        was_active = name is not None

        if was_active:
            await self._registry.unregister(session)
            if room is not None:
                await self._rooms.leave(room, session)

        try:
            await session.close(code)
        except Exception as exc:
            logger.warning("chat_transport_close_failed", session_id=session.id, error=str(exc))

        if was_active and room is not None:
            await self._broadcaster.announce(room, messages.server_line(messages.left_text(name)))
            logger.info("chat_user_left", name=name, room=room, session_id=session.id)
        if self._on_closed is not None:
            self._on_closed(self)
        logger.info("chat_session_closed", session_id=session.id)

    # -------------------- awaiting-login --------------------
    async def _handle_login_frame(self, frame: str) -> None:
        if not messages.is_login_frame(frame):
            # Not a login attempt: ignored, the client retries.
            logger.debug("chat_frame_ignored", session_id=self.session.id)
            return
        try:
            await self._login(messages.parse_login(frame))
        except ChatException as exc:
            logger.info(
                "chat_login_rejected",
                session_id=self.session.id,
                code=int(exc.code),
                error_type=exc.error_type,
                details=exc.details,
            )
            await self._reply(messages.error_line(exc.message))

    async def _login(self, login: messages.LoginFrame) -> None:
        if not login.name:
            raise LoginEmptyException()
        room = login.room or self._default_room
        if not await self._registry.try_register(login.name, self.session):
            raise LoginTakenException(login.name)

        self.session.activate(login.name, room)
        await self._rooms.join(room, self.session)
        joined = messages.joined_text(login.name)
        await self._broadcaster.broadcast(room, self.session, messages.server_line(joined), echo=joined)
        logger.info("chat_login_succeeded", name=login.name, room=room, session_id=self.session.id)

    # -------------------- active --------------------
    async def _handle_chat_frame(self, frame: str) -> None:
        session = self.session
        name = session.name or await self._registry.name_of(session)
        if name is None or session.room is None:
            logger.warning("chat_sender_unresolved", session_id=session.id)
            return
        await self._broadcaster.broadcast(session.room, session, messages.chat_line(name, frame), echo=frame)

    async def _reply(self, text: str) -> bool:
        try:
            await self.session.send(text)
            return True
        except TransportClosedError as exc:
            logger.warning("chat_reply_failed", session_id=self.session.id, error=str(exc))
        except Exception as exc:
            logger.error("chat_reply_failed", session_id=self.session.id, error=str(exc), exc_info=True)
        return False


__all__ = ["ChatProtocol"]
