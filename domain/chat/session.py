"""
Chat session entity - one logical client connection
"""
from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from application.ports.transport import TextTransport, TransportClosedError


def new_session_id() -> str:
    return uuid.uuid4().hex[:12]


class SessionState(str, Enum):
    AWAITING_LOGIN = "awaiting-login"
    ACTIVE = "active"
    CLOSED = "closed"


class ChatSession:
    """A pure conduit around a transport handle.

    Sessions do not interpret frames. ``name`` and ``room`` are only set
    once the session has been activated by a successful login.
    """

    def __init__(self, transport: TextTransport, session_id: Optional[str] = None) -> None:
        self.id = session_id or new_session_id()
        self._transport = transport
        self.state = SessionState.AWAITING_LOGIN
        self.name: Optional[str] = None
        self.room: Optional[str] = None
        self._released = False

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def activate(self, name: str, room: str) -> None:
        """业务规则：awaiting-login -> active，仅允许一次"""
        if self.state is not SessionState.AWAITING_LOGIN:
            raise ValueError(f"cannot activate session in state {self.state.value}")
        self.name = name
        self.room = room
        self.state = SessionState.ACTIVE

    def is_open(self) -> bool:
        # May be stale by the time the caller sends; send failures are authoritative.
        return not self.is_closed and self._transport.is_open()

    async def send(self, text: str) -> None:
        if self.is_closed:
            raise TransportClosedError(f"session {self.id} is closed")
        await self._transport.send_text(text)

    def mark_closed(self) -> bool:
        """Move to *closed* without touching the transport.

        Returns True only for the call that performed the transition.
        """
        if self.is_closed:
            return False
        self.state = SessionState.CLOSED
        return True

    async def close(self, code: int = 1000) -> None:
        """Idempotent: transition to *closed* and release the transport once."""
        self.mark_closed()
        if self._released:
            return
        self._released = True
        await self._transport.close(code)

    def __repr__(self) -> str:
        return f"ChatSession(id={self.id!r}, name={self.name!r}, room={self.room!r}, state={self.state.value})"
