"""In-process room membership.

Groups sessions by room id for room-scoped fan-out. Empty rooms are
dropped as soon as their last member leaves.
"""
from __future__ import annotations

import asyncio
from typing import Dict, List, Set

from domain.chat.session import ChatSession
from core.logging_config import get_logger


logger = get_logger(__name__)


class RoomDirectory:
    """Manage room memberships for this process."""

    def __init__(self) -> None:
        # room -> set[ChatSession]
        self._by_room: Dict[str, Set[ChatSession]] = {}
        self._lock = asyncio.Lock()

    async def join(self, room: str, session: ChatSession) -> None:
        async with self._lock:
            self._by_room.setdefault(room, set()).add(session)
        logger.info("chat_join_room", room=room, session_id=session.id)

    async def leave(self, room: str, session: ChatSession) -> None:
        async with self._lock:
            members = self._by_room.get(room)
            if not members or session not in members:
                return
            members.discard(session)
            if not members:
                self._by_room.pop(room, None)
        logger.info("chat_leave_room", room=room, session_id=session.id)

    async def members(self, room: str) -> List[ChatSession]:
        """Snapshot of the room's members; may be stale by the time it is used."""
        async with self._lock:
            return list(self._by_room.get(room, ()))

    async def rooms(self) -> List[str]:
        async with self._lock:
            return list(self._by_room)


__all__ = ["RoomDirectory"]
