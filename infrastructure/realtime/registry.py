"""In-process registry of logged-in chat sessions.

Maps display names to sessions for this process and is the single place
where name uniqueness is enforced.
"""
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Tuple

from domain.chat.session import ChatSession
from core.logging_config import get_logger


logger = get_logger(__name__)


class SessionRegistry:
    """Name -> session index guarded by an asyncio lock.

    Every public operation is atomic with respect to the others. No lock is
    held once a coroutine returns, so callers may send to the sessions they
    got back without blocking registrations.
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, ChatSession] = {}
        self._lock = asyncio.Lock()

    async def try_register(self, name: str, session: ChatSession) -> bool:
        """Bind ``name`` to ``session`` iff the name is free."""
        async with self._lock:
            if name in self._by_name:
                logger.info("chat_name_taken", name=name, session_id=session.id)
                return False
            self._by_name[name] = session
        logger.info("chat_session_registered", name=name, session_id=session.id)
        return True

    async def unregister(self, session: ChatSession) -> Optional[str]:
        """Drop the entry whose value is ``session``; returns the freed name."""
        async with self._lock:
            name = self._find_name(session)
            if name is None:
                return None
            del self._by_name[name]
        logger.info("chat_session_unregistered", name=name, session_id=session.id)
        return name

    async def name_of(self, session: ChatSession) -> Optional[str]:
        async with self._lock:
            return self._find_name(session)

    async def get(self, name: str) -> Optional[ChatSession]:
        async with self._lock:
            return self._by_name.get(name)

    async def snapshot(self) -> List[Tuple[str, ChatSession]]:
        """Point-in-time copy of all ``(name, session)`` pairs."""
        async with self._lock:
            return list(self._by_name.items())

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def _find_name(self, session: ChatSession) -> Optional[str]:
        # O(1) when the session carries its own name, scan otherwise
        if session.name is not None and self._by_name.get(session.name) is session:
            return session.name
        for name, candidate in self._by_name.items():
            if candidate is session:
                return name
        return None


__all__ = ["SessionRegistry"]
