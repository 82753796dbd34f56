"""Room-scoped fan-out of chat lines.

Delivers a line to every other member of a room and echoes the sender's
own text back to it. A failing peer never aborts the fan-out and never
surfaces to the sender. Engine sessions write through a per-connection
send queue, so a send here only enqueues and a stalled peer cannot hold
up the rest of the room or the echo.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from application.ports.transport import TransportClosedError
from domain.chat.messages import echo_line
from domain.chat.session import ChatSession
from shared.codes import ChatErrorCode
from infrastructure.realtime.room_directory import RoomDirectory
from core.logging_config import get_logger


logger = get_logger(__name__)


@dataclass
class BroadcastResult:
    delivered: int = 0
    failed: List[str] = field(default_factory=list)
    echoed: bool = False


class BroadcastService:
    def __init__(self, *, rooms: RoomDirectory) -> None:
        self._rooms = rooms

    async def broadcast(
        self,
        room: str,
        sender: ChatSession,
        text: str,
        *,
        echo: Optional[str] = None,
    ) -> BroadcastResult:
        """Send ``text`` to the room peers, then ``Вы: <echo>`` to the sender.

        The echo carries the sender's original text rather than a slice of
        ``text``, so names containing ``": "`` do not truncate it.
        """
        result = await self._fan_out(room, text, exclude=sender)

        if echo is not None and sender.is_open():
            try:
                await sender.send(echo_line(echo))
                result.echoed = True
            except TransportClosedError as exc:
                logger.warning("chat_echo_failed", room=room, session_id=sender.id, error=str(exc))
            except Exception as exc:
                logger.error("chat_echo_failed", room=room, session_id=sender.id, error=str(exc), exc_info=True)

        logger.debug(
            "chat_broadcast_done",
            room=room,
            sender=sender.name,
            delivered=result.delivered,
            failed=len(result.failed),
            echoed=result.echoed,
        )
        return result

    async def announce(self, room: str, text: str, *, exclude: Optional[ChatSession] = None) -> BroadcastResult:
        """Server announcement to the room; nobody gets an echo."""
        return await self._fan_out(room, text, exclude=exclude)

    async def _fan_out(self, room: str, text: str, *, exclude: Optional[ChatSession]) -> BroadcastResult:
        # Peers come from a snapshot and are not pre-filtered on is_open();
        # a send error is authoritative and the peer's own read loop reaps it.
        result = BroadcastResult()
        for peer in await self._rooms.members(room):
            if peer is exclude:
                continue
            try:
                await peer.send(text)
                result.delivered += 1
            except Exception as exc:
                result.failed.append(peer.name or peer.id)
                logger.warning(
                    "chat_peer_send_failed",
                    room=room,
                    peer=peer.name,
                    peer_session_id=peer.id,
                    code=int(ChatErrorCode.TRANSPORT_CLOSED),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
        return result


__all__ = ["BroadcastService", "BroadcastResult"]
