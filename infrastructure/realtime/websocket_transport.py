"""Starlette WebSocket adapter for the TextTransport port."""
from __future__ import annotations

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from application.ports.transport import TextTransport, TransportClosedError
from core.logging_config import get_logger


logger = get_logger(__name__)


class WebSocketTransport(TextTransport):
    def __init__(self, ws: WebSocket) -> None:
        self._ws = ws

    def is_open(self) -> bool:
        return (
            self._ws.client_state == WebSocketState.CONNECTED
            and self._ws.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, text: str) -> None:  # type: ignore[override]
        if not self.is_open():
            raise TransportClosedError("websocket is not connected")
        try:
            await self._ws.send_text(text)
        except Exception as exc:
            # Disconnects surface as WebSocketDisconnect, RuntimeError or OSError
            # depending on the server; all of them mean the peer is gone.
            raise TransportClosedError(str(exc) or type(exc).__name__) from exc

    async def close(self, code: int = 1000) -> None:  # type: ignore[override]
        if WebSocketState.DISCONNECTED in (self._ws.application_state, self._ws.client_state):
            return
        try:
            await self._ws.close(code=code)
        except Exception as exc:
            logger.debug("ws_close_ignored", code=code, error=str(exc))


__all__ = ["WebSocketTransport"]
