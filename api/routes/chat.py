"""WebSocket route for the room chat.

Each accepted connection gets its own ChatProtocol from the engine; this
module only pumps frames into it and guarantees cleanup on exit.
"""
from __future__ import annotations

import asyncio
from typing import Optional

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from application.services.chat_engine import ChatEngine
from infrastructure.realtime.websocket_transport import WebSocketTransport
from core.logging_config import get_logger


logger = get_logger(__name__)


router = APIRouter(tags=["Chat"])


def get_chat_engine_from_app(ws: WebSocket) -> ChatEngine:
    engine = getattr(ws.app.state, "chat_engine", None)
    if engine is None:
        raise RuntimeError("Chat engine not initialized. Ensure lifespan sets app.state.chat_engine.")
    return engine


@router.websocket("/chat")
async def chat_endpoint(ws: WebSocket) -> None:
    engine = get_chat_engine_from_app(ws)
    await ws.accept()
    protocol = engine.open_session(WebSocketTransport(ws))
    structlog.contextvars.bind_contextvars(session_id=protocol.session.id)
    client = f"{ws.client.host}:{ws.client.port}" if ws.client else "unknown"
    logger.info("ws_connected", client=client)

    error: Optional[BaseException] = None
    try:
        await protocol.start()
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                logger.info("ws_disconnected", code=message.get("code"))
                break
            text = message.get("text")
            if text is None:
                logger.debug("ws_binary_frame_dropped", size=len(message.get("bytes") or b""))
                continue
            await protocol.handle_frame(text)
    except WebSocketDisconnect as exc:
        logger.info("ws_disconnected", code=exc.code)
    except Exception as exc:
        error = exc
    finally:
        # Cleanup must finish even when this task is being cancelled
        # (server shutdown or client teardown).
        if error is not None:
            await asyncio.shield(protocol.handle_error(error))
        else:
            await asyncio.shield(protocol.close())
        structlog.contextvars.unbind_contextvars("session_id")
