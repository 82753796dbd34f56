"""Application-owned transport port (hexagonal architecture).

A chat session only needs to write text frames, close, and observe
whether the underlying connection is still usable. The WebSocket adapter
in infrastructure implements this contract; tests use in-memory fakes.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


class TransportClosedError(Exception):
    """Raised by a transport when a frame cannot be written.

    Covers both an already-closed connection and an unrecoverable I/O
    failure; callers treat the session as dead either way.
    """


@runtime_checkable
class TextTransport(Protocol):
    """Opaque send endpoint for one client connection."""

    async def send_text(self, text: str) -> None: ...

    async def close(self, code: int = 1000) -> None: ...

    def is_open(self) -> bool: ...


__all__ = ["TextTransport", "TransportClosedError"]
