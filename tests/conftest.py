"""Pytest bootstrap configuration.

Shared fakes for the chat engine: an in-memory transport that records
frames, and fixtures building a fresh engine or app per test.
"""
import asyncio
import os
from typing import List, Optional, Tuple

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

# Keep tests independent from a developer's local .env overrides
os.environ.setdefault("DEFAULT_ROOM", "public")

from application.ports.transport import TransportClosedError  # noqa: E402
from application.services.chat_engine import ChatEngine  # noqa: E402
from domain.chat.session import ChatSession  # noqa: E402
from main import create_app  # noqa: E402


class FakeTransport:
    """Records outgoing frames; can be told to fail every send.

    With ``hold`` set, each send waits on that event first, which models a
    client that has stopped reading.
    """

    def __init__(self, *, fail_sends: bool = False, hold: Optional[asyncio.Event] = None) -> None:
        self.sent: List[str] = []
        self.closed = False
        self.close_codes: List[int] = []
        self.fail_sends = fail_sends
        self.hold = hold

    def is_open(self) -> bool:
        return not self.closed

    async def send_text(self, text: str) -> None:
        if self.closed:
            raise TransportClosedError("closed")
        if self.fail_sends:
            raise TransportClosedError("broken pipe")
        if self.hold is not None:
            await self.hold.wait()
        self.sent.append(text)

    async def close(self, code: int = 1000) -> None:
        self.closed = True
        self.close_codes.append(code)


@pytest.fixture
def make_session():
    def _make(*, fail_sends: bool = False) -> Tuple[ChatSession, FakeTransport]:
        transport = FakeTransport(fail_sends=fail_sends)
        return ChatSession(transport), transport
    return _make


@pytest.fixture
def make_transport():
    def _make(*, fail_sends: bool = False, stalled: bool = False) -> FakeTransport:
        return FakeTransport(fail_sends=fail_sends, hold=asyncio.Event() if stalled else None)
    return _make


@pytest_asyncio.fixture
async def engine():
    chat_engine = ChatEngine(default_room="public", drain_timeout=0.1)
    yield chat_engine
    # stops the per-session sender tasks
    await chat_engine.shutdown()


@pytest.fixture
def client():
    # Context manager form runs the lifespan and keeps every websocket on one loop
    with TestClient(create_app()) as c:
        yield c
