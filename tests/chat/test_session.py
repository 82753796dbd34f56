import pytest

from application.ports.transport import TransportClosedError
from domain.chat.session import SessionState


pytestmark = pytest.mark.asyncio


async def test_new_session_awaits_login(make_session):
    session, transport = make_session()
    assert session.state is SessionState.AWAITING_LOGIN
    assert session.name is None and session.room is None
    assert session.is_open()
    await session.send("hello")
    assert transport.sent == ["hello"]


async def test_activate_only_once(make_session):
    session, _ = make_session()
    session.activate("Alice", "public")
    assert session.is_active
    assert (session.name, session.room) == ("Alice", "public")
    with pytest.raises(ValueError):
        session.activate("Alice", "other")


async def test_close_is_idempotent_and_releases_transport_once(make_session):
    session, transport = make_session()
    await session.close()
    await session.close(code=1011)
    assert session.is_closed
    assert not session.is_open()
    assert transport.close_codes == [1000]


async def test_send_after_close_fails(make_session):
    session, _ = make_session()
    await session.close()
    with pytest.raises(TransportClosedError):
        await session.send("late")


async def test_cannot_activate_closed_session(make_session):
    session, _ = make_session()
    session.mark_closed()
    with pytest.raises(ValueError):
        session.activate("Alice", "public")
