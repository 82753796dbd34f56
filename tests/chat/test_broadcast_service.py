import pytest

from application.services.broadcast_service import BroadcastService
from infrastructure.realtime.room_directory import RoomDirectory


pytestmark = pytest.mark.asyncio


async def _room_with(make_session, *specs):
    rooms = RoomDirectory()
    members = []
    for name, room, fail in specs:
        session, transport = make_session(fail_sends=fail)
        session.activate(name, room)
        await rooms.join(room, session)
        members.append((session, transport))
    return rooms, members


async def test_broadcast_reaches_peers_and_echoes_sender(make_session):
    rooms, [(alice, alice_t), (bob, bob_t), (carol, carol_t)] = await _room_with(
        make_session,
        ("Alice", "public", False),
        ("Bob", "public", False),
        ("Carol", "public", False),
    )
    svc = BroadcastService(rooms=rooms)

    result = await svc.broadcast("public", alice, "Alice: Hello everyone!", echo="Hello everyone!")

    assert bob_t.sent == ["Alice: Hello everyone!"]
    assert carol_t.sent == ["Alice: Hello everyone!"]
    assert alice_t.sent == ["Вы: Hello everyone!"]
    assert result.delivered == 2 and result.failed == [] and result.echoed


async def test_peer_failure_does_not_abort_fan_out(make_session):
    rooms, [(alice, alice_t), (broken, _), (bob, bob_t)] = await _room_with(
        make_session,
        ("Alice", "public", False),
        ("Broken", "public", True),
        ("Bob", "public", False),
    )
    svc = BroadcastService(rooms=rooms)

    result = await svc.broadcast("public", alice, "Alice: hi", echo="hi")

    assert bob_t.sent == ["Alice: hi"]
    assert alice_t.sent == ["Вы: hi"]
    assert result.failed == ["Broken"]
    # the failing peer is not evicted here; its own read loop reaps it
    assert broken in await rooms.members("public")


async def test_closed_peer_is_attempted_and_counted_as_failure(make_session):
    rooms, [(alice, _), (bob, bob_t)] = await _room_with(
        make_session,
        ("Alice", "public", False),
        ("Bob", "public", False),
    )
    await bob.close()
    svc = BroadcastService(rooms=rooms)

    result = await svc.broadcast("public", alice, "Alice: hi", echo="hi")

    assert result.failed == ["Bob"]
    assert bob_t.sent == []


async def test_no_echo_to_closed_sender(make_session):
    rooms, [(alice, alice_t), (bob, bob_t)] = await _room_with(
        make_session,
        ("Alice", "public", False),
        ("Bob", "public", False),
    )
    await alice.close()
    svc = BroadcastService(rooms=rooms)

    result = await svc.broadcast("public", alice, "Alice: bye", echo="bye")

    assert bob_t.sent == ["Alice: bye"]
    assert alice_t.sent == []
    assert not result.echoed


async def test_own_echo_failure_is_swallowed(make_session):
    rooms, [(alice, _), (bob, bob_t)] = await _room_with(
        make_session,
        ("Alice", "public", True),
        ("Bob", "public", False),
    )
    svc = BroadcastService(rooms=rooms)

    result = await svc.broadcast("public", alice, "Alice: hi", echo="hi")

    assert bob_t.sent == ["Alice: hi"]
    assert not result.echoed


async def test_other_rooms_receive_nothing(make_session):
    rooms, [(private_user, _), (public_user, public_t)] = await _room_with(
        make_session,
        ("PrivateUser", "private", False),
        ("PublicUser", "public", False),
    )
    svc = BroadcastService(rooms=rooms)

    await svc.broadcast("private", private_user, "PrivateUser: Private message", echo="Private message")

    assert public_t.sent == []


async def test_echo_keeps_original_text_for_names_with_separator(make_session):
    rooms, [(odd, odd_t), (_bob, bob_t)] = await _room_with(
        make_session,
        ("Dr: Who", "public", False),
        ("Bob", "public", False),
    )
    svc = BroadcastService(rooms=rooms)

    await svc.broadcast("public", odd, "Dr: Who: hello", echo="hello")

    assert bob_t.sent == ["Dr: Who: hello"]
    assert odd_t.sent == ["Вы: hello"]


async def test_announce_skips_excluded_and_never_echoes(make_session):
    rooms, [(alice, alice_t), (bob, bob_t)] = await _room_with(
        make_session,
        ("Alice", "public", False),
        ("Bob", "public", False),
    )
    svc = BroadcastService(rooms=rooms)

    await svc.announce("public", "Server: Alice подключился", exclude=alice)
    await svc.announce("public", "Server: notice")

    assert alice_t.sent == ["Server: notice"]
    assert bob_t.sent == ["Server: Alice подключился", "Server: notice"]
