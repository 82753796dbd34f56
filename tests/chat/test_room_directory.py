import pytest

from infrastructure.realtime.room_directory import RoomDirectory


pytestmark = pytest.mark.asyncio


async def test_join_creates_room_on_demand(make_session):
    rooms = RoomDirectory()
    alice, _ = make_session()

    await rooms.join("public", alice)

    assert await rooms.members("public") == [alice]
    assert await rooms.rooms() == ["public"]


async def test_leave_removes_empty_room(make_session):
    rooms = RoomDirectory()
    alice, _ = make_session()
    bob, _ = make_session()
    await rooms.join("public", alice)
    await rooms.join("public", bob)

    await rooms.leave("public", alice)
    assert await rooms.members("public") == [bob]

    await rooms.leave("public", bob)
    assert await rooms.members("public") == []
    assert await rooms.rooms() == []


async def test_leave_unknown_is_noop(make_session):
    rooms = RoomDirectory()
    alice, _ = make_session()
    await rooms.leave("nowhere", alice)
    await rooms.join("public", alice)
    await rooms.leave("private", alice)
    assert await rooms.members("public") == [alice]


async def test_members_snapshot_is_not_live(make_session):
    rooms = RoomDirectory()
    alice, _ = make_session()
    bob, _ = make_session()
    await rooms.join("public", alice)

    snap = await rooms.members("public")
    await rooms.join("public", bob)

    assert snap == [alice]


async def test_rooms_are_separate(make_session):
    rooms = RoomDirectory()
    alice, _ = make_session()
    bob, _ = make_session()
    await rooms.join("public", alice)
    await rooms.join("private", bob)

    assert await rooms.members("public") == [alice]
    assert await rooms.members("private") == [bob]
