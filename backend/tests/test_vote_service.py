import pytest

from fairmind.core.exceptions import AccessDenied, AlreadyVoted, NotFound
from fairmind.models.resolution import Resolution
from fairmind.models.vote import Vote
from fairmind.services.vote_service import VoteService
from tests.conftest import FakeSocket, make_room


@pytest.fixture
def room(db, alice, bob):
    return make_room(db, alice, participant=bob)


@pytest.fixture
def resolutions(db, room):
    batch = [
        Resolution(room_id=room.id, batch_id="b1", title=f"Option {i}", description="...", ai_score=90 - i * 10, suggested_best=(i == 1))
        for i in (1, 2, 3)
    ]
    db.add_all(batch)
    db.commit()
    return batch


@pytest.fixture
def sockets(registry, room, alice, bob):
    alice_socket, bob_socket = FakeSocket(), FakeSocket()
    registry.register(room.id, alice.id, "Alice", alice_socket)
    registry.register(room.id, bob.id, "Bob", bob_socket)
    return alice_socket, bob_socket


@pytest.fixture
def service(db, broadcaster):
    return VoteService(db, broadcaster)


async def test_matching_votes_resolve_the_room(db, service, room, resolutions, sockets, alice, bob):
    agreed = resolutions[1]

    await service.cast_vote(room.id, agreed.id, alice.id)
    db.refresh(room)
    assert room.status == "active"

    await service.cast_vote(room.id, agreed.id, bob.id)
    db.refresh(room)
    assert room.status == "resolved"
    assert room.resolved_at is not None

    for socket in sockets:
        events = socket.events()
        assert [e["type"] for e in events] == ["vote_cast", "vote_cast", "room_resolved"]
        assert events[0] == {"type": "vote_cast", "userId": alice.id, "resolutionId": agreed.id}
        assert events[2]["resolution"]["id"] == agreed.id
        assert events[2]["resolution"]["title"] == "Option 2"


async def test_differing_votes_leave_room_active(db, service, room, resolutions, sockets, alice, bob):
    await service.cast_vote(room.id, resolutions[0].id, alice.id)
    await service.cast_vote(room.id, resolutions[2].id, bob.id)

    db.refresh(room)
    assert room.status == "active"
    assert room.resolved_at is None
    assert "room_resolved" not in sockets[0].event_types()


async def test_second_vote_by_same_user_is_rejected(db, service, room, resolutions, alice):
    await service.cast_vote(room.id, resolutions[0].id, alice.id)

    with pytest.raises(AlreadyVoted):
        await service.cast_vote(room.id, resolutions[1].id, alice.id)
    assert db.query(Vote).filter(Vote.room_id == room.id).count() == 1


async def test_outsider_cannot_vote(db, service, room, resolutions, carol):
    with pytest.raises(AccessDenied):
        await service.cast_vote(room.id, resolutions[0].id, carol.id)
    assert db.query(Vote).count() == 0


async def test_resolution_must_belong_to_room(db, service, room, resolutions, alice, bob):
    other = make_room(db, bob, code="OTHER1")
    foreign = Resolution(room_id=other.id, batch_id="b2", title="Elsewhere", description="...", ai_score=50)
    db.add(foreign)
    db.commit()

    with pytest.raises(NotFound):
        await service.cast_vote(room.id, foreign.id, alice.id)
    with pytest.raises(NotFound):
        await service.cast_vote(room.id, "missing", alice.id)


async def test_convergence_only_fires_once(db, service, room, resolutions, sockets, alice, bob):
    agreed = resolutions[0]
    await service.cast_vote(room.id, agreed.id, alice.id)
    await service.cast_vote(room.id, agreed.id, bob.id)

    assert await service.evaluate_convergence(room) is None
    assert sockets[0].event_types().count("room_resolved") == 1
