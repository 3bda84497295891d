from datetime import datetime

from fairmind.models.room import Room, RoomStatus


def _room(creator="u1"):
    return Room(code="ABC123", created_by=creator, participant1_id=creator, status=RoomStatus.ACTIVE.value)


def test_second_identity_fills_slot_two():
    room = _room()
    assert room.assign_participant("u2") is True
    assert room.participant_ids == ["u1", "u2"]


def test_creator_rejoining_does_not_fill_slot_two():
    room = _room()
    assert room.assign_participant("u1") is False
    assert room.participant2_id is None


def test_assignment_is_idempotent():
    room = _room()
    room.assign_participant("u2")
    assert room.assign_participant("u2") is False
    assert room.participant_ids == ["u1", "u2"]


def test_third_identity_is_never_assigned():
    room = _room()
    room.assign_participant("u2")
    assert room.assign_participant("u3") is False
    assert set(room.participant_ids) == {"u1", "u2"}
    assert not room.is_member("u3")


def test_first_empty_slot_wins():
    room = Room(code="ABC123", created_by="u1")
    assert room.assign_participant("u2") is True
    assert room.participant1_id == "u2"
    assert room.participant2_id is None


def test_resolved_timestamp_is_set_once():
    room = _room()
    first = datetime(2026, 1, 1)
    assert room.mark_resolved(first) is True
    assert room.status == "resolved"
    assert room.mark_resolved(datetime(2026, 2, 1)) is False
    assert room.resolved_at == first
