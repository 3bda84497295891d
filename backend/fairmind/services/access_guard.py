"""
Room membership checks
"""

from typing import Optional
from sqlalchemy.orm import Session

from fairmind.core.exceptions import AccessDenied
from fairmind.models.room import Room


def is_member(room: Optional[Room], user_id: Optional[str]) -> bool:
    """Creator or either slot occupant; a missing room has no members"""
    if room is None or not user_id:
        return False
    return room.is_member(user_id)


def ensure_member(db: Session, room_id: str, user_id: str) -> Room:
    """Load a room the user may act in, or raise AccessDenied.

    An unknown room is reported the same way as a room the user is not in.
    """
    room = db.get(Room, room_id) if room_id else None
    if not is_member(room, user_id):
        raise AccessDenied()
    return room
