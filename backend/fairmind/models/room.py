"""
Room model
"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from fairmind.core.database import Base
from fairmind.core.utils import utc_now

class RoomStatus(str, enum.Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"
    ARCHIVED = "archived"    # set by administrative action only

class Room(Base):
    """Two-party dispute room"""
    __tablename__ = "rooms"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code = Column(String(6), nullable=False, unique=True, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    participant1_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    participant2_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    status = Column(String(20), default=RoomStatus.ACTIVE.value, nullable=False)
    resolved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    messages = relationship(
        "Message", back_populates="room", cascade="all, delete-orphan", passive_deletes=True
    )
    resolutions = relationship(
        "Resolution", back_populates="room", cascade="all, delete-orphan", passive_deletes=True
    )
    votes = relationship(
        "Vote", back_populates="room", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def participant_ids(self):
        return [p for p in (self.participant1_id, self.participant2_id) if p]

    def is_member(self, user_id: str) -> bool:
        if not user_id:
            return False
        return user_id in (self.created_by, self.participant1_id, self.participant2_id)

    def assign_participant(self, user_id: str) -> bool:
        """Put user_id into the first empty slot.

        Returns True if a slot changed. A user already holding a slot is a
        no-op, and once both slots are taken nobody else is added.
        """
        if user_id in (self.participant1_id, self.participant2_id):
            return False
        if not self.participant1_id:
            self.participant1_id = user_id
            return True
        if not self.participant2_id:
            self.participant2_id = user_id
            return True
        return False

    @property
    def is_active(self) -> bool:
        return self.status == RoomStatus.ACTIVE.value

    def mark_resolved(self, when: datetime) -> bool:
        """Move an active room to resolved; resolved_at is only ever set once"""
        if not self.is_active:
            return False
        self.status = RoomStatus.RESOLVED.value
        if self.resolved_at is None:
            self.resolved_at = when
        return True
