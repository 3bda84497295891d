"""
Vote model
"""

import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from fairmind.core.database import Base
from fairmind.core.utils import utc_now

class Vote(Base):
    """A participant's vote for one resolution"""
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_votes_room_user"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    resolution_id = Column(String(36), ForeignKey("resolutions.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    timestamp = Column(DateTime, default=utc_now, nullable=False)

    room = relationship("Room", back_populates="votes")
    resolution = relationship("Resolution")
