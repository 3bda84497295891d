"""
Message model
"""

import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Text, Boolean
from sqlalchemy.orm import relationship
from fairmind.core.database import Base
from fairmind.core.utils import utc_now

class Message(Base):
    """Text or voice message posted in a room"""
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    text = Column(Text, nullable=True)
    transcript = Column(Text, nullable=True)           # voice messages only
    is_voice = Column(Boolean, default=False, nullable=False)
    voice_url = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=utc_now, nullable=False, index=True)

    room = relationship("Room", back_populates="messages")
    sender = relationship("User")

    @property
    def content(self) -> str:
        """Text of the message, falling back to the transcript for voice messages"""
        return self.text or self.transcript or ""
