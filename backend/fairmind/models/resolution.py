"""
Resolution model
"""

import uuid
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Boolean
from sqlalchemy.orm import relationship
from fairmind.core.database import Base
from fairmind.core.utils import utc_now

class Resolution(Base):
    """One of the three options proposed in a generation batch"""
    __tablename__ = "resolutions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    batch_id = Column(String(36), nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    ai_score = Column(Integer, nullable=False)          # 0-100
    suggested_best = Column(Boolean, default=False, nullable=False)
    generated_at = Column(DateTime, default=utc_now, nullable=False)

    room = relationship("Room", back_populates="resolutions")
