"""
User model
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text
from fairmind.core.database import Base
from fairmind.core.utils import utc_now

class User(Base):
    """Registered user"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    age = Column(Integer, nullable=False)
    gender = Column(String(20), nullable=False)        # Male, Female, Prefer not to say
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
