"""
Room, message, resolution and vote schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import Field, field_serializer, field_validator

from fairmind.core.config import settings
from fairmind.core.utils import format_timestamp_with_timezone
from fairmind.schemas.base import CamelModel


class RoomResponse(CamelModel):
    """Room as returned to members"""
    id: str
    code: str
    created_by: str
    participant1_id: Optional[str] = None
    participant2_id: Optional[str] = None
    status: str
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_serializer('resolved_at', 'created_at')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        return format_timestamp_with_timezone(dt)


class JoinRoomRequest(CamelModel):
    code: str = Field(..., min_length=1, max_length=6)

    @field_validator('code', mode='before')
    @classmethod
    def strip_code(cls, value):
        return value.strip() if isinstance(value, str) else value


class MessageCreate(CamelModel):
    """Text message posted by a room member"""
    text: str = Field(..., min_length=1, max_length=settings.MAX_MESSAGE_LENGTH)


class MessageResponse(CamelModel):
    id: str
    room_id: str
    sender_id: str
    sender_name: str = "User"
    text: Optional[str] = None
    transcript: Optional[str] = None
    is_voice: bool = False
    voice_url: Optional[str] = None
    timestamp: datetime

    @field_serializer('timestamp')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        return format_timestamp_with_timezone(dt)


class ResolutionResponse(CamelModel):
    id: str
    room_id: str
    batch_id: str
    title: str
    description: str
    ai_score: int = Field(..., ge=0, le=100)
    suggested_best: bool
    generated_at: Optional[datetime] = None

    @field_serializer('generated_at')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        return format_timestamp_with_timezone(dt)


class VoteRequest(CamelModel):
    resolution_id: str = Field(..., min_length=1)


class VoteResponse(CamelModel):
    id: str
    room_id: str
    resolution_id: str
    user_id: str
    timestamp: Optional[datetime] = None

    @field_serializer('timestamp')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        return format_timestamp_with_timezone(dt)


class StatsResponse(CamelModel):
    """Dashboard counters for one user"""
    total_arguments: int
    resolved_count: int
    resolutions_today: int
    resolutions_remaining: int
