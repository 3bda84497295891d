"""
Authentication schemas
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import Field, field_serializer

from fairmind.core.utils import format_timestamp_with_timezone
from fairmind.schemas.base import CamelModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

class RegisterRequest(CamelModel):
    """Registration payload"""
    name: str = Field(..., min_length=1, max_length=100)
    age: int = Field(..., ge=13, le=120, description="Must be at least 13 years old")
    gender: Literal["Male", "Female", "Prefer not to say"]
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=8, description="At least 8 characters")

class LoginRequest(CamelModel):
    """Login payload"""
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

class UserResponse(CamelModel):
    """User without credentials"""
    id: str
    name: str
    age: int
    gender: str
    email: str
    created_at: Optional[datetime] = None

    @field_serializer('created_at')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        return format_timestamp_with_timezone(dt)
