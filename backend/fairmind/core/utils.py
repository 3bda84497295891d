"""
Utility helpers
"""

import random
import string
from typing import Optional
from datetime import datetime, timezone

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def utc_now() -> datetime:
    """Naive UTC timestamp, the form stored in the database"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_timestamp_with_timezone(timestamp: Optional[datetime]) -> Optional[str]:
    """Format a stored UTC timestamp with an explicit 'Z' suffix"""
    if not timestamp:
        return None
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
    return timestamp.isoformat() + 'Z'


def generate_room_code(length: int = 6) -> str:
    return ''.join(random.choices(ROOM_CODE_ALPHABET, k=length))
