# Database models
from .user import User
from .room import Room, RoomStatus
from .message import Message
from .resolution import Resolution
from .vote import Vote

__all__ = ["User", "Room", "RoomStatus", "Message", "Resolution", "Vote"]
