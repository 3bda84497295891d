# Business logic services
from .websocket_service import ConnectionRegistry, RoomBroadcaster
from .quota_service import DailyQuota
from .resolution_generator import ResolutionGenerator
from .resolution_service import GenerationTracker, ResolutionService
from .room_service import RoomService
from .session_service import RoomSession
from .vote_service import VoteService

__all__ = [
    "ConnectionRegistry",
    "RoomBroadcaster",
    "DailyQuota",
    "ResolutionGenerator",
    "GenerationTracker",
    "ResolutionService",
    "RoomService",
    "RoomSession",
    "VoteService",
]
