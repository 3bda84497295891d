"""
Shared route dependencies
"""

from typing import Optional

from fastapi import Depends, Request
from starlette.requests import HTTPConnection
from sqlalchemy.orm import Session

from fairmind.core.database import get_db
from fairmind.core.exceptions import AuthenticationFailed
from fairmind.core.security import TOKEN_COOKIE_NAME, decode_access_token
from fairmind.services.quota_service import DailyQuota
from fairmind.services.resolution_generator import ResolutionGenerator
from fairmind.services.resolution_service import GenerationTracker, ResolutionService
from fairmind.services.room_service import RoomService
from fairmind.services.vote_service import VoteService
from fairmind.services.websocket_service import ConnectionRegistry, RoomBroadcaster


def extract_token(connection: HTTPConnection) -> Optional[str]:
    """Token from the cookie, an Authorization header, or a ?token= query parameter"""
    token = connection.cookies.get(TOKEN_COOKIE_NAME)
    if token:
        return token
    authorization = connection.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return connection.query_params.get("token") or None


def authenticate(connection: HTTPConnection) -> Optional[str]:
    token = extract_token(connection)
    return decode_access_token(token) if token else None


def get_current_user_id(request: Request) -> str:
    user_id = authenticate(request)
    if not user_id:
        raise AuthenticationFailed()
    return user_id


def get_registry(connection: HTTPConnection) -> ConnectionRegistry:
    return connection.app.state.registry


def get_broadcaster(connection: HTTPConnection) -> RoomBroadcaster:
    return connection.app.state.broadcaster


def get_quota(connection: HTTPConnection) -> DailyQuota:
    return connection.app.state.quota


def get_generation_tracker(connection: HTTPConnection) -> GenerationTracker:
    return connection.app.state.generation_tracker


def get_resolution_generator() -> ResolutionGenerator:
    return ResolutionGenerator()


def get_room_service(
    db: Session = Depends(get_db),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
    quota: DailyQuota = Depends(get_quota),
) -> RoomService:
    return RoomService(db, broadcaster, quota)


def get_resolution_service(
    db: Session = Depends(get_db),
    generator: ResolutionGenerator = Depends(get_resolution_generator),
    quota: DailyQuota = Depends(get_quota),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
    tracker: GenerationTracker = Depends(get_generation_tracker),
) -> ResolutionService:
    return ResolutionService(db, generator, quota, broadcaster, tracker)


def get_vote_service(
    db: Session = Depends(get_db),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
) -> VoteService:
    return VoteService(db, broadcaster)
