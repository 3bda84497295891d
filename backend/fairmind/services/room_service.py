"""
Room and message service
"""

import os
import uuid
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fairmind.core.config import settings
from fairmind.core.exceptions import AccessDenied, InvalidRequest, NotFound
from fairmind.core.logging_config import get_logger
from fairmind.core.utils import generate_room_code
from fairmind.models.message import Message
from fairmind.models.resolution import Resolution
from fairmind.models.room import Room, RoomStatus
from fairmind.models.user import User
from fairmind.schemas.event_schemas import NewMessageEvent
from fairmind.schemas.room_schemas import MessageResponse, StatsResponse
from fairmind.services.access_guard import ensure_member
from fairmind.services.quota_service import DailyQuota
from fairmind.services.websocket_service import RoomBroadcaster

logger = get_logger(__name__)

ROOM_CODE_ATTEMPTS = 10
VOICE_TRANSCRIPT_PLACEHOLDER = "Voice message (transcription unavailable)"


class RoomService:
    """Room lifecycle, membership and message history"""

    def __init__(self, db: Session, broadcaster: Optional[RoomBroadcaster] = None, quota: Optional[DailyQuota] = None):
        self.db = db
        self.broadcaster = broadcaster
        self.quota = quota

    async def create_room(self, user_id: str) -> Room:
        """Create a room with the creator in slot 1 and a fresh join code"""
        for _ in range(ROOM_CODE_ATTEMPTS):
            code = generate_room_code()
            if self.db.query(Room).filter(Room.code == code).first():
                continue
            room = Room(
                code=code,
                created_by=user_id,
                participant1_id=user_id,
                status=RoomStatus.ACTIVE.value,
            )
            self.db.add(room)
            try:
                self.db.commit()
            except IntegrityError:
                # Another request took the same code between the check and the insert
                self.db.rollback()
                continue
            self.db.refresh(room)
            logger.info("User %s created room %s (%s)", user_id, room.id, room.code)
            return room
        raise RuntimeError("Could not allocate a unique room code")

    async def join_by_code(self, code: str, user_id: str) -> Room:
        room = self.db.query(Room).filter(Room.code == code.strip().upper()).first()
        if not room:
            raise NotFound("Room not found")
        if room.is_member(user_id):
            return room
        if not room.assign_participant(user_id):
            raise AccessDenied("Room is full")
        self.db.commit()
        self.db.refresh(room)
        logger.info("User %s joined room %s", user_id, room.id)
        return room

    async def get_room(self, room_id: str, user_id: str) -> Room:
        return ensure_member(self.db, room_id, user_id)

    async def list_rooms(self, user_id: str) -> List[Room]:
        """Rooms the user created or participates in, newest first"""
        return self.db.query(Room).filter(
            or_(
                Room.created_by == user_id,
                Room.participant1_id == user_id,
                Room.participant2_id == user_id,
            )
        ).order_by(Room.created_at.desc()).all()

    async def delete_room(self, room_id: str, user_id: str):
        """Delete a room with its messages, resolutions and votes; creator only"""
        room = ensure_member(self.db, room_id, user_id)
        if room.created_by != user_id:
            raise AccessDenied("Only the creator can delete a room")
        self.db.delete(room)
        self.db.commit()
        logger.info("Room %s deleted by %s", room_id, user_id)

    async def delete_member_rooms(self, user_id: str) -> int:
        """Delete every room the user belongs to, without committing.

        Messages and votes can only exist in rooms their author is a member
        of, so afterwards nothing references the user.
        """
        rooms = await self.list_rooms(user_id)
        for room in rooms:
            self.db.delete(room)
        self.db.flush()
        return len(rooms)

    async def post_message(self, room_id: str, user_id: str, text: str) -> MessageResponse:
        ensure_member(self.db, room_id, user_id)
        message = Message(room_id=room_id, sender_id=user_id, text=text, is_voice=False)
        return await self._store_and_broadcast(message)

    async def post_voice_message(self, room_id: str, user_id: str, audio: bytes, filename: Optional[str] = None) -> MessageResponse:
        """Store an audio clip and record it as a voice message"""
        ensure_member(self.db, room_id, user_id)
        if not audio:
            raise InvalidRequest("No audio file provided")

        extension = os.path.splitext(filename or "")[1] or ".webm"
        stored_name = f"{uuid.uuid4()}{extension}"
        os.makedirs(settings.AUDIO_DIR, exist_ok=True)
        with open(os.path.join(settings.AUDIO_DIR, stored_name), "wb") as f:
            f.write(audio)

        message = Message(
            room_id=room_id,
            sender_id=user_id,
            text="",
            transcript=VOICE_TRANSCRIPT_PLACEHOLDER,
            is_voice=True,
            voice_url=f"/audio/{stored_name}",
        )
        return await self._store_and_broadcast(message)

    async def _store_and_broadcast(self, message: Message) -> MessageResponse:
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)

        response = self._to_response(message)
        if self.broadcaster:
            await self.broadcaster.broadcast(message.room_id, NewMessageEvent(message=response))
        return response

    async def get_messages(self, room_id: str, user_id: str) -> List[MessageResponse]:
        """Message history in posting order"""
        ensure_member(self.db, room_id, user_id)
        messages = self.db.query(Message).filter(
            Message.room_id == room_id
        ).order_by(Message.timestamp, Message.id).all()
        return [self._to_response(m) for m in messages]

    async def get_resolutions(self, room_id: str, user_id: str) -> List[Resolution]:
        ensure_member(self.db, room_id, user_id)
        return self.db.query(Resolution).filter(
            Resolution.room_id == room_id
        ).order_by(Resolution.generated_at, Resolution.ai_score.desc()).all()

    async def get_stats(self, user_id: str) -> StatsResponse:
        rooms = await self.list_rooms(user_id)
        resolved = [r for r in rooms if r.status == RoomStatus.RESOLVED.value]
        used = self.quota.used_today(user_id) if self.quota else 0
        remaining = self.quota.remaining(user_id) if self.quota else settings.RESOLUTION_DAILY_LIMIT
        return StatsResponse(
            total_arguments=len(rooms),
            resolved_count=len(resolved),
            resolutions_today=used,
            resolutions_remaining=remaining,
        )

    def _to_response(self, message: Message) -> MessageResponse:
        sender = self.db.get(User, message.sender_id)
        response = MessageResponse.model_validate(message)
        response.sender_name = sender.name if sender else "User"
        return response
