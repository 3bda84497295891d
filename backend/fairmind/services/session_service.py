"""
Per-connection room session protocol
"""

from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from fairmind.core.logging_config import get_logger
from fairmind.models.room import Room
from fairmind.schemas.event_schemas import (
    ErrorEvent,
    JoinRoomEvent,
    LeaveRoomEvent,
    UserJoinedEvent,
    UserLeftEvent,
    parse_client_event,
)
from fairmind.services.access_guard import is_member
from fairmind.services.websocket_service import ConnectionRegistry, RoomBroadcaster

logger = get_logger(__name__)

POLICY_VIOLATION = 1008


class RoomSession:
    """Drives join/leave for one authenticated WebSocket.

    A session is in at most one room at a time. It ends (``closed``) when
    the join handshake is refused; the socket is closed at that point.
    """

    def __init__(self, handle: Any, user_id: str, db: Session, registry: ConnectionRegistry, broadcaster: RoomBroadcaster):
        self.handle = handle
        self.user_id = user_id
        self.db = db
        self.registry = registry
        self.broadcaster = broadcaster
        self.room_id: Optional[str] = None
        self.closed = False

    async def handle_frame(self, raw: Optional[str]):
        """Process one frame from the client; ``None`` stands for a non-text frame"""
        if raw is None:
            logger.debug("Non-text frame from %s", self.user_id)
            await self._unrecognized()
            return
        try:
            event = parse_client_event(raw)
        except ValidationError as e:
            logger.debug("Bad frame from %s: %s", self.user_id, e)
            await self._unrecognized()
            return

        if isinstance(event, JoinRoomEvent):
            await self.join(event)
        elif isinstance(event, LeaveRoomEvent):
            await self.leave()

    async def join(self, event: JoinRoomEvent) -> bool:
        # The payload must not claim someone else's identity
        if event.user_id != self.user_id:
            logger.warning("Connection for %s tried to join as %s", self.user_id, event.user_id)
            await self._reject("User ID mismatch")
            return False

        self.db.expire_all()
        room = self.db.get(Room, event.room_id)
        if room is None:
            await self._reject("Room not found")
            return False
        if not is_member(room, self.user_id):
            await self._reject("Access denied")
            return False

        if self.room_id and self.room_id != event.room_id:
            await self.leave()

        self.registry.register(event.room_id, self.user_id, event.user_name, self.handle)
        self.room_id = event.room_id
        logger.info("User %s joined live room %s", self.user_id, event.room_id)

        await self.broadcaster.broadcast(
            event.room_id,
            UserJoinedEvent(user_id=self.user_id, user_name=event.user_name),
            excluding_user_id=self.user_id,
        )
        return True

    async def leave(self):
        """Leave the current room; safe to call more than once"""
        room_id = self.room_id
        if room_id is None:
            return
        self.room_id = None
        if not self.registry.unregister(room_id, self.user_id, self.handle):
            # Superseded by a newer connection for the same user
            return
        logger.info("User %s left live room %s", self.user_id, room_id)
        await self.broadcaster.broadcast(room_id, UserLeftEvent(user_id=self.user_id))

    async def _unrecognized(self):
        await self.broadcaster.send_personal(self.handle, ErrorEvent(message="Unrecognized event"))

    async def _reject(self, reason: str):
        await self.broadcaster.send_personal(self.handle, ErrorEvent(message=reason))
        self.closed = True
        try:
            await self.handle.close(code=POLICY_VIOLATION)
        except RuntimeError as e:
            logger.debug("Socket already closed: %s", e)
