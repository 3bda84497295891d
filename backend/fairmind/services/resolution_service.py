"""
Resolution request coordination
"""

import uuid
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from fairmind.core.config import settings
from fairmind.core.exceptions import GenerationInProgress, InsufficientContext, QuotaExceeded
from fairmind.core.logging_config import get_logger
from fairmind.models.message import Message
from fairmind.models.resolution import Resolution
from fairmind.schemas.event_schemas import ResolutionsGeneratedEvent
from fairmind.schemas.room_schemas import ResolutionResponse
from fairmind.services.access_guard import ensure_member
from fairmind.services.quota_service import DailyQuota
from fairmind.services.resolution_generator import RESOLUTIONS_PER_BATCH, ResolutionGenerator
from fairmind.services.websocket_service import RoomBroadcaster

logger = get_logger(__name__)


class GenerationTracker:
    """Rooms that currently have a generation request in flight"""

    def __init__(self):
        self._rooms: Set[str] = set()

    def try_start(self, room_id: str) -> bool:
        if room_id in self._rooms:
            return False
        self._rooms.add(room_id)
        return True

    def finish(self, room_id: str):
        self._rooms.discard(room_id)

    def clear(self):
        self._rooms.clear()


class ResolutionService:
    """Gates, runs, persists and broadcasts resolution generation for a room"""

    def __init__(
        self,
        db: Session,
        generator: ResolutionGenerator,
        quota: DailyQuota,
        broadcaster: RoomBroadcaster,
        tracker: GenerationTracker,
        min_messages: Optional[int] = None,
    ):
        self.db = db
        self.generator = generator
        self.quota = quota
        self.broadcaster = broadcaster
        self.tracker = tracker
        self.min_messages = min_messages or settings.MIN_MESSAGES_FOR_RESOLUTION

    async def request_resolutions(self, room_id: str, requester_id: str) -> List[Resolution]:
        """Generate one batch of three resolutions for a room.

        Checks, in order: membership, no request already running for the
        room, daily quota, enough conversation. The quota unit is refunded
        if anything after the quota check fails.
        """
        ensure_member(self.db, room_id, requester_id)

        if not self.tracker.try_start(room_id):
            raise GenerationInProgress()
        try:
            allowed, remaining = self.quota.try_consume(requester_id)
            if not allowed:
                raise QuotaExceeded(remaining=0)
            try:
                resolutions = await self._generate_and_store(room_id)
            except Exception:
                self.quota.refund(requester_id)
                raise
        finally:
            self.tracker.finish(room_id)

        logger.info(
            "Room %s: %d resolutions generated for %s (%d left today)",
            room_id, len(resolutions), requester_id, remaining,
        )
        await self.broadcaster.broadcast(
            room_id,
            ResolutionsGeneratedEvent(
                resolutions=[ResolutionResponse.model_validate(r) for r in resolutions]
            ),
        )
        return resolutions

    async def _generate_and_store(self, room_id: str) -> List[Resolution]:
        messages = self.db.query(Message).filter(
            Message.room_id == room_id
        ).order_by(Message.timestamp, Message.id).all()
        if len(messages) < self.min_messages:
            raise InsufficientContext(
                f"Need at least {self.min_messages} messages to generate resolutions"
            )

        candidates = await self.generator.generate([m.content for m in messages])
        if len(candidates) != RESOLUTIONS_PER_BATCH:
            raise RuntimeError(f"Generator returned {len(candidates)} resolutions")

        batch_id = str(uuid.uuid4())
        resolutions = [
            Resolution(
                room_id=room_id,
                batch_id=batch_id,
                title=c.title,
                description=c.description,
                ai_score=c.ai_score,
                suggested_best=c.suggested_best,
            )
            for c in candidates
        ]
        try:
            self.db.add_all(resolutions)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        for resolution in resolutions:
            self.db.refresh(resolution)
        return resolutions
