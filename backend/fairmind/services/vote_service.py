"""
Voting and convergence
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fairmind.core.exceptions import AlreadyVoted, NotFound
from fairmind.core.logging_config import get_logger
from fairmind.core.utils import utc_now
from fairmind.models.resolution import Resolution
from fairmind.models.room import Room
from fairmind.models.vote import Vote
from fairmind.schemas.event_schemas import RoomResolvedEvent, VoteCastEvent
from fairmind.schemas.room_schemas import ResolutionResponse
from fairmind.services.access_guard import ensure_member
from fairmind.services.websocket_service import RoomBroadcaster

logger = get_logger(__name__)

VOTES_TO_CONVERGE = 2


class VoteService:
    """Records votes and resolves a room when both participants agree"""

    def __init__(self, db: Session, broadcaster: RoomBroadcaster):
        self.db = db
        self.broadcaster = broadcaster

    async def cast_vote(self, room_id: str, resolution_id: str, voter_id: str) -> Vote:
        room = ensure_member(self.db, room_id, voter_id)

        existing = self.db.query(Vote).filter(
            Vote.room_id == room_id, Vote.user_id == voter_id
        ).first()
        if existing:
            raise AlreadyVoted()

        resolution = self.db.get(Resolution, resolution_id)
        if resolution is None or resolution.room_id != room_id:
            raise NotFound("Resolution not found")

        vote = Vote(room_id=room_id, resolution_id=resolution_id, user_id=voter_id)
        self.db.add(vote)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyVoted()
        self.db.refresh(vote)
        logger.info("Room %s: %s voted for %s", room_id, voter_id, resolution_id)

        await self.broadcaster.broadcast(
            room_id, VoteCastEvent(user_id=voter_id, resolution_id=resolution_id)
        )
        await self.evaluate_convergence(room)
        return vote

    async def evaluate_convergence(self, room: Room) -> Optional[Resolution]:
        """Resolve the room if exactly two votes name the same resolution.

        Differing votes leave the room active; nothing here breaks ties.
        """
        self.db.refresh(room)
        votes = self.db.query(Vote).filter(Vote.room_id == room.id).all()
        if len(votes) != VOTES_TO_CONVERGE:
            return None
        agreed = {v.resolution_id for v in votes}
        if len(agreed) != 1:
            logger.info("Room %s: votes differ, staying %s", room.id, room.status)
            return None

        # A handler that interleaved with this one may already have resolved the room
        if not room.mark_resolved(utc_now()):
            return None
        self.db.commit()

        resolution = self.db.get(Resolution, agreed.pop())
        logger.info("Room %s resolved on %s", room.id, resolution.id)
        await self.broadcaster.broadcast(
            room.id, RoomResolvedEvent(resolution=ResolutionResponse.model_validate(resolution))
        )
        return resolution
