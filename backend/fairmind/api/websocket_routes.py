"""
WebSocket route
"""

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from fairmind.api.deps import authenticate, get_broadcaster, get_registry
from fairmind.core.database import get_db
from fairmind.core.logging_config import get_logger
from fairmind.services.session_service import POLICY_VIOLATION, RoomSession
from fairmind.services.websocket_service import ConnectionRegistry, RoomBroadcaster

logger = get_logger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_room_endpoint(
    websocket: WebSocket,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_registry),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    """Room live channel: join_room / leave_room in, room events out"""
    user_id = authenticate(websocket)
    if not user_id:
        logger.info("WebSocket connection rejected: unauthenticated")
        await websocket.close(code=POLICY_VIOLATION)
        return

    await websocket.accept()
    session = RoomSession(websocket, user_id, db, registry, broadcaster)

    try:
        while not session.closed:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
            # Binary frames carry no event
            await session.handle_frame(message.get("text"))
    except WebSocketDisconnect:
        logger.debug("WebSocket for %s disconnected", user_id)
    finally:
        await session.leave()
