"""
Live connection registry and room broadcast
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from starlette.websockets import WebSocketState

from fairmind.core.logging_config import get_logger
from fairmind.schemas.event_schemas import BROADCAST_EVENT_TYPES, serialize_event

logger = get_logger(__name__)


@dataclass
class LiveConnection:
    """One user's connection to one room"""
    user_id: str
    display_name: str
    handle: Any  # WebSocket or anything with send_text()


class ConnectionRegistry:
    """In-memory map of room id -> user id -> live connection.

    Owned by the application: created at startup, cleared at shutdown. All
    mutation goes through register/unregister.
    """

    def __init__(self):
        self._rooms: Dict[str, Dict[str, LiveConnection]] = {}

    def register(self, room_id: str, user_id: str, display_name: str, handle: Any) -> Optional[LiveConnection]:
        """Record a connection; returns the entry it superseded, if any"""
        room = self._rooms.setdefault(room_id, {})
        previous = room.pop(user_id, None)
        room[user_id] = LiveConnection(user_id=user_id, display_name=display_name, handle=handle)
        logger.debug("Registered %s in room %s (%d live)", user_id, room_id, len(room))
        return previous

    def unregister(self, room_id: str, user_id: str, handle: Any = None) -> bool:
        """Remove a connection; returns False if there was nothing to remove.

        With ``handle`` given, only that exact connection is removed, so a
        superseded socket closing late cannot evict its replacement.
        """
        room = self._rooms.get(room_id)
        if room is None:
            return False
        entry = room.get(user_id)
        if entry is None:
            return False
        if handle is not None and entry.handle is not handle:
            return False
        del room[user_id]
        if not room:
            del self._rooms[room_id]
        logger.debug("Unregistered %s from room %s", user_id, room_id)
        return True

    def list_others(self, room_id: str, excluding_user_id: Optional[str] = None) -> List[Any]:
        """Handles registered for a room in registration order"""
        room = self._rooms.get(room_id, {})
        return [c.handle for uid, c in room.items() if uid != excluding_user_id]

    def get(self, room_id: str, user_id: str) -> Optional[LiveConnection]:
        return self._rooms.get(room_id, {}).get(user_id)

    def users_in_room(self, room_id: str) -> List[str]:
        return list(self._rooms.get(room_id, {}))

    def room_count(self) -> int:
        return len(self._rooms)

    def clear(self):
        self._rooms.clear()


def is_writable(handle: Any) -> bool:
    """True while both sides of the socket are still connected"""
    client_state = getattr(handle, "client_state", WebSocketState.CONNECTED)
    application_state = getattr(handle, "application_state", WebSocketState.CONNECTED)
    return client_state == WebSocketState.CONNECTED and application_state == WebSocketState.CONNECTED


class RoomBroadcaster:
    """Best-effort, at-most-once fan-out of events to a room"""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    async def broadcast(self, room_id: str, event, excluding_user_id: Optional[str] = None) -> int:
        """Send event to every live connection in the room; returns how many got it"""
        if not isinstance(event, BROADCAST_EVENT_TYPES):
            raise TypeError(f"Not a broadcastable room event: {type(event).__name__}")

        handles = self.registry.list_others(room_id, excluding_user_id)
        if not handles:
            logger.debug("No live connections in room %s, skipping %s", room_id, event.type)
            return 0

        payload = serialize_event(event)
        delivered = 0
        for handle in handles:
            if not is_writable(handle):
                continue
            try:
                await handle.send_text(payload)
                delivered += 1
            except Exception as e:
                # Delivery is best-effort; the socket's own close handler unregisters it
                logger.warning("Dropped %s for a connection in room %s: %s", event.type, room_id, e)

        logger.debug("Broadcast %s to room %s: %d/%d delivered", event.type, room_id, delivered, len(handles))
        return delivered

    async def send_personal(self, handle: Any, event) -> bool:
        """Send an event to one connection"""
        if not is_writable(handle):
            return False
        try:
            await handle.send_text(serialize_event(event))
            return True
        except Exception as e:
            logger.warning("Failed to send %s to a connection: %s", event.type, e)
            return False
