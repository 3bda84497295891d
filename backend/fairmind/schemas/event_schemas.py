"""
Real-time channel events

Every frame on the room WebSocket is one of the models below, tagged by its
``type`` field. Client frames may only be ``join_room`` or ``leave_room``;
anything else fails validation.
"""

from typing import Annotated, List, Literal, Union
from pydantic import Field, TypeAdapter

from fairmind.schemas.base import CamelModel
from fairmind.schemas.room_schemas import MessageResponse, ResolutionResponse


class JoinRoomEvent(CamelModel):
    type: Literal["join_room"] = "join_room"
    room_id: str
    user_id: str
    user_name: str = "User"


class LeaveRoomEvent(CamelModel):
    type: Literal["leave_room"] = "leave_room"
    room_id: str
    user_id: str


class NewMessageEvent(CamelModel):
    type: Literal["new_message"] = "new_message"
    message: MessageResponse


class UserJoinedEvent(CamelModel):
    type: Literal["user_joined"] = "user_joined"
    user_id: str
    user_name: str


class UserLeftEvent(CamelModel):
    type: Literal["user_left"] = "user_left"
    user_id: str


class ResolutionsGeneratedEvent(CamelModel):
    type: Literal["resolutions_generated"] = "resolutions_generated"
    resolutions: List[ResolutionResponse] = Field(..., min_length=3, max_length=3)


class VoteCastEvent(CamelModel):
    type: Literal["vote_cast"] = "vote_cast"
    user_id: str
    resolution_id: str


class RoomResolvedEvent(CamelModel):
    type: Literal["room_resolved"] = "room_resolved"
    resolution: ResolutionResponse


class ErrorEvent(CamelModel):
    """Sent to a single connection, never broadcast"""
    type: Literal["error"] = "error"
    message: str


ClientEvent = Annotated[
    Union[JoinRoomEvent, LeaveRoomEvent],
    Field(discriminator="type"),
]

ServerEvent = Annotated[
    Union[
        NewMessageEvent,
        UserJoinedEvent,
        UserLeftEvent,
        ResolutionsGeneratedEvent,
        VoteCastEvent,
        RoomResolvedEvent,
        ErrorEvent,
    ],
    Field(discriminator="type"),
]

BROADCAST_EVENT_TYPES = (
    NewMessageEvent,
    UserJoinedEvent,
    UserLeftEvent,
    ResolutionsGeneratedEvent,
    VoteCastEvent,
    RoomResolvedEvent,
)

client_event_adapter = TypeAdapter(ClientEvent)
server_event_adapter = TypeAdapter(ServerEvent)


def parse_client_event(raw: str) -> Union[JoinRoomEvent, LeaveRoomEvent]:
    """Decode one client frame; raises pydantic.ValidationError on anything unknown"""
    return client_event_adapter.validate_json(raw)


def serialize_event(event) -> str:
    return event.model_dump_json(by_alias=True)
