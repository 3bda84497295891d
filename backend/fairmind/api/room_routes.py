"""
Room, message, resolution and vote routes
"""

from typing import List

from fastapi import APIRouter, Depends, File, Form, UploadFile

from fairmind.api.deps import (
    get_current_user_id,
    get_resolution_service,
    get_room_service,
    get_vote_service,
)
from fairmind.schemas.room_schemas import (
    JoinRoomRequest,
    MessageCreate,
    MessageResponse,
    ResolutionResponse,
    RoomResponse,
    StatsResponse,
    VoteRequest,
    VoteResponse,
)
from fairmind.services.resolution_service import ResolutionService
from fairmind.services.room_service import RoomService
from fairmind.services.vote_service import VoteService

router = APIRouter()


@router.post("/rooms", response_model=RoomResponse)
async def create_room(
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    """Open a new dispute room"""
    return await service.create_room(user_id)


@router.post("/rooms/join", response_model=RoomResponse)
async def join_room(
    data: JoinRoomRequest,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    """Take the free participant slot of a room by its code"""
    return await service.join_by_code(data.code, user_id)


@router.get("/rooms", response_model=List[RoomResponse])
async def list_rooms(
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    return await service.list_rooms(user_id)


@router.get("/rooms/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    return await service.get_room(room_id, user_id)


@router.delete("/rooms/{room_id}")
async def delete_room(
    room_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    await service.delete_room(room_id, user_id)
    return {"message": "Room deleted", "roomId": room_id}


@router.post("/rooms/{room_id}/messages", response_model=MessageResponse)
async def post_message(
    room_id: str,
    data: MessageCreate,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    return await service.post_message(room_id, user_id, data.text)


@router.get("/rooms/{room_id}/messages", response_model=List[MessageResponse])
async def get_messages(
    room_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    """Message history, oldest first"""
    return await service.get_messages(room_id, user_id)


@router.post("/transcribe", response_model=MessageResponse)
async def transcribe(
    room_id: str = Form(..., alias="roomId"),
    audio: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    """Record an uploaded audio clip as a voice message"""
    content = await audio.read()
    return await service.post_voice_message(room_id, user_id, content, audio.filename)


@router.post("/rooms/{room_id}/generate-resolutions", response_model=List[ResolutionResponse])
async def generate_resolutions(
    room_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ResolutionService = Depends(get_resolution_service),
):
    """Ask the model for three resolution options"""
    return await service.request_resolutions(room_id, user_id)


@router.get("/rooms/{room_id}/resolutions", response_model=List[ResolutionResponse])
async def get_resolutions(
    room_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    return await service.get_resolutions(room_id, user_id)


@router.post("/rooms/{room_id}/vote", response_model=VoteResponse)
async def vote(
    room_id: str,
    data: VoteRequest,
    user_id: str = Depends(get_current_user_id),
    service: VoteService = Depends(get_vote_service),
):
    return await service.cast_vote(room_id, data.resolution_id, user_id)


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    user_id: str = Depends(get_current_user_id),
    service: RoomService = Depends(get_room_service),
):
    return await service.get_stats(user_id)
