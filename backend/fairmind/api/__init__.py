"""
API routers
"""

from fastapi import APIRouter
from .auth_routes import account_router, router as auth_router
from .room_routes import router as room_router
from .websocket_routes import router as ws_router

# Main router
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(account_router, prefix="/user", tags=["auth"])
api_router.include_router(room_router, tags=["rooms"])
api_router.include_router(ws_router, tags=["websocket"])
