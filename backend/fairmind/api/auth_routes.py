"""
Authentication and account routes
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from fairmind.api.deps import get_current_user_id, get_room_service
from fairmind.core.config import settings
from fairmind.core.database import get_db
from fairmind.core.exceptions import AuthenticationFailed, InvalidRequest, NotFound
from fairmind.core.logging_config import get_logger
from fairmind.core.security import TOKEN_COOKIE_NAME, create_access_token, hash_password, verify_password
from fairmind.models.user import User
from fairmind.schemas.auth_schemas import LoginRequest, RegisterRequest, UserResponse
from fairmind.services.room_service import RoomService

logger = get_logger(__name__)

router = APIRouter()
account_router = APIRouter()


def _set_token_cookie(response: Response, user: User):
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        create_access_token(user.id, user.email),
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
        max_age=settings.TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )


@router.post("/register", response_model=UserResponse)
async def register(data: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    """Create an account and sign in"""
    email = data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise InvalidRequest("Email already registered")

    user = User(
        name=data.name,
        age=data.age,
        gender=data.gender,
        email=email,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)

    _set_token_cookie(response, user)
    return user


@router.post("/login", response_model=UserResponse)
async def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email.lower()).first()
    if not user or not verify_password(data.password, user.password_hash):
        raise AuthenticationFailed("Invalid email or password")
    _set_token_cookie(response, user)
    return user


@router.get("/me", response_model=UserResponse)
async def me(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@account_router.delete("/delete")
async def delete_account(
    response: Response,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    rooms: RoomService = Depends(get_room_service),
):
    """Delete the signed-in account together with all of its rooms"""
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    removed = await rooms.delete_member_rooms(user_id)
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s and %d rooms", user_id, removed)

    response.delete_cookie(TOKEN_COOKIE_NAME)
    return {"message": "Account deleted successfully"}
