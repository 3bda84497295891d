"""
Shared fixtures

The process-wide settings are read at import time, so the environment is
prepared before anything from fairmind is imported.
"""

import json
import os
import tempfile
from datetime import datetime, timedelta

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AI_API_KEY"] = ""
os.environ["AUDIO_DIR"] = tempfile.mkdtemp(prefix="fairmind-audio-")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import List

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from fairmind.api.deps import get_resolution_generator
from fairmind.core.database import Base, SessionLocal, engine
from fairmind.core.security import create_access_token
from fairmind.main import app
from fairmind.models.message import Message
from fairmind.models.room import Room
from fairmind.models.user import User
from fairmind.services.resolution_generator import ResolutionCandidate
from fairmind.services.websocket_service import ConnectionRegistry, RoomBroadcaster


class FakeSocket:
    """Stands in for a WebSocket: records what was sent to it"""

    def __init__(self, fail: bool = False):
        self.sent: List[str] = []
        self.fail = fail
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.close_code = None

    async def send_text(self, data: str):
        if self.fail:
            raise RuntimeError("socket is gone")
        self.sent.append(data)

    async def close(self, code: int = 1000):
        self.close_code = code
        self.application_state = WebSocketState.DISCONNECTED

    def events(self):
        return [json.loads(s) for s in self.sent]

    def event_types(self):
        return [e["type"] for e in self.events()]


class FakeGenerator:
    """Returns a fixed batch and records what it was asked"""

    def __init__(self, candidates=None):
        self.calls = []
        self.candidates = candidates or [
            ResolutionCandidate(title="Split the chores", description="Alternate weekly.", ai_score=88, suggested_best=True),
            ResolutionCandidate(title="Hire a cleaner", description="Share the cost.", ai_score=74, suggested_best=False),
            ResolutionCandidate(title="Chore chart", description="Pick tasks each Sunday.", ai_score=61, suggested_best=False),
        ]

    async def generate(self, utterances):
        self.calls.append(list(utterances))
        return list(self.candidates)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def broadcaster(registry):
    return RoomBroadcaster(registry)


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def client(db, fake_generator):
    app.dependency_overrides[get_resolution_generator] = lambda: fake_generator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, name: str, email: str = None) -> User:
    user = User(
        name=name,
        age=30,
        gender="Prefer not to say",
        email=email or f"{name.lower()}@example.com",
        password_hash=None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_room(db, creator: User, code: str = "ROOM01", participant: User = None) -> Room:
    room = Room(code=code, created_by=creator.id, participant1_id=creator.id)
    if participant is not None:
        room.participant2_id = participant.id
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


def add_messages(db, room: Room, senders, texts):
    start = datetime(2026, 1, 1, 12, 0, 0)
    for i, (sender, text) in enumerate(zip(senders, texts)):
        db.add(Message(room_id=room.id, sender_id=sender.id, text=text, timestamp=start + timedelta(seconds=i)))
    db.commit()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def alice(db):
    return make_user(db, "Alice")


@pytest.fixture
def bob(db):
    return make_user(db, "Bob")


@pytest.fixture
def carol(db):
    return make_user(db, "Carol")
