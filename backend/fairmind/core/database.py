"""
Database setup
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from fairmind.core.config import settings
from fairmind.core.logging_config import get_logger

logger = get_logger(__name__)

def _build_engine(url: str):
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # An in-memory database lives as long as its connection, share one
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)
    return create_engine(url, echo=False, pool_pre_ping=True)

engine = _build_engine(settings.DATABASE_URL)

if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # Cascade deletes are off in SQLite unless enabled per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Yield a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """Create all tables"""
    # Import every model so its table is registered on Base.metadata
    from fairmind.models.user import User
    from fairmind.models.room import Room
    from fairmind.models.message import Message
    from fairmind.models.resolution import Resolution
    from fairmind.models.vote import Vote

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialised (%s)", engine.url.render_as_string(hide_password=True))
