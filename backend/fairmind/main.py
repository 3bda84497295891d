"""
FairMind application
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fairmind.api import api_router
from fairmind.core.config import settings
from fairmind.core.database import init_db
from fairmind.core.exceptions import FairMindError
from fairmind.core.logging_config import get_logger, setup_logging
from fairmind.services.quota_service import DailyQuota
from fairmind.services.resolution_service import GenerationTracker
from fairmind.services.websocket_service import ConnectionRegistry, RoomBroadcaster

setup_logging(log_level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)
logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Two-party dispute mediation API",
    version=settings.VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.exception_handler(FairMindError)
async def fairmind_error_handler(request: Request, exc: FairMindError):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    else:
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.on_event("startup")
async def startup_event():
    """Create tables and the process-wide live state"""
    logger.info("Starting %s %s", settings.APP_NAME, settings.VERSION)
    init_db()
    registry = ConnectionRegistry()
    app.state.registry = registry
    app.state.broadcaster = RoomBroadcaster(registry)
    app.state.quota = DailyQuota(settings.RESOLUTION_DAILY_LIMIT)
    app.state.generation_tracker = GenerationTracker()


@app.on_event("shutdown")
async def shutdown_event():
    app.state.registry.clear()
    app.state.quota.clear()
    app.state.generation_tracker.clear()
    logger.info("%s stopped", settings.APP_NAME)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "fairmind"}
