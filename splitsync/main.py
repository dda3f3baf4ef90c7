"""
FastAPI entrypoint for the splitsync engine.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from splitsync.core.config import settings
from splitsync.api.router import api_router
from splitsync.db.local_store import SqlLocalStore
from splitsync.db.session import create_db_engine, create_session_factory, init_db
from splitsync.services.alert_service import ErrorCenter
from splitsync.services.notifier import InProcessNotifier
from splitsync.services.remote_store import HttpRemoteStore
from splitsync.services.retry_service import ResilientCaller
from splitsync.services.sync_service import SyncCoordinator

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = create_db_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
    init_db(engine)
    remote_store = HttpRemoteStore.from_settings(settings)
    app.state.coordinator = SyncCoordinator(
        local_store=SqlLocalStore(create_session_factory(engine)),
        remote_store=remote_store,
        config=settings,
        caller=ResilientCaller(settings),
        notifier=InProcessNotifier(),
        error_center=ErrorCenter()
    )
    logger.info(f"{settings.APP_NAME} started, remote store at {settings.REMOTE_API_URL}")
    try:
        yield
    finally:
        await app.state.coordinator.wait_for_background()
        await remote_store.aclose()
        engine.dispose()


app = FastAPI(
    title="Splitsync API",
    description="Shared-expense balances, settlements and offline sync",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Splitsync API is running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
