"""FastAPI application entrypoint."""

import random
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from zealandia.api.health import router as health_router
from zealandia.api.reputation import router as reputation_router
from zealandia.config import settings
from zealandia.core.engine import ReputationConfig
from zealandia.core.event_bus import EventBus
from zealandia.core.logging import get_logger, setup_logging
from zealandia.db.database import SessionLocal, init_db
from zealandia.services.reputation_service import ReputationStoreService

setup_logging(settings.LOG_LEVEL, verbose_ledger=settings.DEBUG)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database tables created.")

    # Reputation engine, rebuilt from the store; the store persists it from the bus
    logger.info("Loading reputation engine...")
    event_bus = EventBus()
    db_session = SessionLocal()
    store = ReputationStoreService(db_session, event_bus)
    reputation_engine = store.load_engine(
        config=ReputationConfig.from_settings(settings),
        rng=random.Random(settings.RNG_SEED),
    )
    app.state.event_bus = event_bus
    app.state.reputation_store = store
    app.state.reputation_engine = reputation_engine
    logger.info("Reputation engine loaded.")

    yield

    logger.info("Shutting down...")
    store.detach()
    db_session.close()


app = FastAPI(title="Zealandia Reputation Engine", lifespan=lifespan)

app.include_router(health_router)
app.include_router(reputation_router)
