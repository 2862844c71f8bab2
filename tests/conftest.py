"""Shared test fixtures."""

import random

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from zealandia.api.health import router as health_router
from zealandia.api.reputation import router as reputation_router
from zealandia.core.demographics.catalog import SliceCatalog
from zealandia.core.demographics.models import (
    CulturalIdentity,
    DemographicSlice,
    EconomicIdentity,
    Gender,
    LocationalIdentity,
    Occupation,
    Settlement,
    SocialClass,
)
from zealandia.core.engine import ReputationConfig, ReputationEngine
from zealandia.core.event_bus import EventBus
from zealandia.core.politics.position import make_position
from zealandia.db.database import get_db
from zealandia.db.models import Base
from zealandia.services.reputation_service import ReputationStoreService


def build_slice(
    slice_id: str = "s1",
    province: str = "canterbury",
    population: int = 1000,
    can_vote: bool = True,
    position=None,
    settlement: Settlement = Settlement.RURAL,
    urban_center=None,
    occupation: Occupation = Occupation.TENANT_FARMER,
) -> DemographicSlice:
    return DemographicSlice(
        slice_id=slice_id,
        economic=EconomicIdentity(
            social_class=SocialClass.LOWER,
            occupation=occupation,
            gender=Gender.MALE,
        ),
        cultural=CulturalIdentity(ethnicity="english", religion="anglican"),
        locational=LocationalIdentity(
            province=province, settlement=settlement, urban_center=urban_center
        ),
        population=population,
        can_vote=can_vote,
        default_position=position or make_position(),
    )


@pytest.fixture()
def make_slice():
    """DemographicSlice factory."""
    return build_slice


@pytest.fixture()
def world():
    """Three slices over two provinces, two registered players."""
    catalog = SliceCatalog(
        [
            build_slice("cant-farmers", "canterbury", 1000, position=make_position(5, 0, 0)),
            build_slice(
                "chch-merchants",
                "canterbury",
                500,
                position=make_position(-5, 0, 4),
                settlement=Settlement.URBAN,
                urban_center="christchurch",
                occupation=Occupation.MERCHANT,
            ),
            build_slice("otago-miners", "otago", 2000, position=make_position(0, 5, -5)),
        ]
    )
    engine = ReputationEngine(catalog, config=ReputationConfig(), rng=random.Random(7))
    engine.register_players(["p1", "p2"])
    return engine


@pytest.fixture()
def db_session() -> Session:
    """In-memory SQLite session with every table created."""
    db_engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(db_engine)
    session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(world, db_session) -> TestClient:
    """FastAPI TestClient wired to the `world` engine and an in-memory store."""
    bus = world.bus
    store = ReputationStoreService(db_session, bus)
    store.save_slices(world.catalog)
    store.sync(world)
    store.attach(world)

    app = FastAPI()
    app.include_router(health_router)
    app.include_router(reputation_router)
    app.state.event_bus = bus
    app.state.reputation_store = store
    app.state.reputation_engine = world

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)
