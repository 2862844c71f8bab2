"""SQLAlchemy declarative base and ORM models for the reputation store.

Nested value objects (positions, histories, calculations) are stored as JSON.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class PlayerModel(Base):
    """Registered player ids (identity lives with the session store)."""

    __tablename__ = "players"

    player_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, default="")


class DemographicSliceModel(Base):
    """ORM model for demographic slices."""

    __tablename__ = "demographic_slices"

    slice_id: Mapped[str] = mapped_column(String, primary_key=True)
    province: Mapped[str] = mapped_column(String, nullable=False, index=True)
    population: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    can_vote: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)


class ReputationScoreModel(Base):
    """One row per (player, slice)."""

    __tablename__ = "reputation_scores"
    __table_args__ = (UniqueConstraint("player_id", "slice_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    slice_id: Mapped[str] = mapped_column(String, nullable=False)
    approval: Mapped[float] = mapped_column(Float, nullable=False, default=50.0)
    approval_history: Mapped[list] = mapped_column(JSON, default=list)
    last_updated: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    turn_updated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ReputationChangeModel(Base):
    """Append-only audit trail. `id` order is the event-log order."""

    __tablename__ = "reputation_changes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    slice_id: Mapped[str] = mapped_column(String, nullable=False)
    delta: Mapped[float] = mapped_column(Float, nullable=False)
    requested_delta: Mapped[float] = mapped_column(Float, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False)
    source_id: Mapped[str] = mapped_column(String, nullable=False)
    calculation: Mapped[dict] = mapped_column(JSON, nullable=False)
    turn: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class CampaignModel(Base):
    __tablename__ = "campaigns"

    campaign_id: Mapped[str] = mapped_column(String, primary_key=True)
    player_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    slice_id: Mapped[str] = mapped_column(String, nullable=False)
    province: Mapped[str] = mapped_column(String, nullable=False)
    start_turn: Mapped[int] = mapped_column(Integer, nullable=False)
    end_turn: Mapped[int] = mapped_column(Integer, nullable=False)
    boost: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    action_point_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    money_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class EndorsementModel(Base):
    __tablename__ = "endorsements"

    endorsement_id: Mapped[str] = mapped_column(String, primary_key=True)
    endorser_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    endorsed_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    turn: Mapped[int] = mapped_column(Integer, nullable=False)
    transfers: Mapped[list] = mapped_column(JSON, default=list)
    action_point_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    money_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class ElectionModel(Base):
    __tablename__ = "elections"

    election_id: Mapped[str] = mapped_column(String, primary_key=True)
    office_type: Mapped[str] = mapped_column(String, nullable=False)
    province: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="announced")
    voting_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    voting_closes_turn: Mapped[int | None] = mapped_column(Integer, nullable=True)
    candidates: Mapped[list] = mapped_column(JSON, default=list)
    results: Mapped[dict | None] = mapped_column(JSON, nullable=True)


class DecayingEffectModel(Base):
    """Active news/scandal residuals still fading out."""

    __tablename__ = "decaying_effects"
    __table_args__ = (UniqueConstraint("kind", "source_id", "player_id", "slice_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String, nullable=False)
    source_id: Mapped[str] = mapped_column(String, nullable=False)
    player_id: Mapped[str] = mapped_column(String, nullable=False)
    slice_id: Mapped[str] = mapped_column(String, nullable=False)
    residual: Mapped[float] = mapped_column(Float, nullable=False)
    rate: Mapped[float] = mapped_column(Float, nullable=False)
    interval: Mapped[int] = mapped_column(Integer, nullable=False)
    started_turn: Mapped[int] = mapped_column(Integer, nullable=False)
    last_decay_turn: Mapped[int] = mapped_column(Integer, nullable=False, default=-1)
