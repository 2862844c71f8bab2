"""Reputation Store Service - connects the engine to the DB

Service -> Core and Service -> DB are allowed; the core never imports this.
Once attached to an engine the store persists from EventBus handlers: scores
are upserted, audit records are appended from the engine's event log cursor,
lifecycle entities are written through. Every DB access on the shared session
goes through one lock.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from sqlalchemy.orm import Session

from zealandia.core.demographics.catalog import SliceCatalog
from zealandia.core.demographics.models import DemographicSlice
from zealandia.core.elections.models import (
    Candidate,
    CandidateResult,
    DemographicVote,
    Election,
    ElectionResult,
    ElectionStatus,
    OfficeType,
    VoteShare,
)
from zealandia.core.engine import ReputationConfig, ReputationEngine
from zealandia.core.event_bus import EventBus, EventHandler, GameEvent
from zealandia.core.event_types import EventTypes
from zealandia.core.logging import get_logger
from zealandia.core.politics.position import PoliticalPosition
from zealandia.core.reputation.effects import DecayingEffect, EffectKind
from zealandia.core.reputation.ledger import ReputationLedger
from zealandia.core.reputation.models import (
    ApprovalDataPoint,
    Calculation,
    ReputationChange,
    ReputationChangeSource,
    ReputationScore,
)
from zealandia.core.translators.campaigns import Campaign, CampaignStatus
from zealandia.core.translators.endorsements import Endorsement, EndorsementTransfer
from zealandia.db.models import (
    CampaignModel,
    DecayingEffectModel,
    DemographicSliceModel,
    ElectionModel,
    EndorsementModel,
    PlayerModel,
    ReputationChangeModel,
    ReputationScoreModel,
)

logger = get_logger(__name__)


class ReputationStoreService:
    """Save/load of slices, players, scores, audit records and lifecycle state."""

    def __init__(self, db: Session, event_bus: EventBus) -> None:
        self._db = db
        self._bus = event_bus
        self._engine: Optional[ReputationEngine] = None
        self._cursor = 0  # next unsaved index in the engine's event log
        self._lock = threading.RLock()

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        with self._lock:
            try:
                yield
                self._db.commit()
            except Exception:
                self._db.rollback()
                raise

    # ── event handlers ───────────────────────────────────────

    def _subscriptions(self) -> Iterator[Tuple[str, EventHandler]]:
        reputation = (
            EventTypes.BILL_RESOLVED,
            EventTypes.NEWS_PUBLISHED,
            EventTypes.SCANDAL_REPORTED,
            EventTypes.CAMPAIGN_STARTED,
            EventTypes.ENDORSEMENT_MADE,
            EventTypes.TURN_ADVANCED,
        )
        effects = (
            EventTypes.NEWS_PUBLISHED,
            EventTypes.SCANDAL_REPORTED,
            EventTypes.TURN_ADVANCED,
        )
        campaigns = (
            EventTypes.CAMPAIGN_STARTED,
            EventTypes.CAMPAIGN_CANCELLED,
            EventTypes.CAMPAIGN_COMPLETED,
        )
        elections = (
            EventTypes.ELECTION_REGISTERED,
            EventTypes.ELECTION_STATUS_CHANGED,
            EventTypes.ELECTION_VOTING_CLOSED,
            EventTypes.ELECTION_COMPLETED,
        )
        yield EventTypes.PLAYER_REGISTERED, self._on_player_registered
        for event_type in reputation:
            yield event_type, self._on_reputation_changed
        for event_type in effects:
            yield event_type, self._on_effects_changed
        for event_type in campaigns:
            yield event_type, self._on_campaign_changed
        yield EventTypes.ENDORSEMENT_MADE, self._on_endorsement_made
        for event_type in elections:
            yield event_type, self._on_election_changed

    def attach(self, engine: ReputationEngine) -> None:
        """Persist `engine` from its EventBus from now on."""
        if engine.bus is not self._bus:
            raise ValueError("engine publishes on a different EventBus")
        if self._engine is engine:
            return
        self.detach()
        for event_type, handler in self._subscriptions():
            self._bus.subscribe(event_type, handler)
        self._engine = engine
        logger.info("Reputation store attached to engine")

    def detach(self) -> None:
        if self._engine is None:
            return
        for event_type, handler in self._subscriptions():
            self._bus.unsubscribe(event_type, handler)
        self._engine = None

    def _attached(self) -> ReputationEngine:
        if self._engine is None:
            raise RuntimeError("store is not attached to an engine")
        return self._engine

    def _on_player_registered(self, event: GameEvent) -> None:
        with self._transaction():
            self.save_players([event.data["player_id"]])

    def _on_reputation_changed(self, event: GameEvent) -> None:
        saved = self.save_new_changes(self._attached())
        logger.debug(f"{event.event_type}: {saved} audit records stored")

    def _on_effects_changed(self, event: GameEvent) -> None:
        engine = self._attached()
        with self._transaction():
            self.replace_effects(engine.effects.active())

    def _on_campaign_changed(self, event: GameEvent) -> None:
        campaign = self._attached().get_campaign(event.data["campaign_id"])
        with self._transaction():
            self.save_campaign(campaign)

    def _on_endorsement_made(self, event: GameEvent) -> None:
        endorsement = self._attached().get_endorsement(event.data["endorsement_id"])
        with self._transaction():
            self.save_endorsement(endorsement)

    def _on_election_changed(self, event: GameEvent) -> None:
        election = self._attached().get_election(event.data["election_id"])
        with self._transaction():
            self.save_election(election)

    # ── slices / players ─────────────────────────────────────

    def save_slices(self, slices: Iterable[DemographicSlice]) -> int:
        count = 0
        for slice_ in slices:
            row = self._db.get(DemographicSliceModel, slice_.slice_id)
            if row is None:
                row = DemographicSliceModel(slice_id=slice_.slice_id)
                self._db.add(row)
            row.province = slice_.province
            row.population = slice_.population
            row.can_vote = slice_.can_vote
            row.data = slice_.to_dict()
            count += 1
        self._db.flush()
        logger.info(f"Slices saved: {count}")
        return count

    def load_catalog(self) -> SliceCatalog:
        rows = (
            self._db.query(DemographicSliceModel)
            .order_by(DemographicSliceModel.slice_id)
            .all()
        )
        return SliceCatalog(DemographicSlice.from_dict(r.data) for r in rows)

    def save_players(self, player_ids: Iterable[str]) -> None:
        for player_id in player_ids:
            if self._db.get(PlayerModel, player_id) is None:
                self._db.add(PlayerModel(player_id=player_id))
        self._db.flush()

    def load_player_ids(self) -> List[str]:
        return [r.player_id for r in self._db.query(PlayerModel).all()]

    # ── scores ───────────────────────────────────────────────

    def save_scores(self, scores: Iterable[ReputationScore]) -> int:
        existing = {
            (r.player_id, r.slice_id): r
            for r in self._db.query(ReputationScoreModel).all()
        }
        count = 0
        for score in scores:
            row = existing.get(score.key)
            if row is None:
                row = ReputationScoreModel(
                    player_id=score.player_id, slice_id=score.slice_id
                )
                self._db.add(row)
            row.approval = score.approval
            row.approval_history = [
                {
                    "turn": p.turn,
                    "approval": p.approval,
                    "change": p.change,
                    "reason": p.reason,
                }
                for p in score.approval_history
            ]
            row.last_updated = score.last_updated
            row.turn_updated = score.turn_updated
            count += 1
        self._db.flush()
        return count

    def load_scores(self, player_id: Optional[str] = None) -> List[ReputationScore]:
        query = self._db.query(ReputationScoreModel)
        if player_id is not None:
            query = query.filter(ReputationScoreModel.player_id == player_id)
        return [self._score_from_orm(r) for r in query.all()]

    # ── audit records ────────────────────────────────────────

    def append_changes(self, changes: Iterable[ReputationChange]) -> int:
        rows = [self._change_to_orm(c) for c in changes]
        self._db.add_all(rows)
        self._db.flush()
        return len(rows)

    def save_new_changes(self, engine: ReputationEngine) -> int:
        """Append the audit records past the cursor and upsert the scores they
        touched. Returns the number of records stored."""
        with self._lock:
            new_changes = engine.event_log.since(self._cursor)
            end = self._cursor + len(new_changes)
            touched = {(c.player_id, c.slice_id) for c in new_changes}
            with self._transaction():
                self.save_scores(
                    score
                    for score in (engine.ledger.get(p, s) for p, s in touched)
                    if score is not None
                )
                self.append_changes(new_changes)
            self._cursor = end
        return len(new_changes)

    def load_changes(
        self, player_id: Optional[str] = None, since_id: int = 0
    ) -> List[ReputationChange]:
        with self._lock:
            query = self._db.query(ReputationChangeModel).filter(
                ReputationChangeModel.id > since_id
            )
            if player_id is not None:
                query = query.filter(ReputationChangeModel.player_id == player_id)
            return [
                self._change_from_orm(r)
                for r in query.order_by(ReputationChangeModel.id).all()
            ]

    # ── campaigns / endorsements / elections / effects ───────

    def save_campaign(self, campaign: Campaign) -> None:
        row = self._db.get(CampaignModel, campaign.campaign_id)
        if row is None:
            row = CampaignModel(campaign_id=campaign.campaign_id)
            self._db.add(row)
        row.player_id = campaign.player_id
        row.slice_id = campaign.slice_id
        row.province = campaign.province
        row.start_turn = campaign.start_turn
        row.end_turn = campaign.end_turn
        row.boost = campaign.boost
        row.status = campaign.status.value
        row.duration = campaign.duration
        row.action_point_cost = campaign.action_point_cost
        row.money_cost = campaign.money_cost
        row.created_at = campaign.created_at
        self._db.flush()

    def load_campaigns(self) -> List[Campaign]:
        return [self._campaign_from_orm(r) for r in self._db.query(CampaignModel).all()]

    def save_endorsement(self, endorsement: Endorsement) -> None:
        if self._db.get(EndorsementModel, endorsement.endorsement_id) is not None:
            return
        self._db.add(
            EndorsementModel(
                endorsement_id=endorsement.endorsement_id,
                endorser_id=endorsement.endorser_id,
                endorsed_id=endorsement.endorsed_id,
                turn=endorsement.turn,
                transfers=[
                    {
                        "slice_id": t.slice_id,
                        "endorser_approval": t.endorser_approval,
                        "transfer_rate": t.transfer_rate,
                    }
                    for t in endorsement.transfers
                ],
                action_point_cost=endorsement.action_point_cost,
                money_cost=endorsement.money_cost,
                created_at=endorsement.created_at,
            )
        )
        self._db.flush()

    def load_endorsements(self) -> List[Endorsement]:
        return [
            Endorsement(
                endorsement_id=r.endorsement_id,
                endorser_id=r.endorser_id,
                endorsed_id=r.endorsed_id,
                turn=r.turn,
                transfers=[EndorsementTransfer(**t) for t in r.transfers or []],
                action_point_cost=r.action_point_cost,
                money_cost=r.money_cost,
                created_at=r.created_at,
            )
            for r in self._db.query(EndorsementModel).all()
        ]

    def save_election(self, election: Election) -> None:
        row = self._db.get(ElectionModel, election.election_id)
        if row is None:
            row = ElectionModel(election_id=election.election_id)
            self._db.add(row)
        row.office_type = election.office_type.value
        row.province = election.province
        row.city = election.city
        row.status = election.status.value
        row.voting_open = election.voting_open
        row.voting_closes_turn = election.voting_closes_turn
        row.candidates = [self._candidate_to_dict(c) for c in election.candidates]
        row.results = (
            self._result_to_dict(election.results) if election.results else None
        )
        self._db.flush()

    def load_elections(self) -> List[Election]:
        return [self._election_from_orm(r) for r in self._db.query(ElectionModel).all()]

    def replace_effects(self, effects: Iterable[DecayingEffect]) -> int:
        """The active set is small; rewrite it wholesale."""
        self._db.query(DecayingEffectModel).delete()
        rows = [
            DecayingEffectModel(
                kind=e.kind.value,
                source_id=e.source_id,
                player_id=e.player_id,
                slice_id=e.slice_id,
                residual=e.residual,
                rate=e.rate,
                interval=e.interval,
                started_turn=e.started_turn,
                last_decay_turn=e.last_decay_turn,
            )
            for e in effects
        ]
        self._db.add_all(rows)
        self._db.flush()
        return len(rows)

    def load_effects(self) -> List[DecayingEffect]:
        return [
            DecayingEffect(
                kind=EffectKind(r.kind),
                source_id=r.source_id,
                player_id=r.player_id,
                slice_id=r.slice_id,
                residual=r.residual,
                rate=r.rate,
                interval=r.interval,
                started_turn=r.started_turn,
                last_decay_turn=r.last_decay_turn,
            )
            for r in self._db.query(DecayingEffectModel).all()
        ]

    # ── whole engine ─────────────────────────────────────────

    def sync(self, engine: ReputationEngine) -> int:
        """Write the whole engine state (seeding a fresh DB, or an engine that
        ran unattached). Returns the number of new audit records."""
        with self._lock:
            new_changes = engine.event_log.since(self._cursor)
            end = self._cursor + len(new_changes)
            with self._transaction():
                self.save_players(engine.players)
                self.save_scores(engine.ledger.all_scores())
                self.append_changes(new_changes)
                for campaign in engine.campaigns():
                    self.save_campaign(campaign)
                for endorsement in engine.endorsements():
                    self.save_endorsement(endorsement)
                for election in engine.elections():
                    self.save_election(election)
                self.replace_effects(engine.effects.active())
            self._cursor = end
        logger.debug(f"Engine synced: {len(new_changes)} new audit records")
        return len(new_changes)

    def load_engine(
        self,
        config: Optional[ReputationConfig] = None,
        rng: Any = None,
    ) -> ReputationEngine:
        """Rebuild an engine from the DB and attach to it; the new event log
        starts empty."""
        ledger = ReputationLedger()
        for score in self.load_scores():
            ledger.restore(score)
        ledger.mark_applied(
            (r.source, r.source_id, r.player_id, r.slice_id)
            for r in self._db.query(ReputationChangeModel).all()
        )

        engine = ReputationEngine(
            self.load_catalog(),
            ledger=ledger,
            config=config,
            bus=self._bus,
            rng=rng,
        )
        engine.register_players(self.load_player_ids())
        for campaign in self.load_campaigns():
            engine.restore_campaign(campaign)
        for endorsement in self.load_endorsements():
            engine.restore_endorsement(endorsement)
        for election in self.load_elections():
            engine.restore_election(election)
        for effect in self.load_effects():
            engine.restore_effect(effect)
        with self._lock:
            self._cursor = 0
        self.attach(engine)

        logger.info(
            f"Engine loaded: {len(engine.catalog)} slices, "
            f"{len(engine.players)} players, {len(ledger.all_scores())} scores"
        )
        return engine

    # ── conversion ───────────────────────────────────────────

    def _score_from_orm(self, orm: ReputationScoreModel) -> ReputationScore:
        return ReputationScore(
            player_id=orm.player_id,
            slice_id=orm.slice_id,
            approval=orm.approval,
            approval_history=[
                ApprovalDataPoint(**p) for p in orm.approval_history or []
            ],
            last_updated=orm.last_updated,
            turn_updated=orm.turn_updated,
        )

    def _change_to_orm(self, core: ReputationChange) -> ReputationChangeModel:
        return ReputationChangeModel(
            player_id=core.player_id,
            slice_id=core.slice_id,
            delta=core.delta,
            requested_delta=core.requested_delta,
            source=core.source.value,
            source_id=core.source_id,
            calculation=core.calculation.to_dict(),
            turn=core.turn,
            timestamp=core.timestamp,
        )

    def _change_from_orm(self, orm: ReputationChangeModel) -> ReputationChange:
        return ReputationChange(
            player_id=orm.player_id,
            slice_id=orm.slice_id,
            delta=orm.delta,
            requested_delta=orm.requested_delta,
            source=ReputationChangeSource(orm.source),
            source_id=orm.source_id,
            calculation=Calculation.from_dict(orm.calculation),
            turn=orm.turn,
            timestamp=orm.timestamp,
        )

    def _campaign_from_orm(self, orm: CampaignModel) -> Campaign:
        return Campaign(
            campaign_id=orm.campaign_id,
            player_id=orm.player_id,
            slice_id=orm.slice_id,
            province=orm.province,
            start_turn=orm.start_turn,
            end_turn=orm.end_turn,
            boost=orm.boost,
            status=CampaignStatus(orm.status),
            duration=orm.duration,
            action_point_cost=orm.action_point_cost,
            money_cost=orm.money_cost,
            created_at=orm.created_at,
        )

    def _candidate_to_dict(self, c: Candidate) -> Dict[str, Any]:
        return {
            "player_id": c.player_id,
            "position": c.position.to_dict(),
            "platform": c.platform,
            "endorsements": list(c.endorsements),
            "funds_raised": c.funds_raised,
            "name": c.name,
            "party": c.party,
        }

    def _candidate_from_dict(self, data: Dict[str, Any]) -> Candidate:
        return Candidate(
            player_id=data["player_id"],
            position=PoliticalPosition.from_dict(data.get("position")),
            platform=data.get("platform", ""),
            endorsements=list(data.get("endorsements", [])),
            funds_raised=float(data.get("funds_raised", 0.0)),
            name=data.get("name", ""),
            party=data.get("party"),
        )

    def _result_to_dict(self, result: ElectionResult) -> Dict[str, Any]:
        return {
            "election_id": result.election_id,
            "turn": result.turn,
            "office_type": result.office_type.value,
            "winner_id": result.winner_id,
            "total_eligible_voters": result.total_eligible_voters,
            "total_votes_cast": result.total_votes_cast,
            "turnout_percentage": result.turnout_percentage,
            "province": result.province,
            "completed_at": result.completed_at.isoformat(),
            "candidates": [
                {
                    "player_id": c.player_id,
                    "votes": c.votes,
                    "percentage": c.percentage,
                    "name": c.name,
                    "party": c.party,
                }
                for c in result.candidates
            ],
            "demographic_breakdown": [
                {
                    "slice_id": v.slice_id,
                    "eligible_voters": v.eligible_voters,
                    "base_turnout": v.base_turnout,
                    "reputation_modifier": v.reputation_modifier,
                    "final_turnout": v.final_turnout,
                    "effective_votes": v.effective_votes,
                    "vote_distribution": [
                        {
                            "player_id": s.player_id,
                            "votes": s.votes,
                            "percentage": s.percentage,
                        }
                        for s in v.vote_distribution
                    ],
                }
                for v in result.demographic_breakdown
            ],
        }

    def _result_from_dict(self, data: Dict[str, Any]) -> ElectionResult:
        return ElectionResult(
            election_id=data["election_id"],
            turn=data["turn"],
            office_type=OfficeType(data["office_type"]),
            winner_id=data["winner_id"],
            total_eligible_voters=data["total_eligible_voters"],
            total_votes_cast=data["total_votes_cast"],
            turnout_percentage=data["turnout_percentage"],
            province=data.get("province"),
            completed_at=datetime.fromisoformat(data["completed_at"]),
            candidates=[CandidateResult(**c) for c in data.get("candidates", [])],
            demographic_breakdown=[
                DemographicVote(
                    slice_id=v["slice_id"],
                    eligible_voters=v["eligible_voters"],
                    base_turnout=v["base_turnout"],
                    reputation_modifier=v["reputation_modifier"],
                    final_turnout=v["final_turnout"],
                    effective_votes=v["effective_votes"],
                    vote_distribution=[
                        VoteShare(**s) for s in v.get("vote_distribution", [])
                    ],
                )
                for v in data.get("demographic_breakdown", [])
            ],
        )

    def _election_from_orm(self, orm: ElectionModel) -> Election:
        return Election(
            election_id=orm.election_id,
            office_type=OfficeType(orm.office_type),
            candidates=[self._candidate_from_dict(c) for c in orm.candidates or []],
            province=orm.province,
            city=orm.city,
            voting_open=orm.voting_open,
            voting_closes_turn=orm.voting_closes_turn,
            status=ElectionStatus(orm.status),
            results=self._result_from_dict(orm.results) if orm.results else None,
        )
