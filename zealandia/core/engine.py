"""
Reputation Engine - Main Entry Point
====================================
Owns the three collaborator stores of one world (slice catalog, reputation
ledger, audit event log) plus the lifecycle state the translators need
across turns: campaigns, endorsements, elections and decaying effects.

Every operation validates its whole input before the first ledger write,
so a rejected call leaves no score, history entry or audit record behind.
"""

import random
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

from zealandia.core.demographics.catalog import SliceCatalog
from zealandia.core.elections.lifecycle import (
    close_voting as close_election_voting,
    open_voting as open_election_voting,
    transition,
)
from zealandia.core.elections.models import (
    DemographicVote,
    Election,
    ElectionResult,
    ElectionStatus,
)
from zealandia.core.elections.turnout import (
    BaseTurnout,
    compute_demographic_vote,
    compute_election_result,
    election_slices,
)
from zealandia.core.errors import (
    DuplicateEventError,
    InvalidActionError,
    InvalidRangeError,
    InvariantViolationError,
    NotFoundError,
)
from zealandia.core.event_bus import EventBus, GameEvent
from zealandia.core.event_types import EventTypes
from zealandia.core.logging import get_logger
from zealandia.core.politics.alignment import CUBE_WEIGHT
from zealandia.core.politics.position import PoliticalPosition, validate_position
from zealandia.core.reputation.calculations import clamp_approval
from zealandia.core.reputation.effects import DecayingEffect, DecayRegistry, EffectKind
from zealandia.core.reputation.ledger import EventLog, ReputationLedger
from zealandia.core.reputation.models import (
    DEFAULT_APPROVAL,
    PendingDelta,
    ReputationChange,
    ReputationScore,
)
from zealandia.core.translators.bills import (
    Bill,
    BillRole,
    predict_role_delta,
    translate_bill_outcome,
    translate_bill_votes,
    validate_bill,
)
from zealandia.core.translators.campaigns import (
    Campaign,
    CampaignStatus,
    cancel_campaign as cancel_core_campaign,
    complete_campaign,
    create_campaign,
    should_complete,
    translate_campaign_start,
)
from zealandia.core.translators.endorsements import (
    Endorsement,
    build_transfers,
    translate_endorsement,
    validate_endorsement,
)
from zealandia.core.translators.news import NEWS_DECAY_RATE, NewsArticle, translate_news
from zealandia.core.translators.scandals import (
    Scandal,
    translate_decay,
    translate_natural_drift,
    translate_scandal,
)

logger = get_logger(__name__)

ANNUAL_DATA_INTERVAL = 12  # turns per in-game year
SOURCE = "reputation_engine"


@dataclass(frozen=True)
class ReputationConfig:
    """Engine tunables. Built from application settings, never imported by core."""

    bill_magnitude: float = 5.0
    news_decay_rate: float = NEWS_DECAY_RATE
    scandal_decay_rate: float = 0.25
    scandal_decay_interval: int = 3
    decay_threshold: float = 0.1
    natural_drift_rate: float = 0.0
    reputation_update_frequency: int = 3
    cube_weight: float = CUBE_WEIGHT

    def __post_init__(self) -> None:
        for name in ("news_decay_rate", "scandal_decay_rate", "natural_drift_rate"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidRangeError(f"{name}={value} outside [0, 1]")
        if self.scandal_decay_interval < 1 or self.reputation_update_frequency < 1:
            raise InvalidRangeError("turn intervals must be >= 1")
        if self.decay_threshold < 0 or self.cube_weight < 0:
            raise InvalidRangeError("decay_threshold and cube_weight must be >= 0")

    @classmethod
    def from_settings(cls, settings: Any) -> "ReputationConfig":
        return cls(
            bill_magnitude=settings.BILL_MAGNITUDE,
            news_decay_rate=settings.NEWS_DECAY_RATE,
            scandal_decay_rate=settings.SCANDAL_DECAY_RATE,
            scandal_decay_interval=settings.SCANDAL_DECAY_INTERVAL,
            decay_threshold=settings.DECAY_THRESHOLD,
            natural_drift_rate=settings.NATURAL_DRIFT_RATE,
            reputation_update_frequency=settings.REPUTATION_UPDATE_FREQUENCY,
            cube_weight=settings.CUBE_WEIGHT,
        )


class UpdateType(str, Enum):
    REPUTATION_REFRESH = "reputation-refresh"
    ANNUAL_DATA = "annual-data"
    NONE = "none"


@dataclass
class TurnReputationUpdate:
    turn: int
    update_type: UpdateType = UpdateType.NONE
    decayed_scandals: List[str] = field(default_factory=list)
    decayed_news: List[str] = field(default_factory=list)
    completed_campaigns: List[str] = field(default_factory=list)
    reputation_changes: List[ReputationChange] = field(default_factory=list)


@dataclass(frozen=True)
class PolicyImpact:
    slice_id: str
    current_approval: float
    predicted_delta: float
    new_approval: float


def update_type_for(turn: int, frequency: int) -> UpdateType:
    if turn > 0 and turn % ANNUAL_DATA_INTERVAL == 0:
        return UpdateType.ANNUAL_DATA
    if turn > 0 and turn % frequency == 0:
        return UpdateType.REPUTATION_REFRESH
    return UpdateType.NONE


def _unique(ids: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    out = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            out.append(i)
    return out


class ReputationEngine:
    """Facade over catalog + ledger + lifecycle registries for one world.

    Usage:
        engine = ReputationEngine(SliceCatalog(slices), config=ReputationConfig())
        engine.register_players(["p1", "p2"])
        engine.apply_bill_votes(bill, turn=4)
        engine.advance_turn(5)
    """

    def __init__(
        self,
        catalog: SliceCatalog,
        ledger: Optional[ReputationLedger] = None,
        event_log: Optional[EventLog] = None,
        config: Optional[ReputationConfig] = None,
        bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger if ledger is not None else ReputationLedger(event_log)
        self._config = config or ReputationConfig()
        self._bus = bus or EventBus()
        self._rng = rng or random.Random()

        self._players: Set[str] = set()
        self._campaigns: Dict[str, Campaign] = {}
        self._endorsements: Dict[str, Endorsement] = {}
        self._elections: Dict[str, Election] = {}
        self._snapshots: Dict[str, Dict[tuple, float]] = {}
        self._effects = DecayRegistry()
        self._turn_reports: Dict[int, TurnReputationUpdate] = {}
        self._last_turn: Optional[int] = None
        self._lock = threading.RLock()

    # ── collaborators ────────────────────────────────────────

    @property
    def catalog(self) -> SliceCatalog:
        return self._catalog

    @property
    def ledger(self) -> ReputationLedger:
        return self._ledger

    @property
    def event_log(self) -> EventLog:
        return self._ledger.event_log

    @property
    def config(self) -> ReputationConfig:
        return self._config

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def effects(self) -> DecayRegistry:
        return self._effects

    @property
    def last_turn(self) -> Optional[int]:
        return self._last_turn

    # ── players ──────────────────────────────────────────────

    def register_player(self, player_id: str) -> None:
        if not player_id:
            raise InvalidRangeError("player id must not be empty")
        with self._lock:
            if player_id in self._players:
                return
            self._players.add(player_id)
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.PLAYER_REGISTERED,
                data={"player_id": player_id},
                source=SOURCE,
                dedup_key=player_id,
            )
        )

    def register_players(self, player_ids: Iterable[str]) -> None:
        for player_id in player_ids:
            self.register_player(player_id)

    def has_player(self, player_id: str) -> bool:
        return player_id in self._players

    @property
    def players(self) -> List[str]:
        return sorted(self._players)

    def _require_players(self, player_ids: Iterable[str]) -> None:
        for player_id in player_ids:
            if player_id not in self._players:
                raise NotFoundError("player", player_id)

    # ── reputation reads ─────────────────────────────────────

    def get_or_create_score(self, player_id: str, slice_id: str) -> ReputationScore:
        self._require_players([player_id])
        self._catalog.require([slice_id])
        return self._ledger.get_or_create(player_id, slice_id)

    def approval(self, player_id: str, slice_id: str) -> float:
        self._require_players([player_id])
        self._catalog.require([slice_id])
        return self._ledger.approval(player_id, slice_id)

    def scores_for_player(self, player_id: str) -> List[ReputationScore]:
        self._require_players([player_id])
        return sorted(self._ledger.scores_for_player(player_id), key=lambda s: s.slice_id)

    def reputation_by_province(self, player_id: str) -> Dict[str, float]:
        """Population-weighted average approval per province."""
        self._require_players([player_id])
        sums: Dict[str, float] = {}
        populations: Dict[str, int] = {}
        for slice_ in self._catalog:
            province = slice_.province
            approval = self._ledger.approval(player_id, slice_.slice_id)
            sums[province] = sums.get(province, 0.0) + approval * slice_.population
            populations[province] = populations.get(province, 0) + slice_.population
        return {
            province: (sums[province] / populations[province])
            if populations[province]
            else DEFAULT_APPROVAL
            for province in sums
        }

    def overall_approval(self, player_id: str) -> float:
        """Population-weighted average approval across every slice."""
        self._require_players([player_id])
        total = self._catalog.total_population()
        if total == 0:
            return DEFAULT_APPROVAL
        weighted = sum(
            self._ledger.approval(player_id, s.slice_id) * s.population
            for s in self._catalog
        )
        return weighted / total

    # ── internals ────────────────────────────────────────────

    def _commit(
        self, pending: List[PendingDelta], origin: str, origin_id: str
    ) -> List[ReputationChange]:
        changes = self._ledger.apply_batch(pending)
        if changes:
            logger.info(
                f"Reputation batch applied: {origin}:{origin_id} "
                f"({len(changes)} deltas)"
            )
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.REPUTATION_BATCH_APPLIED,
                    data={
                        "origin": origin,
                        "origin_id": origin_id,
                        "count": len(changes),
                        "players": _unique(c.player_id for c in changes),
                    },
                    source=SOURCE,
                    dedup_key=f"{origin}:{origin_id}",
                )
            )
        return changes

    # ── bills ────────────────────────────────────────────────

    def _bill_slices(self, bill: Bill) -> list:
        if bill.position is None:
            self._catalog.require(bill.impact_map)
            return [self._catalog.get(s) for s in bill.impact_map]
        return list(self._catalog)

    def _bill_pending(self, bill: Bill, turn: int, votes: bool, outcome: bool):
        validate_bill(bill)
        self._require_players(bill.player_ids())
        slices = self._bill_slices(bill)
        pending: List[PendingDelta] = []
        if votes:
            pending += translate_bill_votes(
                bill, slices, turn, self._config.bill_magnitude, self._config.cube_weight
            )
        if outcome:
            pending += translate_bill_outcome(
                bill, slices, turn, self._config.bill_magnitude, self._config.cube_weight
            )
        return pending

    def _emit_bill(
        self, bill: Bill, stage: str, changes: List[ReputationChange], turn: int
    ) -> None:
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.BILL_RESOLVED,
                data={
                    "bill_id": bill.bill_id,
                    "passed": bill.passed,
                    "turn": turn,
                    "changes": len(changes),
                },
                source=SOURCE,
                dedup_key=f"{bill.bill_id}:{stage}",
            )
        )

    def apply_bill_votes(self, bill: Bill, turn: int) -> List[ReputationChange]:
        """Proposer and voter deltas for a bill."""
        with self._lock:
            pending = self._bill_pending(bill, turn, votes=True, outcome=False)
            changes = self._commit(pending, "bill", bill.bill_id)
        self._emit_bill(bill, "votes", changes, turn)
        return changes

    def apply_bill_outcome(self, bill: Bill, turn: int) -> List[ReputationChange]:
        """Enactment credit once a bill has passed. Failed bills change nothing."""
        with self._lock:
            pending = self._bill_pending(bill, turn, votes=False, outcome=True)
            changes = self._commit(pending, "bill-outcome", bill.bill_id)
        self._emit_bill(bill, "outcome", changes, turn)
        return changes

    def resolve_bill(self, bill: Bill, turn: int) -> List[ReputationChange]:
        """Votes and, when decided, the outcome, as one all-or-nothing batch."""
        with self._lock:
            pending = self._bill_pending(
                bill, turn, votes=True, outcome=bill.passed is not None
            )
            changes = self._commit(pending, "bill", bill.bill_id)
        self._emit_bill(bill, "resolved", changes, turn)
        return changes

    def preview_policy_impact(
        self,
        player_id: str,
        position: PoliticalPosition,
        role: BillRole = BillRole.PROPOSER,
        limit: int = 20,
    ) -> List[PolicyImpact]:
        """Predicted effect on the `limit` largest voting slices. No mutation."""
        self._require_players([player_id])
        validate_position(position)
        previews = []
        for slice_ in self._catalog.largest_voting(limit):
            current = self._ledger.approval(player_id, slice_.slice_id)
            delta = predict_role_delta(
                position,
                slice_,
                role,
                self._config.bill_magnitude,
                self._config.cube_weight,
            )
            previews.append(
                PolicyImpact(
                    slice_id=slice_.slice_id,
                    current_approval=current,
                    predicted_delta=delta,
                    new_approval=clamp_approval(current + delta),
                )
            )
        return previews

    # ── news / scandals ──────────────────────────────────────

    def _register_effects(
        self,
        kind: EffectKind,
        source_id: str,
        changes: List[ReputationChange],
        rate: float,
        interval: int,
        turn: int,
    ) -> None:
        for change in changes:
            if change.delta == 0:
                continue
            self._effects.register(
                DecayingEffect(
                    kind=kind,
                    source_id=source_id,
                    player_id=change.player_id,
                    slice_id=change.slice_id,
                    residual=change.delta,
                    rate=rate,
                    interval=interval,
                    started_turn=turn,
                )
            )

    def publish_news(self, article: NewsArticle, turn: int) -> List[ReputationChange]:
        """Apply an article's deltas and start tracking their decay."""
        with self._lock:
            self._require_players(i.player_id for i in article.impacts)
            pending = translate_news(article, self._catalog, turn)
            changes = self._commit(pending, "news", article.article_id)
            self._register_effects(
                EffectKind.NEWS,
                article.article_id,
                changes,
                self._config.news_decay_rate,
                1,
                turn,
            )
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.NEWS_PUBLISHED,
                data={"article_id": article.article_id, "changes": len(changes)},
                source=SOURCE,
                dedup_key=article.article_id,
            )
        )
        return changes

    def report_scandal(self, scandal: Scandal, turn: int) -> List[ReputationChange]:
        """Apply a scandal's penalties and start tracking their decay."""
        with self._lock:
            self._require_players([scandal.player_id])
            pending = translate_scandal(scandal, self._catalog, turn)
            changes = self._commit(pending, "scandal", scandal.scandal_id)
            self._register_effects(
                EffectKind.SCANDAL,
                scandal.scandal_id,
                changes,
                self._config.scandal_decay_rate,
                self._config.scandal_decay_interval,
                turn,
            )
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.SCANDAL_REPORTED,
                data={
                    "scandal_id": scandal.scandal_id,
                    "player_id": scandal.player_id,
                    "changes": len(changes),
                },
                source=SOURCE,
                dedup_key=scandal.scandal_id,
            )
        )
        return changes

    # ── campaigns ────────────────────────────────────────────

    def start_campaign(
        self,
        player_id: str,
        slice_id: str,
        turn: int,
        campaign_id: Optional[str] = None,
        province: Optional[str] = None,
    ) -> Campaign:
        """Roll the boost, apply it once, register the 12-turn campaign.

        Action-point and currency costs are checked by the caller.
        """
        with self._lock:
            self._require_players([player_id])
            slice_ = self._catalog.get(slice_id)
            campaign_id = campaign_id or str(uuid.uuid4())
            if campaign_id in self._campaigns:
                raise DuplicateEventError(f"campaign already exists: {campaign_id}")
            for existing in self._campaigns.values():
                if (
                    existing.status == CampaignStatus.ACTIVE
                    and existing.player_id == player_id
                    and existing.slice_id == slice_id
                ):
                    raise InvalidActionError(
                        f"{player_id} already campaigns in {slice_id} "
                        f"({existing.campaign_id})"
                    )

            campaign = create_campaign(
                campaign_id, player_id, slice_, turn, self._rng, province
            )
            self._commit([translate_campaign_start(campaign)], "campaign", campaign_id)
            self._campaigns[campaign_id] = campaign

        logger.info(
            f"Campaign started: {campaign_id} {player_id}->{slice_id} "
            f"boost={campaign.boost} turns {campaign.start_turn}-{campaign.end_turn}"
        )
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.CAMPAIGN_STARTED,
                data={
                    "campaign_id": campaign_id,
                    "player_id": player_id,
                    "slice_id": slice_id,
                    "boost": campaign.boost,
                },
                source=SOURCE,
                dedup_key=campaign_id,
            )
        )
        return campaign

    def get_campaign(self, campaign_id: str) -> Campaign:
        try:
            return self._campaigns[campaign_id]
        except KeyError:
            raise NotFoundError("campaign", campaign_id) from None

    def campaigns(
        self,
        player_id: Optional[str] = None,
        status: Optional[CampaignStatus] = None,
    ) -> List[Campaign]:
        return [
            c
            for c in self._campaigns.values()
            if (player_id is None or c.player_id == player_id)
            and (status is None or c.status == status)
        ]

    def cancel_campaign(self, campaign_id: str) -> Campaign:
        with self._lock:
            campaign = self.get_campaign(campaign_id)
            cancel_core_campaign(campaign)
        logger.info(f"Campaign cancelled: {campaign_id}")
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.CAMPAIGN_CANCELLED,
                data={"campaign_id": campaign_id, "player_id": campaign.player_id},
                source=SOURCE,
                dedup_key=campaign_id,
            )
        )
        return campaign

    # ── endorsements ─────────────────────────────────────────

    def _build_endorsement(
        self,
        endorser_id: str,
        endorsed_id: str,
        turn: int,
        endorsement_id: Optional[str],
    ) -> Endorsement:
        validate_endorsement(endorser_id, endorsed_id)
        self._require_players([endorser_id, endorsed_id])
        return Endorsement(
            endorsement_id=endorsement_id or str(uuid.uuid4()),
            endorser_id=endorser_id,
            endorsed_id=endorsed_id,
            turn=turn,
            transfers=build_transfers(
                self._ledger.scores_for_player(endorser_id), self._rng
            ),
        )

    def preview_endorsement(
        self, endorser_id: str, endorsed_id: str, turn: int
    ) -> Endorsement:
        """Sampled transfers without touching the ledger."""
        with self._lock:
            return self._build_endorsement(endorser_id, endorsed_id, turn, None)

    def endorse(
        self,
        endorser_id: str,
        endorsed_id: str,
        turn: int,
        endorsement_id: Optional[str] = None,
    ) -> Endorsement:
        """One endorsement per endorser per turn. Costs are checked by the caller."""
        with self._lock:
            if endorsement_id and endorsement_id in self._endorsements:
                raise DuplicateEventError(f"endorsement already exists: {endorsement_id}")
            for existing in self._endorsements.values():
                if existing.endorser_id == endorser_id and existing.turn == turn:
                    raise InvalidActionError(
                        f"{endorser_id} already endorsed {existing.endorsed_id} "
                        f"on turn {turn}"
                    )
            endorsement = self._build_endorsement(
                endorser_id, endorsed_id, turn, endorsement_id
            )
            self._commit(
                translate_endorsement(endorsement),
                "endorsement",
                endorsement.endorsement_id,
            )
            self._endorsements[endorsement.endorsement_id] = endorsement

        logger.info(
            f"Endorsement made: {endorser_id}->{endorsed_id} "
            f"slices={len(endorsement.transfers)} "
            f"avg_rate={endorsement.average_transfer:.2f}"
        )
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.ENDORSEMENT_MADE,
                data={
                    "endorsement_id": endorsement.endorsement_id,
                    "endorser_id": endorser_id,
                    "endorsed_id": endorsed_id,
                },
                source=SOURCE,
                dedup_key=endorsement.endorsement_id,
            )
        )
        return endorsement

    def get_endorsement(self, endorsement_id: str) -> Endorsement:
        try:
            return self._endorsements[endorsement_id]
        except KeyError:
            raise NotFoundError("endorsement", endorsement_id) from None

    def endorsements(self, player_id: Optional[str] = None) -> List[Endorsement]:
        return [
            e
            for e in self._endorsements.values()
            if player_id is None or player_id in (e.endorser_id, e.endorsed_id)
        ]

    # ── elections ────────────────────────────────────────────

    def register_election(self, election: Election) -> Election:
        with self._lock:
            if election.election_id in self._elections:
                raise DuplicateEventError(
                    f"election already exists: {election.election_id}"
                )
            self._require_players(election.candidate_ids())
            if len(set(election.candidate_ids())) != len(election.candidates):
                raise InvalidActionError(
                    f"election {election.election_id}: duplicate candidate"
                )
            for candidate in election.candidates:
                validate_position(candidate.position)
            self._elections[election.election_id] = election
        logger.info(
            f"Election registered: {election.election_id} "
            f"({election.office_type.value}, {len(election.candidates)} candidates)"
        )
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.ELECTION_REGISTERED,
                data={"election_id": election.election_id},
                source=SOURCE,
                dedup_key=election.election_id,
            )
        )
        return election

    def get_election(self, election_id: str) -> Election:
        try:
            return self._elections[election_id]
        except KeyError:
            raise NotFoundError("election", election_id) from None

    def elections(self) -> List[Election]:
        return list(self._elections.values())

    def _emit_status(self, election: Election) -> None:
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.ELECTION_STATUS_CHANGED,
                data={
                    "election_id": election.election_id,
                    "status": election.status.value,
                },
                source=SOURCE,
                dedup_key=f"{election.election_id}:{election.status.value}",
            )
        )

    def start_election_campaigning(self, election_id: str) -> Election:
        with self._lock:
            election = self.get_election(election_id)
            transition(election, ElectionStatus.CAMPAIGNING)
        self._emit_status(election)
        return election

    def open_voting(self, election_id: str) -> Election:
        with self._lock:
            election = self.get_election(election_id)
            open_election_voting(election)
        logger.info(f"Voting opened: {election_id}")
        self._emit_status(election)
        return election

    def close_voting(self, election_id: str, turn: int) -> Election:
        """Close the polls and freeze the approvals the tally will read."""
        with self._lock:
            election = self.get_election(election_id)
            close_election_voting(election, turn)
            scoped = election_slices(election, self._catalog)
            self._snapshots[election_id] = self._ledger.snapshot(
                election.candidate_ids(), [s.slice_id for s in scoped]
            )
        logger.info(f"Voting closed: {election_id} on turn {turn}")
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.ELECTION_VOTING_CLOSED,
                data={"election_id": election_id, "turn": turn},
                source=SOURCE,
                dedup_key=election_id,
            )
        )
        return election

    def compute_demographic_vote(
        self, election_id: str, slice_id: str, base_turnout: float
    ) -> DemographicVote:
        """One slice's vote on current approvals. No mutation."""
        election = self.get_election(election_id)
        slice_ = self._catalog.get(slice_id)
        approvals = {
            pid: self._ledger.approval(pid, slice_id)
            for pid in election.candidate_ids()
        }
        return compute_demographic_vote(
            slice_, election, approvals, base_turnout, self._config.cube_weight
        )

    def tally_election(
        self, election_id: str, base_turnout: BaseTurnout, turn: int
    ) -> ElectionResult:
        """Aggregate the closed election and mark it completed."""
        with self._lock:
            election = self.get_election(election_id)
            if election.status == ElectionStatus.COMPLETED:
                raise InvalidActionError(f"election {election_id} already completed")
            if election.status != ElectionStatus.VOTING:
                logger.error(
                    f"Election {election_id} tallied in status {election.status.value}"
                )
                raise InvariantViolationError(
                    f"election {election_id}: voting has not taken place"
                )

            snapshot = self._snapshots.get(election_id)
            if snapshot is None and not election.voting_open:
                # closed before a restart; fall back to a fresh consistent read
                scoped = election_slices(election, self._catalog)
                snapshot = self._ledger.snapshot(
                    election.candidate_ids(), [s.slice_id for s in scoped]
                )
            result = compute_election_result(
                election,
                self._catalog,
                snapshot or {},
                base_turnout,
                turn,
                self._config.cube_weight,
            )
            transition(election, ElectionStatus.COMPLETED)
            election.results = result
            self._snapshots.pop(election_id, None)

        self._bus.emit(
            GameEvent(
                event_type=EventTypes.ELECTION_COMPLETED,
                data={
                    "election_id": election_id,
                    "winner_id": result.winner_id,
                    "turnout_percentage": result.turnout_percentage,
                },
                source=SOURCE,
                dedup_key=election_id,
            )
        )
        return result

    # ── turns ────────────────────────────────────────────────

    def advance_turn(self, turn: int) -> TurnReputationUpdate:
        """Per-turn tick: effect decay, natural drift, campaign completion.

        At most once per turn; repeated or older turns return the stored report.
        """
        if turn < 0:
            raise InvalidRangeError(f"turn={turn} is negative")

        with self._lock:
            if self._last_turn is not None and turn <= self._last_turn:
                logger.warning(
                    f"advance_turn({turn}) ignored: turn {self._last_turn} "
                    f"already processed"
                )
                return self._turn_reports.get(turn, TurnReputationUpdate(turn=turn))

            self._bus.reset_chain()
            update_type = update_type_for(
                turn, self._config.reputation_update_frequency
            )

            steps = translate_decay(
                self._effects.due(turn), turn, self._config.decay_threshold
            )
            pending = [p for _, p, _ in steps if p.delta != 0]
            if update_type != UpdateType.NONE:
                pending += translate_natural_drift(
                    self._ledger.all_scores(), turn, self._config.natural_drift_rate
                )
            changes = self._ledger.apply_batch(pending)

            report = TurnReputationUpdate(
                turn=turn, update_type=update_type, reputation_changes=changes
            )
            expired: List[DecayingEffect] = []
            for effect, delta, is_expired in steps:
                target = (
                    report.decayed_scandals
                    if effect.kind == EffectKind.SCANDAL
                    else report.decayed_news
                )
                if effect.source_id not in target:
                    target.append(effect.source_id)
                if is_expired:
                    self._effects.remove(effect)
                    expired.append(effect)
                else:
                    effect.residual += delta.delta
                    effect.last_decay_turn = turn

            for campaign in self._campaigns.values():
                if should_complete(campaign, turn):
                    complete_campaign(campaign)
                    report.completed_campaigns.append(campaign.campaign_id)

            self._turn_reports[turn] = report
            self._last_turn = turn

        for effect in expired:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.EFFECT_EXPIRED,
                    data={
                        "kind": effect.kind.value,
                        "source_id": effect.source_id,
                        "player_id": effect.player_id,
                        "slice_id": effect.slice_id,
                    },
                    source=SOURCE,
                    dedup_key="/".join(effect.key),
                )
            )
        for campaign_id in report.completed_campaigns:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.CAMPAIGN_COMPLETED,
                    data={"campaign_id": campaign_id},
                    source=SOURCE,
                    dedup_key=campaign_id,
                )
            )
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.TURN_ADVANCED,
                data={
                    "turn": turn,
                    "update_type": update_type.value,
                    "changes": len(changes),
                },
                source=SOURCE,
                dedup_key=str(turn),
            )
        )
        logger.info(
            f"Turn advanced: {turn} ({update_type.value}) changes={len(changes)} "
            f"completed_campaigns={len(report.completed_campaigns)} "
            f"active_effects={len(self._effects)}"
        )
        return report

    def turn_report(self, turn: int) -> Optional[TurnReputationUpdate]:
        return self._turn_reports.get(turn)

    # ── persistence hooks ────────────────────────────────────

    def restore_campaign(self, campaign: Campaign) -> None:
        with self._lock:
            self._campaigns[campaign.campaign_id] = campaign

    def restore_endorsement(self, endorsement: Endorsement) -> None:
        with self._lock:
            self._endorsements[endorsement.endorsement_id] = endorsement

    def restore_election(self, election: Election) -> None:
        with self._lock:
            self._elections[election.election_id] = election

    def restore_effect(self, effect: DecayingEffect) -> None:
        with self._lock:
            self._effects.register(effect)
