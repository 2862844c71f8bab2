"""Reputation API endpoints.

Thin surface over ReputationEngine. Mutations reach the DB through the
ReputationStoreService handlers on the engine's EventBus, which run before
the engine call returns.
"""

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request

from zealandia.api.schemas import (
    BillRequest,
    CampaignRequest,
    CampaignResponse,
    CandidateVotes,
    ChangeInfo,
    ChangesResponse,
    CloseVotingRequest,
    ElectionRequest,
    ElectionResponse,
    ElectionResultResponse,
    EndorsementRequest,
    EndorsementResponse,
    ErrorResponse,
    HistoryPoint,
    NewsRequest,
    PolicyImpactInfo,
    PolicyPreviewRequest,
    PolicyPreviewResponse,
    RegisterPlayerRequest,
    ReputationSummaryResponse,
    ScandalRequest,
    ScoreResponse,
    TallyRequest,
    TurnRequest,
    TurnResponse,
)
from zealandia.core.elections.models import Candidate, Election, OfficeType
from zealandia.core.engine import ReputationEngine
from zealandia.core.errors import (
    DuplicateEventError,
    InsufficientBalanceError,
    InvalidActionError,
    InvalidRangeError,
    InvariantViolationError,
    NotFoundError,
    ReputationError,
)
from zealandia.core.logging import get_logger
from zealandia.core.reputation.models import ReputationChange, ReputationScore
from zealandia.core.translators.bills import Bill, BillRole
from zealandia.core.translators.campaigns import Campaign
from zealandia.core.translators.endorsements import Endorsement
from zealandia.core.translators.news import NewsArticle, NewsImpact, OutletType
from zealandia.core.translators.scandals import Scandal
from zealandia.services.reputation_service import ReputationStoreService

logger = get_logger(__name__)

router = APIRouter(prefix="/reputation", tags=["reputation"])

ERROR_STATUS = {
    NotFoundError: 404,
    InvalidRangeError: 400,
    InvalidActionError: 400,
    DuplicateEventError: 409,
    # raised by the currency/action-point ledger, which checks balances before
    # calling the engine
    InsufficientBalanceError: 402,
    InvariantViolationError: 500,
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def get_engine(request: Request) -> ReputationEngine:
    engine: ReputationEngine = request.app.state.reputation_engine
    return engine


def get_store(request: Request) -> ReputationStoreService:
    store: ReputationStoreService = request.app.state.reputation_store
    return store


def _raise_http(e: ReputationError) -> NoReturn:
    status = ERROR_STATUS.get(type(e), 400)
    if status >= 500:
        logger.exception(f"Engine invariant violated: {e}")
    else:
        logger.info(f"Rejected request: {type(e).__name__}: {e}")
    raise HTTPException(status_code=status, detail=str(e))


def _change_info(change: ReputationChange) -> ChangeInfo:
    return ChangeInfo(
        player_id=change.player_id,
        slice_id=change.slice_id,
        delta=change.delta,
        requested_delta=change.requested_delta,
        source=change.source.value,
        source_id=change.source_id,
        turn=change.turn,
    )


def _score_response(score: ReputationScore) -> ScoreResponse:
    return ScoreResponse(
        player_id=score.player_id,
        slice_id=score.slice_id,
        approval=score.approval,
        turn_updated=score.turn_updated,
        history=[
            HistoryPoint(
                turn=p.turn, approval=p.approval, change=p.change, reason=p.reason
            )
            for p in score.approval_history
        ],
    )


def _campaign_response(c: Campaign) -> CampaignResponse:
    return CampaignResponse(
        campaign_id=c.campaign_id,
        player_id=c.player_id,
        slice_id=c.slice_id,
        province=c.province,
        start_turn=c.start_turn,
        end_turn=c.end_turn,
        boost=c.boost,
        status=c.status.value,
        action_point_cost=c.action_point_cost,
        money_cost=c.money_cost,
    )


def _endorsement_response(e: Endorsement, stored: bool = True) -> EndorsementResponse:
    return EndorsementResponse(
        endorsement_id=e.endorsement_id if stored else None,
        endorser_id=e.endorser_id,
        endorsed_id=e.endorsed_id,
        turn=e.turn,
        transfers=[
            {
                "slice_id": t.slice_id,
                "endorser_approval": t.endorser_approval,
                "transfer_rate": t.transfer_rate,
            }
            for t in e.transfers
        ],
        average_transfer=e.average_transfer,
        action_point_cost=e.action_point_cost,
        money_cost=e.money_cost,
    )


def _election_response(e: Election) -> ElectionResponse:
    return ElectionResponse(
        election_id=e.election_id,
        office_type=e.office_type.value,
        status=e.status.value,
        voting_open=e.voting_open,
        candidates=e.candidate_ids(),
    )


# ── players / reads ──────────────────────────────────────────


@router.post("/players", status_code=201)
def register_player(
    request: RegisterPlayerRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> dict[str, str]:
    try:
        engine.register_player(request.player_id)
    except ReputationError as e:
        _raise_http(e)
    logger.info(f"Player registered: {request.player_id}")
    return {"player_id": request.player_id}


@router.get(
    "/players/{player_id}",
    response_model=ReputationSummaryResponse,
    responses=ERROR_RESPONSES,
)
def get_reputation_summary(
    player_id: str, engine: ReputationEngine = Depends(get_engine)
) -> ReputationSummaryResponse:
    """Overall and per-province approval plus every stored score."""
    try:
        return ReputationSummaryResponse(
            player_id=player_id,
            overall_approval=engine.overall_approval(player_id),
            by_province=engine.reputation_by_province(player_id),
            scores=[_score_response(s) for s in engine.scores_for_player(player_id)],
        )
    except ReputationError as e:
        _raise_http(e)


@router.get(
    "/players/{player_id}/slices/{slice_id}",
    response_model=ScoreResponse,
    responses=ERROR_RESPONSES,
)
def get_score(
    player_id: str, slice_id: str, engine: ReputationEngine = Depends(get_engine)
) -> ScoreResponse:
    try:
        approval = engine.approval(player_id, slice_id)
    except ReputationError as e:
        _raise_http(e)
    score = engine.ledger.get(player_id, slice_id)
    if score is None:
        return ScoreResponse(player_id=player_id, slice_id=slice_id, approval=approval)
    return _score_response(score)


@router.get("/players/{player_id}/changes", response_model=ChangesResponse)
def get_changes(
    player_id: str,
    since_id: int = 0,
    store: ReputationStoreService = Depends(get_store),
) -> ChangesResponse:
    """Persisted audit records, oldest first."""
    return ChangesResponse(
        changes=[_change_info(c) for c in store.load_changes(player_id, since_id)]
    )


# ── bills / news / scandals ──────────────────────────────────


@router.post("/bills", response_model=ChangesResponse, responses=ERROR_RESPONSES)
def resolve_bill(
    request: BillRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> ChangesResponse:
    try:
        bill = Bill(
            bill_id=request.bill_id,
            proposer_id=request.proposer_id,
            position=request.position.to_core() if request.position else None,
            yes_votes=request.yes_votes,
            no_votes=request.no_votes,
            abstain_votes=request.abstain_votes,
            impact_map=request.impact_map,
            passed=request.passed,
        )
        changes = engine.resolve_bill(bill, request.turn)
    except ReputationError as e:
        _raise_http(e)
    return ChangesResponse(changes=[_change_info(c) for c in changes])


@router.post(
    "/bills/preview", response_model=PolicyPreviewResponse, responses=ERROR_RESPONSES
)
def preview_policy(
    request: PolicyPreviewRequest, engine: ReputationEngine = Depends(get_engine)
) -> PolicyPreviewResponse:
    try:
        role = BillRole(request.role)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown role: {request.role}")
    try:
        impacts = engine.preview_policy_impact(
            request.player_id, request.position.to_core(), role, request.limit
        )
    except ReputationError as e:
        _raise_http(e)
    return PolicyPreviewResponse(
        impacts=[
            PolicyImpactInfo(
                slice_id=i.slice_id,
                current_approval=i.current_approval,
                predicted_delta=i.predicted_delta,
                new_approval=i.new_approval,
            )
            for i in impacts
        ]
    )


@router.post("/news", response_model=ChangesResponse, responses=ERROR_RESPONSES)
def publish_news(
    request: NewsRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> ChangesResponse:
    try:
        outlet = OutletType(request.outlet_type) if request.outlet_type else None
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"Unknown outlet type: {request.outlet_type}"
        )
    article = NewsArticle(
        article_id=request.article_id,
        published_turn=request.turn,
        outlet_type=outlet,
        impacts=[
            NewsImpact(
                slice_id=i.slice_id, player_id=i.player_id, delta=i.delta, reason=i.reason
            )
            for i in request.impacts
        ],
    )
    try:
        changes = engine.publish_news(article, request.turn)
    except ReputationError as e:
        _raise_http(e)
    return ChangesResponse(changes=[_change_info(c) for c in changes])


@router.post("/scandals", response_model=ChangesResponse, responses=ERROR_RESPONSES)
def report_scandal(
    request: ScandalRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> ChangesResponse:
    scandal = Scandal(
        scandal_id=request.scandal_id,
        player_id=request.player_id,
        reported_turn=request.turn,
        impacts=request.impacts,
        description=request.description,
    )
    try:
        changes = engine.report_scandal(scandal, request.turn)
    except ReputationError as e:
        _raise_http(e)
    return ChangesResponse(changes=[_change_info(c) for c in changes])


# ── campaigns / endorsements ─────────────────────────────────


@router.post(
    "/campaigns",
    response_model=CampaignResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
)
def start_campaign(
    request: CampaignRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> CampaignResponse:
    """Costs (1 AP, 100 currency) are debited by the caller beforehand."""
    try:
        campaign = engine.start_campaign(
            request.player_id, request.slice_id, request.turn, province=request.province
        )
    except ReputationError as e:
        _raise_http(e)
    return _campaign_response(campaign)


@router.post(
    "/campaigns/{campaign_id}/cancel",
    response_model=CampaignResponse,
    responses=ERROR_RESPONSES,
)
def cancel_campaign(
    campaign_id: str,
    engine: ReputationEngine = Depends(get_engine),
) -> CampaignResponse:
    try:
        campaign = engine.cancel_campaign(campaign_id)
    except ReputationError as e:
        _raise_http(e)
    return _campaign_response(campaign)


@router.post(
    "/endorsements",
    response_model=EndorsementResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
)
def endorse(
    request: EndorsementRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> EndorsementResponse:
    try:
        endorsement = engine.endorse(
            request.endorser_id, request.endorsed_id, request.turn
        )
    except ReputationError as e:
        _raise_http(e)
    return _endorsement_response(endorsement)


@router.post(
    "/endorsements/preview",
    response_model=EndorsementResponse,
    responses=ERROR_RESPONSES,
)
def preview_endorsement(
    request: EndorsementRequest, engine: ReputationEngine = Depends(get_engine)
) -> EndorsementResponse:
    try:
        endorsement = engine.preview_endorsement(
            request.endorser_id, request.endorsed_id, request.turn
        )
    except ReputationError as e:
        _raise_http(e)
    return _endorsement_response(endorsement, stored=False)


# ── turns ────────────────────────────────────────────────────


@router.post("/turns", response_model=TurnResponse, responses=ERROR_RESPONSES)
def advance_turn(
    request: TurnRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> TurnResponse:
    try:
        report = engine.advance_turn(request.turn)
    except ReputationError as e:
        _raise_http(e)
    return TurnResponse(
        turn=report.turn,
        update_type=report.update_type.value,
        decayed_scandals=report.decayed_scandals,
        decayed_news=report.decayed_news,
        completed_campaigns=report.completed_campaigns,
        reputation_changes=len(report.reputation_changes),
    )


# ── elections ────────────────────────────────────────────────


@router.post(
    "/elections",
    response_model=ElectionResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
)
def register_election(
    request: ElectionRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> ElectionResponse:
    try:
        office = OfficeType(request.office_type)
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"Unknown office type: {request.office_type}"
        )
    try:
        election = engine.register_election(
            Election(
                election_id=request.election_id,
                office_type=office,
                province=request.province,
                city=request.city,
                candidates=[
                    Candidate(
                        player_id=c.player_id,
                        position=c.position.to_core(),
                        name=c.name,
                        party=c.party,
                        funds_raised=c.funds_raised,
                    )
                    for c in request.candidates
                ],
            )
        )
    except ReputationError as e:
        _raise_http(e)
    return _election_response(election)


@router.post(
    "/elections/{election_id}/open",
    response_model=ElectionResponse,
    responses=ERROR_RESPONSES,
)
def open_voting(
    election_id: str,
    engine: ReputationEngine = Depends(get_engine),
) -> ElectionResponse:
    try:
        election = engine.open_voting(election_id)
    except ReputationError as e:
        _raise_http(e)
    return _election_response(election)


@router.post(
    "/elections/{election_id}/close",
    response_model=ElectionResponse,
    responses=ERROR_RESPONSES,
)
def close_voting(
    election_id: str,
    request: CloseVotingRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> ElectionResponse:
    try:
        election = engine.close_voting(election_id, request.turn)
    except ReputationError as e:
        _raise_http(e)
    return _election_response(election)


@router.post(
    "/elections/{election_id}/tally",
    response_model=ElectionResultResponse,
    responses={**ERROR_RESPONSES, 500: {"model": ErrorResponse}},
)
def tally_election(
    election_id: str,
    request: TallyRequest,
    engine: ReputationEngine = Depends(get_engine),
) -> ElectionResultResponse:
    try:
        result = engine.tally_election(election_id, request.base_turnout, request.turn)
    except ReputationError as e:
        _raise_http(e)
    return ElectionResultResponse(
        election_id=result.election_id,
        winner_id=result.winner_id,
        total_eligible_voters=result.total_eligible_voters,
        total_votes_cast=result.total_votes_cast,
        turnout_percentage=result.turnout_percentage,
        candidates=[
            CandidateVotes(player_id=c.player_id, votes=c.votes, percentage=c.percentage)
            for c in result.candidates
        ],
    )
