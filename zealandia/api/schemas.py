"""API request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from zealandia.core.politics.position import PoliticalPosition


# === Shared ===


class PositionSchema(BaseModel):
    """Political position (cube + issues + salience)"""

    cube: dict[str, float] = Field(
        default_factory=dict, description="economic / authority / social, -10 ~ 10"
    )
    issues: dict[str, float] = Field(default_factory=dict, description="-10 ~ 10")
    salience: dict[str, float] = Field(default_factory=dict, description="0 ~ 1")

    def to_core(self) -> PoliticalPosition:
        return PoliticalPosition.from_dict(self.model_dump())


# === Request Schemas ===


class RegisterPlayerRequest(BaseModel):
    player_id: str = Field(..., min_length=1, max_length=64, description="Player ID")


class BillRequest(BaseModel):
    """Bill resolution: roster, policy position or impact map, outcome"""

    bill_id: str = Field(..., min_length=1)
    turn: int = Field(..., ge=0)
    proposer_id: Optional[str] = None
    position: Optional[PositionSchema] = None
    yes_votes: list[str] = []
    no_votes: list[str] = []
    abstain_votes: list[str] = []
    impact_map: dict[str, float] = Field(
        default_factory=dict, description="slice id -> -1 ~ 1"
    )
    passed: Optional[bool] = None


class PolicyPreviewRequest(BaseModel):
    player_id: str
    position: PositionSchema
    role: str = Field("proposer", description="proposer, yes-voter, no-voter")
    limit: int = Field(20, ge=1, le=500)


class NewsImpactSchema(BaseModel):
    slice_id: str
    player_id: str
    delta: float = Field(..., description="-5 ~ 5")
    reason: str = ""


class NewsRequest(BaseModel):
    article_id: str = Field(..., min_length=1)
    turn: int = Field(..., ge=0)
    outlet_type: Optional[str] = None
    impacts: list[NewsImpactSchema] = []


class ScandalRequest(BaseModel):
    scandal_id: str = Field(..., min_length=1)
    player_id: str
    turn: int = Field(..., ge=0)
    impacts: dict[str, float] = Field(
        default_factory=dict, description="slice id -> -100 ~ 0"
    )
    description: str = ""


class CampaignRequest(BaseModel):
    player_id: str
    slice_id: str
    turn: int = Field(..., ge=0)
    province: Optional[str] = None


class EndorsementRequest(BaseModel):
    endorser_id: str
    endorsed_id: str
    turn: int = Field(..., ge=0)


class TurnRequest(BaseModel):
    turn: int = Field(..., ge=0)


class CandidateSchema(BaseModel):
    player_id: str
    position: PositionSchema = Field(default_factory=PositionSchema)
    name: str = ""
    party: Optional[str] = None
    funds_raised: float = 0.0


class ElectionRequest(BaseModel):
    election_id: str = Field(..., min_length=1)
    office_type: str = Field(..., description="e.g. parliament, mayor")
    candidates: list[CandidateSchema] = []
    province: Optional[str] = None
    city: Optional[str] = None


class CloseVotingRequest(BaseModel):
    turn: int = Field(..., ge=0)


class TallyRequest(BaseModel):
    turn: int = Field(..., ge=0)
    base_turnout: float = Field(..., ge=0.0, le=1.0)


# === Response Schemas ===


class HistoryPoint(BaseModel):
    turn: int
    approval: float
    change: float
    reason: str = ""


class ScoreResponse(BaseModel):
    player_id: str
    slice_id: str
    approval: float
    turn_updated: int = 0
    history: list[HistoryPoint] = []


class ReputationSummaryResponse(BaseModel):
    player_id: str
    overall_approval: float
    by_province: dict[str, float] = {}
    scores: list[ScoreResponse] = []


class ChangeInfo(BaseModel):
    player_id: str
    slice_id: str
    delta: float
    requested_delta: float
    source: str
    source_id: str
    turn: int


class ChangesResponse(BaseModel):
    changes: list[ChangeInfo] = []


class PolicyImpactInfo(BaseModel):
    slice_id: str
    current_approval: float
    predicted_delta: float
    new_approval: float


class PolicyPreviewResponse(BaseModel):
    impacts: list[PolicyImpactInfo] = []


class CampaignResponse(BaseModel):
    campaign_id: str
    player_id: str
    slice_id: str
    province: str
    start_turn: int
    end_turn: int
    boost: int
    status: str
    action_point_cost: int
    money_cost: int


class TransferInfo(BaseModel):
    slice_id: str
    endorser_approval: float
    transfer_rate: int


class EndorsementResponse(BaseModel):
    endorsement_id: Optional[str] = None
    endorser_id: str
    endorsed_id: str
    turn: int
    transfers: list[TransferInfo] = []
    average_transfer: float = 0.0
    action_point_cost: int = 1
    money_cost: int = 0


class TurnResponse(BaseModel):
    turn: int
    update_type: str
    decayed_scandals: list[str] = []
    decayed_news: list[str] = []
    completed_campaigns: list[str] = []
    reputation_changes: int = 0


class ElectionResponse(BaseModel):
    election_id: str
    office_type: str
    status: str
    voting_open: bool
    candidates: list[str] = []


class CandidateVotes(BaseModel):
    player_id: str
    votes: int
    percentage: float


class ElectionResultResponse(BaseModel):
    election_id: str
    winner_id: str
    total_eligible_voters: int
    total_votes_cast: int
    turnout_percentage: float
    candidates: list[CandidateVotes] = []


class ErrorResponse(BaseModel):
    detail: str
