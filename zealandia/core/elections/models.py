"""Election domain model

DB-independent plain data classes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from zealandia.core.politics.position import PoliticalPosition


class OfficeType(str, Enum):
    PRIME_MINISTER = "prime-minister"
    PARLIAMENT = "parliament"
    LOWER_HOUSE = "lower-house"
    UPPER_HOUSE = "upper-house"
    GOVERNOR = "governor"
    SUPERINTENDENT = "superintendent"
    PROVINCIAL_COUNCIL = "provincial-council"
    MAYOR = "mayor"


class ElectionStatus(str, Enum):
    ANNOUNCED = "announced"
    CAMPAIGNING = "campaigning"
    VOTING = "voting"
    COMPLETED = "completed"


@dataclass
class Candidate:
    player_id: str
    position: PoliticalPosition = field(default_factory=PoliticalPosition)
    platform: str = ""
    endorsements: List[str] = field(default_factory=list)
    funds_raised: float = 0.0
    name: str = ""
    party: Optional[str] = None


@dataclass(frozen=True)
class VoteShare:
    player_id: str
    votes: int
    percentage: float


@dataclass
class DemographicVote:
    slice_id: str
    eligible_voters: int
    base_turnout: float  # 0 ~ 1
    reputation_modifier: float  # (average candidate approval - 50) / 100
    final_turnout: float  # 0 ~ 1
    effective_votes: int
    vote_distribution: List[VoteShare] = field(default_factory=list)


@dataclass(frozen=True)
class CandidateResult:
    player_id: str
    votes: int
    percentage: float
    name: str = ""
    party: Optional[str] = None


@dataclass
class ElectionResult:
    election_id: str
    turn: int
    office_type: OfficeType
    winner_id: str
    total_eligible_voters: int
    total_votes_cast: int
    turnout_percentage: float
    candidates: List[CandidateResult] = field(default_factory=list)
    demographic_breakdown: List[DemographicVote] = field(default_factory=list)
    province: Optional[str] = None
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def votes_for(self, player_id: str) -> int:
        for c in self.candidates:
            if c.player_id == player_id:
                return c.votes
        return 0


@dataclass
class Election:
    election_id: str
    office_type: OfficeType
    candidates: List[Candidate] = field(default_factory=list)
    province: Optional[str] = None
    city: Optional[str] = None
    voting_open: bool = False
    voting_closes_turn: Optional[int] = None
    status: ElectionStatus = ElectionStatus.ANNOUNCED
    results: Optional[ElectionResult] = None

    def candidate_ids(self) -> List[str]:
        return [c.player_id for c in self.candidates]
