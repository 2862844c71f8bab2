"""Reputation domain model

One ReputationScore per (player, slice) pair, plus the immutable audit record
emitted for every applied delta.
DB-independent plain data classes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from zealandia.core.politics.alignment import CubeBreakdown, IssueBreakdown

DEFAULT_APPROVAL = 50.0
APPROVAL_MIN = 0.0
APPROVAL_MAX = 100.0


class ReputationChangeSource(str, Enum):
    BILL_PROPOSAL = "bill-proposal"
    BILL_VOTE_YES = "bill-vote-yes"
    BILL_VOTE_NO = "bill-vote-no"
    BILL_VOTE_ABSTAIN = "bill-vote-abstain"
    BILL_OUTCOME = "bill-outcome"
    NEWS_ARTICLE = "news-article"
    CAMPAIGN = "campaign"
    ENDORSEMENT = "endorsement"
    SCANDAL = "scandal"
    TURN_DECAY = "turn-decay"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ApprovalDataPoint:
    turn: int
    approval: float
    change: float
    reason: str = ""


@dataclass
class ReputationScore:
    player_id: str
    slice_id: str
    approval: float = DEFAULT_APPROVAL  # 0 ~ 100
    approval_history: List[ApprovalDataPoint] = field(default_factory=list)
    last_updated: datetime = field(default_factory=_utcnow)
    turn_updated: int = 0

    @property
    def key(self) -> Tuple[str, str]:
        return (self.player_id, self.slice_id)


@dataclass
class Calculation:
    """How a delta was derived. `total_delta` is always the applied value."""

    issue_matches: List[IssueBreakdown] = field(default_factory=list)
    cube_match: Optional[CubeBreakdown] = None
    total_delta: float = 0.0
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issue_matches": [
                {
                    "issue": m.issue,
                    "player_position": m.player_position,
                    "group_position": m.group_position,
                    "salience": m.salience,
                    "weight": m.weight,
                    "contribution": m.contribution,
                }
                for m in self.issue_matches
            ],
            "cube_match": (
                {
                    "distance": self.cube_match.distance,
                    "weight": self.cube_match.weight,
                    "contribution": self.cube_match.contribution,
                }
                if self.cube_match
                else None
            ),
            "total_delta": self.total_delta,
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Calculation":
        data = data or {}
        cube = data.get("cube_match")
        return cls(
            issue_matches=[IssueBreakdown(**m) for m in data.get("issue_matches", [])],
            cube_match=CubeBreakdown(**cube) if cube else None,
            total_delta=float(data.get("total_delta", 0.0)),
            details=dict(data.get("details", {})),
        )


@dataclass(frozen=True)
class ReputationChange:
    """Audit record of one delta application."""

    player_id: str
    slice_id: str
    delta: float  # applied (post-clamp)
    requested_delta: float
    source: ReputationChangeSource
    source_id: str
    calculation: Calculation
    turn: int
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class PendingDelta:
    """A delta request produced by a translator, not yet applied."""

    player_id: str
    slice_id: str
    delta: float
    source: ReputationChangeSource
    source_id: str
    turn: int
    calculation: Calculation = field(default_factory=Calculation)

    @property
    def dedup_key(self) -> Tuple[str, str, str, str]:
        return (self.source.value, self.source_id, self.player_id, self.slice_id)
