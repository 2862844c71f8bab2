"""Bill proposal / vote / outcome -> reputation deltas

delta = alignment(policy, slice.default_position) * role weight * magnitude

A bill without a political position only touches the slices named in its
author-supplied impact map, whose values stand in for the alignment score.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from zealandia.core.demographics.models import DemographicSlice
from zealandia.core.errors import InvalidActionError, InvalidRangeError
from zealandia.core.politics.alignment import CUBE_WEIGHT, alignment_breakdown
from zealandia.core.politics.position import PoliticalPosition, validate_position
from zealandia.core.reputation.models import (
    Calculation,
    PendingDelta,
    ReputationChangeSource,
)


class BillRole(str, Enum):
    PROPOSER = "proposer"
    YES_VOTER = "yes-voter"
    NO_VOTER = "no-voter"
    ABSTAIN_VOTER = "abstain-voter"


ROLE_WEIGHTS: Dict[BillRole, float] = {
    BillRole.PROPOSER: 1.0,
    BillRole.YES_VOTER: 0.4,
    BillRole.NO_VOTER: -0.2,
    BillRole.ABSTAIN_VOTER: 0.0,
}

ROLE_SOURCES: Dict[BillRole, ReputationChangeSource] = {
    BillRole.PROPOSER: ReputationChangeSource.BILL_PROPOSAL,
    BillRole.YES_VOTER: ReputationChangeSource.BILL_VOTE_YES,
    BillRole.NO_VOTER: ReputationChangeSource.BILL_VOTE_NO,
    BillRole.ABSTAIN_VOTER: ReputationChangeSource.BILL_VOTE_ABSTAIN,
}

# enacted bills credit their sponsors (proposer + yes voters) once more
OUTCOME_WEIGHT = 0.5


@dataclass
class Bill:
    """A policy as supplied by the policy/bill subsystem."""

    bill_id: str
    proposer_id: Optional[str] = None
    position: Optional[PoliticalPosition] = None
    yes_votes: List[str] = field(default_factory=list)
    no_votes: List[str] = field(default_factory=list)
    abstain_votes: List[str] = field(default_factory=list)
    impact_map: Dict[str, float] = field(default_factory=dict)  # slice id -> [-1, 1]
    passed: Optional[bool] = None

    def roster(self) -> List[tuple]:
        """(player_id, role) pairs in application order."""
        pairs = []
        if self.proposer_id:
            pairs.append((self.proposer_id, BillRole.PROPOSER))
        pairs.extend((p, BillRole.YES_VOTER) for p in self.yes_votes)
        pairs.extend((p, BillRole.NO_VOTER) for p in self.no_votes)
        pairs.extend((p, BillRole.ABSTAIN_VOTER) for p in self.abstain_votes)
        return pairs

    def player_ids(self) -> List[str]:
        return [p for p, _ in self.roster()]

    def affected_slice_ids(self, all_slice_ids: Iterable[str]) -> List[str]:
        if self.position is not None:
            return list(all_slice_ids)
        return list(self.impact_map)


def validate_bill(bill: Bill) -> None:
    if bill.position is not None:
        validate_position(bill.position)
    for slice_id, impact in bill.impact_map.items():
        if not -1.0 <= impact <= 1.0:
            raise InvalidRangeError(
                f"bill {bill.bill_id}: impact {impact} for {slice_id} outside [-1, 1]"
            )

    voted: Dict[str, str] = {}
    for ballot, players in (
        ("yes", bill.yes_votes),
        ("no", bill.no_votes),
        ("abstain", bill.abstain_votes),
    ):
        for player_id in players:
            if player_id in voted:
                raise InvalidActionError(
                    f"bill {bill.bill_id}: {player_id} voted both "
                    f"{voted[player_id]} and {ballot}"
                )
            voted[player_id] = ballot


def _slice_alignment(
    bill: Bill, slice_: DemographicSlice, cube_weight: float
) -> Calculation:
    if bill.position is not None:
        result = alignment_breakdown(bill.position, slice_.default_position, cube_weight)
        return Calculation(
            issue_matches=result.issue_matches,
            cube_match=result.cube_match,
            details={"alignment": result.score},
        )
    return Calculation(
        details={"alignment": bill.impact_map[slice_.slice_id], "impact_map": True}
    )


def _deltas_for(
    bill: Bill,
    players: List[tuple],
    slices: List[DemographicSlice],
    turn: int,
    magnitude: float,
    cube_weight: float,
    outcome: bool,
) -> List[PendingDelta]:
    pending: List[PendingDelta] = []
    for slice_ in slices:
        base = _slice_alignment(bill, slice_, cube_weight)
        alignment = base.details["alignment"]
        for player_id, role in players:
            weight = OUTCOME_WEIGHT if outcome else ROLE_WEIGHTS[role]
            if weight == 0:
                continue
            source = (
                ReputationChangeSource.BILL_OUTCOME if outcome else ROLE_SOURCES[role]
            )
            pending.append(
                PendingDelta(
                    player_id=player_id,
                    slice_id=slice_.slice_id,
                    delta=alignment * weight * magnitude,
                    source=source,
                    source_id=bill.bill_id,
                    turn=turn,
                    calculation=Calculation(
                        issue_matches=base.issue_matches,
                        cube_match=base.cube_match,
                        details={
                            **base.details,
                            "role": role.value,
                            "role_weight": weight,
                            "magnitude": magnitude,
                        },
                    ),
                )
            )
    return pending


def translate_bill_votes(
    bill: Bill,
    slices: List[DemographicSlice],
    turn: int,
    magnitude: float,
    cube_weight: float = CUBE_WEIGHT,
) -> List[PendingDelta]:
    """Proposer + yes/no/abstain deltas for every affected slice."""
    validate_bill(bill)
    return _deltas_for(
        bill, bill.roster(), slices, turn, magnitude, cube_weight, outcome=False
    )


def translate_bill_outcome(
    bill: Bill,
    slices: List[DemographicSlice],
    turn: int,
    magnitude: float,
    cube_weight: float = CUBE_WEIGHT,
) -> List[PendingDelta]:
    """Enactment credit for sponsors. A failed bill has no outcome delta."""
    validate_bill(bill)
    if bill.passed is None:
        raise InvalidActionError(f"bill {bill.bill_id} has no outcome yet")
    if not bill.passed:
        return []
    sponsors = [
        (p, r)
        for p, r in bill.roster()
        if r in (BillRole.PROPOSER, BillRole.YES_VOTER)
    ]
    # proposer who also voted yes is credited once
    unique: List[tuple] = []
    seen = set()
    for player_id, role in sponsors:
        if player_id not in seen:
            seen.add(player_id)
            unique.append((player_id, role))
    return _deltas_for(bill, unique, slices, turn, magnitude, cube_weight, outcome=True)


def predict_role_delta(
    position: PoliticalPosition,
    slice_: DemographicSlice,
    role: BillRole,
    magnitude: float,
    cube_weight: float = CUBE_WEIGHT,
) -> float:
    """Delta a player in `role` would receive from `slice_` (no mutation)."""
    score = alignment_breakdown(position, slice_.default_position, cube_weight).score
    return score * ROLE_WEIGHTS[role] * magnitude
