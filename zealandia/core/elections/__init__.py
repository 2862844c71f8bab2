"""Turnout & election aggregator - public API"""

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
from zealandia.core.elections.lifecycle import (
    TRANSITION_TABLE,
    can_transition,
    close_voting,
    open_voting,
    transition,
)
from zealandia.core.elections.turnout import (
    BaseTurnout,
    compute_demographic_vote,
    compute_election_result,
    distribute_votes,
    election_slices,
    final_turnout,
)

__all__ = [
    "Candidate",
    "CandidateResult",
    "DemographicVote",
    "Election",
    "ElectionResult",
    "ElectionStatus",
    "OfficeType",
    "VoteShare",
    "TRANSITION_TABLE",
    "can_transition",
    "close_voting",
    "open_voting",
    "transition",
    "BaseTurnout",
    "compute_demographic_vote",
    "compute_election_result",
    "distribute_votes",
    "election_slices",
    "final_turnout",
]
