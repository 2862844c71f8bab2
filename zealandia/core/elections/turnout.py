"""Turnout & election aggregation

Per slice:
    eligible       = population if can_vote else 0
    final_turnout  = clamp(base_turnout * (1 + (avg_candidate_approval - 50) / 100), 0, 1)
    effective      = round_half_up(eligible * final_turnout)
Votes are split across candidates in proportion to their alignment with the
slice, after shifting the scores so the least aligned candidate weighs 0.
Equal scores split evenly. Largest-remainder rounding keeps the per-slice
total exact.

Winner: plurality of summed votes; ties go to the candidate with more funds
raised, then to ballot order.
"""

import math
from typing import Callable, Dict, Iterable, List, Mapping, Tuple, Union

from zealandia.core.demographics.catalog import in_city, in_province
from zealandia.core.demographics.models import DemographicSlice, validate_slice
from zealandia.core.elections.models import (
    CandidateResult,
    DemographicVote,
    Election,
    ElectionResult,
    VoteShare,
)
from zealandia.core.errors import (
    InvalidActionError,
    InvalidRangeError,
    InvariantViolationError,
)
from zealandia.core.logging import get_logger
from zealandia.core.politics.alignment import CUBE_WEIGHT, alignment_score
from zealandia.core.reputation.models import DEFAULT_APPROVAL

logger = get_logger(__name__)

BaseTurnout = Union[float, Callable[[DemographicSlice], float]]


def final_turnout(base_turnout: float, average_approval: float) -> float:
    deviation = average_approval - DEFAULT_APPROVAL
    return max(0.0, min(1.0, base_turnout * (1.0 + deviation / 100.0)))


def round_half_up(value: float) -> int:
    """2.5 -> 3, unlike the built-in round."""
    return math.floor(value + 0.5)


def distribute_votes(total: int, weights: List[float]) -> List[int]:
    """Split `total` proportionally to `weights` (largest remainder).

    All-zero weights split evenly.
    """
    if not weights:
        return []
    if sum(weights) <= 0:
        weights = [1.0] * len(weights)
    weight_sum = sum(weights)

    exact = [total * w / weight_sum for w in weights]
    counts = [math.floor(x) for x in exact]
    leftover = total - sum(counts)
    # ties in the remainder go to ballot order
    order = sorted(range(len(weights)), key=lambda i: (-(exact[i] - counts[i]), i))
    for i in order[:leftover]:
        counts[i] += 1
    return counts


def _resolve_base(base_turnout: BaseTurnout, slice_: DemographicSlice) -> float:
    value = base_turnout(slice_) if callable(base_turnout) else base_turnout
    if not 0.0 <= value <= 1.0:
        raise InvalidRangeError(
            f"base turnout {value} for {slice_.slice_id} outside [0, 1]"
        )
    return float(value)


def compute_demographic_vote(
    slice_: DemographicSlice,
    election: Election,
    approvals: Mapping[str, float],
    base_turnout: float,
    cube_weight: float = CUBE_WEIGHT,
) -> DemographicVote:
    """One slice's turnout and vote split.

    `approvals` maps candidate player id -> approval with this slice; missing
    candidates count as the default approval.
    """
    if not election.candidates:
        raise InvalidActionError(f"election {election.election_id} has no candidates")
    validate_slice(slice_)
    if not 0.0 <= base_turnout <= 1.0:
        raise InvalidRangeError(f"base turnout {base_turnout} outside [0, 1]")

    eligible = slice_.eligible_voters
    candidate_approvals = [
        approvals.get(c.player_id, DEFAULT_APPROVAL) for c in election.candidates
    ]
    average = sum(candidate_approvals) / len(candidate_approvals)
    turnout = final_turnout(base_turnout, average)
    effective = round_half_up(eligible * turnout)

    scores = [
        alignment_score(c.position, slice_.default_position, cube_weight)
        for c in election.candidates
    ]
    floor = min(scores)
    votes = distribute_votes(effective, [s - floor for s in scores])

    return DemographicVote(
        slice_id=slice_.slice_id,
        eligible_voters=eligible,
        base_turnout=base_turnout,
        reputation_modifier=(average - DEFAULT_APPROVAL) / 100.0,
        final_turnout=turnout,
        effective_votes=effective,
        vote_distribution=[
            VoteShare(
                player_id=c.player_id,
                votes=v,
                percentage=(v / effective * 100.0) if effective else 0.0,
            )
            for c, v in zip(election.candidates, votes)
        ],
    )


def election_slices(
    election: Election, slices: Iterable[DemographicSlice]
) -> List[DemographicSlice]:
    """Slices inside the election's scope (city > province > everything)."""
    if election.city:
        return in_city(slices, election.city)
    if election.province:
        return in_province(slices, election.province)
    return list(slices)


def compute_election_result(
    election: Election,
    slices: Iterable[DemographicSlice],
    snapshot: Mapping[Tuple[str, str], float],
    base_turnout: BaseTurnout,
    turn: int,
    cube_weight: float = CUBE_WEIGHT,
) -> ElectionResult:
    """Aggregate every in-scope slice. `snapshot` is (player, slice) -> approval
    taken at voting close."""
    if election.voting_open:
        logger.error(
            f"Election {election.election_id} aggregated while voting is open"
        )
        raise InvariantViolationError(
            f"election {election.election_id}: voting is still open"
        )
    if not election.candidates:
        raise InvalidActionError(f"election {election.election_id} has no candidates")

    scoped = election_slices(election, slices)
    bases = [_resolve_base(base_turnout, s) for s in scoped]

    breakdown: List[DemographicVote] = []
    totals: Dict[str, int] = {c.player_id: 0 for c in election.candidates}
    for slice_, base in zip(scoped, bases):
        approvals = {
            c.player_id: snapshot.get((c.player_id, slice_.slice_id), DEFAULT_APPROVAL)
            for c in election.candidates
        }
        vote = compute_demographic_vote(slice_, election, approvals, base, cube_weight)
        breakdown.append(vote)
        for share in vote.vote_distribution:
            totals[share.player_id] += share.votes

    total_eligible = sum(v.eligible_voters for v in breakdown)
    total_cast = sum(totals.values())

    ranked = sorted(
        enumerate(election.candidates),
        key=lambda ic: (-totals[ic[1].player_id], -ic[1].funds_raised, ic[0]),
    )
    winner = ranked[0][1]

    result = ElectionResult(
        election_id=election.election_id,
        turn=turn,
        office_type=election.office_type,
        winner_id=winner.player_id,
        total_eligible_voters=total_eligible,
        total_votes_cast=total_cast,
        turnout_percentage=(
            total_cast / total_eligible * 100.0 if total_eligible else 0.0
        ),
        candidates=[
            CandidateResult(
                player_id=c.player_id,
                votes=totals[c.player_id],
                percentage=(totals[c.player_id] / total_cast * 100.0)
                if total_cast
                else 0.0,
                name=c.name,
                party=c.party,
            )
            for c in election.candidates
        ],
        demographic_breakdown=breakdown,
        province=election.province,
    )
    logger.info(
        f"Election tallied: {election.election_id} winner={winner.player_id} "
        f"votes={total_cast}/{total_eligible} slices={len(breakdown)}"
    )
    return result
