"""Election status transitions

announced -> campaigning -> voting -> completed
(announced may go straight to voting for snap elections)
"""

from typing import Dict, FrozenSet

from zealandia.core.elections.models import Election, ElectionStatus
from zealandia.core.errors import InvalidActionError

TRANSITION_TABLE: Dict[ElectionStatus, FrozenSet[ElectionStatus]] = {
    ElectionStatus.ANNOUNCED: frozenset(
        {ElectionStatus.CAMPAIGNING, ElectionStatus.VOTING}
    ),
    ElectionStatus.CAMPAIGNING: frozenset({ElectionStatus.VOTING}),
    ElectionStatus.VOTING: frozenset({ElectionStatus.COMPLETED}),
    ElectionStatus.COMPLETED: frozenset(),
}


def can_transition(current: ElectionStatus, target: ElectionStatus) -> bool:
    return target in TRANSITION_TABLE.get(current, frozenset())


def transition(election: Election, target: ElectionStatus) -> None:
    if not can_transition(election.status, target):
        raise InvalidActionError(
            f"election {election.election_id}: cannot go from "
            f"{election.status.value} to {target.value}"
        )
    election.status = target


def open_voting(election: Election) -> None:
    transition(election, ElectionStatus.VOTING)
    election.voting_open = True


def close_voting(election: Election, turn: int) -> None:
    if election.status != ElectionStatus.VOTING or not election.voting_open:
        raise InvalidActionError(
            f"election {election.election_id}: voting is not open"
        )
    election.voting_open = False
    election.voting_closes_turn = turn
