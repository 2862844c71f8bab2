"""Endorsements

An endorser passes part of their standing to the endorsed player, slice by
slice. The transfer rate is an integer drawn uniformly from the band chosen
by the endorser's approval with that slice:

    approval  0-39  -> -7 .. +1
    approval 40-59  -> -5 .. +5
    approval 60-100 -> -1 .. +7

Only slices the endorser already holds a score with take part.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Tuple

from zealandia.core.errors import InvalidActionError, InvalidRangeError
from zealandia.core.reputation.models import (
    APPROVAL_MAX,
    APPROVAL_MIN,
    Calculation,
    PendingDelta,
    ReputationChangeSource,
    ReputationScore,
)

ENDORSEMENT_ACTION_POINT_COST = 1
ENDORSEMENT_MONEY_COST = 0

# (approval lower bound, (rate min, rate max)); first match from the top
TRANSFER_BANDS: List[Tuple[float, Tuple[int, int]]] = [
    (60.0, (-1, 7)),
    (40.0, (-5, 5)),
    (0.0, (-7, 1)),
]


@dataclass(frozen=True)
class EndorsementTransfer:
    slice_id: str
    endorser_approval: float
    transfer_rate: int  # -7 ~ +7


@dataclass
class Endorsement:
    endorsement_id: str
    endorser_id: str
    endorsed_id: str
    turn: int
    transfers: List[EndorsementTransfer] = field(default_factory=list)
    action_point_cost: int = ENDORSEMENT_ACTION_POINT_COST
    money_cost: int = ENDORSEMENT_MONEY_COST
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def average_transfer(self) -> float:
        if not self.transfers:
            return 0.0
        return sum(t.transfer_rate for t in self.transfers) / len(self.transfers)


def transfer_band(approval: float) -> Tuple[int, int]:
    if not APPROVAL_MIN <= approval <= APPROVAL_MAX:
        raise InvalidRangeError(f"approval={approval} outside [0, 100]")
    for lower, band in TRANSFER_BANDS:
        if approval >= lower:
            return band
    return TRANSFER_BANDS[-1][1]


def sample_transfer_rate(approval: float, rng: random.Random) -> int:
    low, high = transfer_band(approval)
    return rng.randint(low, high)


def build_transfers(
    endorser_scores: List[ReputationScore], rng: random.Random
) -> List[EndorsementTransfer]:
    return [
        EndorsementTransfer(
            slice_id=score.slice_id,
            endorser_approval=score.approval,
            transfer_rate=sample_transfer_rate(score.approval, rng),
        )
        for score in sorted(endorser_scores, key=lambda s: s.slice_id)
    ]


def validate_endorsement(endorser_id: str, endorsed_id: str) -> None:
    if endorser_id == endorsed_id:
        raise InvalidActionError(f"{endorser_id} cannot endorse themselves")


def translate_endorsement(endorsement: Endorsement) -> List[PendingDelta]:
    """Zero-rate transfers are recorded on the endorsement but not applied."""
    return [
        PendingDelta(
            player_id=endorsement.endorsed_id,
            slice_id=t.slice_id,
            delta=float(t.transfer_rate),
            source=ReputationChangeSource.ENDORSEMENT,
            source_id=endorsement.endorsement_id,
            turn=endorsement.turn,
            calculation=Calculation(
                details={
                    "endorser_id": endorsement.endorser_id,
                    "endorser_approval": t.endorser_approval,
                    "transfer_rate": t.transfer_rate,
                    "band": list(transfer_band(t.endorser_approval)),
                }
            ),
        )
        for t in endorsement.transfers
        if t.transfer_rate != 0
    ]
