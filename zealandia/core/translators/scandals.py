"""Scandal -> reputation deltas, and turn decay of lingering effects"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from zealandia.core.demographics.catalog import SliceCatalog
from zealandia.core.errors import InvalidRangeError
from zealandia.core.reputation.calculations import natural_drift
from zealandia.core.reputation.effects import DecayingEffect, decay_step
from zealandia.core.reputation.models import (
    Calculation,
    PendingDelta,
    ReputationChangeSource,
    ReputationScore,
)

SCANDAL_DELTA_MIN = -100.0


@dataclass
class Scandal:
    scandal_id: str
    player_id: str
    reported_turn: int
    impacts: Dict[str, float] = field(default_factory=dict)  # slice id -> delta <= 0
    description: str = ""


def validate_scandal(scandal: Scandal, catalog: SliceCatalog) -> None:
    catalog.require(scandal.impacts)
    for slice_id, delta in scandal.impacts.items():
        if not SCANDAL_DELTA_MIN <= delta <= 0:
            raise InvalidRangeError(
                f"scandal {scandal.scandal_id}: delta {delta} for {slice_id} "
                f"outside [-100, 0]"
            )


def translate_scandal(
    scandal: Scandal, catalog: SliceCatalog, turn: int
) -> List[PendingDelta]:
    validate_scandal(scandal, catalog)
    return [
        PendingDelta(
            player_id=scandal.player_id,
            slice_id=slice_id,
            delta=delta,
            source=ReputationChangeSource.SCANDAL,
            source_id=scandal.scandal_id,
            turn=turn,
            calculation=Calculation(details={"description": scandal.description}),
        )
        for slice_id, delta in scandal.impacts.items()
        if delta != 0
    ]


def translate_decay(
    effects: List[DecayingEffect], turn: int, threshold: float
) -> List[Tuple[DecayingEffect, PendingDelta, bool]]:
    """One decay step for each due effect.

    Returns (effect, reversing delta, expired) triples; the caller updates
    residuals only after the batch is applied.
    """
    steps = []
    for effect in effects:
        reduction, expired = decay_step(effect.residual, effect.rate, threshold)
        steps.append(
            (
                effect,
                PendingDelta(
                    player_id=effect.player_id,
                    slice_id=effect.slice_id,
                    delta=-reduction,
                    source=ReputationChangeSource.TURN_DECAY,
                    source_id=f"{effect.kind.value}:{effect.source_id}@{turn}",
                    turn=turn,
                    calculation=Calculation(
                        details={
                            "effect": effect.kind.value,
                            "residual_before": effect.residual,
                            "rate": effect.rate,
                            "expired": expired,
                        }
                    ),
                ),
                expired,
            )
        )
    return steps


def translate_natural_drift(
    scores: List[ReputationScore], turn: int, rate: float
) -> List[PendingDelta]:
    """Pull every score toward the default approval. Negligible drifts skipped."""
    pending: List[PendingDelta] = []
    if rate <= 0:
        return pending
    for score in scores:
        delta = natural_drift(score.approval, rate)
        if delta is None:
            continue
        pending.append(
            PendingDelta(
                player_id=score.player_id,
                slice_id=score.slice_id,
                delta=delta,
                source=ReputationChangeSource.TURN_DECAY,
                source_id=f"drift@{turn}",
                turn=turn,
                calculation=Calculation(
                    details={"drift_rate": rate, "approval_before": score.approval}
                ),
            )
        )
    return pending
