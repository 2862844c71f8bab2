"""Approval arithmetic

All pure functions, no external dependencies.
"""

from typing import Optional

from zealandia.core.reputation.models import (
    APPROVAL_MAX,
    APPROVAL_MIN,
    DEFAULT_APPROVAL,
    ReputationChangeSource,
)

# drifts smaller than this are not worth a ledger entry
MIN_DRIFT = 0.1


def clamp_approval(value: float) -> float:
    """0 ~ 100 clamp."""
    return max(APPROVAL_MIN, min(APPROVAL_MAX, value))


def natural_drift(approval: float, rate: float) -> Optional[float]:
    """Pull toward the default approval by `rate` of the distance.

    Returns the signed delta, or None when it is negligible.
    """
    delta = -(approval - DEFAULT_APPROVAL) * rate
    if abs(delta) < MIN_DRIFT:
        return None
    return delta


def generate_reason_text(source: ReputationChangeSource, delta: float) -> str:
    """Human-readable history label."""
    direction = "increased" if delta > 0 else "decreased"
    amount = f"{abs(delta):.1f}"

    if source == ReputationChangeSource.BILL_PROPOSAL:
        return f"Proposed bill ({direction} by {amount}%)"
    if source == ReputationChangeSource.BILL_VOTE_YES:
        return f"Voted YES on bill ({direction} by {amount}%)"
    if source == ReputationChangeSource.BILL_VOTE_NO:
        return f"Voted NO on bill ({direction} by {amount}%)"
    if source == ReputationChangeSource.BILL_VOTE_ABSTAIN:
        return "Abstained from vote"
    if source == ReputationChangeSource.BILL_OUTCOME:
        return f"Bill enacted ({direction} by {amount}%)"
    if source == ReputationChangeSource.CAMPAIGN:
        return f"Campaign effect (+{amount}%)"
    if source == ReputationChangeSource.ENDORSEMENT:
        return f"Received endorsement ({direction} by {amount}%)"
    if source == ReputationChangeSource.NEWS_ARTICLE:
        return f"News coverage ({direction} by {amount}%)"
    if source == ReputationChangeSource.SCANDAL:
        return f"Scandal (-{amount}%)"
    if source == ReputationChangeSource.TURN_DECAY:
        return f"Natural decay ({direction} by {amount}%)"
    return f"Reputation {direction} by {amount}%"
