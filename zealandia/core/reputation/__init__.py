"""Reputation ledger - public API"""

from zealandia.core.reputation.models import (
    DEFAULT_APPROVAL,
    ApprovalDataPoint,
    Calculation,
    PendingDelta,
    ReputationChange,
    ReputationChangeSource,
    ReputationScore,
)
from zealandia.core.reputation.calculations import (
    clamp_approval,
    generate_reason_text,
    natural_drift,
)
from zealandia.core.reputation.effects import (
    DecayingEffect,
    DecayRegistry,
    EffectKind,
    decay_step,
)
from zealandia.core.reputation.ledger import EventLog, ReputationLedger

__all__ = [
    "DEFAULT_APPROVAL",
    "ApprovalDataPoint",
    "Calculation",
    "PendingDelta",
    "ReputationChange",
    "ReputationChangeSource",
    "ReputationScore",
    "clamp_approval",
    "generate_reason_text",
    "natural_drift",
    "DecayingEffect",
    "DecayRegistry",
    "EffectKind",
    "decay_step",
    "EventLog",
    "ReputationLedger",
]
