"""Zealandia Reputation & Electoral Simulation Engine"""
__version__ = "0.1.0"

from zealandia.core.demographics import DemographicSlice, SliceCatalog
from zealandia.core.politics import PoliticalPosition, alignment_breakdown, alignment_score
from zealandia.core.reputation import ReputationLedger, ReputationScore, EventLog
from zealandia.core.elections import Election, ElectionResult, compute_election_result
from zealandia.core.engine import ReputationConfig, ReputationEngine, TurnReputationUpdate

__all__ = [
    "DemographicSlice",
    "SliceCatalog",
    "PoliticalPosition",
    "alignment_breakdown",
    "alignment_score",
    "ReputationLedger",
    "ReputationScore",
    "EventLog",
    "Election",
    "ElectionResult",
    "compute_election_result",
    "ReputationConfig",
    "ReputationEngine",
    "TurnReputationUpdate",
]
