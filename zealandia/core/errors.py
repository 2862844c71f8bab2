"""Engine error kinds.

Every translator and aggregator validates its whole input before the first
ledger write, so any of these raised from an engine call means nothing was
mutated.
"""


class ReputationError(Exception):
    """Base class for all engine errors."""


class NotFoundError(ReputationError):
    """Unknown player / slice / election / campaign id."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class InvalidRangeError(ReputationError):
    """A position, salience, approval or rate outside its bounded range."""


class InsufficientBalanceError(ReputationError):
    """Action points / currency check failed. Raised by callers, never by the engine."""


class DuplicateEventError(ReputationError):
    """Same (source, source_id) applied twice to the same (player, slice)."""


class InvalidActionError(ReputationError):
    """A well-formed request the game rules reject (e.g. self-endorsement)."""


class InvariantViolationError(ReputationError):
    """Programming error, such as tallying an election whose voting is still open."""
