"""Reputation ledger - durable per-(player, slice) approval with history

Read-modify-write of a score is serialized by the ledger lock; the audit
record of every application goes to the EventLog. A batch is validated as a
whole before the first write, so a rejected batch leaves no trace.
"""

import copy
import dataclasses
import math
import threading
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set, Tuple

from zealandia.core.errors import DuplicateEventError, InvalidRangeError
from zealandia.core.logging import get_logger
from zealandia.core.reputation.calculations import clamp_approval, generate_reason_text
from zealandia.core.reputation.models import (
    APPROVAL_MAX,
    APPROVAL_MIN,
    DEFAULT_APPROVAL,
    ApprovalDataPoint,
    Calculation,
    PendingDelta,
    ReputationChange,
    ReputationChangeSource,
    ReputationScore,
)

logger = get_logger(__name__)

ScoreKey = Tuple[str, str]


class EventLog:
    """Append-only audit log of ReputationChange records."""

    def __init__(self) -> None:
        self._records: List[ReputationChange] = []
        self._lock = threading.Lock()

    def append(self, change: ReputationChange) -> None:
        with self._lock:
            self._records.append(change)

    def since(self, cursor: int) -> List[ReputationChange]:
        """Records at index >= cursor (persistence picks up from its cursor)."""
        with self._lock:
            return list(self._records[cursor:])

    def for_player(self, player_id: str) -> List[ReputationChange]:
        with self._lock:
            return [r for r in self._records if r.player_id == player_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class ReputationLedger:
    """Approval store keyed by (player_id, slice_id)."""

    def __init__(self, event_log: Optional[EventLog] = None) -> None:
        self._scores: Dict[ScoreKey, ReputationScore] = {}
        self._applied: Set[Tuple[str, str, str, str]] = set()
        self._event_log = event_log if event_log is not None else EventLog()
        self._lock = threading.RLock()

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    # ── lookup ───────────────────────────────────────────────

    def get(self, player_id: str, slice_id: str) -> Optional[ReputationScore]:
        with self._lock:
            return self._scores.get((player_id, slice_id))

    def get_or_create(self, player_id: str, slice_id: str) -> ReputationScore:
        """Lazy creation at the default approval."""
        with self._lock:
            key = (player_id, slice_id)
            score = self._scores.get(key)
            if score is None:
                score = ReputationScore(player_id=player_id, slice_id=slice_id)
                self._scores[key] = score
            return score

    def approval(self, player_id: str, slice_id: str) -> float:
        """Current approval, default 50 when no score exists. Does not create."""
        score = self.get(player_id, slice_id)
        return score.approval if score is not None else DEFAULT_APPROVAL

    def scores_for_player(self, player_id: str) -> List[ReputationScore]:
        with self._lock:
            return [s for (p, _), s in self._scores.items() if p == player_id]

    def all_scores(self) -> List[ReputationScore]:
        with self._lock:
            return list(self._scores.values())

    def snapshot(
        self,
        player_ids: Optional[Iterable[str]] = None,
        slice_ids: Optional[Iterable[str]] = None,
    ) -> Dict[ScoreKey, float]:
        """Consistent copy of approvals, taken under the ledger lock."""
        players = set(player_ids) if player_ids is not None else None
        slices = set(slice_ids) if slice_ids is not None else None
        with self._lock:
            return {
                key: score.approval
                for key, score in self._scores.items()
                if (players is None or key[0] in players)
                and (slices is None or key[1] in slices)
            }

    def has_applied(
        self,
        source: ReputationChangeSource,
        source_id: str,
        player_id: str,
        slice_id: str,
    ) -> bool:
        with self._lock:
            return (source.value, source_id, player_id, slice_id) in self._applied

    # ── mutation ─────────────────────────────────────────────

    def apply_delta(
        self,
        player_id: str,
        slice_id: str,
        delta: float,
        source: ReputationChangeSource,
        source_id: str,
        calculation: Optional[Calculation] = None,
        turn: int = 0,
    ) -> ReputationScore:
        """Single-delta convenience over apply_batch."""
        self.apply_batch(
            [
                PendingDelta(
                    player_id=player_id,
                    slice_id=slice_id,
                    delta=delta,
                    source=source,
                    source_id=source_id,
                    turn=turn,
                    calculation=calculation or Calculation(),
                )
            ]
        )
        return self.get_or_create(player_id, slice_id)

    def apply_batch(self, pending: List[PendingDelta]) -> List[ReputationChange]:
        """Validate every delta, then apply all of them. All-or-nothing."""
        with self._lock:
            self._validate_batch(pending)
            changes = [self._apply_one(p) for p in pending]

        if changes:
            logger.debug(f"Ledger batch applied: {len(changes)} deltas")
        return changes

    def restore(self, score: ReputationScore) -> None:
        """Load a persisted score as-is (no history entry, no audit record)."""
        if not APPROVAL_MIN <= score.approval <= APPROVAL_MAX:
            raise InvalidRangeError(
                f"approval={score.approval} outside [0, 100] "
                f"for {score.player_id}/{score.slice_id}"
            )
        with self._lock:
            self._scores[score.key] = copy.deepcopy(score)

    def mark_applied(self, keys: Iterable[Tuple[str, str, str, str]]) -> None:
        """Re-seed the duplicate registry from persisted audit records."""
        with self._lock:
            self._applied.update(keys)

    # ── internals ────────────────────────────────────────────

    def _validate_batch(self, pending: List[PendingDelta]) -> None:
        seen: Set[Tuple[str, str, str, str]] = set()
        for p in pending:
            if not math.isfinite(p.delta):
                raise InvalidRangeError(
                    f"delta={p.delta} is not finite ({p.source.value}:{p.source_id})"
                )
            if p.turn < 0:
                raise InvalidRangeError(f"turn={p.turn} is negative")
            key = p.dedup_key
            if key in self._applied or key in seen:
                raise DuplicateEventError(
                    f"{p.source.value}:{p.source_id} already applied to "
                    f"{p.player_id}/{p.slice_id}"
                )
            seen.add(key)

    def _apply_one(self, p: PendingDelta) -> ReputationChange:
        score = self.get_or_create(p.player_id, p.slice_id)
        old = score.approval
        score.approval = clamp_approval(old + p.delta)
        applied = score.approval - old
        score.last_updated = datetime.now(timezone.utc)
        score.turn_updated = p.turn
        score.approval_history.append(
            ApprovalDataPoint(
                turn=p.turn,
                approval=score.approval,
                change=p.delta,
                reason=generate_reason_text(p.source, p.delta),
            )
        )
        self._applied.add(p.dedup_key)

        change = ReputationChange(
            player_id=p.player_id,
            slice_id=p.slice_id,
            delta=applied,
            requested_delta=p.delta,
            source=p.source,
            source_id=p.source_id,
            calculation=dataclasses.replace(p.calculation, total_delta=applied),
            turn=p.turn,
        )
        self._event_log.append(change)
        logger.debug(
            f"Delta applied: {p.player_id}/{p.slice_id} {old:.2f} -> "
            f"{score.approval:.2f} ({p.source.value}:{p.source_id})"
        )
        return change
