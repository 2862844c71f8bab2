"""Reputation ledger tests"""

import math
import threading

import pytest

from zealandia.core.errors import DuplicateEventError, InvalidRangeError
from zealandia.core.reputation.ledger import ReputationLedger
from zealandia.core.reputation.models import (
    Calculation,
    PendingDelta,
    ReputationChangeSource,
    ReputationScore,
)

SRC = ReputationChangeSource


def _pending(delta, source_id="ev-1", player="p1", slice_id="s1", source=SRC.SCANDAL):
    return PendingDelta(
        player_id=player,
        slice_id=slice_id,
        delta=delta,
        source=source,
        source_id=source_id,
        turn=1,
    )


class TestLazyCreation:
    def test_get_or_create_defaults_to_fifty(self):
        ledger = ReputationLedger()
        score = ledger.get_or_create("p1", "s1")
        assert score.approval == 50.0
        assert score.approval_history == []
        assert ledger.get_or_create("p1", "s1") is score

    def test_approval_read_does_not_create(self):
        ledger = ReputationLedger()
        assert ledger.approval("p1", "s1") == 50.0
        assert ledger.get("p1", "s1") is None


class TestClamping:
    def test_clamped_to_upper_bound(self):
        ledger = ReputationLedger()
        score = ledger.apply_delta("p1", "s1", 80.0, SRC.CAMPAIGN, "c1")
        assert score.approval == 100.0

    def test_clamped_to_lower_bound(self):
        ledger = ReputationLedger()
        score = ledger.apply_delta("p1", "s1", -75.0, SRC.SCANDAL, "x1")
        assert score.approval == 0.0

    def test_sequence_stays_in_range(self):
        ledger = ReputationLedger()
        for i, delta in enumerate([30, 45, -200, 7, 99, -1, 60]):
            score = ledger.apply_delta("p1", "s1", delta, SRC.NEWS_ARTICLE, f"n{i}")
            assert 0.0 <= score.approval <= 100.0


class TestHistoryAndAudit:
    def test_history_entry_records_requested_change(self):
        ledger = ReputationLedger()
        score = ledger.apply_delta(
            "p1", "s1", 70.0, SRC.CAMPAIGN, "c1", turn=4
        )
        point = score.approval_history[-1]
        assert point.turn == 4
        assert point.approval == 100.0
        assert point.change == 70.0
        assert point.reason.startswith("Campaign effect")
        assert score.turn_updated == 4

    def test_one_audit_record_per_delta(self):
        ledger = ReputationLedger()
        ledger.apply_delta("p1", "s1", 5.0, SRC.CAMPAIGN, "c1")
        ledger.apply_delta("p1", "s2", -3.0, SRC.SCANDAL, "x1")
        assert len(ledger.event_log) == 2

    def test_audit_total_delta_is_applied_delta(self):
        """Post-clamp delta, not the pre-clamp request."""
        ledger = ReputationLedger()
        ledger.apply_delta("p1", "s1", 45.0, SRC.CAMPAIGN, "c1")
        ledger.apply_delta(
            "p1", "s1", 20.0, SRC.NEWS_ARTICLE, "n1", calculation=Calculation()
        )
        change = ledger.event_log.since(1)[0]
        assert change.delta == pytest.approx(5.0)
        assert change.requested_delta == pytest.approx(20.0)
        assert change.calculation.total_delta == pytest.approx(5.0)

    def test_for_player_filters(self):
        ledger = ReputationLedger()
        ledger.apply_delta("p1", "s1", 1.0, SRC.CAMPAIGN, "c1")
        ledger.apply_delta("p2", "s1", 1.0, SRC.CAMPAIGN, "c2")
        assert [c.source_id for c in ledger.event_log.for_player("p2")] == ["c2"]


class TestDuplicates:
    def test_same_source_same_pair_rejected(self):
        ledger = ReputationLedger()
        ledger.apply_delta("p1", "s1", 2.0, SRC.ENDORSEMENT, "e1")
        with pytest.raises(DuplicateEventError):
            ledger.apply_delta("p1", "s1", 2.0, SRC.ENDORSEMENT, "e1")
        assert ledger.approval("p1", "s1") == 52.0

    def test_same_source_other_slice_allowed(self):
        ledger = ReputationLedger()
        ledger.apply_delta("p1", "s1", 2.0, SRC.ENDORSEMENT, "e1")
        ledger.apply_delta("p1", "s2", 2.0, SRC.ENDORSEMENT, "e1")
        assert ledger.has_applied(SRC.ENDORSEMENT, "e1", "p1", "s2")


class TestBatchAtomicity:
    def test_duplicate_inside_batch_applies_nothing(self):
        ledger = ReputationLedger()
        batch = [_pending(-4.0, slice_id="s1"), _pending(-4.0, slice_id="s1")]
        with pytest.raises(DuplicateEventError):
            ledger.apply_batch(batch)
        assert ledger.get("p1", "s1") is None
        assert len(ledger.event_log) == 0

    def test_non_finite_delta_applies_nothing(self):
        ledger = ReputationLedger()
        batch = [_pending(-4.0, slice_id="s1"), _pending(math.nan, slice_id="s2")]
        with pytest.raises(InvalidRangeError):
            ledger.apply_batch(batch)
        assert ledger.all_scores() == []

    def test_batch_returns_changes_in_order(self):
        ledger = ReputationLedger()
        changes = ledger.apply_batch(
            [_pending(-1.0, slice_id="a"), _pending(-2.0, slice_id="b")]
        )
        assert [c.slice_id for c in changes] == ["a", "b"]


class TestSnapshotAndRestore:
    def test_snapshot_filters(self):
        ledger = ReputationLedger()
        ledger.apply_delta("p1", "s1", 10.0, SRC.CAMPAIGN, "c1")
        ledger.apply_delta("p2", "s1", -10.0, SRC.SCANDAL, "x1")
        ledger.apply_delta("p1", "s2", 5.0, SRC.CAMPAIGN, "c2")
        snap = ledger.snapshot(["p1"], ["s1"])
        assert snap == {("p1", "s1"): 60.0}

    def test_restore_rejects_out_of_range(self):
        ledger = ReputationLedger()
        with pytest.raises(InvalidRangeError):
            ledger.restore(ReputationScore("p1", "s1", approval=120.0))

    def test_mark_applied_blocks_replay(self):
        ledger = ReputationLedger()
        ledger.mark_applied([(SRC.CAMPAIGN.value, "c1", "p1", "s1")])
        with pytest.raises(DuplicateEventError):
            ledger.apply_delta("p1", "s1", 3.0, SRC.CAMPAIGN, "c1")


class TestConcurrency:
    def test_concurrent_deltas_are_all_kept(self):
        """Serialized read-modify-write: no lost update, every record kept."""
        ledger = ReputationLedger()

        def worker(n: int) -> None:
            for i in range(50):
                ledger.apply_delta("p1", "s1", 0.1, SRC.NEWS_ARTICLE, f"w{n}-{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        score = ledger.get("p1", "s1")
        assert score.approval == pytest.approx(50.0 + 400 * 0.1)
        assert len(score.approval_history) == 400
        assert len(ledger.event_log) == 400
