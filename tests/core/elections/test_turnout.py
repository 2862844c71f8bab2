"""Turnout and election aggregation tests"""

import pytest

from zealandia.core.elections.models import Candidate, Election, OfficeType
from zealandia.core.elections.turnout import (
    compute_demographic_vote,
    compute_election_result,
    distribute_votes,
    election_slices,
    final_turnout,
    round_half_up,
)
from zealandia.core.errors import (
    InvalidActionError,
    InvalidRangeError,
    InvariantViolationError,
)
from zealandia.core.demographics.catalog import SliceCatalog
from zealandia.core.demographics.models import Settlement
from zealandia.core.politics.position import make_position


def _election(*candidates, **kwargs) -> Election:
    return Election("e1", OfficeType.PARLIAMENT, candidates=list(candidates), **kwargs)


class TestFinalTurnout:
    def test_reputation_modifier(self):
        assert final_turnout(0.5, 60.0) == pytest.approx(0.55)
        assert final_turnout(0.5, 50.0) == pytest.approx(0.5)
        assert final_turnout(0.5, 20.0) == pytest.approx(0.35)

    def test_clamped(self):
        assert final_turnout(0.95, 100.0) == 1.0
        assert final_turnout(0.0, 100.0) == 0.0

    def test_monotonic_in_approval(self):
        values = [final_turnout(0.6, a) for a in range(0, 101, 5)]
        assert values == sorted(values)


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(2.49) == 2


class TestDistributeVotes:
    def test_total_preserved(self):
        counts = distribute_votes(100, [1.0, 1.0, 1.0])
        assert sum(counts) == 100
        assert counts == [34, 33, 33]

    def test_proportional(self):
        assert distribute_votes(550, [3.0, 1.0]) == [413, 137]

    def test_zero_weights_split_evenly(self):
        assert distribute_votes(10, [0.0, 0.0]) == [5, 5]

    def test_empty(self):
        assert distribute_votes(10, []) == []


class TestDemographicVote:
    def test_scenario(self, make_slice):
        """Population 1000, base 0.5, candidates averaging 60 approval."""
        slice_ = make_slice(population=1000)
        election = _election(Candidate("a"), Candidate("b"))
        vote = compute_demographic_vote(slice_, election, {"a": 70.0, "b": 50.0}, 0.5)
        assert vote.eligible_voters == 1000
        assert vote.reputation_modifier == pytest.approx(0.1)
        assert vote.final_turnout == pytest.approx(0.55)
        assert vote.effective_votes == 550
        assert sum(s.votes for s in vote.vote_distribution) == 550

    def test_half_vote_rounds_up(self, make_slice):
        slice_ = make_slice(population=5)
        election = _election(Candidate("a"), Candidate("b"))
        vote = compute_demographic_vote(slice_, election, {}, 0.5)
        assert vote.effective_votes == 3
        assert sum(s.votes for s in vote.vote_distribution) == 3

    def test_closer_candidate_takes_votes(self, make_slice):
        slice_ = make_slice(position=make_position(6, 0, 0))
        election = _election(
            Candidate("near", position=make_position(6, 0, 0)),
            Candidate("far", position=make_position(-6, 0, 0)),
        )
        vote = compute_demographic_vote(slice_, election, {}, 0.5)
        shares = {s.player_id: s.votes for s in vote.vote_distribution}
        assert shares == {"near": 500, "far": 0}

    def test_non_voting_slice(self, make_slice):
        election = _election(Candidate("a"))
        vote = compute_demographic_vote(make_slice(can_vote=False), election, {}, 0.8)
        assert vote.effective_votes == 0
        assert vote.vote_distribution[0].percentage == 0.0

    def test_base_turnout_range(self, make_slice):
        with pytest.raises(InvalidRangeError):
            compute_demographic_vote(make_slice(), _election(Candidate("a")), {}, 1.2)

    def test_requires_candidates(self, make_slice):
        with pytest.raises(InvalidActionError):
            compute_demographic_vote(make_slice(), _election(), {}, 0.5)


class TestElectionScope:
    def test_city_then_province_then_all(self, make_slice):
        slices = [
            make_slice("a", province="canterbury"),
            make_slice(
                "b",
                province="canterbury",
                settlement=Settlement.URBAN,
                urban_center="christchurch",
            ),
            make_slice("c", province="otago"),
        ]
        ids = lambda e: [s.slice_id for s in election_slices(e, slices)]  # noqa: E731
        assert ids(_election(city="christchurch", province="canterbury")) == ["b"]
        assert ids(_election(province="canterbury")) == ["a", "b"]
        assert ids(_election()) == ["a", "b", "c"]

    def test_scope_matches_catalog_filters(self, make_slice):
        catalog = SliceCatalog(
            [
                make_slice("a", province="canterbury"),
                make_slice(
                    "b",
                    province="canterbury",
                    settlement=Settlement.URBAN,
                    urban_center="christchurch",
                ),
            ]
        )
        city = _election(city="christchurch")
        province = _election(province="canterbury")
        assert election_slices(city, catalog) == catalog.in_city("christchurch")
        assert election_slices(province, catalog) == catalog.in_province("canterbury")


class TestElectionResult:
    def test_aggregates_and_picks_winner(self, make_slice):
        slices = [
            make_slice("s1", population=1000, position=make_position(5, 0, 0)),
            make_slice("s2", population=400, position=make_position(-5, 0, 0)),
        ]
        election = _election(
            Candidate("right", position=make_position(5, 0, 0)),
            Candidate("left", position=make_position(-5, 0, 0)),
        )
        result = compute_election_result(election, slices, {}, 0.5, turn=9)
        assert result.winner_id == "right"
        assert result.total_eligible_voters == 1400
        assert result.total_votes_cast == 700
        assert result.turnout_percentage == pytest.approx(50.0)
        assert result.votes_for("right") == 500
        assert result.votes_for("left") == 200
        assert len(result.demographic_breakdown) == 2

    def test_snapshot_drives_turnout(self, make_slice):
        slices = [make_slice("s1", population=1000)]
        election = _election(Candidate("a"), Candidate("b"))
        snapshot = {("a", "s1"): 80.0, ("b", "s1"): 80.0}
        result = compute_election_result(election, slices, snapshot, 0.5, turn=1)
        assert result.total_votes_cast == 650

    def test_tie_broken_by_funds_then_ballot_order(self, make_slice):
        slices = [make_slice("s1", population=100)]
        tied = _election(Candidate("a"), Candidate("b", funds_raised=50.0))
        assert compute_election_result(tied, slices, {}, 0.5, 1).winner_id == "b"
        even = _election(Candidate("a"), Candidate("b"))
        assert compute_election_result(even, slices, {}, 0.5, 1).winner_id == "a"

    def test_callable_base_turnout(self, make_slice):
        slices = [make_slice("s1", province="otago"), make_slice("s2")]
        base = lambda s: 0.2 if s.province == "otago" else 0.6  # noqa: E731
        result = compute_election_result(_election(Candidate("a")), slices, {}, base, 1)
        assert result.total_votes_cast == 800

    def test_zero_eligible(self, make_slice):
        slices = [make_slice("s1", can_vote=False)]
        result = compute_election_result(_election(Candidate("a")), slices, {}, 0.5, 1)
        assert result.turnout_percentage == 0.0
        assert result.total_votes_cast == 0

    def test_voting_open_is_invariant_violation(self, make_slice):
        election = _election(Candidate("a"), voting_open=True)
        with pytest.raises(InvariantViolationError):
            compute_election_result(election, [make_slice()], {}, 0.5, 1)
