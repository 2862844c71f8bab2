"""Election status transition tests"""

import pytest

from zealandia.core.elections.lifecycle import (
    can_transition,
    close_voting,
    open_voting,
    transition,
)
from zealandia.core.elections.models import Election, ElectionStatus, OfficeType
from zealandia.core.errors import InvalidActionError


@pytest.fixture()
def election():
    return Election("e1", OfficeType.MAYOR, city="dunedin")


class TestTransitions:
    def test_table(self):
        assert can_transition(ElectionStatus.ANNOUNCED, ElectionStatus.CAMPAIGNING)
        assert can_transition(ElectionStatus.ANNOUNCED, ElectionStatus.VOTING)
        assert not can_transition(ElectionStatus.VOTING, ElectionStatus.CAMPAIGNING)
        assert not can_transition(ElectionStatus.COMPLETED, ElectionStatus.VOTING)

    def test_invalid_transition(self, election):
        with pytest.raises(InvalidActionError):
            transition(election, ElectionStatus.COMPLETED)
        assert election.status == ElectionStatus.ANNOUNCED

    def test_open_and_close(self, election):
        transition(election, ElectionStatus.CAMPAIGNING)
        open_voting(election)
        assert election.status == ElectionStatus.VOTING
        assert election.voting_open
        close_voting(election, 14)
        assert not election.voting_open
        assert election.voting_closes_turn == 14

    def test_close_requires_open_voting(self, election):
        with pytest.raises(InvalidActionError):
            close_voting(election, 3)
        open_voting(election)
        close_voting(election, 3)
        with pytest.raises(InvalidActionError):
            close_voting(election, 4)
