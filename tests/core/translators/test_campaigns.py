"""Campaign lifecycle tests"""

import random

import pytest

from zealandia.core.errors import InvalidActionError
from zealandia.core.reputation.models import ReputationChangeSource
from zealandia.core.translators.campaigns import (
    CAMPAIGN_DURATION,
    CampaignStatus,
    cancel_campaign,
    complete_campaign,
    create_campaign,
    roll_campaign_boost,
    should_complete,
    translate_campaign_start,
)


@pytest.fixture()
def campaign(make_slice):
    return create_campaign("c1", "p1", make_slice("s1", province="otago"), 5, random.Random(0))


class TestCampaign:
    def test_create(self, campaign):
        assert campaign.end_turn == 5 + CAMPAIGN_DURATION
        assert campaign.province == "otago"
        assert 1 <= campaign.boost <= 5
        assert campaign.status == CampaignStatus.ACTIVE
        assert campaign.money_cost == 100

    def test_boost_range(self):
        rng = random.Random(42)
        assert {roll_campaign_boost(rng) for _ in range(300)} == {1, 2, 3, 4, 5}

    def test_start_delta(self, campaign):
        pending = translate_campaign_start(campaign)
        assert pending.delta == float(campaign.boost)
        assert pending.source == ReputationChangeSource.CAMPAIGN
        assert pending.turn == 5

    def test_completes_after_end_turn(self, campaign):
        assert not should_complete(campaign, campaign.end_turn)
        assert should_complete(campaign, campaign.end_turn + 1)
        complete_campaign(campaign)
        assert campaign.status == CampaignStatus.COMPLETED
        assert not should_complete(campaign, campaign.end_turn + 1)

    def test_cancel_only_active(self, campaign):
        cancel_campaign(campaign)
        assert campaign.status == CampaignStatus.CANCELLED
        with pytest.raises(InvalidActionError):
            cancel_campaign(campaign)
        with pytest.raises(InvalidActionError):
            complete_campaign(campaign)

    def test_turns_remaining(self, campaign):
        assert campaign.turns_remaining(5) == CAMPAIGN_DURATION
        assert campaign.turns_remaining(100) == 0
