"""Campaigns

A campaign targets one slice in one province for a fixed 12 turns. Its boost
(1-5, rolled once at creation) is applied a single time when the campaign
starts; afterwards the engine only moves it through its lifecycle:
active -> completed once the current turn passes end_turn, or
active -> cancelled on request.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from zealandia.core.demographics.models import DemographicSlice
from zealandia.core.errors import InvalidActionError
from zealandia.core.reputation.models import (
    Calculation,
    PendingDelta,
    ReputationChangeSource,
)

CAMPAIGN_DURATION = 12
CAMPAIGN_ACTION_POINT_COST = 1
CAMPAIGN_MONEY_COST = 100
CAMPAIGN_BOOST_MIN = 1
CAMPAIGN_BOOST_MAX = 5


class CampaignStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class Campaign:
    campaign_id: str
    player_id: str
    slice_id: str
    province: str
    start_turn: int
    end_turn: int
    boost: int
    status: CampaignStatus = CampaignStatus.ACTIVE
    duration: int = CAMPAIGN_DURATION
    action_point_cost: int = CAMPAIGN_ACTION_POINT_COST
    money_cost: int = CAMPAIGN_MONEY_COST
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def turns_remaining(self, turn: int) -> int:
        return max(0, self.end_turn - turn)


def roll_campaign_boost(rng: random.Random) -> int:
    """Uniform integer in [1, 5]."""
    return rng.randint(CAMPAIGN_BOOST_MIN, CAMPAIGN_BOOST_MAX)


def create_campaign(
    campaign_id: str,
    player_id: str,
    slice_: DemographicSlice,
    start_turn: int,
    rng: random.Random,
    province: Optional[str] = None,
) -> Campaign:
    return Campaign(
        campaign_id=campaign_id,
        player_id=player_id,
        slice_id=slice_.slice_id,
        province=province or slice_.province,
        start_turn=start_turn,
        end_turn=start_turn + CAMPAIGN_DURATION,
        boost=roll_campaign_boost(rng),
    )


def translate_campaign_start(campaign: Campaign) -> PendingDelta:
    return PendingDelta(
        player_id=campaign.player_id,
        slice_id=campaign.slice_id,
        delta=float(campaign.boost),
        source=ReputationChangeSource.CAMPAIGN,
        source_id=campaign.campaign_id,
        turn=campaign.start_turn,
        calculation=Calculation(
            details={"boost": campaign.boost, "duration": campaign.duration}
        ),
    )


def should_complete(campaign: Campaign, turn: int) -> bool:
    return campaign.status == CampaignStatus.ACTIVE and turn > campaign.end_turn


def complete_campaign(campaign: Campaign) -> None:
    if campaign.status != CampaignStatus.ACTIVE:
        raise InvalidActionError(
            f"campaign {campaign.campaign_id} is {campaign.status.value}, not active"
        )
    campaign.status = CampaignStatus.COMPLETED


def cancel_campaign(campaign: Campaign) -> None:
    if campaign.status != CampaignStatus.ACTIVE:
        raise InvalidActionError(
            f"campaign {campaign.campaign_id} is {campaign.status.value}, not active"
        )
    campaign.status = CampaignStatus.CANCELLED
