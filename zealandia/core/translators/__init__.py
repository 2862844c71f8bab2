"""Event-to-delta translators - public API"""

from zealandia.core.translators.bills import (
    OUTCOME_WEIGHT,
    ROLE_WEIGHTS,
    Bill,
    BillRole,
    predict_role_delta,
    translate_bill_outcome,
    translate_bill_votes,
)
from zealandia.core.translators.news import (
    NEWS_DECAY_RATE,
    NewsArticle,
    NewsImpact,
    OutletType,
    outlet_alignment,
    translate_news,
)
from zealandia.core.translators.scandals import (
    Scandal,
    translate_decay,
    translate_natural_drift,
    translate_scandal,
)
from zealandia.core.translators.campaigns import (
    CAMPAIGN_DURATION,
    Campaign,
    CampaignStatus,
    cancel_campaign,
    complete_campaign,
    create_campaign,
    roll_campaign_boost,
    should_complete,
    translate_campaign_start,
)
from zealandia.core.translators.endorsements import (
    TRANSFER_BANDS,
    Endorsement,
    EndorsementTransfer,
    build_transfers,
    sample_transfer_rate,
    transfer_band,
    translate_endorsement,
)

__all__ = [
    "OUTCOME_WEIGHT",
    "ROLE_WEIGHTS",
    "Bill",
    "BillRole",
    "predict_role_delta",
    "translate_bill_outcome",
    "translate_bill_votes",
    "NEWS_DECAY_RATE",
    "NewsArticle",
    "NewsImpact",
    "OutletType",
    "outlet_alignment",
    "translate_news",
    "Scandal",
    "translate_decay",
    "translate_natural_drift",
    "translate_scandal",
    "CAMPAIGN_DURATION",
    "Campaign",
    "CampaignStatus",
    "cancel_campaign",
    "complete_campaign",
    "create_campaign",
    "roll_campaign_boost",
    "should_complete",
    "translate_campaign_start",
    "TRANSFER_BANDS",
    "Endorsement",
    "EndorsementTransfer",
    "build_transfers",
    "sample_transfer_rate",
    "transfer_band",
    "translate_endorsement",
]
