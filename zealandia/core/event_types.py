"""Event type constants broadcast on the EventBus."""


class EventTypes:
    """Event type string constants"""

    # players
    PLAYER_REGISTERED = "player_registered"

    # reputation ledger
    REPUTATION_BATCH_APPLIED = "reputation_batch_applied"

    # translators
    BILL_RESOLVED = "bill_resolved"
    NEWS_PUBLISHED = "news_published"
    SCANDAL_REPORTED = "scandal_reported"
    EFFECT_EXPIRED = "effect_expired"

    # campaigns / endorsements
    CAMPAIGN_STARTED = "campaign_started"
    CAMPAIGN_COMPLETED = "campaign_completed"
    CAMPAIGN_CANCELLED = "campaign_cancelled"
    ENDORSEMENT_MADE = "endorsement_made"

    # elections
    ELECTION_REGISTERED = "election_registered"
    ELECTION_VOTING_CLOSED = "election_voting_closed"
    ELECTION_STATUS_CHANGED = "election_status_changed"
    ELECTION_COMPLETED = "election_completed"

    # engine
    TURN_ADVANCED = "turn_advanced"
