"""News article -> reputation deltas

The tone heuristics that pick each delta live outside the engine; deltas
arrive as input in [-5, 5]. AI outlets carry an editorial bias on the social
axis and land softer with slices far from it. After publication the
article's residual influence decays by NEWS_DECAY_RATE per turn.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from zealandia.core.demographics.catalog import SliceCatalog
from zealandia.core.errors import InvalidRangeError
from zealandia.core.politics.position import POSITION_SPAN
from zealandia.core.reputation.models import (
    Calculation,
    PendingDelta,
    ReputationChangeSource,
)

NEWS_DELTA_MIN = -5.0
NEWS_DELTA_MAX = 5.0
NEWS_DECAY_RATE = 0.20


class OutletType(str, Enum):
    AI_CONSERVATIVE = "ai-conservative"
    AI_MODERATE = "ai-moderate"
    AI_PROGRESSIVE = "ai-progressive"
    PLAYER_PROVINCIAL = "player-provincial"


# position on the social axis
OUTLET_BIAS: Dict[OutletType, float] = {
    OutletType.AI_CONSERVATIVE: 8.0,
    OutletType.AI_MODERATE: 0.0,
    OutletType.AI_PROGRESSIVE: -8.0,
}


@dataclass
class NewsImpact:
    slice_id: str
    player_id: str
    delta: float  # -5 ~ +5
    reason: str = ""


@dataclass
class NewsArticle:
    article_id: str
    published_turn: int
    impacts: List[NewsImpact] = field(default_factory=list)
    outlet_type: Optional[OutletType] = None


def outlet_alignment(outlet_type: Optional[OutletType], slice_social: float) -> float:
    """1.0 for player outlets, otherwise 1 - |bias - social| / 20."""
    if outlet_type is None or outlet_type not in OUTLET_BIAS:
        return 1.0
    return 1.0 - abs(OUTLET_BIAS[outlet_type] - slice_social) / POSITION_SPAN


def validate_article(article: NewsArticle, catalog: SliceCatalog) -> None:
    catalog.require(i.slice_id for i in article.impacts)
    for impact in article.impacts:
        if not NEWS_DELTA_MIN <= impact.delta <= NEWS_DELTA_MAX:
            raise InvalidRangeError(
                f"article {article.article_id}: delta {impact.delta} for "
                f"{impact.player_id}/{impact.slice_id} outside [-5, 5]"
            )


def translate_news(
    article: NewsArticle, catalog: SliceCatalog, turn: int
) -> List[PendingDelta]:
    validate_article(article, catalog)
    pending: List[PendingDelta] = []
    for impact in article.impacts:
        slice_ = catalog.get(impact.slice_id)
        factor = outlet_alignment(
            article.outlet_type, slice_.default_position.cube.social
        )
        delta = impact.delta * factor
        if delta == 0:
            continue
        pending.append(
            PendingDelta(
                player_id=impact.player_id,
                slice_id=impact.slice_id,
                delta=delta,
                source=ReputationChangeSource.NEWS_ARTICLE,
                source_id=article.article_id,
                turn=turn,
                calculation=Calculation(
                    details={
                        "outlet_type": (
                            article.outlet_type.value if article.outlet_type else None
                        ),
                        "base_delta": impact.delta,
                        "outlet_alignment": factor,
                        "reason": impact.reason,
                    }
                ),
            )
        )
    return pending
