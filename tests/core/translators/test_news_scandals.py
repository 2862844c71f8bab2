"""News, scandal and decay translator tests"""

import pytest

from zealandia.core.demographics.catalog import SliceCatalog
from zealandia.core.errors import InvalidRangeError, NotFoundError
from zealandia.core.politics.position import make_position
from zealandia.core.reputation.effects import DecayingEffect, EffectKind
from zealandia.core.reputation.models import ReputationChangeSource, ReputationScore
from zealandia.core.translators.news import (
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


@pytest.fixture()
def catalog(make_slice):
    return SliceCatalog(
        [
            make_slice("cons", position=make_position(0, 0, 8)),
            make_slice("prog", position=make_position(0, 0, -8)),
        ]
    )


class TestNews:
    def test_outlet_alignment(self):
        assert outlet_alignment(None, 5.0) == 1.0
        assert outlet_alignment(OutletType.PLAYER_PROVINCIAL, -9.0) == 1.0
        assert outlet_alignment(OutletType.AI_CONSERVATIVE, 8.0) == pytest.approx(1.0)
        assert outlet_alignment(OutletType.AI_CONSERVATIVE, -8.0) == pytest.approx(0.2)

    def test_biased_outlet_softens_distant_slice(self, catalog):
        article = NewsArticle(
            "n1",
            published_turn=2,
            outlet_type=OutletType.AI_CONSERVATIVE,
            impacts=[NewsImpact("cons", "p1", 4.0), NewsImpact("prog", "p1", 4.0)],
        )
        deltas = {p.slice_id: p.delta for p in translate_news(article, catalog, 2)}
        assert deltas["cons"] == pytest.approx(4.0)
        assert deltas["prog"] == pytest.approx(0.8)

    def test_delta_out_of_range(self, catalog):
        article = NewsArticle("n1", 2, impacts=[NewsImpact("cons", "p1", 6.0)])
        with pytest.raises(InvalidRangeError):
            translate_news(article, catalog, 2)

    def test_unknown_slice(self, catalog):
        article = NewsArticle("n1", 2, impacts=[NewsImpact("nowhere", "p1", 1.0)])
        with pytest.raises(NotFoundError):
            translate_news(article, catalog, 2)


class TestScandal:
    def test_translate(self, catalog):
        scandal = Scandal("x1", "p1", 3, impacts={"cons": -10.0, "prog": 0.0})
        pending = translate_scandal(scandal, catalog, 3)
        assert [(p.slice_id, p.delta) for p in pending] == [("cons", -10.0)]
        assert pending[0].source == ReputationChangeSource.SCANDAL

    def test_positive_delta_rejected(self, catalog):
        with pytest.raises(InvalidRangeError):
            translate_scandal(Scandal("x1", "p1", 3, impacts={"cons": 2.0}), catalog, 3)


class TestDecay:
    def test_decay_reverses_fraction_of_residual(self):
        effect = DecayingEffect(EffectKind.SCANDAL, "x1", "p1", "s1", -10.0, 0.25, 3, 2)
        [(returned, pending, expired)] = translate_decay([effect], 5, 0.1)
        assert returned is effect
        assert pending.delta == pytest.approx(2.5)
        assert pending.source == ReputationChangeSource.TURN_DECAY
        assert pending.source_id == "scandal:x1@5"
        assert expired is False

    def test_small_residual_expires(self):
        effect = DecayingEffect(EffectKind.NEWS, "n1", "p1", "s1", 0.11, 0.2, 1, 0)
        [(_, pending, expired)] = translate_decay([effect], 1, 0.1)
        assert pending.delta == pytest.approx(-0.11)
        assert expired is True

    def test_natural_drift(self):
        scores = [
            ReputationScore("p1", "s1", approval=70.0),
            ReputationScore("p1", "s2", approval=50.0),
        ]
        assert translate_natural_drift(scores, 3, 0.0) == []
        pending = translate_natural_drift(scores, 3, 0.1)
        assert [(p.slice_id, p.delta) for p in pending] == [("s1", pytest.approx(-2.0))]
        assert pending[0].source_id == "drift@3"
