"""
StockPulse — Unit Tests for the Recommendation Engine
"""
import math

import pytest

from stockpulse.data.models import Action, Sentiment, SentimentSummary
from stockpulse.engines.recommendation import (
    RecommendationEngine, SentimentSignal, Signal, fuse, sentiment_signal, technical_signal,
)

# (current, average) pairs that produce each technical direction
PRICES = {
    Action.BUY: (90.0, 100.0),
    Action.HOLD: (100.0, 100.0),
    Action.SELL: (110.0, 100.0),
}

# sentiment scores that produce each sentiment signal with confidence 80 / 50 / 80
SCORES = {
    SentimentSignal.BULLISH: 80,
    SentimentSignal.NEUTRAL: 50,
    SentimentSignal.BEARISH: 20,
}


def summary_for(score: int) -> SentimentSummary:
    if score > 60:
        overall = Sentiment.POSITIVE
    elif score < 40:
        overall = Sentiment.NEGATIVE
    else:
        overall = Sentiment.NEUTRAL
    return SentimentSummary(overall=overall, score=score, positive=2, negative=1, neutral=1)


@pytest.fixture
def engine():
    return RecommendationEngine()


class TestTechnicalSignal:
    @pytest.mark.parametrize("current,average,direction,confidence", [
        (106.0, 100.0, "SELL", 70),
        (94.0, 100.0, "BUY", 75),
        (100.0, 100.0, "HOLD", 60),
        (105.0, 100.0, "HOLD", 60),
        (95.0, 100.0, "HOLD", 60),
    ])
    def test_thresholds(self, current, average, direction, confidence):
        assert technical_signal(current, average) == Signal(direction, confidence)

    @pytest.mark.parametrize("current,average", [
        (None, 100.0), (100.0, None), (0.0, 100.0), (100.0, 0.0), (-5.0, 100.0),
        (float("nan"), 100.0), (100.0, float("nan")),
    ])
    def test_missing_prices_hold(self, current, average):
        assert technical_signal(current, average) == Signal("HOLD", 60)


class TestSentimentSignal:
    @pytest.mark.parametrize("score,direction,confidence", [
        (70, "BULLISH", 70),
        (69, "NEUTRAL", 69),
        (30, "BEARISH", 70),
        (31, "NEUTRAL", 69),
        (50, "NEUTRAL", 50),
        (100, "BULLISH", 90),
        (0, "BEARISH", 90),
    ])
    def test_mapping(self, score, direction, confidence):
        assert sentiment_signal(score) == Signal(direction, confidence)


class TestFusion:
    @pytest.mark.parametrize("technical,sentiment,action,confidence", [
        (Action.BUY, SentimentSignal.BULLISH, Action.BUY, 88),
        (Action.BUY, SentimentSignal.NEUTRAL, Action.BUY, 70),
        (Action.BUY, SentimentSignal.BEARISH, Action.HOLD, 65),
        (Action.HOLD, SentimentSignal.BULLISH, Action.BUY, 75),
        (Action.HOLD, SentimentSignal.NEUTRAL, Action.HOLD, 55),
        (Action.HOLD, SentimentSignal.BEARISH, Action.SELL, 75),
        (Action.SELL, SentimentSignal.BULLISH, Action.HOLD, 65),
        (Action.SELL, SentimentSignal.NEUTRAL, Action.SELL, 65),
        (Action.SELL, SentimentSignal.BEARISH, Action.SELL, 85),
    ])
    def test_table(self, engine, technical, sentiment, action, confidence):
        current, average = PRICES[technical]
        rec = engine.recommend("Apple Inc.", current, average, summary_for(SCORES[sentiment]))
        assert rec.action == action
        assert rec.confidence == confidence
        assert 0 <= rec.confidence <= 100

    def test_agreement_reinforces_up_to_cap(self):
        action, confidence, _ = fuse(Signal("BUY", 75), Signal("BULLISH", 90))
        assert action == Action.BUY
        # mean 82.5 rounds up to 83, plus 10
        assert confidence == 93
        assert confidence >= (75 + 90) / 2 + 10

        _, capped, _ = fuse(Signal("SELL", 90), Signal("BEARISH", 90))
        assert capped == 95

    def test_conflict_downgrades_and_reduces(self):
        for technical, sentiment in [("BUY", "BEARISH"), ("SELL", "BULLISH")]:
            action, confidence, _ = fuse(Signal(technical, 75), Signal(sentiment, 90))
            assert action == Action.HOLD
            assert confidence < 75


class TestRecommendationEngine:
    def test_reasoning_order(self, engine):
        rec = engine.recommend("Apple Inc.", 90.0, 100.0, summary_for(80))
        assert len(rec.reasoning) == 6
        assert rec.reasoning[0] == "Current price: $90.00"
        assert rec.reasoning[1] == "Moving average price: $100.00"
        assert rec.reasoning[2].startswith("Technical signal: BUY")
        assert rec.reasoning[3].startswith("News sentiment: BULLISH")
        assert rec.reasoning[4] == "Article sentiment: 2 positive, 1 negative, 1 neutral"
        assert "agree" in rec.reasoning[5]

    def test_summary_and_prices(self, engine):
        rec = engine.recommend("Apple Inc.", 90.0, 100.0, summary_for(80))
        assert rec.summary == (
            "Based on technical analysis and market sentiment, Apple Inc. shows bullish signals."
        )
        assert rec.current_price == 90.0
        assert rec.target_price == 100.0

    def test_hold_has_no_target(self, engine):
        rec = engine.recommend("Apple Inc.", 100.0, 100.0, summary_for(50))
        assert rec.action == Action.HOLD
        assert rec.target_price is None
        assert "neutral signals" in rec.summary

    @pytest.mark.parametrize("current,average", [
        (0.0, 0.0), (None, None), (float("nan"), 100.0), (100.0, float("nan")),
    ])
    def test_unusable_prices_do_not_leak(self, engine, current, average):
        rec = engine.recommend("Apple Inc.", current, average, summary_for(50))
        assert rec.action == Action.HOLD
        assert rec.current_price is None
        assert rec.target_price is None
        assert rec.reasoning[0] == "Current price: unavailable"
        assert not any("nan" in line.lower() for line in rec.reasoning)

    def test_sentiment_only_with_missing_prices(self, engine):
        rec = engine.recommend("Apple Inc.", None, None, summary_for(20))
        assert rec.action == Action.SELL
        assert rec.confidence == 75
        assert rec.target_price is None

    def test_recommendation_is_immutable(self, engine):
        rec = engine.recommend("Apple Inc.", 90.0, 100.0, summary_for(80))
        with pytest.raises(Exception):
            rec.action = Action.SELL
        assert not math.isnan(rec.confidence)
