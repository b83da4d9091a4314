"""
StockPulse — Recommendation Engine
Fuses a mean-reversion technical signal with the news-sentiment signal.

Technical:  price > MA * 1.05 -> SELL (70)
            price < MA * 0.95 -> BUY  (75)
            otherwise         -> HOLD (60)
Sentiment:  score >= 70 -> BULLISH, score <= 30 -> BEARISH, else NEUTRAL;
            confidence = min(90, 50 + |score - 50|)

Fusion (t = technical, s = sentiment, m = mean of the two confidences):

    technical \\ sentiment   BULLISH             NEUTRAL    BEARISH
    BUY                     BUY  min(95, m+10)  BUY  t-5   HOLD min(65, m-5)
    HOLD                    BUY  s-5            HOLD m     SELL s-5
    SELL                    HOLD min(65, m-5)   SELL t-5   SELL min(95, m+10)
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from stockpulse.data.models import Action, Recommendation, SentimentSummary
from stockpulse.utils.helpers import clamp, round_half_up
from stockpulse.utils.logger import get_logger

logger = get_logger("recommendation")

SELL_THRESHOLD = 1.05
BUY_THRESHOLD = 0.95

TECHNICAL_CONFIDENCE = {Action.SELL: 70, Action.BUY: 75, Action.HOLD: 60}

BULLISH_MIN_SCORE = 70
BEARISH_MAX_SCORE = 30
SENTIMENT_CONFIDENCE_CAP = 90

AGREEMENT_BONUS = 10
AGREEMENT_CAP = 95
CONFLICT_PENALTY = 5
CONFLICT_CAP = 65
ONE_SIDED_PENALTY = 5


class SentimentSignal(str, Enum):
    BULLISH = "BULLISH"
    NEUTRAL = "NEUTRAL"
    BEARISH = "BEARISH"


@dataclass(frozen=True)
class Signal:
    direction: str
    confidence: int


def technical_signal(current_price: Optional[float], average_price: Optional[float]) -> Signal:
    if not current_price or not average_price or current_price <= 0 or average_price <= 0:
        return Signal(Action.HOLD.value, TECHNICAL_CONFIDENCE[Action.HOLD])
    if current_price > average_price * SELL_THRESHOLD:
        action = Action.SELL
    elif current_price < average_price * BUY_THRESHOLD:
        action = Action.BUY
    else:
        action = Action.HOLD
    return Signal(action.value, TECHNICAL_CONFIDENCE[action])


def sentiment_signal(score: int) -> Signal:
    if score >= BULLISH_MIN_SCORE:
        label = SentimentSignal.BULLISH
    elif score <= BEARISH_MAX_SCORE:
        label = SentimentSignal.BEARISH
    else:
        label = SentimentSignal.NEUTRAL
    confidence = min(SENTIMENT_CONFIDENCE_CAP, 50 + abs(score - 50))
    return Signal(label.value, int(confidence))


def _agree(t: int, s: int) -> int:
    return min(AGREEMENT_CAP, round_half_up((t + s) / 2) + AGREEMENT_BONUS)


def _conflict(t: int, s: int) -> int:
    return min(CONFLICT_CAP, round_half_up((t + s) / 2) - CONFLICT_PENALTY)


def _technical_only(t: int, s: int) -> int:
    return t - ONE_SIDED_PENALTY


def _sentiment_only(t: int, s: int) -> int:
    return s - ONE_SIDED_PENALTY


def _mean(t: int, s: int) -> int:
    return round_half_up((t + s) / 2)


FusionRule = Tuple[Action, Callable[[int, int], int], str]

FUSION_TABLE: Dict[Tuple[Action, SentimentSignal], FusionRule] = {
    (Action.BUY, SentimentSignal.BULLISH): (
        Action.BUY, _agree,
        "Technical and sentiment signals agree on a bullish outlook, reinforcing the BUY signal.",
    ),
    (Action.BUY, SentimentSignal.NEUTRAL): (
        Action.BUY, _technical_only,
        "Technical indicators suggest buying while sentiment is neutral; confidence is slightly reduced.",
    ),
    (Action.BUY, SentimentSignal.BEARISH): (
        Action.HOLD, _conflict,
        "Technical BUY signal conflicts with bearish news sentiment; downgrading to HOLD.",
    ),
    (Action.HOLD, SentimentSignal.BULLISH): (
        Action.BUY, _sentiment_only,
        "Price is near its average but bullish news sentiment tips the balance toward BUY.",
    ),
    (Action.HOLD, SentimentSignal.NEUTRAL): (
        Action.HOLD, _mean,
        "Neither technical nor sentiment signals show a clear direction.",
    ),
    (Action.HOLD, SentimentSignal.BEARISH): (
        Action.SELL, _sentiment_only,
        "Price is near its average but bearish news sentiment tips the balance toward SELL.",
    ),
    (Action.SELL, SentimentSignal.BULLISH): (
        Action.HOLD, _conflict,
        "Technical SELL signal conflicts with bullish news sentiment; downgrading to HOLD.",
    ),
    (Action.SELL, SentimentSignal.NEUTRAL): (
        Action.SELL, _technical_only,
        "Technical indicators suggest selling while sentiment is neutral; confidence is slightly reduced.",
    ),
    (Action.SELL, SentimentSignal.BEARISH): (
        Action.SELL, _agree,
        "Technical and sentiment signals agree on a bearish outlook, reinforcing the SELL signal.",
    ),
}

SUMMARY_TONE = {
    Action.BUY: "bullish",
    Action.HOLD: "neutral",
    Action.SELL: "bearish",
}


def fuse(technical: Signal, sentiment: Signal) -> Tuple[Action, int, str]:
    action, rule, rationale = FUSION_TABLE[(Action(technical.direction), SentimentSignal(sentiment.direction))]
    confidence = int(clamp(rule(technical.confidence, sentiment.confidence), 0, 100))
    return action, confidence, rationale


class RecommendationEngine:
    """Builds an immutable Recommendation from prices and a sentiment summary."""

    def recommend(
        self,
        company_name: str,
        current_price: Optional[float],
        average_price: Optional[float],
        sentiment: SentimentSummary,
    ) -> Recommendation:
        prices_available = bool(current_price and average_price and current_price > 0 and average_price > 0)

        technical = technical_signal(current_price, average_price)
        sent = sentiment_signal(sentiment.score)
        action, confidence, rationale = fuse(technical, sent)

        reasoning: List[str] = []
        if prices_available:
            reasoning.append(f"Current price: ${current_price:.2f}")
            reasoning.append(f"Moving average price: ${average_price:.2f}")
        else:
            reasoning.append("Current price: unavailable")
            reasoning.append("Moving average price: unavailable")
        reasoning.append(f"Technical signal: {technical.direction} ({technical.confidence}% confidence)")
        reasoning.append(f"News sentiment: {sent.direction} (score {sentiment.score}/100)")
        reasoning.append(
            f"Article sentiment: {sentiment.positive} positive, "
            f"{sentiment.negative} negative, {sentiment.neutral} neutral"
        )
        reasoning.append(rationale)

        target_price = None
        if prices_available and action != Action.HOLD:
            target_price = round(average_price, 2)

        logger.info(
            "recommendation_built",
            company=company_name,
            technical=technical.direction,
            sentiment=sent.direction,
            action=action.value,
            confidence=confidence,
        )

        return Recommendation(
            action=action,
            confidence=confidence,
            summary=(
                f"Based on technical analysis and market sentiment, {company_name} "
                f"shows {SUMMARY_TONE[action]} signals."
            ),
            target_price=target_price,
            current_price=round(current_price, 2) if prices_available else None,
            reasoning=reasoning,
        )
