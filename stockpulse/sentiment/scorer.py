"""
StockPulse — News Sentiment Scorer
Classifies text as positive / negative / neutral with a remote language model,
falling back to a deterministic keyword count whenever the model is disabled,
fails, or answers with anything other than one of the three labels.
"""
import asyncio
from typing import Iterable, List, Optional

from stockpulse.data.models import NewsArticle, NewsItem, Sentiment, SentimentSummary
from stockpulse.data.result import Err
from stockpulse.sentiment.llm_client import ChatCompletionClient
from stockpulse.utils.helpers import clamp, round_half_up
from stockpulse.utils.logger import get_logger

logger = get_logger("sentiment_scorer")

POSITIVE_KEYWORDS = frozenset([
    "gains", "surge", "soars", "rallies", "climbs", "jumps", "rises", "up",
    "bullish", "strong", "beat", "beats", "exceed", "outperform", "profit",
    "growth", "revenue", "earnings", "success", "breakthrough", "positive",
    "upgrade", "buy", "target", "optimistic", "boost", "expand", "expansion",
    "milestone", "record", "high", "increase", "good", "great", "excellent",
])

NEGATIVE_KEYWORDS = frozenset([
    "falls", "drops", "plunges", "crashes", "declines", "tumbles", "slides",
    "bearish", "weak", "miss", "misses", "underperform", "loss", "losses",
    "decline", "warning", "concern", "risk", "sell", "downgrade", "cuts",
    "layoffs", "bankruptcy", "lawsuit", "investigation", "scandal", "negative",
    "down", "low", "bad", "poor", "disappointing", "worse", "worst",
])

SYSTEM_PROMPT = (
    "You are a financial sentiment analysis expert. Analyze the sentiment of "
    'financial news text and respond with ONLY one word: "positive", '
    '"negative", or "neutral".\n\n'
    "Consider:\n"
    "- Market impact and investor sentiment\n"
    "- Financial performance indicators\n"
    "- Company outlook and prospects\n"
    "- Risk factors and opportunities\n\n"
    "Respond with exactly one word only."
)

_LABELS = {s.value: s for s in Sentiment}


def keyword_sentiment(text: str) -> Sentiment:
    """Count keyword-set members present in the text; the larger set wins."""
    if not text:
        return Sentiment.NEUTRAL
    lowered = text.lower()
    positive = sum(1 for word in POSITIVE_KEYWORDS if word in lowered)
    negative = sum(1 for word in NEGATIVE_KEYWORDS if word in lowered)
    if positive > negative:
        return Sentiment.POSITIVE
    if negative > positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def parse_label(content: str) -> Optional[Sentiment]:
    return _LABELS.get(content.strip().strip('."\'').lower())


def summarize(sentiments: Iterable[Sentiment]) -> SentimentSummary:
    """
    score = round(((p - n) / K + 1) * 50), halves rounded up;
    overall is positive above 60, negative below 40.
    """
    sentiments = list(sentiments)
    total = len(sentiments)
    if total == 0:
        return SentimentSummary()

    positive = sum(1 for s in sentiments if s == Sentiment.POSITIVE)
    negative = sum(1 for s in sentiments if s == Sentiment.NEGATIVE)
    neutral = total - positive - negative

    score = int(clamp(round_half_up(((positive - negative) / total + 1) * 50), 0, 100))
    if score > 60:
        overall = Sentiment.POSITIVE
    elif score < 40:
        overall = Sentiment.NEGATIVE
    else:
        overall = Sentiment.NEUTRAL

    return SentimentSummary(
        overall=overall,
        score=score,
        positive=positive,
        negative=negative,
        neutral=neutral,
    )


def summarize_articles(articles: Iterable[NewsArticle]) -> SentimentSummary:
    return summarize(a.sentiment for a in articles)


class SentimentScorer:
    """Remote-first classifier with a keyword fallback."""

    def __init__(self, client: Optional[ChatCompletionClient] = None):
        self.client = client

    @property
    def remote_enabled(self) -> bool:
        return self.client is not None and self.client.enabled

    async def classify(self, text: str) -> Sentiment:
        if not text or not text.strip():
            return Sentiment.NEUTRAL
        if not self.remote_enabled:
            return keyword_sentiment(text)

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": f'Analyze the financial sentiment of this text: "{text}"'},
        ]
        try:
            result = await self.client.complete(messages)
        except Exception as e:
            logger.warning("llm_sentiment_exception", error=str(e))
            return keyword_sentiment(text)

        if isinstance(result, Err):
            logger.warning(
                "llm_sentiment_failed",
                kind=result.error.kind.value,
                status=result.error.status,
                error=result.error.message,
            )
            return keyword_sentiment(text)

        label = parse_label(result.value)
        if label is None:
            logger.warning("llm_sentiment_invalid_label", content=result.value[:40])
            return keyword_sentiment(text)
        return label

    async def classify_batch(self, texts: List[str]) -> List[Sentiment]:
        """Classify concurrently; results keep input order."""
        results = await asyncio.gather(*(self.classify(t) for t in texts), return_exceptions=True)
        sentiments = []
        for text, result in zip(texts, results):
            if isinstance(result, Sentiment):
                sentiments.append(result)
            else:
                logger.warning("batch_item_failed", error=str(result))
                sentiments.append(keyword_sentiment(text))
        return sentiments

    async def score_articles(self, items: List[NewsItem]) -> List[NewsArticle]:
        sentiments = await self.classify_batch([item.text for item in items])
        return [
            NewsArticle(**item.model_dump(), sentiment=sentiment)
            for item, sentiment in zip(items, sentiments)
        ]
