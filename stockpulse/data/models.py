"""
StockPulse — Data Models
Canonical data structures shared by the adapters, engines and API.
Every provider-specific field name is translated into these shapes at the
adapter boundary.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union
from datetime import datetime
from enum import Enum
import math


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Action(str, Enum):
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"


class ApiModel(BaseModel):
    """Snake-case attributes, camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Bar(ApiModel):
    """Single OHLCV candle."""
    model_config = ConfigDict(frozen=True)

    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int = 0

    @property
    def is_valid(self) -> bool:
        """OHLC must all be finite and strictly positive."""
        for value in (self.open, self.high, self.low, self.close):
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                return False
        return True


class ChartSeries(ApiModel):
    """Three resolutions derived from one raw 1-minute series."""
    one_minute: List[Bar] = Field(default_factory=list)
    fifteen_minute: List[Bar] = Field(default_factory=list)
    one_hour: List[Bar] = Field(default_factory=list)


class ValidationResult(ApiModel):
    valid: bool
    company_name: Optional[str] = None
    industry: Optional[str] = None
    market_cap: Optional[str] = None
    current_price: Optional[Union[float, str]] = None
    exchange: Optional[str] = None
    sector: Optional[str] = None
    description: Optional[str] = None
    message: Optional[str] = None


class Quote(ApiModel):
    """Latest trade snapshot for a symbol."""
    symbol: str
    price: float
    change: float = 0.0
    change_percent: Optional[str] = None


class NewsItem(ApiModel):
    """An article as returned by the news provider, before scoring."""
    model_config = ConfigDict(frozen=True)

    headline: str
    source: str = "Unknown"
    timestamp: str = ""
    excerpt: str = ""
    url: str = ""

    @property
    def text(self) -> str:
        """Text sent to the sentiment scorer."""
        if self.excerpt:
            return f"{self.headline}. {self.excerpt}"
        return self.headline


class NewsArticle(NewsItem):
    sentiment: Sentiment


class SentimentSummary(ApiModel):
    overall: Sentiment = Sentiment.NEUTRAL
    score: int = Field(default=50, ge=0, le=100)
    positive: int = 0
    negative: int = 0
    neutral: int = 0


class Recommendation(ApiModel):
    model_config = ConfigDict(frozen=True)

    action: Action
    confidence: int = Field(ge=0, le=100)
    summary: str
    target_price: Optional[float] = None
    current_price: Optional[float] = None
    reasoning: List[str] = Field(default_factory=list)


class AnalysisResult(ApiModel):
    ticker: str
    company_name: str
    validation: ValidationResult
    recommendation: Recommendation
    chart_data: ChartSeries
    news: List[NewsArticle] = Field(default_factory=list)
    sentiment: SentimentSummary
    is_fallback: bool = False
    generated_at: str


class PopularStock(ApiModel):
    symbol: str
    name: str
    current_price: Optional[float] = None
    change: str = "N/A"
    is_positive: bool = False
