"""
StockPulse — Network-free fallback data.
Used when a provider is unavailable so the API can always answer with a
complete, well-formed payload.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from stockpulse.data.models import Bar, NewsArticle, Sentiment, ValidationResult

KNOWN_TICKERS: Dict[str, Dict[str, str]] = {
    "AAPL": {"name": "Apple Inc.", "industry": "Technology", "exchange": "NASDAQ"},
    "TSLA": {"name": "Tesla Inc.", "industry": "Automotive", "exchange": "NASDAQ"},
    "GOOGL": {"name": "Alphabet Inc.", "industry": "Technology", "exchange": "NASDAQ"},
    "MSFT": {"name": "Microsoft Corporation", "industry": "Technology", "exchange": "NASDAQ"},
    "AMZN": {"name": "Amazon.com Inc.", "industry": "E-commerce", "exchange": "NASDAQ"},
    "NVDA": {"name": "NVIDIA Corporation", "industry": "Technology", "exchange": "NASDAQ"},
    "META": {"name": "Meta Platforms Inc.", "industry": "Technology", "exchange": "NASDAQ"},
    "NFLX": {"name": "Netflix Inc.", "industry": "Entertainment", "exchange": "NASDAQ"},
    "AMD": {"name": "Advanced Micro Devices Inc.", "industry": "Technology", "exchange": "NASDAQ"},
    "INTC": {"name": "Intel Corporation", "industry": "Technology", "exchange": "NASDAQ"},
}

# 100 hourly buckets of 60 one-minute bars
SYNTHETIC_BAR_COUNT = 6000


def company_name_for(ticker: str) -> str:
    known = KNOWN_TICKERS.get(ticker.upper())
    return known["name"] if known else f"{ticker} Corporation"


def fallback_validation(ticker: str) -> ValidationResult:
    """Validate against the static table of well-known tickers. Never fails."""
    stock = KNOWN_TICKERS.get(ticker.upper())
    if stock is None:
        return ValidationResult(
            valid=False,
            message=(
                f"Stock symbol '{ticker}' not found. "
                "Please try common symbols like AAPL, TSLA, GOOGL, MSFT, etc."
            ),
        )
    return ValidationResult(
        valid=True,
        company_name=stock["name"],
        industry=stock["industry"],
        market_cap="N/A",
        current_price="N/A",
        exchange=stock["exchange"],
        sector="Technology",
        description="N/A",
    )


def synthetic_bars(
    count: int = SYNTHETIC_BAR_COUNT,
    base_price: float = 150.0,
    end: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> List[Bar]:
    """Random-walk 1-minute bars, oldest first, all strictly positive."""
    rng = np.random.default_rng(seed)
    end = end or datetime.now().replace(second=0, microsecond=0)
    times = pd.date_range(end=end - timedelta(minutes=1), periods=count, freq="1min")

    returns = rng.normal(0.0, 0.001, count)
    closes = base_price * np.exp(np.cumsum(returns))
    opens = np.concatenate(([base_price], closes[:-1]))
    spread = np.abs(rng.normal(0.0, 0.0008, count)) * closes
    highs = np.maximum(opens, closes) + spread
    lows = np.maximum(np.minimum(opens, closes) - spread, 0.01)
    volumes = rng.integers(1_000, 50_000, count)

    return [
        Bar(
            time=t.to_pydatetime(),
            open=round(float(o), 4),
            high=round(float(h), 4),
            low=round(float(lo), 4),
            close=round(float(c), 4),
            volume=int(v),
        )
        for t, o, h, lo, c, v in zip(times, opens, highs, lows, closes, volumes)
    ]


def synthetic_news(ticker: str) -> List[NewsArticle]:
    """Template headlines with preset sentiment."""
    templates = [
        (
            f"{ticker} Reports Strong Quarterly Earnings, Beats Expectations",
            "Financial Times",
            "2 hours ago",
            "The company exceeded analyst expectations with revenue growth of 12% "
            "year-over-year, driven by strong product demand.",
            Sentiment.POSITIVE,
        ),
        (
            f"Market Volatility Affects {ticker} Stock Performance",
            "Reuters",
            "4 hours ago",
            "Recent market turbulence has created uncertainty around tech stocks, "
            "including major players in the sector.",
            Sentiment.NEUTRAL,
        ),
        (
            f"Analysts Upgrade {ticker} Price Target Following Innovation Announcement",
            "Bloomberg",
            "6 hours ago",
            "Several Wall Street analysts have raised their price targets following "
            "the company's latest product innovation reveal.",
            Sentiment.POSITIVE,
        ),
        (
            f"{ticker} Faces Regulatory Scrutiny in European Markets",
            "Wall Street Journal",
            "8 hours ago",
            "European regulators are examining the company's business practices, "
            "which could impact future operations.",
            Sentiment.NEGATIVE,
        ),
        (
            f"{ticker} CEO Discusses Future Growth Strategy in Interview",
            "CNBC",
            "12 hours ago",
            "The CEO outlined ambitious plans for expansion into emerging markets "
            "and continued investment in R&D.",
            Sentiment.POSITIVE,
        ),
    ]
    return [
        NewsArticle(
            headline=headline,
            source=source,
            timestamp=timestamp,
            excerpt=excerpt,
            url=f"https://example.com/news{i + 1}",
            sentiment=sentiment,
        )
        for i, (headline, source, timestamp, excerpt, sentiment) in enumerate(templates)
    ]
