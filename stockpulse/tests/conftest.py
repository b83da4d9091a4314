"""
StockPulse — Test Configuration & Fixtures
Shared fixtures for all test modules. Nothing here touches the network.
"""
import pytest
import numpy as np
import pandas as pd
from typing import List
from unittest.mock import AsyncMock, MagicMock

from stockpulse.data.models import Bar, NewsItem, ValidationResult
from stockpulse.data.result import Err, ProviderError


def build_bars(n: int, start: str = "2024-01-02 09:07", base: float = 100.0, seed: int = 42) -> List[Bar]:
    """n consecutive 1-minute bars with a mild random walk."""
    if n == 0:
        return []
    rng = np.random.default_rng(seed)
    times = pd.date_range(start=start, periods=n, freq="1min")
    closes = base + np.cumsum(rng.normal(0.0, 0.1, n))
    opens = closes + rng.normal(0.0, 0.05, n)
    highs = np.maximum(opens, closes) + 0.1
    lows = np.minimum(opens, closes) - 0.1
    volumes = rng.integers(1_000, 10_000, n)
    return [
        Bar(time=t.to_pydatetime(), open=float(o), high=float(h), low=float(lo), close=float(c), volume=int(v))
        for t, o, h, lo, c, v in zip(times, opens, highs, lows, closes, volumes)
    ]


@pytest.fixture
def make_bars():
    return build_bars


@pytest.fixture
def sample_news_items():
    return [
        NewsItem(
            headline="Apple beats earnings estimates as iPhone sales surge",
            source="Reuters",
            timestamp="2024-01-02T14:00:00Z",
            excerpt="Revenue growth exceeded expectations.",
            url="https://example.com/a",
        ),
        NewsItem(
            headline="Regulators open investigation into Apple after lawsuit",
            source="Bloomberg",
            timestamp="2024-01-02T13:00:00Z",
            excerpt="",
            url="https://example.com/b",
        ),
        NewsItem(
            headline="Apple to hold its annual meeting on Tuesday",
            source="CNBC",
            timestamp="2024-01-02T12:00:00Z",
            excerpt="",
            url="https://example.com/c",
        ),
    ]


@pytest.fixture
def unavailable():
    return Err(ProviderError.unavailable("test", "request timed out"))


@pytest.fixture
def stub_market(unavailable):
    """Market client whose provider calls all fail as unavailable."""
    market = MagicMock()
    market.validate = AsyncMock(
        return_value=ValidationResult(valid=True, company_name="Apple Inc.", industry="Technology")
    )
    market.fetch_intraday_bars = AsyncMock(return_value=unavailable)
    market.get_quote = AsyncMock(return_value=unavailable)
    market.disconnect = AsyncMock()
    return market


@pytest.fixture
def stub_news(unavailable):
    news = MagicMock()
    news.fetch_articles = AsyncMock(return_value=unavailable)
    news.disconnect = AsyncMock()
    return news
