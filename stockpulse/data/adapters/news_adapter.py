"""
StockPulse — News Search Adapter
Recent headlines for a ticker from a NewsAPI-compatible /everything endpoint.
"""
from typing import Any, Dict, List, Optional

from stockpulse.config.settings import get_settings
from stockpulse.data.adapters.base import BaseDataAdapter
from stockpulse.data.models import NewsItem
from stockpulse.data.result import Err, Ok, ProviderError, Result
from stockpulse.utils.logger import get_logger

logger = get_logger("news_adapter")

SOURCE = "newsapi"


class MalformedPayload(ValueError):
    """A 200 body whose structure cannot be read."""


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def map_article(raw: Any) -> Optional[NewsItem]:
    if not isinstance(raw, dict):
        return None
    headline = _text(raw.get("title"))
    if not headline or headline == "[Removed]":
        return None
    source = raw.get("source")
    name = _text(source.get("name")) if isinstance(source, dict) else _text(source)
    return NewsItem(
        headline=headline,
        source=name or "Unknown",
        timestamp=_text(raw.get("publishedAt")),
        excerpt=_text(raw.get("description")),
        url=_text(raw.get("url")),
    )


def map_articles(data: Dict[str, Any], limit: int) -> List[NewsItem]:
    articles = data.get("articles") or []
    if not isinstance(articles, list):
        raise MalformedPayload(f"'articles' is {type(articles).__name__}, expected list")
    items = []
    for raw in articles:
        item = map_article(raw)
        if item is not None:
            items.append(item)
        if len(items) >= limit:
            break
    return items


class NewsAdapter(BaseDataAdapter):
    """News Client."""

    def __init__(self):
        self.settings = get_settings().news
        super().__init__(source=SOURCE, timeout_seconds=self.settings.request_timeout_seconds)
        self.api_key = self.settings.news_api_key
        self.base_url = self.settings.news_base_url

    async def fetch_articles(self, ticker: str) -> Result[List[NewsItem]]:
        """Most recent articles mentioning the ticker, newest first."""
        if not self.api_key:
            return Err(ProviderError.unavailable(SOURCE, "API key not configured"))

        params = {
            "q": ticker,
            "language": self.settings.news_language,
            "sortBy": "publishedAt",
            "pageSize": self.settings.news_page_size,
        }
        result = await self._get_json(self.base_url, params=params, headers={"X-Api-Key": self.api_key})
        if isinstance(result, Err):
            return result

        data = result.value
        if not isinstance(data, dict):
            return Err(ProviderError.unavailable(SOURCE, "malformed payload: body is not an object"))
        if data.get("status") == "error":
            return Err(ProviderError.rejected(SOURCE, str(data.get("message", "provider error"))))

        try:
            items = map_articles(data, self.settings.news_page_size)
        except MalformedPayload as e:
            logger.warning("malformed_payload", ticker=ticker, error=str(e))
            return Err(ProviderError.unavailable(SOURCE, f"malformed payload: {e}"))
        logger.info("news_fetched", ticker=ticker, count=len(items))
        return Ok(items)
