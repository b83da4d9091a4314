"""
StockPulse — Unit Tests for the News Adapter
"""
import pytest
from unittest.mock import AsyncMock

from stockpulse.data.adapters.news_adapter import MalformedPayload, NewsAdapter, map_article, map_articles
from stockpulse.data.fallback import synthetic_news
from stockpulse.data.models import Sentiment
from stockpulse.data.result import Err, Ok, ProviderError, ProviderErrorKind
from stockpulse.sentiment.scorer import summarize_articles


def raw_article(title, source="Reuters", description="Details.", published="2024-01-02T14:00:00Z"):
    return {
        "source": {"id": None, "name": source},
        "title": title,
        "description": description,
        "url": f"https://example.com/{title[:5]}",
        "publishedAt": published,
    }


@pytest.fixture
def adapter():
    a = NewsAdapter()
    a.api_key = "news-key"
    return a


class TestMapping:
    def test_map_article(self):
        item = map_article(raw_article("Apple unveils new chip"))
        assert item.headline == "Apple unveils new chip"
        assert item.source == "Reuters"
        assert item.timestamp == "2024-01-02T14:00:00Z"
        assert item.text == "Apple unveils new chip. Details."

    def test_missing_fields(self):
        item = map_article({"title": "Headline only", "source": None, "description": None})
        assert item.source == "Unknown"
        assert item.excerpt == ""
        assert item.text == "Headline only"

    @pytest.mark.parametrize("title", ["", "   ", None, "[Removed]"])
    def test_skips_unusable(self, title):
        assert map_article({"title": title}) is None

    def test_limit(self):
        data = {"articles": [raw_article("[Removed]")] + [raw_article(f"Story {i}") for i in range(20)]}
        items = map_articles(data, 10)
        assert len(items) == 10
        assert items[0].headline == "Story 0"

    @pytest.mark.parametrize("raw", [None, "Apple rises", ["Apple rises"]])
    def test_non_object_article(self, raw):
        assert map_article(raw) is None

    def test_non_text_fields(self):
        item = map_article({"title": "Apple rises", "source": {"name": 7}, "description": {"x": 1}})
        assert item.source == "Unknown"
        assert item.excerpt == ""

    def test_non_object_entries_skipped(self):
        items = map_articles({"articles": [None, "junk", raw_article("Apple rises")]}, 10)
        assert [i.headline for i in items] == ["Apple rises"]

    def test_unreadable_list_raises(self):
        with pytest.raises(MalformedPayload):
            map_articles({"articles": {"title": "Apple rises"}}, 10)


class TestFetchArticles:
    @pytest.mark.asyncio
    async def test_ok(self, adapter):
        adapter._get_json = AsyncMock(return_value=Ok({"status": "ok", "articles": [raw_article("Apple rises")]}))
        result = await adapter.fetch_articles("AAPL")
        assert isinstance(result, Ok)
        assert [i.headline for i in result.value] == ["Apple rises"]

        _, kwargs = adapter._get_json.await_args
        assert kwargs["params"]["q"] == "AAPL"
        assert kwargs["params"]["sortBy"] == "publishedAt"
        assert kwargs["headers"] == {"X-Api-Key": "news-key"}

    @pytest.mark.asyncio
    async def test_error_status_is_rejected(self, adapter):
        adapter._get_json = AsyncMock(return_value=Ok({"status": "error", "message": "apiKeyInvalid"}))
        result = await adapter.fetch_articles("AAPL")
        assert isinstance(result, Err)
        assert result.error.kind == ProviderErrorKind.REJECTED

    @pytest.mark.asyncio
    async def test_missing_key(self):
        adapter = NewsAdapter()
        adapter.api_key = ""
        adapter._get_json = AsyncMock()
        result = await adapter.fetch_articles("AAPL")
        assert isinstance(result, Err)
        assert result.error.kind == ProviderErrorKind.UNAVAILABLE
        adapter._get_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_transport_error_passes_through(self, adapter):
        err = Err(ProviderError.unavailable("newsapi", "request timed out"))
        adapter._get_json = AsyncMock(return_value=err)
        assert await adapter.fetch_articles("AAPL") == err

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"status": "ok", "articles": "oops"}, ["Apple rises"]])
    async def test_malformed_body_is_unavailable(self, adapter, body):
        adapter._get_json = AsyncMock(return_value=Ok(body))
        result = await adapter.fetch_articles("AAPL")
        assert isinstance(result, Err)
        assert result.error.kind == ProviderErrorKind.UNAVAILABLE
        assert "malformed payload" in result.error.message


class TestSyntheticNews:
    def test_preset_sentiment(self):
        articles = synthetic_news("AAPL")
        assert len(articles) == 5
        assert all("AAPL" in a.headline for a in articles)
        summary = summarize_articles(articles)
        assert (summary.positive, summary.negative, summary.neutral) == (3, 1, 1)
        assert summary.score == 70
        assert summary.overall == Sentiment.POSITIVE
