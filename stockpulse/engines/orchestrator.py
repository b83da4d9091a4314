"""
StockPulse — Analysis Orchestrator
VALIDATE -> FETCH_BARS -> RESAMPLE -> FETCH_NEWS+SCORE -> SUMMARIZE -> RECOMMEND,
with a full synthetic fallback when any stage after validation fails
unexpectedly. Nothing is cached between requests.
"""
import asyncio
from typing import List, Optional, Tuple

import numpy as np

from stockpulse.config.settings import get_settings
from stockpulse.data.adapters.alphavantage_adapter import AlphaVantageAdapter
from stockpulse.data.adapters.news_adapter import NewsAdapter
from stockpulse.data.fallback import company_name_for, synthetic_bars, synthetic_news
from stockpulse.data.models import (
    AnalysisResult, Bar, ChartSeries, NewsArticle, PopularStock, ValidationResult,
)
from stockpulse.data.result import Err, TickerNotFoundError
from stockpulse.engines.recommendation import RecommendationEngine
from stockpulse.engines.resampler import BarResampler, bars_to_dataframe
from stockpulse.sentiment.scorer import SentimentScorer, summarize_articles
from stockpulse.utils.helpers import utc_timestamp
from stockpulse.utils.logger import get_logger

logger = get_logger("orchestrator")


def price_context(bars: List[Bar], window: int) -> Tuple[Optional[float], Optional[float]]:
    """Last valid close and the mean of the last `window` valid closes."""
    df = bars_to_dataframe(bars)
    if df.empty:
        return None, None
    closes = df["close"].astype(float).to_numpy()
    return float(closes[-1]), float(np.mean(closes[-window:]))


class AnalysisOrchestrator:
    """Sequences the pipeline for one ticker per call; holds no request state."""

    def __init__(
        self,
        market: AlphaVantageAdapter,
        news: NewsAdapter,
        scorer: SentimentScorer,
        resampler: Optional[BarResampler] = None,
        recommender: Optional[RecommendationEngine] = None,
    ):
        self.settings = get_settings().analysis
        self.market = market
        self.news = news
        self.scorer = scorer
        self.resampler = resampler or BarResampler()
        self.recommender = recommender or RecommendationEngine()

    async def validate(self, ticker: str) -> ValidationResult:
        return await self.market.validate(ticker)

    async def analyze(self, ticker: str) -> AnalysisResult:
        """Run the full pipeline. Raises TickerNotFoundError when validation fails."""
        validation = await self.validate(ticker)
        if not validation.valid:
            raise TickerNotFoundError(validation)

        company_name = validation.company_name or company_name_for(ticker)
        try:
            return await self._run_pipeline(ticker, company_name, validation)
        except Exception as e:
            logger.exception("pipeline_failed_using_fallback", ticker=ticker, error=str(e))
            return self._fallback_analysis(ticker, company_name, validation)

    async def _run_pipeline(self, ticker: str, company_name: str, validation: ValidationResult) -> AnalysisResult:
        used_fallback = False

        bars_result = await self.market.fetch_intraday_bars(ticker)
        if isinstance(bars_result, Err):
            logger.warning(
                "intraday_unavailable_using_synthetic",
                ticker=ticker,
                kind=bars_result.error.kind.value,
                error=bars_result.error.message,
            )
            bars = synthetic_bars()
            used_fallback = True
        else:
            bars = bars_result.value

        chart_data = self.resampler.resample(bars)
        if not chart_data.one_minute:
            logger.warning("no_valid_bars_using_synthetic", ticker=ticker)
            bars = synthetic_bars()
            chart_data = self.resampler.resample(bars)
            used_fallback = True

        news, news_fallback = await self._score_news(ticker)
        used_fallback = used_fallback or news_fallback

        # Join point: summarising starts only after every article is scored
        sentiment = summarize_articles(news)

        current_price, average_price = price_context(bars, self.settings.ma_window)
        recommendation = self.recommender.recommend(company_name, current_price, average_price, sentiment)

        logger.info(
            "analysis_complete",
            ticker=ticker,
            action=recommendation.action.value,
            confidence=recommendation.confidence,
            articles=len(news),
            fallback=used_fallback,
        )
        return AnalysisResult(
            ticker=ticker,
            company_name=company_name,
            validation=validation,
            recommendation=recommendation,
            chart_data=chart_data,
            news=news,
            sentiment=sentiment,
            is_fallback=used_fallback,
            generated_at=utc_timestamp(),
        )

    async def _score_news(self, ticker: str) -> Tuple[List[NewsArticle], bool]:
        news_result = await self.news.fetch_articles(ticker)
        if isinstance(news_result, Err):
            logger.warning(
                "news_unavailable_using_synthetic",
                ticker=ticker,
                kind=news_result.error.kind.value,
                error=news_result.error.message,
            )
            return synthetic_news(ticker), True
        return await self.scorer.score_articles(news_result.value), False

    def _fallback_analysis(self, ticker: str, company_name: str, validation: ValidationResult) -> AnalysisResult:
        """Self-consistent synthetic payload run through the same resampler and fusion."""
        bars = synthetic_bars()
        chart_data: ChartSeries = self.resampler.resample(bars)
        news = synthetic_news(ticker)
        sentiment = summarize_articles(news)
        current_price, average_price = price_context(bars, self.settings.ma_window)
        recommendation = self.recommender.recommend(company_name, current_price, average_price, sentiment)
        return AnalysisResult(
            ticker=ticker,
            company_name=company_name,
            validation=validation,
            recommendation=recommendation,
            chart_data=chart_data,
            news=news,
            sentiment=sentiment,
            is_fallback=True,
            generated_at=utc_timestamp(),
        )

    async def refresh(self, ticker: str) -> dict:
        """
        No-op acknowledgment. Every analysis is fetched fresh and there is no
        server-side cache to invalidate.
        """
        logger.info("refresh_requested", ticker=ticker)
        return {"success": True, "message": f"Stock data for {ticker} refreshed successfully"}

    async def popular(self, symbols: List[str]) -> List[PopularStock]:
        """Quotes for each symbol, fetched concurrently; failures degrade per symbol."""
        results = await asyncio.gather(
            *(self.market.get_quote(s) for s in symbols), return_exceptions=True
        )
        stocks = []
        for symbol, result in zip(symbols, results):
            name = company_name_for(symbol)
            if isinstance(result, BaseException) or isinstance(result, Err):
                error = result.error.message if isinstance(result, Err) else str(result)
                logger.warning("popular_quote_failed", symbol=symbol, error=error)
                stocks.append(PopularStock(symbol=symbol, name=name))
                continue
            quote = result.value
            stocks.append(
                PopularStock(
                    symbol=symbol,
                    name=name,
                    current_price=round(quote.price, 2),
                    change=quote.change_percent or f"{quote.change:+.2f}",
                    is_positive=quote.change >= 0,
                )
            )
        return stocks
