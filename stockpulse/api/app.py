"""
StockPulse — FastAPI Application
Ticker validation, analysis, refresh and popular-stock endpoints.
"""
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stockpulse.config.settings import get_settings
from stockpulse.data.adapters.alphavantage_adapter import AlphaVantageAdapter
from stockpulse.data.adapters.news_adapter import NewsAdapter
from stockpulse.data.result import InputError, InternalError, TickerNotFoundError
from stockpulse.engines.orchestrator import AnalysisOrchestrator
from stockpulse.sentiment.llm_client import ChatCompletionClient
from stockpulse.sentiment.scorer import SentimentScorer
from stockpulse.utils.helpers import is_valid_ticker, utc_timestamp
from stockpulse.utils.logger import bind_request_context, get_logger, setup_logging

logger = get_logger("api")

_orchestrator: Optional[AnalysisOrchestrator] = None
_llm_client: Optional[ChatCompletionClient] = None


def get_orchestrator() -> AnalysisOrchestrator:
    """Composition root: one adapter set (and one token cache) per process."""
    global _orchestrator, _llm_client
    if _orchestrator is None:
        _llm_client = ChatCompletionClient()
        _orchestrator = AnalysisOrchestrator(
            market=AlphaVantageAdapter(),
            news=NewsAdapter(),
            scorer=SentimentScorer(_llm_client),
        )
    return _orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown."""
    setup_logging()
    settings = get_settings()
    orchestrator = get_orchestrator()

    logger.info(
        "stockpulse_starting",
        version=settings.version,
        market_data_configured=bool(settings.market_data.alpha_vantage_api_key),
        news_configured=bool(settings.news.news_api_key),
        llm_configured=settings.llm.enabled,
    )

    yield

    logger.info("stockpulse_shutting_down")
    for adapter in (orchestrator.market, orchestrator.news, _llm_client):
        if adapter is not None:
            await adapter.disconnect()


app = FastAPI(
    title="StockPulse",
    description="Stock recommendations from price action and news sentiment",
    version="1.0.0",
    lifespan=lifespan,
)

# The browser client calls this API from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    bind_request_context()
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def clean_ticker(ticker: str, route: str = None) -> str:
    """Strip whitespace and enforce [A-Z]{1,5}; no case folding."""
    cleaned = (ticker or "").strip()
    if not cleaned:
        raise InputError("Ticker symbol is required")
    if not is_valid_ticker(cleaned):
        raise InputError("Invalid ticker format. Ticker should be 1-5 letters only.")
    if route:
        bind_request_context(ticker=cleaned, route=route)
    return cleaned


@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    logger.info("rejected_input", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(TickerNotFoundError)
async def not_found_handler(request: Request, exc: TickerNotFoundError):
    return JSONResponse(status_code=404, content=_dump(exc.validation))


@app.exception_handler(InternalError)
async def internal_error_handler(request: Request, exc: InternalError):
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ─── Health ─────────────────────────────────────────────────────

@app.get("/healthz", tags=["System"])
async def health_check():
    settings = get_settings()
    return {"status": "healthy", "version": settings.version, "timestamp": utc_timestamp()}


# ─── Stock Endpoints ────────────────────────────────────────────

router = APIRouter(prefix=get_settings().api_prefix, tags=["Stocks"])


@router.get("/validate/{ticker}")
async def validate_ticker(ticker: str, orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """Validate a ticker; 404 carries the same body shape as 200."""
    symbol = clean_ticker(ticker, route="validate")
    try:
        validation = await orchestrator.validate(symbol)
    except Exception as e:
        logger.error("validation_error", error=str(e))
        raise InternalError(f"Failed to validate ticker symbol: {e}") from e

    logger.info("validation_result", valid=validation.valid)
    return JSONResponse(status_code=200 if validation.valid else 404, content=_dump(validation))


@router.get("/analysis/{ticker}")
async def stock_analysis(ticker: str, orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    """Full analysis; provider outages are absorbed by fallback data."""
    symbol = clean_ticker(ticker, route="analysis")
    try:
        result = await orchestrator.analyze(symbol)
    except TickerNotFoundError:
        raise
    except Exception as e:
        logger.error("analysis_error", error=str(e))
        raise InternalError(f"Internal server error while getting stock analysis: {e}") from e
    return JSONResponse(content=_dump(result))


@router.post("/refresh/{ticker}")
async def refresh_stock(ticker: str, orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    symbol = clean_ticker(ticker, route="refresh")
    return await orchestrator.refresh(symbol)


@router.get("/popular")
async def popular_stocks(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)):
    settings = get_settings()
    bind_request_context(route="popular")
    try:
        stocks = await orchestrator.popular(settings.popular_symbols)
    except Exception as e:
        logger.error("popular_error", error=str(e))
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return {"success": True, "stocks": [_dump(s) for s in stocks]}


app.include_router(router)
