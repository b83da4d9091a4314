"""
StockPulse — Alpha Vantage Market Data Adapter
Ticker validation (symbol search + company overview), 1-minute intraday bars
and global quotes. Alpha Vantage field names stay inside the map_* functions.
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TypeVar

from stockpulse.config.settings import get_settings
from stockpulse.data.adapters.base import BaseDataAdapter
from stockpulse.data.fallback import fallback_validation
from stockpulse.data.models import Bar, Quote, ValidationResult
from stockpulse.data.result import Err, Ok, ProviderError, ProviderErrorKind, Result
from stockpulse.utils.helpers import format_market_cap, safe_float
from stockpulse.utils.logger import get_logger

logger = get_logger("alphavantage_adapter")

SOURCE = "alphavantage"
INTRADAY_KEY = "Time Series (1min)"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

T = TypeVar("T")


def _not_found(ticker: str) -> ValidationResult:
    return ValidationResult(
        valid=False,
        message=f"Stock symbol '{ticker}' not found. Please verify the ticker symbol.",
    )


class MalformedPayload(ValueError):
    """A 200 body whose structure cannot be read."""


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _section(data: Dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return kind()
    if not isinstance(value, kind):
        raise MalformedPayload(f"'{key}' is {type(value).__name__}, expected {kind.__name__}")
    return value


def check_payload(data: Dict[str, Any]) -> Optional[ProviderError]:
    """Alpha Vantage reports throttling and bad calls with HTTP 200 bodies."""
    if "Error Message" in data:
        return ProviderError.rejected(SOURCE, str(data["Error Message"]))
    for key in ("Note", "Information"):
        if key in data:
            return ProviderError.unavailable(SOURCE, str(data[key]))
    return None


def map_exact_match(data: Dict[str, Any], ticker: str) -> Optional[Dict[str, Any]]:
    matches = _section(data, "bestMatches", list)
    if not all(isinstance(m, dict) for m in matches):
        raise MalformedPayload("'bestMatches' holds non-object entries")
    for match in matches:
        if (_text(match.get("1. symbol")) or "").upper() == ticker.upper():
            return match
    return None


def map_overview(overview: Dict[str, Any], match: Dict[str, Any]) -> Optional[ValidationResult]:
    """Map an OVERVIEW payload; None when it carries no recognised symbol."""
    symbol = _text(overview.get("Symbol"))
    if not symbol or symbol == "None":
        return None
    market_cap = overview.get("MarketCapitalization")
    return ValidationResult(
        valid=True,
        company_name=_text(overview.get("Name")) or _text(match.get("2. name")),
        industry=_text(overview.get("Industry")) or "N/A",
        market_cap=format_market_cap(market_cap) if market_cap else "N/A",
        current_price="N/A",
        exchange=_text(overview.get("Exchange")) or "N/A",
        sector=_text(overview.get("Sector")) or "N/A",
        description=_text(overview.get("Description")) or "N/A",
    )


def map_intraday(data: Dict[str, Any]) -> List[Bar]:
    """Map TIME_SERIES_INTRADAY (newest first) to bars, oldest first."""
    series = _section(data, INTRADAY_KEY, dict)
    bars = []
    for stamp, values in series.items():
        if not isinstance(values, dict):
            continue
        try:
            time = datetime.strptime(stamp, TIME_FORMAT)
        except (TypeError, ValueError):
            continue
        volume = safe_float(values.get("5. volume"), 0.0)
        bars.append(
            Bar(
                time=time,
                open=safe_float(values.get("1. open"), float("nan")),
                high=safe_float(values.get("2. high"), float("nan")),
                low=safe_float(values.get("3. low"), float("nan")),
                close=safe_float(values.get("4. close"), float("nan")),
                volume=max(int(volume), 0),
            )
        )
    bars.sort(key=lambda b: b.time)
    return bars


def map_quote(data: Dict[str, Any]) -> Optional[Quote]:
    quote = _section(data, "Global Quote", dict)
    symbol = _text(quote.get("01. symbol"))
    price = safe_float(quote.get("05. price"))
    if not symbol or price is None:
        return None
    return Quote(
        symbol=symbol,
        price=price,
        change=safe_float(quote.get("09. change"), 0.0),
        change_percent=_text(quote.get("10. change percent")),
    )


class AlphaVantageAdapter(BaseDataAdapter):
    """Market Data Client backed by Alpha Vantage."""

    def __init__(self):
        self.settings = get_settings().market_data
        super().__init__(source=SOURCE, timeout_seconds=self.settings.request_timeout_seconds)
        self.api_key = self.settings.alpha_vantage_api_key
        self.base_url = self.settings.alpha_vantage_base_url

    async def _query(self, function: str, **params: Any) -> Result[Dict[str, Any]]:
        if not self.api_key:
            return Err(ProviderError.unavailable(SOURCE, "API key not configured"))

        result = await self._get_json(self.base_url, params={"function": function, "apikey": self.api_key, **params})
        if isinstance(result, Err):
            return result
        if not isinstance(result.value, dict):
            return Err(ProviderError.unavailable(SOURCE, "malformed payload: body is not an object"))
        problem = check_payload(result.value)
        if problem is not None:
            return Err(problem)
        return result

    def _map(self, mapper: Callable[..., T], *args: Any) -> Result[T]:
        """Apply a mapper; a body it cannot read is reported as unavailable."""
        try:
            return Ok(mapper(*args))
        except ValueError as e:  # MalformedPayload or a pydantic ValidationError
            logger.warning("malformed_payload", mapper=mapper.__name__, error=str(e))
            return Err(ProviderError.unavailable(SOURCE, f"malformed payload: {e}"))

    async def validate(self, ticker: str) -> ValidationResult:
        """
        Validate a ticker and enrich it with company information.
        Unavailable provider -> static table; rejected -> not found.
        """
        search = await self._query("SYMBOL_SEARCH", keywords=ticker)
        if isinstance(search, Err):
            return self._degrade(ticker, search.error)

        match = self._map(map_exact_match, search.value, ticker)
        if isinstance(match, Err):
            return self._degrade(ticker, match.error)
        if match.value is None:
            logger.info("ticker_no_exact_match", ticker=ticker)
            return _not_found(ticker)

        overview = await self._query("OVERVIEW", symbol=ticker)
        if isinstance(overview, Err):
            return self._degrade(ticker, overview.error)

        mapped = self._map(map_overview, overview.value, match.value)
        if isinstance(mapped, Err):
            return self._degrade(ticker, mapped.error)
        validation = mapped.value
        if validation is None:
            logger.info("ticker_overview_empty", ticker=ticker)
            return ValidationResult(
                valid=False,
                message=f"Unable to retrieve company information for '{ticker}'. Please verify the ticker symbol.",
            )

        quote = await self.get_quote(ticker)
        if isinstance(quote, Ok):
            validation = validation.model_copy(update={"current_price": quote.value.price})

        logger.info("ticker_validated", ticker=ticker, company=validation.company_name)
        return validation

    def _degrade(self, ticker: str, error: ProviderError) -> ValidationResult:
        logger.warning(
            "validation_provider_error",
            ticker=ticker,
            kind=error.kind.value,
            status=error.status,
            error=error.message,
        )
        if error.kind == ProviderErrorKind.REJECTED:
            return _not_found(ticker)
        return fallback_validation(ticker)

    async def fetch_intraday_bars(self, ticker: str) -> Result[List[Bar]]:
        """Raw 1-minute bars, oldest first. Unreadable rows are kept as invalid bars."""
        result = await self._query(
            "TIME_SERIES_INTRADAY",
            symbol=ticker,
            interval="1min",
            outputsize=self.settings.intraday_output_size,
        )
        if isinstance(result, Err):
            return result

        mapped = self._map(map_intraday, result.value)
        if isinstance(mapped, Err):
            return mapped
        bars = mapped.value
        if not bars:
            return Err(ProviderError.unavailable(SOURCE, f"no intraday series for {ticker}"))
        invalid = sum(1 for b in bars if not b.is_valid)
        logger.info("intraday_fetched", ticker=ticker, count=len(bars), invalid=invalid)
        return Ok(bars)

    async def get_quote(self, ticker: str) -> Result[Quote]:
        result = await self._query("GLOBAL_QUOTE", symbol=ticker)
        if isinstance(result, Err):
            return result
        quote = self._map(map_quote, result.value)
        if isinstance(quote, Err):
            return quote
        if quote.value is None:
            return Err(ProviderError.unavailable(SOURCE, f"empty quote for {ticker}"))
        return quote
