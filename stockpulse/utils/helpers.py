"""
StockPulse — Common Utility Functions
"""
from datetime import datetime, timezone
from typing import Any, Optional
import math
import re

TICKER_PATTERN = re.compile(r"^[A-Z]{1,5}$")


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> str:
    """Return current UTC timestamp as ISO string."""
    return utc_now().isoformat()


def is_valid_ticker(ticker: str) -> bool:
    """True for 1-5 uppercase ASCII letters."""
    return bool(TICKER_PATTERN.match(ticker))


def clamp(value: float, min_val: float = 0.0, max_val: float = 100.0) -> float:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def safe_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Parse a provider number; returns default for blanks, 'None' and garbage."""
    if value is None:
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def format_market_cap(market_cap: Any) -> str:
    """Format a raw market capitalisation as $1.23T / $4.56B / $7.89M."""
    try:
        num = int(float(market_cap))
    except (TypeError, ValueError, OverflowError):
        return "N/A"

    if num >= 1e12:
        return f"${num / 1e12:.2f}T"
    elif num >= 1e9:
        return f"${num / 1e9:.2f}B"
    elif num >= 1e6:
        return f"${num / 1e6:.2f}M"
    return f"${num:,}"
