"""
StockPulse — Provider results and error taxonomy.

Adapters never raise for provider faults. They return ``Ok(value)`` or
``Err(ProviderError)`` and callers branch on ``ProviderError.kind``:

    UNAVAILABLE  timeout, connection failure, 5xx, rate-limit notice,
                 unparseable body or missing credentials -> local fallback data
    REJECTED     4xx or an explicit provider error payload -> not found
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ProviderErrorKind(str, Enum):
    UNAVAILABLE = "unavailable"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ProviderError:
    kind: ProviderErrorKind
    provider: str
    message: str
    status: Optional[int] = None

    @classmethod
    def unavailable(cls, provider: str, message: str, status: Optional[int] = None) -> "ProviderError":
        return cls(ProviderErrorKind.UNAVAILABLE, provider, message, status)

    @classmethod
    def rejected(cls, provider: str, message: str, status: Optional[int] = None) -> "ProviderError":
        return cls(ProviderErrorKind.REJECTED, provider, message, status)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: ProviderError


Result = Union[Ok[T], Err]


class InputError(ValueError):
    """Malformed caller input (e.g. a ticker outside [A-Z]{1,5})."""


class TickerNotFoundError(Exception):
    """Validation came back negative; carries the not-found result."""

    def __init__(self, validation):
        super().__init__(validation.message or "Ticker not found")
        self.validation = validation


class InternalError(RuntimeError):
    """Unexpected failure in transformation logic."""
