"""
StockPulse — OAuth2 access-token cache.

Holds one bearer token in process memory. Readers take the cached token
without locking; a miss or an expired token is refreshed under an
asyncio.Lock and re-checked inside the lock, so a burst of concurrent
requests triggers a single token exchange.
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from cachetools import TLRUCache

from stockpulse.data.result import ProviderError
from stockpulse.utils.logger import get_logger

logger = get_logger("token_cache")

_KEY = "access_token"


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_in: float  # seconds, as reported by the issuer


class TokenExchangeError(Exception):
    """The client-credentials exchange failed."""

    def __init__(self, error: ProviderError):
        super().__init__(error.message)
        self.error = error


TokenFetcher = Callable[[], Awaitable[AccessToken]]


class TokenCache:
    """Single-slot token cache; expiry = issue time + TTL - safety margin."""

    def __init__(
        self,
        fetcher: TokenFetcher,
        safety_margin: float = 60.0,
        timer: Callable[[], float] = time.monotonic,
    ):
        self._fetcher = fetcher
        self._safety_margin = safety_margin
        self._cache: TLRUCache = TLRUCache(maxsize=1, ttu=self._expires_at, timer=timer)
        self._lock = asyncio.Lock()
        self.refresh_count = 0

    def _expires_at(self, _key: str, token: AccessToken, now: float) -> float:
        return now + max(token.expires_in - self._safety_margin, 0.0)

    def peek(self) -> Optional[str]:
        """Return the cached token if still valid, without refreshing."""
        token = self._cache.get(_KEY)
        return token.value if token is not None else None

    async def get(self) -> str:
        """Return a valid token, refreshing it if missing or expired."""
        cached = self.peek()
        if cached is not None:
            return cached
        async with self._lock:
            cached = self.peek()
            if cached is not None:
                return cached
            return await self._refresh_locked()

    async def refresh(self) -> str:
        """Force a new token exchange."""
        async with self._lock:
            return await self._refresh_locked()

    def invalidate(self) -> None:
        self._cache.clear()

    async def _refresh_locked(self) -> str:
        token = await self._fetcher()
        self.refresh_count += 1
        self._cache[_KEY] = token
        logger.info("access_token_refreshed", expires_in=token.expires_in)
        return token.value
