"""
StockPulse — Base Data Adapter Interface
Session lifecycle and HTTP-status-to-ProviderError mapping shared by every
outbound provider.
"""
import asyncio
from abc import ABC
from typing import Any, Dict, Optional

import aiohttp

from stockpulse.data.result import Err, Ok, ProviderError, Result
from stockpulse.utils.logger import get_logger

logger = get_logger("adapter")


class BaseDataAdapter(ABC):
    """Abstract base class for all outbound provider adapters."""

    def __init__(self, source: str, timeout_seconds: float = 10.0):
        self.source = source
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def connect(self) -> None:
        """Initialize the HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            logger.info("adapter_connected", source=self.source)

    async def disconnect(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
        logger.info("adapter_disconnected", source=self.source)

    async def _request_json(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> Result[Dict[str, Any]]:
        """
        Issue one request and return the decoded JSON body.
        No retries: a failure is reported once and the caller picks the fallback.
        """
        if not self._session or self._session.closed:
            await self.connect()

        try:
            async with self._session.request(method, url, **kwargs) as resp:
                if resp.status >= 500:
                    return Err(ProviderError.unavailable(self.source, f"HTTP {resp.status}", resp.status))
                if resp.status >= 400:
                    return Err(ProviderError.rejected(self.source, f"HTTP {resp.status}", resp.status))
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError:
            return Err(ProviderError.unavailable(self.source, "request timed out"))
        except aiohttp.ClientError as e:
            return Err(ProviderError.unavailable(self.source, f"connection error: {e}"))
        except ValueError as e:
            return Err(ProviderError.unavailable(self.source, f"malformed response body: {e}"))

        if not isinstance(data, dict):
            return Err(ProviderError.unavailable(self.source, "unexpected response shape"))
        return Ok(data)

    async def _get_json(self, url: str, params: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Result[Dict[str, Any]]:
        return await self._request_json("GET", url, params=params, headers=headers)

