"""
StockPulse — Chat-completion client.
Azure-OpenAI-style deployment endpoint authenticated with a bearer token from
an OAuth2 client-credentials exchange.
"""
import json
from typing import Any, Dict, List, Optional

import aiohttp

from stockpulse.config.settings import get_settings
from stockpulse.data.adapters.base import BaseDataAdapter
from stockpulse.data.result import Err, Ok, ProviderError, Result
from stockpulse.sentiment.token_cache import AccessToken, TokenCache, TokenExchangeError
from stockpulse.utils.logger import get_logger

logger = get_logger("llm_client")

SOURCE = "llm"


def extract_content(data: Dict[str, Any]) -> Optional[str]:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


class ChatCompletionClient(BaseDataAdapter):
    """Single-shot chat completions; the token cache is injectable."""

    def __init__(self, token_cache: Optional[TokenCache] = None):
        self.settings = get_settings().llm
        super().__init__(source=SOURCE, timeout_seconds=self.settings.request_timeout_seconds)
        self.token_cache = token_cache or TokenCache(
            self.fetch_token, safety_margin=self.settings.token_safety_margin
        )

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    @property
    def completions_url(self) -> str:
        return (
            f"{self.settings.endpoint.rstrip('/')}/openai/deployments/"
            f"{self.settings.deployment}/chat/completions"
        )

    async def fetch_token(self) -> AccessToken:
        """Client-credentials exchange. Raises TokenExchangeError on any failure."""
        result = await self._request_json(
            "POST",
            self.settings.token_url,
            data={"grant_type": "client_credentials"},
            auth=aiohttp.BasicAuth(self.settings.client_id, self.settings.client_secret),
            headers={"Accept": "*/*"},
        )
        if isinstance(result, Err):
            logger.error("token_exchange_failed", status=result.error.status, error=result.error.message)
            raise TokenExchangeError(result.error)

        value = result.value.get("access_token")
        if not value:
            raise TokenExchangeError(ProviderError.unavailable(SOURCE, "token response without access_token"))
        expires_in = result.value.get("expires_in") or self.settings.default_token_ttl
        return AccessToken(value=value, expires_in=float(expires_in))

    async def complete(self, messages: List[Dict[str, str]]) -> Result[str]:
        if not self.enabled:
            return Err(ProviderError.unavailable(SOURCE, "LLM credentials not configured"))

        try:
            token = await self.token_cache.get()
        except TokenExchangeError as e:
            return Err(e.error)

        payload = {
            "messages": messages,
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens,
            "user": json.dumps({"appkey": self.settings.app_key}),
        }
        result = await self._request_json(
            "POST",
            self.completions_url,
            params={"api-version": self.settings.api_version},
            json=payload,
            headers={"api-key": token, "Authorization": f"Bearer {token}"},
        )
        if isinstance(result, Err):
            if result.error.status == 401:
                # Revoked before its TTL; the next call exchanges a fresh one
                self.token_cache.invalidate()
            return result

        content = extract_content(result.value)
        if content is None:
            return Err(ProviderError.unavailable(SOURCE, "completion without message content"))
        return Ok(content)
