"""
StockPulse — Central Configuration
All settings are loaded from environment variables with sensible defaults.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional


class MarketDataSettings(BaseSettings):
    """Alpha Vantage market-data provider."""
    alpha_vantage_api_key: str = ""
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    intraday_output_size: str = "full"

    request_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class NewsSettings(BaseSettings):
    """News search provider."""
    news_api_key: str = ""
    news_base_url: str = "https://newsapi.org/v2/everything"
    news_page_size: int = 10
    news_language: str = "en"

    request_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class LLMSettings(BaseSettings):
    """Chat-completion endpoint behind an OAuth2 client-credentials exchange."""
    client_id: str = ""
    client_secret: str = ""
    app_key: str = ""
    token_url: str = "https://id.cisco.com/oauth2/default/v1/token"
    endpoint: str = "https://chat-ai.cisco.com"
    deployment: str = "gpt-4.1"
    api_version: str = "2024-12-01-preview"
    temperature: float = 0.1
    max_tokens: int = 10
    token_safety_margin: float = 60.0  # seconds
    default_token_ttl: int = 3600

    request_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_prefix="LLM_", env_file=".env", extra="ignore")

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret)


class AnalysisSettings(BaseSettings):
    """Recommendation and charting parameters."""
    ma_window: int = 20
    max_chart_points: int = 100
    fine_bucket: int = 1
    medium_bucket: int = 15
    coarse_bucket: int = 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class AppSettings(BaseSettings):
    """Top-level application settings."""
    app_name: str = "StockPulse"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    api_prefix: str = "/api/stocks"

    popular_symbols: List[str] = ["AAPL", "TSLA", "GOOGL", "MSFT", "AMZN", "NVDA"]
    cors_origins: List[str] = ["*"]

    market_data: MarketDataSettings = Field(default_factory=MarketDataSettings)
    news: NewsSettings = Field(default_factory=NewsSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Singleton
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings
