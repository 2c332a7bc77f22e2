"""Configuration system using pydantic-settings with environment variable loading.

Each provider has its own settings group so base URL, API key, priority and
rate-limit ceiling can be overridden independently (e.g. ``TWELVE_DATA_API_KEY``).
"""

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseSettings):
    """Connection settings shared by every data provider.

    ``rate_limit`` is the documented call ceiling of the provider's plan. It is
    reported by the status endpoint but not enforced by the fallback engine.
    """

    base_url: str
    api_key: SecretStr = SecretStr("")
    priority: int | None = None
    rate_limit: int = 0
    rate_limit_window: Literal["second", "day", "month"] = "day"
    enabled: bool = True


class AlphaVantageSettings(ProviderSettings):
    """Alpha Vantage: primary forex/commodity source."""

    model_config = SettingsConfigDict(env_prefix="ALPHA_VANTAGE_")

    base_url: str = "https://www.alphavantage.co/query"
    api_key: SecretStr = SecretStr("demo")
    priority: int | None = 1
    rate_limit: int = 25


class TwelveDataSettings(ProviderSettings):
    """Twelve Data: secondary forex/crypto source."""

    model_config = SettingsConfigDict(env_prefix="TWELVE_DATA_")

    base_url: str = "https://api.twelvedata.com"
    priority: int | None = 2
    rate_limit: int = 800


class ExchangeRateSettings(ProviderSettings):
    """Exchange Rate API: forex-only spot rates."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_RATE_")

    base_url: str = "https://api.exchangerate-api.com/v4/latest"
    priority: int | None = 3
    rate_limit: int = 1500
    rate_limit_window: Literal["second", "day", "month"] = "month"


class MetalPriceSettings(ProviderSettings):
    """Metal Price API: gold and silver spot prices."""

    model_config = SettingsConfigDict(env_prefix="METAL_PRICE_")

    base_url: str = "https://api.metals.live/v1/spot"
    priority: int | None = 4
    rate_limit: int = 100


class CoinGeckoSettings(ProviderSettings):
    """CoinGecko: crypto prices and history, no key required."""

    model_config = SettingsConfigDict(env_prefix="COINGECKO_")

    base_url: str = "https://api.coingecko.com/api/v3"
    priority: int | None = 5
    rate_limit: int = 10
    rate_limit_window: Literal["second", "day", "month"] = "second"


class CacheSettings(BaseSettings):
    """Quote cache and provider health persistence."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    backend: Literal["sqlite", "memory"] = "sqlite"
    db_path: str = "data/market_feed.db"
    duration_ms: int = 60_000


class HttpSettings(BaseSettings):
    """Outbound HTTP client configuration."""

    model_config = SettingsConfigDict(env_prefix="HTTP_")

    timeout_seconds: float = 10.0  # per adapter call, bounds one fallback step
    user_agent: str = "MarketFeed/1.0"


class FeedSettings(BaseSettings):
    """Batch fetch behaviour."""

    model_config = SettingsConfigDict(env_prefix="FEED_")

    batch_concurrency: int = 4  # 1 = fetch catalog entries one at a time
    default_history_period: str = "7d"


class ServerSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = "0.0.0.0"
    port: int = 3000
    enabled: bool = True


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    alpha_vantage: AlphaVantageSettings = AlphaVantageSettings()
    twelve_data: TwelveDataSettings = TwelveDataSettings()
    exchange_rate: ExchangeRateSettings = ExchangeRateSettings()
    metal_price: MetalPriceSettings = MetalPriceSettings()
    coingecko: CoinGeckoSettings = CoinGeckoSettings()
    cache: CacheSettings = CacheSettings()
    http: HttpSettings = HttpSettings()
    feed: FeedSettings = FeedSettings()
    server: ServerSettings = ServerSettings()
