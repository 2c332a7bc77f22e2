"""Default provider registry built from application settings.

To add a provider: implement a ProviderAdapter, give it a settings group in
marketfeed.config, and list it in _ADAPTERS below.
"""

import httpx

from marketfeed.config import AppSettings, ProviderSettings
from marketfeed.providers.alpha_vantage import AlphaVantageAdapter
from marketfeed.providers.base import ProviderAdapter
from marketfeed.providers.coingecko import CoinGeckoAdapter
from marketfeed.providers.exchange_rate import ExchangeRateAdapter
from marketfeed.providers.metal_price import MetalPriceAdapter
from marketfeed.providers.registry import ProviderEntry, ProviderRegistry
from marketfeed.providers.twelve_data import TwelveDataAdapter

_ADAPTERS: list[tuple[str, type[ProviderAdapter]]] = [
    ("alpha_vantage", AlphaVantageAdapter),
    ("twelve_data", TwelveDataAdapter),
    ("exchange_rate", ExchangeRateAdapter),
    ("metal_price", MetalPriceAdapter),
    ("coingecko", CoinGeckoAdapter),
]


def create_http_client(settings: AppSettings) -> httpx.AsyncClient:
    """Shared async HTTP client used by every adapter."""
    return httpx.AsyncClient(
        timeout=settings.http.timeout_seconds,
        headers={"Accept": "application/json", "User-Agent": settings.http.user_agent},
        follow_redirects=True,
    )


def create_default_registry(
    settings: AppSettings, http: httpx.AsyncClient
) -> ProviderRegistry:
    """Create a registry with every enabled built-in provider."""
    registry = ProviderRegistry()
    for field_name, adapter_cls in _ADAPTERS:
        provider_settings: ProviderSettings = getattr(settings, field_name)
        if not provider_settings.enabled:
            continue
        registry.register(
            ProviderEntry(
                provider_id=adapter_cls.provider_id,
                adapter=adapter_cls(provider_settings, http),
                priority=provider_settings.priority,
                rate_limit=provider_settings.rate_limit,
                rate_limit_window=provider_settings.rate_limit_window,
            )
        )
    return registry
