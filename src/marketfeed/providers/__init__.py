"""Provider adapters -- one per external data source, plus the registry."""

from marketfeed.providers.alpha_vantage import AlphaVantageAdapter
from marketfeed.providers.base import ProviderAdapter
from marketfeed.providers.coingecko import CoinGeckoAdapter
from marketfeed.providers.exchange_rate import ExchangeRateAdapter
from marketfeed.providers.metal_price import MetalPriceAdapter
from marketfeed.providers.registry import ProviderEntry, ProviderRegistry
from marketfeed.providers.twelve_data import TwelveDataAdapter
from marketfeed.providers.types import FetchRequest, ProviderResult

__all__ = [
    "AlphaVantageAdapter",
    "CoinGeckoAdapter",
    "ExchangeRateAdapter",
    "FetchRequest",
    "MetalPriceAdapter",
    "ProviderAdapter",
    "ProviderEntry",
    "ProviderRegistry",
    "ProviderResult",
    "TwelveDataAdapter",
]
