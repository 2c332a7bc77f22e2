"""Unified fetchers -- provider fallback, normalization and the batch orchestrator."""

from marketfeed.fetchers.batch import BatchOrchestrator
from marketfeed.fetchers.catalog import (
    COMMODITIES,
    CRYPTOCURRENCIES,
    FOREX_PAIRS,
    CatalogAsset,
    find_catalog_asset,
)
from marketfeed.fetchers.service import MarketDataService

__all__ = [
    "BatchOrchestrator",
    "COMMODITIES",
    "CRYPTOCURRENCIES",
    "CatalogAsset",
    "FOREX_PAIRS",
    "MarketDataService",
    "find_catalog_asset",
]
