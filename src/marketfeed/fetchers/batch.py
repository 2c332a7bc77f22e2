"""Batch orchestrator: fetch the whole catalog, isolating per-asset failures.

Catalog entries may be fetched concurrently (bounded by a semaphore), but the
result list always follows catalog order: forex pairs, then commodities, then
cryptocurrencies.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import structlog

from marketfeed.exceptions import AllProvidersExhausted
from marketfeed.fetchers.catalog import COMMODITIES, CRYPTOCURRENCIES, FOREX_PAIRS
from marketfeed.logging import get_logger
from marketfeed.models import Asset

if TYPE_CHECKING:
    from marketfeed.fetchers.service import MarketDataService

logger = get_logger(__name__)


class BatchOrchestrator:
    """Runs the per-class fetchers over every catalog entry.

    Args:
        service: The unified fetchers.
        concurrency: Maximum catalog entries in flight at once. Each entry's
            provider fallback stays sequential regardless.
    """

    def __init__(self, service: "MarketDataService", concurrency: int = 1) -> None:
        self._service = service
        self._concurrency = max(1, concurrency)

    def _jobs(self) -> list[tuple[str, Callable[[], Awaitable[Asset]]]]:
        jobs: list[tuple[str, Callable[[], Awaitable[Asset]]]] = []
        for pair in FOREX_PAIRS:
            jobs.append(
                (
                    pair.symbol,
                    lambda p=pair: self._service.fetch_forex_rate(p.from_currency, p.to_currency),
                )
            )
        for commodity in COMMODITIES:
            jobs.append(
                (
                    commodity.name,
                    lambda c=commodity: self._service.fetch_commodity_price(c.symbol, c.name),
                )
            )
        for coin in CRYPTOCURRENCIES:
            jobs.append(
                (coin.name, lambda c=coin: self._service.fetch_crypto_price(c.id))
            )
        return jobs

    async def run(self) -> list[Asset]:
        """Fetch every catalog entry and return the successes in catalog order."""
        jobs = self._jobs()
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(label: str, job: Callable[[], Awaitable[Asset]]) -> Asset:
            async with semaphore:
                with structlog.contextvars.bound_contextvars(catalog_asset=label):
                    return await job()

        results = await asyncio.gather(
            *(_bounded(label, job) for label, job in jobs), return_exceptions=True
        )

        assets: list[Asset] = []
        for (label, _), result in zip(jobs, results):
            if isinstance(result, AllProvidersExhausted):
                logger.warning("catalog_asset_unavailable", asset=label, error=str(result))
            elif isinstance(result, asyncio.CancelledError):
                raise result
            elif isinstance(result, BaseException):
                logger.error(
                    "catalog_asset_fetch_error",
                    asset=label,
                    error=repr(result),
                    exc_info=result,
                )
            else:
                assets.append(result)

        logger.info(
            "market_data_batch_complete",
            fetched=len(assets),
            failed=len(jobs) - len(assets),
        )
        return assets
