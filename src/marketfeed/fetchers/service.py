"""Unified fetchers: cache lookup, health-ranked fallback and normalization.

Every public fetch follows the same shape:

1. Serve a fresh cache entry if one exists (no provider call, no health update).
2. Rank healthy providers by priority.
3. Try each provider that supports the request, strictly one after another.
   The first normalized success is recorded on the health tracker, cached and
   returned. Any failure is recorded, logged and the next provider is tried.
4. If no provider succeeds, raise AllProvidersExhausted.
"""

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

from marketfeed.exceptions import AllProvidersExhausted, MarketDataError, ProviderDataError
from marketfeed.fetchers.batch import BatchOrchestrator
from marketfeed.fetchers.catalog import CatalogAsset, crypto_identity, forex_identity
from marketfeed.fetchers.normalize import HISTORY_NORMALIZERS, QUOTE_NORMALIZERS, Quote
from marketfeed.health.tracker import ProviderHealthTracker
from marketfeed.logging import get_logger
from marketfeed.models import Asset, AssetClass, AssetType, HistoricalBar, ProviderHealth, now_ms
from marketfeed.providers.registry import ProviderRegistry
from marketfeed.providers.types import FetchRequest
from marketfeed.storage.cache import CacheStore

logger = get_logger(__name__)

T = TypeVar("T")

#: Normalizer bound to one provider for one request: raw payload -> result.
_Normalize = Callable[[Any], T]


class MarketDataService:
    """Public fetch operations over the provider fallback chain.

    Args:
        registry: Configured providers and their adapters.
        tracker: Provider health tracker used for ranking and bookkeeping.
        cache: Short-lived result cache.
        call_timeout: Seconds allowed for one adapter call before it counts
            as a failure and the next provider is tried.
        batch_concurrency: Catalog entries fetched in parallel by
            fetch_all_market_data (1 = sequential).
        clock: Millisecond clock used for ``Asset.last_updated``.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        tracker: ProviderHealthTracker,
        cache: CacheStore,
        call_timeout: float = 10.0,
        batch_concurrency: int = 1,
        default_history_period: str = "7d",
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._registry = registry
        self._tracker = tracker
        self._cache = cache
        self._call_timeout = call_timeout
        self._batch_concurrency = batch_concurrency
        self._default_history_period = default_history_period
        self._clock = clock

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def tracker(self) -> ProviderHealthTracker:
        return self._tracker

    # ──────────────────────────────────────────────
    # Public fetch operations
    # ──────────────────────────────────────────────

    async def fetch_forex_rate(self, from_currency: str, to_currency: str) -> Asset:
        """Latest rate for a currency pair."""
        identity = forex_identity(from_currency, to_currency)
        base, quote = identity.symbol.split("/")
        request = FetchRequest(
            asset_class=AssetClass.FOREX,
            symbol=identity.symbol,
            asset_id=identity.id,
            asset_type=AssetType.FOREX,
        )
        return await self._fetch_quote(request, f"forex_{base}_{quote}", identity)

    async def fetch_commodity_price(self, symbol: str, name: str) -> Asset:
        """Latest price for a commodity such as ``XAUUSD``."""
        identity = CatalogAsset(id=symbol, symbol=symbol, name=name, type=AssetType.COMMODITY)
        request = FetchRequest(
            asset_class=AssetClass.COMMODITY,
            symbol=symbol,
            asset_id=symbol,
            asset_type=AssetType.COMMODITY,
        )
        return await self._fetch_quote(request, f"commodity_{symbol}", identity)

    async def fetch_crypto_price(self, coin_id: str) -> Asset:
        """Latest USD price for a CoinGecko coin id such as ``bitcoin``."""
        identity = crypto_identity(coin_id)
        request = FetchRequest(
            asset_class=AssetClass.CRYPTO,
            symbol=coin_id,
            asset_id=coin_id,
            asset_type=AssetType.CRYPTO,
            ticker=identity.symbol if identity.symbol != coin_id.upper() else "",
        )
        return await self._fetch_quote(request, f"crypto_{coin_id}", identity)

    async def fetch_asset_history(
        self, asset: Asset | CatalogAsset, period: str | None = None
    ) -> list[HistoricalBar]:
        """OHLCV history for an asset over ``period`` (``1d``, ``7d``, ``30d``)."""
        period = period or self._default_history_period
        request = FetchRequest(
            asset_class=AssetClass.HISTORY,
            symbol=asset.symbol,
            asset_id=asset.id,
            asset_type=asset.type,
            period=period,
        )

        def _pick(provider_id: str) -> _Normalize[list[HistoricalBar]] | None:
            normalizer = HISTORY_NORMALIZERS.get(provider_id)
            if normalizer is None:
                return None

            def _normalize(payload: Any) -> list[HistoricalBar]:
                bars = normalizer(payload, request)
                if not bars:
                    raise ProviderDataError("empty history")
                return bars

            return _normalize

        return await self._resolve(
            request,
            cache_key=f"history_{asset.id}_{period}",
            pick_normalizer=_pick,
            encode=lambda bars: [bar.to_dict() for bar in bars],
            decode=lambda data: [HistoricalBar.from_dict(item) for item in data],
        )

    async def fetch_all_market_data(self) -> list[Asset]:
        """Every catalog asset that could be fetched, in catalog order. Never raises."""
        return await BatchOrchestrator(self, concurrency=self._batch_concurrency).run()

    async def get_providers_status(self) -> list[ProviderHealth]:
        """Current health record of every configured provider."""
        return await self._tracker.get_all()

    # ──────────────────────────────────────────────
    # Fallback engine
    # ──────────────────────────────────────────────

    async def _fetch_quote(
        self, request: FetchRequest, cache_key: str, identity: CatalogAsset
    ) -> Asset:
        def _pick(provider_id: str) -> _Normalize[Asset] | None:
            normalizer = QUOTE_NORMALIZERS.get((provider_id, request.asset_class))
            if normalizer is None:
                return None
            display_name = self._registry.adapter_of(provider_id).display_name

            def _normalize(payload: Any) -> Asset:
                quote: Quote = normalizer(payload, request)
                return Asset(
                    id=identity.id,
                    symbol=identity.symbol,
                    name=identity.name,
                    type=identity.type,
                    price=quote.price,
                    change_24h=quote.change,
                    change_24h_percent=quote.change_percent,
                    last_updated=self._clock(),
                    provider=display_name,
                )

            return _normalize

        return await self._resolve(
            request,
            cache_key=cache_key,
            pick_normalizer=_pick,
            encode=lambda asset: asset.to_dict(),
            decode=Asset.from_dict,
        )

    async def _resolve(
        self,
        request: FetchRequest,
        cache_key: str,
        pick_normalizer: Callable[[str], _Normalize[T] | None],
        encode: Callable[[T], Any],
        decode: Callable[[Any], T],
    ) -> T:
        cached = await self._cache.get(cache_key)
        if cached is not None:
            try:
                return decode(cached)
            except (KeyError, ValueError, TypeError, ArithmeticError) as e:
                logger.warning("cache_decode_error", key=cache_key, error=str(e))

        log = logger.bind(request=request.describe(), cache_key=cache_key)
        attempts: list[str] = []

        for provider_id in await self._tracker.rank_healthy_providers():
            adapter = self._registry.adapter_of(provider_id)
            normalize = pick_normalizer(provider_id)
            if normalize is None or not adapter.supports(request):
                continue

            try:
                result = await asyncio.wait_for(
                    adapter.fetch(request), timeout=self._call_timeout
                )
                if not result.ok:
                    raise ProviderDataError(result.error or "unknown provider error")
                value = self._normalize(normalize, result.payload)
            except (MarketDataError, asyncio.TimeoutError) as e:
                reason = str(e) or type(e).__name__
                attempts.append(f"{provider_id}: {reason}")
                log.warning("provider_fetch_failed", provider=provider_id, error=reason)
                await self._tracker.record_result(provider_id, False)
                continue

            await self._tracker.record_result(provider_id, True)
            await self._cache.set(cache_key, encode(value))
            log.debug("provider_fetch_succeeded", provider=provider_id)
            return value

        log.error("all_providers_exhausted", attempts=len(attempts))
        raise AllProvidersExhausted(request.describe(), attempts)

    @staticmethod
    def _normalize(normalize: _Normalize[T], payload: Any) -> T:
        try:
            return normalize(payload)
        except ProviderDataError:
            raise
        except (KeyError, IndexError, ValueError, TypeError, AttributeError, ArithmeticError) as e:
            raise ProviderDataError(f"malformed payload: {type(e).__name__}: {e}") from e
