"""JSON API endpoints: health check, market snapshot, provider status and per-asset lookups."""

from __future__ import annotations

import time

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from marketfeed.exceptions import UnknownAssetError
from marketfeed.fetchers.catalog import CatalogAsset, find_catalog_asset
from marketfeed.fetchers.service import MarketDataService
from marketfeed.indicators.engine import SignalEngine, describe_strength
from marketfeed.logging import get_logger
from marketfeed.models import AssetType

log = get_logger(__name__)

router = APIRouter()


def _service(request: Request) -> MarketDataService:
    return request.app.state.service


def _catalog_asset(asset_id: str) -> CatalogAsset:
    asset = find_catalog_asset(asset_id)
    if asset is None:
        raise UnknownAssetError(f"Unknown asset '{asset_id}'")
    return asset


@router.get("/health")
async def health() -> JSONResponse:
    """Liveness probe."""
    return JSONResponse(content={"ok": True, "timestamp": int(time.time() * 1000)})


@router.get("/market-data")
async def market_data(request: Request) -> JSONResponse:
    """Snapshot of every catalog asset that could be fetched."""
    assets = await _service(request).fetch_all_market_data()
    log.debug("market_data_served", count=len(assets))
    return JSONResponse(content=[asset.to_dict() for asset in assets])


@router.get("/providers")
async def providers(request: Request) -> JSONResponse:
    """Health record plus static configuration of each provider."""
    service = _service(request)
    statuses = await service.get_providers_status()

    result = []
    for health in statuses:
        entry = service.registry.get(health.provider)
        result.append({
            **health.to_dict(),
            "displayName": entry.adapter.display_name,
            "priority": entry.priority,
            "rateLimit": entry.rate_limit,
            "rateLimitWindow": entry.rate_limit_window,
        })
    return JSONResponse(content=result)


@router.get("/forex/{from_currency}/{to_currency}")
async def forex(request: Request, from_currency: str, to_currency: str) -> JSONResponse:
    asset = await _service(request).fetch_forex_rate(from_currency.upper(), to_currency.upper())
    return JSONResponse(content=asset.to_dict())


@router.get("/commodities/{symbol}")
async def commodity(request: Request, symbol: str) -> JSONResponse:
    catalog_asset = _catalog_asset(symbol.upper())
    asset = await _service(request).fetch_commodity_price(catalog_asset.symbol, catalog_asset.name)
    return JSONResponse(content=asset.to_dict())


@router.get("/crypto/{coin_id}")
async def crypto(request: Request, coin_id: str) -> JSONResponse:
    asset = await _service(request).fetch_crypto_price(coin_id.lower())
    return JSONResponse(content=asset.to_dict())


@router.get("/history/{asset_id}")
async def history(
    request: Request,
    asset_id: str,
    period: str = Query("7d", pattern="^(1d|7d|30d)$"),
) -> JSONResponse:
    bars = await _service(request).fetch_asset_history(_catalog_asset(asset_id), period)
    return JSONResponse(content=[bar.to_dict() for bar in bars])


@router.get("/signals/{asset_id}")
async def signals(request: Request, asset_id: str) -> JSONResponse:
    """Indicator signals for one catalog asset, computed from its history."""
    catalog_asset = _catalog_asset(asset_id)
    service = _service(request)

    if catalog_asset.type is AssetType.FOREX:
        base, quote = catalog_asset.symbol.split("/")
        asset = await service.fetch_forex_rate(base, quote)
    elif catalog_asset.type is AssetType.COMMODITY:
        asset = await service.fetch_commodity_price(catalog_asset.symbol, catalog_asset.name)
    else:
        asset = await service.fetch_crypto_price(catalog_asset.id)

    engine: SignalEngine = request.app.state.signal_engine or SignalEngine(service)
    result = []
    for signal in await engine.signals_for(asset):
        result.append({
            **signal.to_dict(),
            "strengthLabel": describe_strength(signal.strength),
        })
    return JSONResponse(content=result)
