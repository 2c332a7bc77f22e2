"""Entry point for the market feed.

Wires all components together and serves the HTTP API with uvicorn. Components
share one asyncio event loop; FastAPI's lifespan opens the key-value database
on startup and closes it together with the HTTP client on shutdown.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. httpx.AsyncClient (shared by every adapter)
4. KeyValueDatabase + KeyValueStore (sqlite or memory backend)
5. CacheStore (60 s quote cache)
6. ProviderRegistry (adapters with priorities)
7. ProviderHealthTracker (over KeyValueHealthStore)
8. MarketDataService (unified fetchers + batch orchestrator)
9. SignalEngine (technical indicators)

With SERVER_ENABLED=false the feed fetches one market snapshot, logs it and
exits.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from marketfeed.config import AppSettings
from marketfeed.fetchers.service import MarketDataService
from marketfeed.health.store import KeyValueHealthStore
from marketfeed.health.tracker import ProviderHealthTracker
from marketfeed.indicators.engine import SignalEngine
from marketfeed.logging import get_logger, setup_logging
from marketfeed.providers.defaults import create_default_registry, create_http_client
from marketfeed.storage.cache import CacheStore
from marketfeed.storage.database import KeyValueDatabase
from marketfeed.storage.kv import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build the component graph. Does NOT open the database."""
    logger = get_logger("marketfeed.main")

    http_client = create_http_client(settings)

    database: KeyValueDatabase | None = None
    store: KeyValueStore
    if settings.cache.backend == "sqlite":
        database = KeyValueDatabase(settings.cache.db_path)
        store = SQLiteKeyValueStore(database)
    else:
        store = InMemoryKeyValueStore()

    cache = CacheStore(store, duration_ms=settings.cache.duration_ms)
    registry = create_default_registry(settings, http_client)
    tracker = ProviderHealthTracker(registry, KeyValueHealthStore(store))

    service = MarketDataService(
        registry=registry,
        tracker=tracker,
        cache=cache,
        call_timeout=settings.http.timeout_seconds,
        batch_concurrency=settings.feed.batch_concurrency,
        default_history_period=settings.feed.default_history_period,
    )

    if not settings.twelve_data.api_key.get_secret_value():
        logger.warning(
            "no_api_key_configured",
            provider="TWELVE_DATA",
            note="Requests will fail and the provider will be quarantined.",
        )

    logger.info(
        "components_built",
        providers=registry.provider_ids,
        cache_backend=settings.cache.backend,
    )

    return {
        "http_client": http_client,
        "database": database,
        "store": store,
        "cache": cache,
        "registry": registry,
        "tracker": tracker,
        "service": service,
        "signal_engine": SignalEngine(service),
    }


async def _open(components: dict[str, Any]) -> None:
    if components["database"] is not None:
        await components["database"].connect()


async def _close(components: dict[str, Any]) -> None:
    await components["http_client"].aclose()
    if components["database"] is not None:
        await components["database"].close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open storage on startup; close HTTP client and storage on shutdown."""
    logger = get_logger("marketfeed.main")
    components = app.state.components

    await _open(components)
    app.state.service = components["service"]
    app.state.signal_engine = components["signal_engine"]
    logger.info("lifespan_started")

    yield

    await _close(components)
    logger.info("market_feed_stopped")


async def run() -> None:
    """Run the market feed server, or fetch a single snapshot."""
    settings = AppSettings()
    setup_logging(settings.log_level)
    logger = get_logger("marketfeed.main")

    components = _build_components(settings)

    if settings.server.enabled:
        from marketfeed.api.app import create_app

        app = create_app(lifespan=lifespan)
        app.state.components = components

        logger.info("starting_server", host=settings.server.host, port=settings.server.port)

        config = uvicorn.Config(
            app,
            host=settings.server.host,
            port=settings.server.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        await _open(components)
        try:
            assets = await components["service"].fetch_all_market_data()
            for asset in assets:
                logger.info("market_snapshot", **asset.to_dict())
            statuses = await components["service"].get_providers_status()
            for health in statuses:
                logger.info("provider_status", **health.to_dict())
        finally:
            await _close(components)


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
