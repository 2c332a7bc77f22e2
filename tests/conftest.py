"""Shared test fixtures for the market feed."""

from collections.abc import Callable

import httpx
import pytest

from marketfeed.config import AppSettings, CacheSettings, TwelveDataSettings
from marketfeed.fetchers.service import MarketDataService
from marketfeed.health.store import InMemoryHealthStore
from marketfeed.health.tracker import ProviderHealthTracker
from marketfeed.providers.defaults import create_default_registry
from marketfeed.storage.cache import CacheStore
from marketfeed.storage.kv import InMemoryKeyValueStore

#: Fixed start time for FakeClock (2024-01-01T00:00:00Z).
START_MS = 1_704_067_200_000

ALPHA_VANTAGE_HOST = "www.alphavantage.co"
TWELVE_DATA_HOST = "api.twelvedata.com"
EXCHANGE_RATE_HOST = "api.exchangerate-api.com"
METAL_PRICE_HOST = "api.metals.live"
COINGECKO_HOST = "api.coingecko.com"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


Handler = Callable[[httpx.Request], httpx.Response]


class ProviderRouter:
    """MockTransport handler that dispatches by host and records every call.

    Hosts without a registered handler answer HTTP 500.
    """

    def __init__(self) -> None:
        self.handlers: dict[str, Handler] = {}
        self.calls: list[httpx.Request] = []

    def on(self, host: str, handler: Handler) -> None:
        self.handlers[host] = handler

    def json(self, host: str, payload: object, status_code: int = 200) -> None:
        self.on(host, lambda request: httpx.Response(status_code, json=payload))

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.calls if r.url.host == host]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.handlers.get(request.url.host)
        if handler is None:
            return httpx.Response(500, text="no handler")
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (memory cache, dummy API keys)."""
    return AppSettings(
        log_level="DEBUG",
        twelve_data=TwelveDataSettings(api_key="test-twelve-key"),  # type: ignore[arg-type]
        cache=CacheSettings(backend="memory"),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def cache(kv_store: InMemoryKeyValueStore, clock: FakeClock) -> CacheStore:
    return CacheStore(kv_store, clock=clock)


@pytest.fixture
def router() -> ProviderRouter:
    return ProviderRouter()


@pytest.fixture
def http_client(router: ProviderRouter) -> httpx.AsyncClient:
    """AsyncClient whose requests never leave the process."""
    return httpx.AsyncClient(transport=httpx.MockTransport(router))


@pytest.fixture
def service(
    mock_settings: AppSettings,
    http_client: httpx.AsyncClient,
    cache: CacheStore,
    clock: FakeClock,
) -> MarketDataService:
    """MarketDataService over the real adapters, talking to the ProviderRouter."""
    registry = create_default_registry(mock_settings, http_client)
    tracker = ProviderHealthTracker(registry, InMemoryHealthStore(), clock=clock)
    return MarketDataService(
        registry=registry,
        tracker=tracker,
        cache=cache,
        call_timeout=1.0,
        clock=clock,
    )
