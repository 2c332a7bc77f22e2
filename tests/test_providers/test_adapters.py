"""Tests for the provider adapters against httpx.MockTransport.

Each adapter must turn provider-specific error markers into a failed
ProviderResult, raise TransportError when the provider is unreachable, and
declare exactly the requests it can serve.
"""

import httpx
import pytest

from conftest import (
    ALPHA_VANTAGE_HOST,
    COINGECKO_HOST,
    EXCHANGE_RATE_HOST,
    METAL_PRICE_HOST,
    TWELVE_DATA_HOST,
    ProviderRouter,
)
from marketfeed.config import (
    AlphaVantageSettings,
    CoinGeckoSettings,
    ExchangeRateSettings,
    MetalPriceSettings,
    TwelveDataSettings,
)
from marketfeed.exceptions import ProviderDataError, TransportError
from marketfeed.models import AssetClass, AssetType
from marketfeed.providers import (
    AlphaVantageAdapter,
    CoinGeckoAdapter,
    ExchangeRateAdapter,
    FetchRequest,
    MetalPriceAdapter,
    TwelveDataAdapter,
)

EURUSD = FetchRequest(AssetClass.FOREX, "EUR/USD", "EURUSD", AssetType.FOREX)
GOLD = FetchRequest(AssetClass.COMMODITY, "XAUUSD", "XAUUSD", AssetType.COMMODITY)
PLATINUM = FetchRequest(AssetClass.COMMODITY, "XPTUSD", "XPTUSD", AssetType.COMMODITY)
BITCOIN = FetchRequest(AssetClass.CRYPTO, "bitcoin", "bitcoin", AssetType.CRYPTO, ticker="BTC")
EURUSD_HISTORY = FetchRequest(AssetClass.HISTORY, "EUR/USD", "EURUSD", AssetType.FOREX, period="30d")
BITCOIN_HISTORY = FetchRequest(AssetClass.HISTORY, "BTC", "bitcoin", AssetType.CRYPTO, period="30d")


class TestFetchRequest:
    def test_slash_pair(self) -> None:
        assert EURUSD.currency_pair == ("EUR", "USD")

    def test_six_letter_commodity_pair(self) -> None:
        assert GOLD.currency_pair == ("XAU", "USD")

    def test_coin_id_has_no_pair(self) -> None:
        assert BITCOIN.currency_pair is None

    def test_describe(self) -> None:
        assert EURUSD.describe() == "forex EUR/USD"
        assert BITCOIN_HISTORY.describe() == "history bitcoin (30d)"


class TestAlphaVantageAdapter:
    @pytest.fixture
    def adapter(self, http_client: httpx.AsyncClient) -> AlphaVantageAdapter:
        return AlphaVantageAdapter(AlphaVantageSettings(api_key="av-key"), http_client)  # type: ignore[arg-type]

    def test_supports(self, adapter: AlphaVantageAdapter) -> None:
        assert adapter.supports(EURUSD)
        assert adapter.supports(GOLD)
        assert adapter.supports(EURUSD_HISTORY)
        assert not adapter.supports(BITCOIN)
        assert not adapter.supports(BITCOIN_HISTORY)

    @pytest.mark.asyncio
    async def test_exchange_rate_request(
        self, adapter: AlphaVantageAdapter, router: ProviderRouter
    ) -> None:
        router.json(ALPHA_VANTAGE_HOST, {"Realtime Currency Exchange Rate": {"5. Exchange Rate": "1.08"}})

        result = await adapter.fetch(GOLD)

        assert result.ok
        params = router.calls[0].url.params
        assert params["function"] == "CURRENCY_EXCHANGE_RATE"
        assert params["from_currency"] == "XAU"
        assert params["to_currency"] == "USD"
        assert params["apikey"] == "av-key"

    @pytest.mark.asyncio
    async def test_history_uses_fx_daily(
        self, adapter: AlphaVantageAdapter, router: ProviderRouter
    ) -> None:
        router.json(ALPHA_VANTAGE_HOST, {"Time Series FX (Daily)": {}})

        await adapter.fetch(EURUSD_HISTORY)

        params = router.calls[0].url.params
        assert params["function"] == "FX_DAILY"
        assert params["from_symbol"] == "EUR"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("marker", ["Note", "Error Message", "Information"])
    async def test_error_markers_fail(
        self, adapter: AlphaVantageAdapter, router: ProviderRouter, marker: str
    ) -> None:
        router.json(ALPHA_VANTAGE_HOST, {marker: "API call frequency exceeded"})

        result = await adapter.fetch(EURUSD)

        assert not result.ok
        assert result.error == "API call frequency exceeded"

    @pytest.mark.asyncio
    async def test_http_error_status_fails(
        self, adapter: AlphaVantageAdapter, router: ProviderRouter
    ) -> None:
        router.json(ALPHA_VANTAGE_HOST, {}, status_code=503)

        result = await adapter.fetch(EURUSD)

        assert not result.ok
        assert "503" in result.error

    @pytest.mark.asyncio
    async def test_unreachable_raises_transport_error(
        self, adapter: AlphaVantageAdapter, router: ProviderRouter
    ) -> None:
        def _refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        router.on(ALPHA_VANTAGE_HOST, _refuse)

        with pytest.raises(TransportError):
            await adapter.fetch(EURUSD)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_provider_data_error(
        self, adapter: AlphaVantageAdapter, router: ProviderRouter
    ) -> None:
        router.on(ALPHA_VANTAGE_HOST, lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ProviderDataError):
            await adapter.fetch(EURUSD)


class TestTwelveDataAdapter:
    @pytest.fixture
    def adapter(self, http_client: httpx.AsyncClient) -> TwelveDataAdapter:
        return TwelveDataAdapter(TwelveDataSettings(api_key="td-key"), http_client)  # type: ignore[arg-type]

    def test_supports(self, adapter: TwelveDataAdapter) -> None:
        assert adapter.supports(EURUSD)
        assert adapter.supports(BITCOIN)
        assert not adapter.supports(GOLD)
        assert not adapter.supports(EURUSD_HISTORY)

    @pytest.mark.asyncio
    async def test_crypto_quotes_ticker_against_usd(
        self, adapter: TwelveDataAdapter, router: ProviderRouter
    ) -> None:
        router.json(TWELVE_DATA_HOST, {"status": "ok", "close": "42000"})

        result = await adapter.fetch(BITCOIN)

        assert result.ok
        request = router.calls[0]
        assert request.url.path == "/quote"
        assert request.url.params["symbol"] == "BTC/USD"
        assert request.url.params["apikey"] == "td-key"

    @pytest.mark.asyncio
    async def test_forex_symbol(self, adapter: TwelveDataAdapter, router: ProviderRouter) -> None:
        router.json(TWELVE_DATA_HOST, {"status": "ok", "close": "1.08"})

        await adapter.fetch(EURUSD)

        assert router.calls[0].url.params["symbol"] == "EUR/USD"

    @pytest.mark.asyncio
    async def test_error_status_fails_with_message(
        self, adapter: TwelveDataAdapter, router: ProviderRouter
    ) -> None:
        router.json(TWELVE_DATA_HOST, {"status": "error", "code": 401, "message": "apikey invalid"})

        result = await adapter.fetch(EURUSD)

        assert not result.ok
        assert result.error == "apikey invalid"

    @pytest.mark.asyncio
    async def test_payload_without_status_fails(
        self, adapter: TwelveDataAdapter, router: ProviderRouter
    ) -> None:
        router.json(TWELVE_DATA_HOST, {"close": "1.08"})

        result = await adapter.fetch(EURUSD)

        assert not result.ok


class TestExchangeRateAdapter:
    @pytest.fixture
    def adapter(self, http_client: httpx.AsyncClient) -> ExchangeRateAdapter:
        return ExchangeRateAdapter(ExchangeRateSettings(), http_client)

    def test_supports_forex_only(self, adapter: ExchangeRateAdapter) -> None:
        assert adapter.supports(EURUSD)
        assert not adapter.supports(GOLD)
        assert not adapter.supports(BITCOIN)

    @pytest.mark.asyncio
    async def test_requests_base_currency(
        self, adapter: ExchangeRateAdapter, router: ProviderRouter
    ) -> None:
        router.json(EXCHANGE_RATE_HOST, {"base": "EUR", "rates": {"USD": 1.08}})

        result = await adapter.fetch(EURUSD)

        assert result.ok
        assert router.calls[0].url.path == "/v4/latest/EUR"

    @pytest.mark.asyncio
    async def test_error_result_fails(
        self, adapter: ExchangeRateAdapter, router: ProviderRouter
    ) -> None:
        router.json(EXCHANGE_RATE_HOST, {"result": "error", "error-type": "unsupported-code"})

        result = await adapter.fetch(EURUSD)

        assert not result.ok
        assert result.error == "unsupported-code"


class TestMetalPriceAdapter:
    @pytest.fixture
    def adapter(self, http_client: httpx.AsyncClient) -> MetalPriceAdapter:
        return MetalPriceAdapter(MetalPriceSettings(), http_client)

    def test_supports_only_gold_and_silver(self, adapter: MetalPriceAdapter) -> None:
        silver = FetchRequest(AssetClass.COMMODITY, "XAGUSD", "XAGUSD", AssetType.COMMODITY)
        assert adapter.supports(GOLD)
        assert adapter.supports(silver)
        assert not adapter.supports(PLATINUM)
        assert not adapter.supports(EURUSD)

    @pytest.mark.asyncio
    async def test_error_payload_fails(
        self, adapter: MetalPriceAdapter, router: ProviderRouter
    ) -> None:
        router.json(METAL_PRICE_HOST, {"error": "quota exceeded"})

        result = await adapter.fetch(GOLD)

        assert not result.ok
        assert result.error == "quota exceeded"

    @pytest.mark.asyncio
    async def test_list_payload_passes_through(
        self, adapter: MetalPriceAdapter, router: ProviderRouter
    ) -> None:
        router.json(METAL_PRICE_HOST, [{"gold": 2050.1}, {"silver": 23.4}])

        result = await adapter.fetch(GOLD)

        assert result.ok
        assert result.payload == [{"gold": 2050.1}, {"silver": 23.4}]


class TestCoinGeckoAdapter:
    @pytest.fixture
    def adapter(self, http_client: httpx.AsyncClient) -> CoinGeckoAdapter:
        return CoinGeckoAdapter(CoinGeckoSettings(), http_client)

    def test_supports(self, adapter: CoinGeckoAdapter) -> None:
        assert adapter.supports(BITCOIN)
        assert adapter.supports(BITCOIN_HISTORY)
        assert not adapter.supports(EURUSD)
        assert not adapter.supports(EURUSD_HISTORY)

    @pytest.mark.asyncio
    async def test_simple_price_request(
        self, adapter: CoinGeckoAdapter, router: ProviderRouter
    ) -> None:
        router.json(COINGECKO_HOST, {"bitcoin": {"usd": 42000}})

        await adapter.fetch(BITCOIN)

        request = router.calls[0]
        assert request.url.path == "/api/v3/simple/price"
        assert request.url.params["ids"] == "bitcoin"
        assert request.url.params["include_24hr_change"] == "true"

    @pytest.mark.asyncio
    async def test_history_substitutes_coin_id(
        self, adapter: CoinGeckoAdapter, router: ProviderRouter
    ) -> None:
        router.json(COINGECKO_HOST, {"prices": []})

        await adapter.fetch(BITCOIN_HISTORY)

        request = router.calls[0]
        assert request.url.path == "/api/v3/coins/bitcoin/market_chart"
        assert request.url.params["days"] == "30"

    @pytest.mark.asyncio
    async def test_rate_limited_fails(
        self, adapter: CoinGeckoAdapter, router: ProviderRouter
    ) -> None:
        router.json(COINGECKO_HOST, {"status": {"error_code": 429}}, status_code=429)

        result = await adapter.fetch(BITCOIN)

        assert not result.ok
        assert "429" in result.error
