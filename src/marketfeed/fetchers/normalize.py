"""Normalization of provider payloads into quotes and OHLCV bars.

Each provider lays out its response differently; the functions here turn a
raw payload into a ``Quote`` (price and 24h change) or a list of
``HistoricalBar``. Asset identity (id, symbol, name) is never taken from the
payload, so the same request yields the same identity whichever provider
answers.

Every normalizer raises ProviderDataError when a required field is missing,
malformed or non-positive.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from marketfeed.exceptions import ProviderDataError
from marketfeed.models import AssetClass, HistoricalBar
from marketfeed.providers.alpha_vantage import AlphaVantageAdapter
from marketfeed.providers.coingecko import CoinGeckoAdapter
from marketfeed.providers.exchange_rate import ExchangeRateAdapter
from marketfeed.providers.metal_price import METAL_KEYS, MetalPriceAdapter
from marketfeed.providers.twelve_data import TwelveDataAdapter
from marketfeed.providers.types import FetchRequest

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Quote:
    """Provider-independent price reading."""

    price: Decimal
    change: Decimal = _ZERO
    change_percent: Decimal = _ZERO


QuoteNormalizer = Callable[[Any, FetchRequest], Quote]
HistoryNormalizer = Callable[[Any, FetchRequest], list[HistoricalBar]]


# ──────────────────────────────────────────────
# Numeric helpers
# ──────────────────────────────────────────────


def to_decimal(value: Any, field: str) -> Decimal:
    """Convert a provider number or numeric string to Decimal."""
    if value is None or value == "":
        raise ProviderDataError(f"missing field: {field}")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ProviderDataError(f"invalid number in {field}: {value!r}") from e
    if not result.is_finite():
        raise ProviderDataError(f"non-finite number in {field}: {value!r}")
    return result


def optional_decimal(value: Any) -> Decimal | None:
    """Like to_decimal, but None for absent or unparseable values."""
    try:
        return to_decimal(value, "optional")
    except ProviderDataError:
        return None


def positive_price(value: Any, field: str) -> Decimal:
    price = to_decimal(value, field)
    if price <= 0:
        raise ProviderDataError(f"non-positive price in {field}: {price}")
    return price


def compute_change(price: Decimal, previous_close: Decimal | None) -> tuple[Decimal, Decimal]:
    """Absolute and percentage change against the previous close.

    Without a usable previous close both values are zero.
    """
    if previous_close is None or previous_close == 0:
        return _ZERO, _ZERO
    change = price - previous_close
    return change, change / previous_close * _HUNDRED


# ──────────────────────────────────────────────
# Quote normalizers
# ──────────────────────────────────────────────


def alpha_vantage_quote(payload: Any, request: FetchRequest) -> Quote:
    rate = payload.get("Realtime Currency Exchange Rate") if isinstance(payload, dict) else None
    if not rate:
        raise ProviderDataError("Alpha Vantage: missing 'Realtime Currency Exchange Rate'")

    price = positive_price(rate.get("5. Exchange Rate"), "5. Exchange Rate")
    change, percent = compute_change(price, optional_decimal(rate.get("8. Previous Close")))
    return Quote(price=price, change=change, change_percent=percent)


def twelve_data_quote(payload: Any, request: FetchRequest) -> Quote:
    if not isinstance(payload, dict):
        raise ProviderDataError("Twelve Data: unexpected payload")

    price = positive_price(payload.get("price", payload.get("close")), "price")
    change = optional_decimal(payload.get("change"))
    percent = optional_decimal(payload.get("percent_change"))
    if change is None or percent is None:
        derived_change, derived_percent = compute_change(
            price, optional_decimal(payload.get("previous_close"))
        )
        change = derived_change if change is None else change
        percent = derived_percent if percent is None else percent
    return Quote(price=price, change=change, change_percent=percent)


def exchange_rate_quote(payload: Any, request: FetchRequest) -> Quote:
    pair = request.currency_pair
    rates = payload.get("rates") if isinstance(payload, dict) else None
    if pair is None or not isinstance(rates, dict) or rates.get(pair[1]) is None:
        raise ProviderDataError(f"Exchange Rate API: currency pair not found: {request.symbol}")
    return Quote(price=positive_price(rates[pair[1]], f"rates.{pair[1]}"))


def metal_price_quote(payload: Any, request: FetchRequest) -> Quote:
    metal = METAL_KEYS.get(request.symbol.upper())
    if metal is None:
        raise ProviderDataError(f"Metal Price API: unsupported symbol {request.symbol}")

    # payload is either {"gold": ...} or a list of single-metal objects
    entries = payload if isinstance(payload, list) else [payload]
    for entry in entries:
        if isinstance(entry, dict) and entry.get(metal) is not None:
            value = entry[metal]
            if isinstance(value, dict):
                value = value.get("price")
            return Quote(price=positive_price(value, metal))
    raise ProviderDataError(f"Metal Price API: metal not found: {metal}")


def coingecko_quote(payload: Any, request: FetchRequest) -> Quote:
    coin = payload.get(request.symbol) if isinstance(payload, dict) else None
    if not coin:
        raise ProviderDataError(f"CoinGecko: coin not found: {request.symbol}")

    price = positive_price(coin.get("usd"), "usd")
    percent = optional_decimal(coin.get("usd_24h_change"))
    if percent is None:
        return Quote(price=price)
    return Quote(price=price, change=price * percent / _HUNDRED, change_percent=percent)


# ──────────────────────────────────────────────
# History normalizers
# ──────────────────────────────────────────────


def _date_to_ms(value: str) -> int:
    try:
        dt = datetime.strptime(value[:10], "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise ProviderDataError(f"invalid date in time series: {value!r}") from e
    return int(dt.timestamp() * 1000)


def alpha_vantage_history(payload: Any, request: FetchRequest) -> list[HistoricalBar]:
    """FX_DAILY series, returned oldest first."""
    if not isinstance(payload, dict):
        raise ProviderDataError("Alpha Vantage: unexpected payload")
    series_key = next((k for k in payload if "Time Series" in k), None)
    if series_key is None:
        raise ProviderDataError("Alpha Vantage: missing time series")

    bars = [
        HistoricalBar(
            timestamp=_date_to_ms(day),
            open=to_decimal(values.get("1. open"), "1. open"),
            high=to_decimal(values.get("2. high"), "2. high"),
            low=to_decimal(values.get("3. low"), "3. low"),
            close=to_decimal(values.get("4. close"), "4. close"),
        )
        for day, values in payload[series_key].items()
    ]
    bars.sort(key=lambda bar: bar.timestamp)
    return bars


def coingecko_history(payload: Any, request: FetchRequest) -> list[HistoricalBar]:
    """Market chart prices as flat bars (open = high = low = close)."""
    prices = payload.get("prices") if isinstance(payload, dict) else None
    if not isinstance(prices, list):
        raise ProviderDataError("CoinGecko: missing prices")
    volumes = payload.get("total_volumes") or []

    bars = []
    for index, point in enumerate(prices):
        price = to_decimal(point[1], "prices")
        volume = _ZERO
        if index < len(volumes):
            volume = optional_decimal(volumes[index][1]) or _ZERO
        bars.append(
            HistoricalBar(
                timestamp=int(point[0]),
                open=price,
                high=price,
                low=price,
                close=price,
                volume=volume,
            )
        )
    return bars


QUOTE_NORMALIZERS: dict[tuple[str, AssetClass], QuoteNormalizer] = {
    (AlphaVantageAdapter.provider_id, AssetClass.FOREX): alpha_vantage_quote,
    (AlphaVantageAdapter.provider_id, AssetClass.COMMODITY): alpha_vantage_quote,
    (TwelveDataAdapter.provider_id, AssetClass.FOREX): twelve_data_quote,
    (TwelveDataAdapter.provider_id, AssetClass.CRYPTO): twelve_data_quote,
    (ExchangeRateAdapter.provider_id, AssetClass.FOREX): exchange_rate_quote,
    (MetalPriceAdapter.provider_id, AssetClass.COMMODITY): metal_price_quote,
    (CoinGeckoAdapter.provider_id, AssetClass.CRYPTO): coingecko_quote,
}

HISTORY_NORMALIZERS: dict[str, HistoryNormalizer] = {
    AlphaVantageAdapter.provider_id: alpha_vantage_history,
    CoinGeckoAdapter.provider_id: coingecko_history,
}
