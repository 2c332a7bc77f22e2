"""Turns indicator readings into buy/sell/neutral signals for display.

Strength is a 0-100 score. A reading deep in buy/sell territory scores
towards 100; a neutral reading scores highest at the centre of its range.
"""

from decimal import Decimal

from marketfeed.exceptions import AllProvidersExhausted
from marketfeed.fetchers.service import MarketDataService
from marketfeed.indicators.moving_average import compute_sma
from marketfeed.indicators.oscillators import compute_bollinger, compute_macd, compute_rsi
from marketfeed.logging import get_logger
from marketfeed.models import Asset, HistoricalBar, IndicatorSignal, SignalDirection, now_ms

logger = get_logger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_STRENGTH_QUANTUM = Decimal("0.01")

RSI_OVERSOLD = Decimal("30")
RSI_OVERBOUGHT = Decimal("70")
SMA_SHORT_WINDOW = 10
SMA_LONG_WINDOW = 30


def _clamp_strength(value: Decimal) -> Decimal:
    return min(_HUNDRED, max(_ZERO, value)).quantize(_STRENGTH_QUANTUM)


def describe_strength(strength: Decimal) -> str:
    """Human label for a 0-100 strength."""
    if strength >= 70:
        return "Strong"
    if strength >= 40:
        return "Moderate"
    return "Weak"


def rsi_signal(rsi: Decimal) -> tuple[SignalDirection, Decimal]:
    if rsi <= RSI_OVERSOLD:
        return SignalDirection.BUY, _clamp_strength(50 + (RSI_OVERSOLD - rsi) / RSI_OVERSOLD * 50)
    if rsi >= RSI_OVERBOUGHT:
        return SignalDirection.SELL, _clamp_strength(
            50 + (rsi - RSI_OVERBOUGHT) / (_HUNDRED - RSI_OVERBOUGHT) * 50
        )
    return SignalDirection.NEUTRAL, _clamp_strength(50 - abs(rsi - 50) * Decimal("2.5"))


def macd_signal(histogram: Decimal, price: Decimal) -> tuple[SignalDirection, Decimal]:
    """Histogram above zero is bullish; strength scales with histogram/price in bps."""
    if histogram == 0 or price == 0:
        return SignalDirection.NEUTRAL, _ZERO
    strength = _clamp_strength(abs(histogram) / abs(price) * Decimal("10000"))
    direction = SignalDirection.BUY if histogram > 0 else SignalDirection.SELL
    return direction, strength


def bollinger_signal(percent_b: Decimal) -> tuple[SignalDirection, Decimal]:
    if percent_b <= 0:
        return SignalDirection.BUY, _clamp_strength(50 + abs(percent_b) * _HUNDRED)
    if percent_b >= 1:
        return SignalDirection.SELL, _clamp_strength(50 + (percent_b - 1) * _HUNDRED)
    return SignalDirection.NEUTRAL, _clamp_strength((1 - abs(percent_b - Decimal("0.5")) * 2) * 50)


def sma_crossover_signal(short: Decimal, long: Decimal) -> tuple[SignalDirection, Decimal]:
    if long == 0 or short == long:
        return SignalDirection.NEUTRAL, _ZERO
    spread_pct = (short - long) / long * _HUNDRED
    direction = SignalDirection.BUY if spread_pct > 0 else SignalDirection.SELL
    return direction, _clamp_strength(abs(spread_pct) * 20)


def compute_signals(asset: Asset, history: list[HistoricalBar]) -> list[IndicatorSignal]:
    """Every indicator that has enough history, in a fixed order.

    Indicators lacking data are skipped rather than reported as neutral.
    """
    closes = [bar.close for bar in history]
    timestamp = history[-1].timestamp if history else now_ms()
    readings: list[tuple[str, Decimal, tuple[SignalDirection, Decimal]]] = []

    rsi = compute_rsi(closes)
    if rsi is not None:
        readings.append(("RSI (14)", rsi, rsi_signal(rsi)))

    macd = compute_macd(closes)
    if macd is not None:
        readings.append(("MACD (12,26,9)", macd.histogram, macd_signal(macd.histogram, closes[-1])))

    bands = compute_bollinger(closes)
    if bands is not None:
        readings.append(("Bollinger Bands (20,2)", bands.percent_b, bollinger_signal(bands.percent_b)))

    short_sma = compute_sma(closes, SMA_SHORT_WINDOW)
    long_sma = compute_sma(closes, SMA_LONG_WINDOW)
    if short_sma and long_sma:
        readings.append(
            (
                f"SMA Crossover ({SMA_SHORT_WINDOW}/{SMA_LONG_WINDOW})",
                short_sma[-1] - long_sma[-1],
                sma_crossover_signal(short_sma[-1], long_sma[-1]),
            )
        )

    return [
        IndicatorSignal(
            asset_id=asset.id,
            asset_symbol=asset.symbol,
            asset_type=asset.type,
            asset_name=asset.name,
            indicator_name=name,
            signal=direction,
            strength=strength,
            value=value,
            timestamp=timestamp,
            provider=asset.provider,
        )
        for name, value, (direction, strength) in readings
    ]


class SignalEngine:
    """Fetches history through the service and derives indicator signals."""

    def __init__(self, service: MarketDataService, period: str = "30d") -> None:
        self._service = service
        self._period = period

    async def signals_for(self, asset: Asset) -> list[IndicatorSignal]:
        """Signals for one asset; empty when no provider can supply history."""
        try:
            history = await self._service.fetch_asset_history(asset, self._period)
        except AllProvidersExhausted as e:
            logger.warning("signal_history_unavailable", asset=asset.id, error=str(e))
            return []
        return compute_signals(asset, history)

    async def signals_for_all(self, assets: list[Asset]) -> list[IndicatorSignal]:
        signals: list[IndicatorSignal] = []
        for asset in assets:
            signals.extend(await self.signals_for(asset))
        return signals
