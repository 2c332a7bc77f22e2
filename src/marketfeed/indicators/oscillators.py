"""RSI, MACD and Bollinger Bands over Decimal closes (oldest first)."""

from dataclasses import dataclass
from decimal import Decimal

from marketfeed.indicators.moving_average import QUANTUM, compute_ema, compute_sma

_HUNDRED = Decimal("100")


@dataclass
class MACDReading:
    macd: Decimal
    signal: Decimal
    histogram: Decimal


@dataclass
class BollingerReading:
    middle: Decimal
    upper: Decimal
    lower: Decimal
    percent_b: Decimal  # 0 at the lower band, 1 at the upper band


def compute_rsi(closes: list[Decimal], period: int = 14) -> Decimal | None:
    """Wilder's Relative Strength Index of the latest close.

    Returns None with fewer than ``period + 1`` closes.
    """
    if period <= 0 or len(closes) < period + 1:
        return None

    deltas = [closes[i] - closes[i - 1] for i in range(1, len(closes))]
    gains = [max(d, Decimal("0")) for d in deltas]
    losses = [max(-d, Decimal("0")) for d in deltas]

    avg_gain = sum(gains[:period], Decimal("0")) / period
    avg_loss = sum(losses[:period], Decimal("0")) / period
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return _HUNDRED if avg_gain > 0 else Decimal("50")
    rs = avg_gain / avg_loss
    return (_HUNDRED - _HUNDRED / (1 + rs)).quantize(QUANTUM)


def compute_macd(
    closes: list[Decimal], fast: int = 12, slow: int = 26, signal: int = 9
) -> MACDReading | None:
    """MACD line, signal line and histogram of the latest close.

    Returns None with fewer than ``slow + signal`` closes.
    """
    if len(closes) < slow + signal:
        return None

    fast_ema = compute_ema(closes, fast)
    slow_ema = compute_ema(closes, slow)
    macd_line = [f - s for f, s in zip(fast_ema, slow_ema)][slow - 1:]
    signal_line = compute_ema(macd_line, signal)

    macd_value = macd_line[-1]
    signal_value = signal_line[-1]
    return MACDReading(
        macd=macd_value,
        signal=signal_value,
        histogram=(macd_value - signal_value).quantize(QUANTUM),
    )


def compute_bollinger(
    closes: list[Decimal], window: int = 20, num_std: Decimal = Decimal("2")
) -> BollingerReading | None:
    """Bollinger Bands (population standard deviation) of the latest window."""
    if len(closes) < window:
        return None

    recent = closes[-window:]
    middle = compute_sma(recent, window)[-1]
    variance = sum(((c - middle) ** 2 for c in recent), Decimal("0")) / window
    std = variance.sqrt().quantize(QUANTUM)
    upper = middle + num_std * std
    lower = middle - num_std * std

    if upper == lower:
        percent_b = Decimal("0.5")
    else:
        percent_b = ((closes[-1] - lower) / (upper - lower)).quantize(QUANTUM)
    return BollingerReading(middle=middle, upper=upper, lower=lower, percent_b=percent_b)
