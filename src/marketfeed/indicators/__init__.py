"""Technical indicators -- moving averages, oscillators and display signals."""

from marketfeed.indicators.engine import SignalEngine, compute_signals, describe_strength
from marketfeed.indicators.moving_average import compute_ema, compute_sma
from marketfeed.indicators.oscillators import compute_bollinger, compute_macd, compute_rsi

__all__ = [
    "SignalEngine",
    "compute_bollinger",
    "compute_ema",
    "compute_macd",
    "compute_rsi",
    "compute_signals",
    "compute_sma",
    "describe_strength",
]
