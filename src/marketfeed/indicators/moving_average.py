"""Simple and exponential moving averages over Decimal closes.

Intermediate results are quantized to 12 decimal places so repeated Decimal
division cannot grow unbounded representations.
"""

from decimal import Decimal

#: Precision limit for averaged values (12 decimal places).
QUANTUM = Decimal("0.000000000001")


def compute_sma(values: list[Decimal], window: int) -> list[Decimal]:
    """Rolling simple moving average.

    Returns ``len(values) - window + 1`` averages (the first one covers
    ``values[:window]``), or an empty list when there is not enough data.
    """
    if window <= 0 or len(values) < window:
        return []

    averages = []
    running = sum(values[:window], Decimal("0"))
    averages.append((running / window).quantize(QUANTUM))
    for i in range(window, len(values)):
        running += values[i] - values[i - window]
        averages.append((running / window).quantize(QUANTUM))
    return averages


def compute_ema(values: list[Decimal], span: int) -> list[Decimal]:
    """Exponential moving average, same length as the input.

        alpha = 2 / (span + 1)
        EMA_t = alpha * value_t + (1 - alpha) * EMA_{t-1}

    The first EMA value is the first input value.
    """
    if not values:
        return []

    alpha = Decimal("2") / (Decimal(span) + Decimal("1"))
    one_minus_alpha = Decimal("1") - alpha

    ema = [values[0].quantize(QUANTUM)]
    for v in values[1:]:
        ema.append((alpha * v + one_minus_alpha * ema[-1]).quantize(QUANTUM))
    return ema
