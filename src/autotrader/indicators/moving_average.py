"""Simple and exponential moving averages over float price series.

Both functions return a fresh list and never touch the input. An empty
result means "not enough data" and must never be read as zero.
"""

from collections.abc import Sequence


def sma(series: Sequence[float], period: int) -> list[float]:
    """Compute the Simple Moving Average.

    Each output point is the arithmetic mean of the trailing ``period``
    inputs ending at that index.

    Args:
        series: Prices ordered oldest-first.
        period: Window length.

    Returns:
        ``len(series) - period + 1`` values, or an empty list when
        ``len(series) < period``.
    """
    if period <= 0 or len(series) < period:
        return []

    values: list[float] = []
    window_sum = sum(series[:period])
    values.append(window_sum / period)
    for i in range(period, len(series)):
        window_sum += series[i] - series[i - period]
        values.append(window_sum / period)
    return values


def ema(series: Sequence[float], period: int) -> list[float]:
    """Compute the Exponential Moving Average.

    Seeded with the first price rather than a period-SMA:
        k = 2 / (period + 1)
        EMA_0 = price_0
        EMA_i = price_i * k + EMA_{i-1} * (1 - k)

    Args:
        series: Prices ordered oldest-first.
        period: Smoothing period.

    Returns:
        One value per input price, or an empty list when
        ``len(series) < period``.
    """
    if period <= 0 or len(series) < period:
        return []

    k = 2 / (period + 1)
    values = [float(series[0])]
    for price in series[1:]:
        values.append(price * k + values[-1] * (1 - k))
    return values
