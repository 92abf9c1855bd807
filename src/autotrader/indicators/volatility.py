"""Volatility indicators: Average True Range and Bollinger Bands."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from autotrader.indicators.moving_average import sma
from autotrader.models import OHLCBar


@dataclass(frozen=True)
class BollingerBands:
    """Price envelope at +/- N population standard deviations around the SMA."""

    upper: float
    middle: float
    lower: float


def true_ranges(bars: Sequence[OHLCBar]) -> list[float]:
    """True range per bar from the second bar onward.

    TR = max(high - low, |high - prev_close|, |low - prev_close|)
    """
    ranges: list[float] = []
    for prev, bar in zip(bars, bars[1:]):
        ranges.append(
            max(
                bar.high - bar.low,
                abs(bar.high - prev.close),
                abs(bar.low - prev.close),
            )
        )
    return ranges


def atr(bars: Sequence[OHLCBar], period: int = 14) -> list[float]:
    """Compute the Wilder-smoothed Average True Range series.

    Seeded with the simple mean of the first ``period`` true ranges, then
        atr = (atr * (period - 1) + tr) / period

    Returns:
        ATR values, or an empty list when fewer than ``period + 1`` bars.
    """
    if period <= 0 or len(bars) < period + 1:
        return []

    ranges = true_ranges(bars)
    current = sum(ranges[:period]) / period
    values = [current]
    for tr in ranges[period:]:
        current = (current * (period - 1) + tr) / period
        values.append(current)
    return values


def atr_last(bars: Sequence[OHLCBar], period: int = 14) -> float:
    """Latest ATR as a scalar, 0.0 when there is not enough data.

    Scalar convention used by the pullback strategy, where a zero ATR means
    "skip this token".
    """
    series = atr(bars, period)
    return series[-1] if series else 0.0


def bollinger_bands(
    series: Sequence[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerBands | None:
    """Compute Bollinger Bands for the latest point.

    Returns:
        BollingerBands, or None when ``len(series) < period`` or the middle
        band is exactly zero.
    """
    if len(series) < period:
        return None

    middle_series = sma(series, period)
    if not middle_series:
        return None
    middle = middle_series[-1]
    if middle == 0:
        return None

    window = series[-period:]
    variance = sum((p - middle) ** 2 for p in window) / period
    sigma = math.sqrt(variance)
    return BollingerBands(
        upper=middle + sigma * std_dev,
        middle=middle,
        lower=middle - sigma * std_dev,
    )


def synthetic_bars(points: Sequence[tuple[int, float]]) -> list[OHLCBar]:
    """Build OHLC bars from a price chart that has no candles.

    Each bar's high/low is the max/min of its price and the next price;
    open and close are the bar's own price.
    """
    bars: list[OHLCBar] = []
    for i, (timestamp, price) in enumerate(points):
        next_price = points[i + 1][1] if i + 1 < len(points) else price
        bars.append(
            OHLCBar(
                timestamp=int(timestamp),
                open=price,
                high=max(price, next_price),
                low=min(price, next_price),
                close=price,
            )
        )
    return bars
