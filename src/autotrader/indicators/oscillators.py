"""Momentum oscillators: RSI (Wilder) and MACD."""

from collections.abc import Sequence
from dataclasses import dataclass

from autotrader.indicators.moving_average import ema


@dataclass(frozen=True)
class MacdResult:
    """MACD line and signal line, aligned to the same length."""

    line: list[float]
    signal: list[float]

    @property
    def last_line(self) -> float:
        return self.line[-1]

    @property
    def last_signal(self) -> float:
        return self.signal[-1]

    @property
    def histogram(self) -> float:
        return self.line[-1] - self.signal[-1]

    def crossed_up(self) -> bool:
        """True when the line moved from at/below the signal to above it on the last bar."""
        if len(self.line) < 2 or len(self.signal) < 2:
            return False
        return self.line[-2] <= self.signal[-2] and self.line[-1] > self.signal[-1]


def rsi(series: Sequence[float], period: int = 14) -> list[float]:
    """Compute Wilder's smoothed Relative Strength Index.

    Average gain/loss are seeded with the simple mean of the first
    ``period`` deltas, then smoothed per delta:
        avg = (avg * (period - 1) + current) / period
    RSI is 100 whenever the average loss is zero.

    Args:
        series: Prices ordered oldest-first.
        period: Lookback period.

    Returns:
        ``len(series) - period`` RSI values, or an empty list when
        ``len(series) <= period``.
    """
    if period <= 0 or len(series) <= period:
        return []

    avg_gain = 0.0
    avg_loss = 0.0
    for i in range(1, period + 1):
        change = series[i] - series[i - 1]
        if change > 0:
            avg_gain += change
        else:
            avg_loss -= change
    avg_gain /= period
    avg_loss /= period

    values = [_rsi_value(avg_gain, avg_loss)]
    for i in range(period + 1, len(series)):
        change = series[i] - series[i - 1]
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        values.append(_rsi_value(avg_gain, avg_loss))
    return values


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def macd(
    series: Sequence[float],
    short_period: int = 12,
    long_period: int = 26,
    signal_period: int = 9,
) -> MacdResult | None:
    """Compute the MACD line and its signal line.

    The short EMA is head-truncated to the long EMA's length, the
    difference forms the MACD line, and the signal is the EMA of that line.
    The MACD line is then re-aligned to the signal's length.

    Returns:
        MacdResult, or None when ``len(series) < long_period`` or the MACD
        line is shorter than ``signal_period``.
    """
    if len(series) < long_period:
        return None

    ema_short = ema(series, short_period)
    ema_long = ema(series, long_period)
    if not ema_short or not ema_long:
        return None

    aligned_short = ema_short[len(ema_short) - len(ema_long):]
    line = [s - l for s, l in zip(aligned_short, ema_long)]
    if len(line) < signal_period:
        return None

    signal = ema(line, signal_period)
    if not signal:
        return None
    aligned_line = line[len(line) - len(signal):]
    return MacdResult(line=aligned_line, signal=signal)
