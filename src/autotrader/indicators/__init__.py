"""Technical indicator library.

Pure functions over chronological float price series and OHLC bars:
SMA, EMA, RSI, MACD, ATR and Bollinger Bands. Insufficient data always
yields an empty list or None, never partial values.
"""

from autotrader.indicators.moving_average import ema, sma
from autotrader.indicators.oscillators import MacdResult, macd, rsi
from autotrader.indicators.snapshot import IndicatorSnapshot, compute_snapshot
from autotrader.indicators.volatility import (
    BollingerBands,
    atr,
    atr_last,
    bollinger_bands,
    synthetic_bars,
    true_ranges,
)

__all__ = [
    "BollingerBands",
    "IndicatorSnapshot",
    "MacdResult",
    "atr",
    "atr_last",
    "bollinger_bands",
    "compute_snapshot",
    "ema",
    "macd",
    "rsi",
    "sma",
    "synthetic_bars",
    "true_ranges",
]
