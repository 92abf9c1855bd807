"""Bundle every indicator for one instrument at one point in time."""

from collections.abc import Sequence
from dataclasses import dataclass

from autotrader.indicators.moving_average import ema, sma
from autotrader.indicators.oscillators import MacdResult, macd, rsi
from autotrader.indicators.volatility import BollingerBands, atr, bollinger_bands
from autotrader.models import OHLCBar


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Latest indicator values; ``None`` marks an indicator without enough data."""

    price: float | None = None
    sma: float | None = None
    ema: float | None = None
    rsi: float | None = None
    macd: MacdResult | None = None
    atr: float | None = None
    bollinger: BollingerBands | None = None

    def as_dict(self) -> dict[str, float | None]:
        """Flatten to scalar values for prompts and log events."""
        return {
            "price": self.price,
            "sma": self.sma,
            "ema": self.ema,
            "rsi": self.rsi,
            "macd_line": self.macd.last_line if self.macd else None,
            "macd_signal": self.macd.last_signal if self.macd else None,
            "atr": self.atr,
            "bollinger_upper": self.bollinger.upper if self.bollinger else None,
            "bollinger_middle": self.bollinger.middle if self.bollinger else None,
            "bollinger_lower": self.bollinger.lower if self.bollinger else None,
        }


def compute_snapshot(
    prices: Sequence[float],
    bars: Sequence[OHLCBar] | None = None,
    *,
    sma_period: int = 20,
    ema_period: int = 20,
    rsi_period: int = 14,
    atr_period: int = 14,
    bollinger_period: int = 20,
    bollinger_std_dev: float = 2.0,
) -> IndicatorSnapshot:
    """Run the indicator library over a price series.

    Args:
        prices: Closing prices, oldest first.
        bars: Optional OHLC bars for ATR. ATR is left ``None`` without them.

    Returns:
        IndicatorSnapshot with the last value of each indicator.
    """
    sma_values = sma(prices, sma_period)
    ema_values = ema(prices, ema_period)
    rsi_values = rsi(prices, rsi_period)
    atr_values = atr(bars, atr_period) if bars else []

    return IndicatorSnapshot(
        price=prices[-1] if prices else None,
        sma=sma_values[-1] if sma_values else None,
        ema=ema_values[-1] if ema_values else None,
        rsi=rsi_values[-1] if rsi_values else None,
        macd=macd(prices),
        atr=atr_values[-1] if atr_values else None,
        bollinger=bollinger_bands(prices, bollinger_period, bollinger_std_dev),
    )
