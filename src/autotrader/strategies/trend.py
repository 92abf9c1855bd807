"""Market regime classification from a trend asset's moving averages."""

from collections.abc import Sequence

from autotrader.indicators import sma
from autotrader.logging import get_logger
from autotrader.models import MarketTrend

logger = get_logger(__name__)


def market_trend(prices: Sequence[float], short: int = 20, long: int = 50) -> MarketTrend:
    """Classify the market from the last short and long SMA values.

    UPTREND when the short SMA is above the long SMA, DOWNTREND otherwise,
    SIDEWAYS when there are fewer than ``long`` prices.
    """
    if len(prices) < long:
        return MarketTrend.SIDEWAYS
    short_sma = sma(prices, short)
    long_sma = sma(prices, long)
    if not short_sma or not long_sma:
        return MarketTrend.SIDEWAYS
    if short_sma[-1] > long_sma[-1]:
        return MarketTrend.UPTREND
    return MarketTrend.DOWNTREND


async def fetch_market_trend(market_data, coin_id: str, short: int, long: int, days: int = 14) -> MarketTrend:
    """Fetch the trend asset's chart and classify it. Failures read as SIDEWAYS."""
    chart = await market_data.get_historical_chart(coin_id, "usd", days)
    trend = market_trend([price for _, price in chart], short, long)
    logger.info("market_trend_assessed", asset=coin_id, points=len(chart), trend=trend.value)
    return trend
