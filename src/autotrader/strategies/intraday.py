"""Intraday MACD crossover with an ATR volatility filter.

Price history (2-day chart, roughly 15-minute points) is cached and
refreshed on a slower timer than the trading cycle via ``refresh_history``.
"""

from autotrader.indicators import atr, macd, synthetic_bars
from autotrader.logging import get_logger
from autotrader.models import OHLCBar, Opportunity, TokenInfo
from autotrader.strategies.base import CycleContext, Strategy, listed_tokens
from autotrader.strategies.tokens import INTRADAY_TOKENS

logger = get_logger(__name__)

HISTORY_DAYS = 2


def is_volatile(atr_value: float, price: float, threshold_pct: float) -> bool:
    """ATR as a percentage of price exceeds ``threshold_pct``."""
    if price <= 0:
        return False
    return atr_value / price * 100 > threshold_pct


class IntradayStrategy(Strategy):
    """Bullish MACD crossover while ATR/price is above the volatility threshold."""

    name = "intraday"

    def __init__(self, tokens: dict[str, TokenInfo] | None = None) -> None:
        self.tokens = tokens if tokens is not None else INTRADAY_TOKENS
        self._history: dict[str, list[OHLCBar]] = {}

    @property
    def history(self) -> dict[str, list[OHLCBar]]:
        return self._history

    async def refresh_history(self, market_data) -> None:
        for coin_id in self.tokens:
            chart = await market_data.get_historical_chart(coin_id, "usd", HISTORY_DAYS)
            if not chart:
                logger.warning("intraday_history_unavailable", coin_id=coin_id)
                continue
            self._history[coin_id] = synthetic_bars(chart)
            logger.info("intraday_history_refreshed", coin_id=coin_id, points=len(chart))

    async def find_opportunities(self, ctx: CycleContext) -> list[Opportunity]:
        config = ctx.config
        if not self._history:
            await self.refresh_history(ctx.market_data)

        candidates: list[Opportunity] = []
        for row, token in listed_tokens(ctx.market_listing, self.tokens):
            if ctx.store.has(lambda p, s=token.symbol: p.symbol == s):
                logger.info("intraday_position_open", symbol=token.symbol)
                continue
            bars = self._history.get(token.coingecko_id, [])
            price = row.get("current_price")
            macd_result = macd([bar.close for bar in bars])
            atr_values = atr(bars, config.atr_period)
            if macd_result is None or not atr_values or not price:
                logger.info("intraday_insufficient_data", symbol=token.symbol, bars=len(bars))
                continue

            crossed_up = macd_result.crossed_up()
            volatile = is_volatile(atr_values[-1], price, config.atr_volatility_threshold)
            logger.info(
                "intraday_analysis",
                symbol=token.symbol,
                price=price,
                macd=macd_result.last_line,
                signal=macd_result.last_signal,
                atr=atr_values[-1],
                crossed_up=crossed_up,
                volatile=volatile,
            )
            candidates.append(
                Opportunity(
                    strategy=self.name,
                    token=token,
                    price=float(price),
                    is_opportunity=crossed_up and volatile,
                    indicators={
                        "MACD Line": macd_result.last_line,
                        "Signal Line": macd_result.last_signal,
                        "MACD Crossed Up": crossed_up,
                        "ATR(14)": atr_values[-1],
                        "Volatile": volatile,
                    },
                )
            )
        return candidates
