"""Trend pullback: buy uptrending tokens that dip back to their 20-EMA."""

from dataclasses import dataclass

from autotrader.indicators import atr_last, ema
from autotrader.logging import get_logger
from autotrader.models import MarketTrend, Opportunity, TokenInfo
from autotrader.strategies.base import CycleContext, Strategy, listed_tokens
from autotrader.strategies.tokens import MARKET_TREND_ASSET, PULLBACK_TOKENS
from autotrader.strategies.trend import fetch_market_trend

logger = get_logger(__name__)


@dataclass(frozen=True)
class PullbackSignal:
    is_near_ema: bool
    is_opportunity: bool


def classify_pullback(price: float, ema_value: float, atr_value: float, multiplier: float = 1.0) -> PullbackSignal:
    """Price within ``multiplier`` ATRs of the EMA, and above it, is a pullback entry."""
    is_near_ema = abs(price - ema_value) <= atr_value * multiplier
    return PullbackSignal(
        is_near_ema=is_near_ema,
        is_opportunity=price > ema_value and is_near_ema,
    )


class PullbackStrategy(Strategy):
    """Enter on pullbacks to the 20-period EMA while the market is in an uptrend.

    ATR comes from 14-day OHLC candles and the EMA from the 7-day chart.
    Every analysed token is returned with its verdict so override mode can
    still let the oracle pick tokens the predicate rejected.
    """

    name = "pullback"

    def __init__(
        self,
        tokens: dict[str, TokenInfo] | None = None,
        require_uptrend: bool = True,
    ) -> None:
        self.tokens = tokens if tokens is not None else PULLBACK_TOKENS
        self._require_uptrend = require_uptrend

    async def assess_market(self, ctx: CycleContext) -> MarketTrend:
        return await fetch_market_trend(
            ctx.market_data,
            MARKET_TREND_ASSET,
            ctx.config.market_trend_sma_short,
            ctx.config.market_trend_sma_long,
        )

    async def find_opportunities(self, ctx: CycleContext) -> list[Opportunity]:
        if self._require_uptrend and ctx.market_trend != MarketTrend.UPTREND:
            logger.info("pullback_scan_skipped", trend=ctx.market_trend.value)
            return []

        config = ctx.config
        candidates: list[Opportunity] = []
        for row, token in listed_tokens(ctx.market_listing, self.tokens):
            bars = await ctx.market_data.get_ohlc(token.coingecko_id, "usd", 14)
            if not bars:
                logger.info("pullback_no_ohlc", symbol=token.symbol)
                continue
            atr_value = atr_last(bars, config.atr_period)
            if atr_value == 0:
                logger.info("pullback_zero_atr", symbol=token.symbol)
                continue

            chart = await ctx.market_data.get_historical_chart(token.coingecko_id, "usd", 7)
            ema_values = ema([p for _, p in chart], config.entry_ema_period)
            if not ema_values:
                logger.info("pullback_insufficient_chart", symbol=token.symbol, points=len(chart))
                continue

            asset = token.asset
            price = await ctx.execution.get_price(asset.address, asset.chain, asset.specific_chain)
            if price is None:
                logger.info("pullback_no_price", symbol=token.symbol)
                continue

            signal = classify_pullback(price, ema_values[-1], atr_value, config.atr_multiplier)
            logger.info(
                "pullback_analysis",
                symbol=token.symbol,
                price=price,
                ema=ema_values[-1],
                atr=atr_value,
                near_ema=signal.is_near_ema,
                opportunity=signal.is_opportunity,
            )
            candidates.append(
                Opportunity(
                    strategy=self.name,
                    token=token,
                    price=price,
                    is_opportunity=signal.is_opportunity,
                    indicators={
                        "EMA(20)": ema_values[-1],
                        "ATR(14)": atr_value,
                        "Near EMA": signal.is_near_ema,
                        "CoinGecko Price": row.get("current_price"),
                    },
                )
            )
        return candidates
