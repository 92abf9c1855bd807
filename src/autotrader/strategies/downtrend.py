"""Downtrend capitulation buys: deep discount to the 200-EMA with oversold RSI."""

from autotrader.indicators import ema, rsi
from autotrader.logging import get_logger
from autotrader.models import Opportunity, TokenInfo
from autotrader.strategies.base import CycleContext, Strategy, listed_tokens
from autotrader.strategies.tokens import TREND_ADAPTIVE_TOKENS

logger = get_logger(__name__)

EMA_DISCOUNT = 0.95


class DowntrendStrategy(Strategy):
    """Price below 95% of EMA(200) and RSI(14) oversold, on 365-day OHLC closes."""

    name = "downtrend"
    ohlc_days = 365

    def __init__(self, tokens: dict[str, TokenInfo] | None = None) -> None:
        self.tokens = tokens if tokens is not None else TREND_ADAPTIVE_TOKENS

    async def find_opportunities(self, ctx: CycleContext) -> list[Opportunity]:
        config = ctx.config
        candidates: list[Opportunity] = []
        for _row, token in listed_tokens(ctx.market_listing, self.tokens):
            bars = await ctx.market_data.get_ohlc(token.coingecko_id, "usd", self.ohlc_days)
            closes = [bar.close for bar in bars]
            rsi_values = rsi(closes, config.rsi_period)
            long_ema = ema(closes, config.long_term_ema_period)
            if not rsi_values or not long_ema:
                logger.info("downtrend_insufficient_data", symbol=token.symbol, bars=len(bars))
                continue

            asset = token.asset
            price = await ctx.execution.get_price(asset.address, asset.chain, asset.specific_chain)
            if price is None:
                continue

            below_ema = price < long_ema[-1] * EMA_DISCOUNT
            oversold = rsi_values[-1] < config.rsi_oversold
            is_opportunity = below_ema and oversold
            logger.info(
                "downtrend_analysis",
                symbol=token.symbol,
                price=price,
                ema=long_ema[-1],
                rsi=rsi_values[-1],
                opportunity=is_opportunity,
            )
            if is_opportunity:
                candidates.append(
                    Opportunity(
                        strategy=self.name,
                        token=token,
                        price=price,
                        is_opportunity=True,
                        indicators={
                            f"EMA({config.long_term_ema_period})": long_ema[-1],
                            "RSI(14)": rsi_values[-1],
                        },
                    )
                )
        return candidates
