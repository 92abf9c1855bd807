"""Sideways-market mean reversion: oversold RSI at the lower Bollinger Band."""

from autotrader.indicators import bollinger_bands, rsi
from autotrader.logging import get_logger
from autotrader.models import Opportunity, TokenInfo
from autotrader.strategies.base import CycleContext, Strategy, listed_tokens
from autotrader.strategies.tokens import TREND_ADAPTIVE_TOKENS

logger = get_logger(__name__)


class MeanReversionStrategy(Strategy):
    """RSI(14) below the oversold level and price at or below the lower band.

    Indicators use the closes of 30-day OHLC candles; the live price comes
    from the execution gateway.
    """

    name = "mean_reversion"
    ohlc_days = 30

    def __init__(self, tokens: dict[str, TokenInfo] | None = None) -> None:
        self.tokens = tokens if tokens is not None else TREND_ADAPTIVE_TOKENS

    async def find_opportunities(self, ctx: CycleContext) -> list[Opportunity]:
        config = ctx.config
        candidates: list[Opportunity] = []
        for _row, token in listed_tokens(ctx.market_listing, self.tokens):
            bars = await ctx.market_data.get_ohlc(token.coingecko_id, "usd", self.ohlc_days)
            closes = [bar.close for bar in bars]
            rsi_values = rsi(closes, config.rsi_period)
            bands = bollinger_bands(closes, config.bollinger_period, config.bollinger_std_dev)
            if not rsi_values or bands is None:
                logger.info("mean_reversion_insufficient_data", symbol=token.symbol, bars=len(bars))
                continue

            asset = token.asset
            price = await ctx.execution.get_price(asset.address, asset.chain, asset.specific_chain)
            if price is None:
                continue

            at_lower_band = price <= bands.lower
            oversold = rsi_values[-1] < config.rsi_oversold
            is_opportunity = at_lower_band and oversold
            logger.info(
                "mean_reversion_analysis",
                symbol=token.symbol,
                price=price,
                rsi=rsi_values[-1],
                lower_band=bands.lower,
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
                            "RSI(14)": rsi_values[-1],
                            "Lower Bollinger Band": bands.lower,
                            "Middle Bollinger Band": bands.middle,
                        },
                    )
                )
        return candidates
