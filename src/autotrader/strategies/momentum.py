"""Momentum breakouts: hourly pump on a volume spike in a trending coin."""

from typing import Any

from autotrader.logging import get_logger
from autotrader.models import Opportunity, TokenInfo
from autotrader.strategies.base import CycleContext, Strategy, listed_tokens
from autotrader.strategies.tokens import MOMENTUM_TOKENS

logger = get_logger(__name__)

MIN_HOURLY_CHANGE_PCT = 5.0
MIN_VOLUME_USD = 1_000_000
VOLUME_TO_MARKET_CAP = 10


def is_momentum_candidate(row: dict[str, Any], hot_ids: set[str]) -> bool:
    change_1h = row.get("price_change_percentage_1h_in_currency") or 0
    volume = row.get("total_volume") or 0
    market_cap = row.get("market_cap") or 0
    volume_spike = volume > market_cap / VOLUME_TO_MARKET_CAP
    return change_1h > MIN_HOURLY_CHANGE_PCT and volume_spike and row.get("id") in hot_ids


class MomentumStrategy(Strategy):
    """Buy coins up >5% in an hour with volume above a tenth of market cap.

    The coin must also be trending on CoinGecko or a top 24h gainer, trade
    at least $1M daily volume, and the portfolio must be above the daily
    loss limit.
    """

    name = "momentum"
    needs_portfolio = True

    def __init__(self, tokens: dict[str, TokenInfo] | None = None) -> None:
        self.tokens = tokens if tokens is not None else MOMENTUM_TOKENS

    async def fetch_listing(self, market_data) -> list[dict[str, Any]]:
        return await market_data.get_market_listing(
            per_page=100,
            price_change_percentage="1h",
        )

    async def find_opportunities(self, ctx: CycleContext) -> list[Opportunity]:
        pnl_24h = ctx.portfolio.get("pnl_24h")
        if isinstance(pnl_24h, (int, float)) and pnl_24h <= ctx.config.daily_loss_limit:
            logger.warning("daily_loss_limit_reached", pnl_24h=pnl_24h)
            return []

        trending = await ctx.market_data.get_trending_tokens()
        movers = await ctx.market_data.get_top_movers("usd", "24h")
        hot_ids = set(trending) | {row.get("id") for row in movers.get("gainers", [])}

        candidates: list[Opportunity] = []
        for row, token in listed_tokens(ctx.market_listing, self.tokens):
            if not is_momentum_candidate(row, hot_ids):
                continue
            if (row.get("total_volume") or 0) < MIN_VOLUME_USD:
                logger.info("momentum_illiquid", symbol=token.symbol, volume=row.get("total_volume"))
                continue
            candidates.append(
                Opportunity(
                    strategy=self.name,
                    token=token,
                    price=float(row.get("current_price") or 0),
                    is_opportunity=True,
                    indicators={
                        "1h Change %": row.get("price_change_percentage_1h_in_currency"),
                        "24h Volume": row.get("total_volume"),
                        "Market Cap": row.get("market_cap"),
                    },
                )
            )
        logger.info("momentum_scan_complete", candidates=len(candidates))
        return candidates
