"""Regime switching between pullback, mean-reversion and downtrend entries."""

from autotrader.logging import get_logger
from autotrader.models import MarketTrend, Opportunity, TokenInfo
from autotrader.strategies.base import CycleContext, Strategy
from autotrader.strategies.downtrend import DowntrendStrategy
from autotrader.strategies.mean_reversion import MeanReversionStrategy
from autotrader.strategies.pullback import PullbackStrategy
from autotrader.strategies.tokens import TREND_ADAPTIVE_TOKENS

logger = get_logger(__name__)


class TrendAdaptiveStrategy(Strategy):
    """Delegate to the sub-strategy matching the current market trend."""

    name = "trend_adaptive"

    def __init__(self, tokens: dict[str, TokenInfo] | None = None) -> None:
        self.tokens = tokens if tokens is not None else TREND_ADAPTIVE_TOKENS
        self._pullback = PullbackStrategy(self.tokens)
        self._by_trend: dict[MarketTrend, Strategy] = {
            MarketTrend.UPTREND: self._pullback,
            MarketTrend.SIDEWAYS: MeanReversionStrategy(self.tokens),
            MarketTrend.DOWNTREND: DowntrendStrategy(self.tokens),
        }

    async def assess_market(self, ctx: CycleContext) -> MarketTrend:
        return await self._pullback.assess_market(ctx)

    async def find_opportunities(self, ctx: CycleContext) -> list[Opportunity]:
        delegate = self._by_trend[ctx.market_trend]
        logger.info("trend_adaptive_mode", trend=ctx.market_trend.value, strategy=delegate.name)
        return await delegate.find_opportunities(ctx)
