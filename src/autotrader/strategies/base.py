"""Strategy interface and the per-cycle context handed to it."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from autotrader.models import MarketTrend, Opportunity, StableBalances, TokenInfo

if TYPE_CHECKING:
    from autotrader.config import StrategyConfig
    from autotrader.exchange.client import ExecutionGateway
    from autotrader.market_data.coingecko import CoinGeckoClient
    from autotrader.position.store import PositionStore


@dataclass
class CycleContext:
    """Everything a strategy may read during one trading cycle."""

    market_data: CoinGeckoClient
    execution: ExecutionGateway
    store: PositionStore
    config: StrategyConfig
    market_listing: list[dict[str, Any]] = field(default_factory=list)
    balances: StableBalances = field(default_factory=StableBalances)
    portfolio: dict[str, Any] = field(default_factory=dict)
    market_trend: MarketTrend = MarketTrend.SIDEWAYS


class Strategy(ABC):
    """Opportunity predicate plugged into the trading cycle.

    Subclasses set ``name`` (the label stored on positions and used to pick
    the oracle prompt) and implement ``find_opportunities``.

    Attributes:
        tokens: Tradable universe keyed by CoinGecko id.
        needs_portfolio: Fetch the Recall portfolio each cycle.
        records_positions: Persist executed entries as open positions.
        uses_oracle: Gate candidates on the confidence oracle.
    """

    name: str = ""
    tokens: Mapping[str, TokenInfo] = MappingProxyType({})
    needs_portfolio: bool = False
    records_positions: bool = True
    uses_oracle: bool = True

    async def fetch_listing(self, market_data: CoinGeckoClient) -> list[dict[str, Any]]:
        """Market rows for this strategy's universe."""
        if not self.tokens:
            return []
        return await market_data.get_market_listing(ids=list(self.tokens))

    async def assess_market(self, ctx: CycleContext) -> MarketTrend:
        """Broad market regime used to gate entries and brief the oracle."""
        return MarketTrend.SIDEWAYS

    async def refresh_history(self, market_data: CoinGeckoClient) -> None:
        """Refresh cached price history. Only stateful strategies override this."""
        return None

    @abstractmethod
    async def find_opportunities(self, ctx: CycleContext) -> list[Opportunity]:
        """Evaluate the universe and return candidate entries."""


def listed_tokens(
    listing: list[dict[str, Any]], tokens: Mapping[str, TokenInfo]
) -> list[tuple[dict[str, Any], TokenInfo]]:
    """Pair market rows with the configured token they describe."""
    return [(row, tokens[row["id"]]) for row in listing if row.get("id") in tokens]
