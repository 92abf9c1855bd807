"""Meme-coin discovery from DEX Screener trending pairs."""

from autotrader.logging import get_logger
from autotrader.market_data.dexscreener import DexScreenerClient
from autotrader.models import Asset, Opportunity, TokenInfo
from autotrader.strategies.base import CycleContext, Strategy

logger = get_logger(__name__)


class MemeCoinStrategy(Strategy):
    """Buy fresh, liquid, sub-cent DEX pairs not already held.

    Args:
        dex: DEX Screener client used for discovery.
        min_liquidity: Minimum pool liquidity in USD.
        max_price: Pairs priced at or above this are skipped.
        position_usd: Notional attached to every candidate.
    """

    name = "memecoin"
    uses_oracle = False

    def __init__(
        self,
        dex: DexScreenerClient,
        min_liquidity: float = 10_000,
        max_price: float = 0.001,
        position_usd: float = 25.0,
    ) -> None:
        self._dex = dex
        self._min_liquidity = min_liquidity
        self._max_price = max_price
        self._position_usd = position_usd

    async def fetch_listing(self, market_data) -> list:
        return []

    async def find_opportunities(self, ctx: CycleContext) -> list[Opportunity]:
        pairs = await self._dex.get_top_trending_pairs(self._min_liquidity)
        candidates: list[Opportunity] = []
        for pair in pairs:
            if ctx.store.has(lambda p, a=pair.token_address: p.to_asset.address == a):
                logger.info("memecoin_already_held", symbol=pair.symbol)
                continue
            if pair.price_usd >= self._max_price:
                continue
            token = TokenInfo(
                coingecko_id="",
                asset=Asset(pair.token_address, pair.symbol, pair.chain, pair.specific_chain),
            )
            candidates.append(
                Opportunity(
                    strategy=self.name,
                    token=token,
                    price=pair.price_usd,
                    is_opportunity=True,
                    amount_usd=self._position_usd,
                    indicators={"Liquidity (USD)": pair.liquidity},
                )
            )
        logger.info("memecoin_scan_complete", pairs=len(pairs), candidates=len(candidates))
        return candidates
