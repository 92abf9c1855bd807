"""Portfolio rebalancing toward fixed target allocations."""

from dataclasses import dataclass
from typing import Any

from autotrader.logging import get_logger
from autotrader.models import (
    USDC_EVM_ADDRESS,
    USDC_SVM_ADDRESS,
    Opportunity,
    TokenInfo,
    TradeSide,
)
from autotrader.strategies.base import CycleContext, Strategy
from autotrader.strategies.tokens import REBALANCE_TOKENS, TARGET_ALLOCATIONS

logger = get_logger(__name__)

STABLE_ADDRESSES = {USDC_EVM_ADDRESS.lower(), USDC_SVM_ADDRESS.lower()}


@dataclass
class Holding:
    value: float
    amount: float
    price: float


def current_allocations(
    holdings: list[dict[str, Any]],
    prices: dict[str, float],
    tokens: dict[str, TokenInfo],
) -> tuple[dict[str, Holding], float]:
    """Value each tracked holding, counting USDC toward the total.

    Args:
        holdings: Portfolio token rows with ``token`` (address) and ``amount``.
        prices: CoinGecko id -> USD price.
        tokens: Tracked universe keyed by CoinGecko id.

    Returns:
        ``(symbol -> Holding, total value)``.
    """
    by_address = {t.asset.address.lower(): t for t in tokens.values()}
    allocations: dict[str, Holding] = {}
    total = 0.0
    for row in holdings:
        address = str(row.get("token", "")).lower()
        amount = float(row.get("amount") or 0)
        token = by_address.get(address)
        if token is not None:
            price = prices.get(token.coingecko_id)
            if not price:
                continue
            holding = allocations.setdefault(token.symbol, Holding(0.0, 0.0, price))
            holding.amount += amount
            holding.value += amount * price
            total += amount * price
        elif address in STABLE_ADDRESSES and amount > 0:
            holding = allocations.setdefault("USDC", Holding(0.0, 0.0, 1.0))
            holding.amount += amount
            holding.value += amount
            total += amount
    return allocations, total


class RebalanceStrategy(Strategy):
    """Emit buy and sell legs for allocations that drift past the threshold.

    Args:
        targets: Symbol -> target weight (fractions summing to at most 1).
        threshold_pct: Drift in percentage points that triggers a trade.
        min_trade_usd: Legs smaller than this are skipped.
    """

    name = "rebalance"
    needs_portfolio = True
    records_positions = False

    def __init__(
        self,
        tokens: dict[str, TokenInfo] | None = None,
        targets: dict[str, float] | None = None,
        threshold_pct: float = 1.0,
        min_trade_usd: float = 50.0,
    ) -> None:
        self.tokens = tokens if tokens is not None else REBALANCE_TOKENS
        self._targets = targets if targets is not None else TARGET_ALLOCATIONS
        self._threshold_pct = threshold_pct
        self._min_trade_usd = min_trade_usd

    async def find_opportunities(self, ctx: CycleContext) -> list[Opportunity]:
        prices = {
            row["id"]: float(row["current_price"])
            for row in ctx.market_listing
            if row.get("id") and row.get("current_price")
        }
        allocations, total = current_allocations(
            ctx.portfolio.get("tokens", []), prices, self.tokens
        )
        if total <= 0:
            logger.info("rebalance_empty_portfolio")
            return []

        by_symbol = {t.symbol: t for t in self.tokens.values()}
        legs: list[Opportunity] = []
        for symbol, target in self._targets.items():
            token = by_symbol.get(symbol)
            if token is None:
                continue
            holding = allocations.get(symbol)
            current_value = holding.value if holding else 0.0
            current_pct = current_value / total * 100
            deviation = current_pct - target * 100
            if abs(deviation) <= self._threshold_pct:
                continue

            amount_usd = abs(total * target - current_value)
            if amount_usd < self._min_trade_usd:
                logger.info("rebalance_leg_too_small", symbol=symbol, amount_usd=amount_usd)
                continue

            price = holding.price if holding else prices.get(token.coingecko_id, 0.0)
            if not price:
                continue
            side = TradeSide.SELL if deviation > 0 else TradeSide.BUY
            token_amount = None
            if side == TradeSide.SELL:
                token_amount = min(holding.amount, amount_usd / price)
                if token_amount * price < self._min_trade_usd:
                    continue

            logger.info(
                "rebalance_leg",
                symbol=symbol,
                side=side.value,
                current_pct=round(current_pct, 2),
                target_pct=target * 100,
                amount_usd=amount_usd,
            )
            legs.append(
                Opportunity(
                    strategy=self.name,
                    token=token,
                    price=price,
                    is_opportunity=True,
                    side=side,
                    amount_usd=amount_usd,
                    token_amount=token_amount,
                    indicators={
                        "Current Allocation %": current_pct,
                        "Target Allocation %": target * 100,
                    },
                )
            )
        return legs
