"""Position sizing and funding-chain selection.

Sizers return the USD (USDC) notional to spend on an entry, or None when
the candidate should be skipped.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from autotrader.models import (
    USDC_EVM_ADDRESS,
    USDC_SVM_ADDRESS,
    Opportunity,
    StableBalances,
)

# EVM chains tried, after the token's own chain, when looking for USDC.
FUNDING_CHAIN_PREFERENCE = ("base", "polygon", "arbitrum", "optimism", "eth")


class PositionSizer(ABC):
    """Decides the notional for a new entry."""

    @abstractmethod
    def size(self, opportunity: Opportunity, available_usd: float) -> float | None:
        """Return the USD amount to spend, or None to skip."""


class FixedUsdSizer(PositionSizer):
    """Same notional for every entry. A preset opportunity amount wins."""

    def __init__(self, amount: float = 1000.0) -> None:
        self._amount = amount

    def size(self, opportunity: Opportunity, available_usd: float) -> float | None:
        if opportunity.amount_usd is not None:
            return opportunity.amount_usd
        return self._amount


class PercentOfCapitalSizer(PositionSizer):
    """Fraction of available capital scaled by volatility and confidence.

    size = capital * fraction * (1 - volatility) * confidence, floored at
    ``minimum``. ``fraction`` is read from ``config.max_position_fraction``
    so performance adaptation changes future sizes.

    Args:
        config: StrategyConfig providing ``max_position_fraction``.
        volatility: Volatility discount in [0, 1]. Overridden per
            opportunity by an ``indicators["volatility"]`` value.
        minimum: Smallest trade size in USD.
    """

    def __init__(self, config: Any, volatility: float = 0.5, minimum: float = 10.0) -> None:
        self._config = config
        self._volatility = volatility
        self._minimum = minimum

    def size(self, opportunity: Opportunity, available_usd: float) -> float | None:
        volatility = opportunity.indicators.get("volatility", self._volatility)
        confidence = opportunity.confidence if opportunity.confidence is not None else 1.0
        base = available_usd * self._config.max_position_fraction
        return max(self._minimum, base * (1 - volatility) * confidence)


class TokenTableSizer(PositionSizer):
    """Per-symbol USD notional, or a fixed token quantity priced at entry.

    Args:
        table: Symbol -> USD amount.
        token_units: Symbol -> token quantity (e.g. ``{"WETH": 1}``); the USD
            amount is ``units * opportunity.price``.
        default: Amount for symbols in neither table. None skips them.
    """

    def __init__(
        self,
        table: dict[str, float],
        token_units: dict[str, float] | None = None,
        default: float | None = None,
    ) -> None:
        self._table = {k.upper(): v for k, v in table.items()}
        self._units = {k.upper(): v for k, v in (token_units or {}).items()}
        self._default = default

    def size(self, opportunity: Opportunity, available_usd: float) -> float | None:
        symbol = opportunity.symbol.upper()
        if symbol in self._units:
            return self._units[symbol] * opportunity.price
        return self._table.get(symbol, self._default)


@dataclass(frozen=True)
class FundingSource:
    """USDC balance chosen to pay for an entry."""

    chain: str
    specific_chain: str
    token_address: str


def select_funding_source(
    opportunity: Opportunity,
    balances: StableBalances,
    amount_usd: float,
) -> FundingSource | None:
    """Pick the USDC balance that can fund ``amount_usd``.

    SVM tokens draw on SVM USDC only. EVM tokens try their own chain first,
    then base, polygon, arbitrum, optimism and eth.

    Returns:
        FundingSource, or None when no compatible chain holds enough.
    """
    asset = opportunity.token.asset
    if asset.chain == "svm":
        if balances.svm >= amount_usd:
            return FundingSource(chain="svm", specific_chain="svm", token_address=USDC_SVM_ADDRESS)
        return None

    candidates = [asset.specific_chain] + [
        c for c in FUNDING_CHAIN_PREFERENCE if c != asset.specific_chain
    ]
    for specific_chain in candidates:
        balance = balances.evm.get(specific_chain)
        if balance is not None and balance.amount >= amount_usd:
            return FundingSource(
                chain="evm",
                specific_chain=specific_chain,
                token_address=balance.address or USDC_EVM_ADDRESS,
            )
    return None
