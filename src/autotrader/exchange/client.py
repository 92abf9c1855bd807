"""Abstract execution gateway interface.

Strategy and orchestration code depends only on this interface, keeping
Recall-specific request shapes isolated in the concrete implementation.
"""

from abc import ABC, abstractmethod
from typing import Any

from autotrader.models import TradeRequest, TradeResult


class ExecutionGateway(ABC):
    """Abstract base class for trade-execution providers."""

    @abstractmethod
    async def close(self) -> None:
        """Release HTTP resources."""
        ...

    @abstractmethod
    async def get_portfolio(self) -> dict[str, Any]:
        """Fetch the agent's portfolio summary (total value, holdings)."""
        ...

    @abstractmethod
    async def get_balances(self) -> list[dict[str, Any]]:
        """Fetch per-token balances across chains."""
        ...

    @abstractmethod
    async def get_price(
        self, token_address: str, chain: str, specific_chain: str
    ) -> float | None:
        """Current USD price of a token, or None if unavailable."""
        ...

    @abstractmethod
    async def execute_trade(self, request: TradeRequest) -> TradeResult:
        """Execute a swap. Succeeds with a transaction record or raises."""
        ...

    @abstractmethod
    async def get_trade_quote(self, request: TradeRequest) -> dict[str, Any]:
        """Quote a swap without executing it."""
        ...

    @abstractmethod
    async def get_trade_history(self) -> list[dict[str, Any]]:
        """Past trades executed by this agent."""
        ...
