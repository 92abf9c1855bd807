"""Fixtures for strategy tests: a cycle context over mocked gateways."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from autotrader.config import StrategyConfig
from autotrader.exchange.client import ExecutionGateway
from autotrader.market_data.coingecko import CoinGeckoClient
from autotrader.models import MarketTrend
from autotrader.position.store import PositionStore
from autotrader.strategies.base import CycleContext


@pytest.fixture
def market_data() -> AsyncMock:
    return AsyncMock(spec=CoinGeckoClient)


@pytest.fixture
def execution() -> AsyncMock:
    return AsyncMock(spec=ExecutionGateway)


@pytest.fixture
def make_ctx(
    tmp_path: Path, market_data: AsyncMock, execution: AsyncMock
) -> Callable[..., CycleContext]:
    """Factory for a CycleContext over the mocked gateways and an empty store."""
    store = PositionStore(tmp_path / "positions.json")

    def _make(listing=None, trend=MarketTrend.SIDEWAYS, **kwargs) -> CycleContext:
        return CycleContext(
            market_data=market_data,
            execution=execution,
            store=store,
            config=kwargs.pop("config", StrategyConfig()),
            market_listing=listing or [],
            market_trend=trend,
            **kwargs,
        )

    return _make
