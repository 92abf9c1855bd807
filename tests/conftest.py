"""Shared test fixtures for the autotrader bots."""

from collections.abc import Callable

import pytest

from autotrader.config import AppSettings, BotSettings, RecallSettings, StrategyConfig
from autotrader.models import Asset, OpenPosition, TokenInfo


@pytest.fixture
def weth() -> TokenInfo:
    return TokenInfo(
        coingecko_id="weth",
        asset=Asset(
            address="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
            symbol="WETH",
            chain="evm",
            specific_chain="eth",
        ),
    )


@pytest.fixture
def sol() -> TokenInfo:
    return TokenInfo(
        coingecko_id="solana",
        asset=Asset(
            address="So11111111111111111111111111111111111111112",
            symbol="SOL",
            chain="svm",
            specific_chain="svm",
        ),
    )


@pytest.fixture
def make_position(weth: TokenInfo) -> Callable[..., OpenPosition]:
    """Factory for OpenPosition records with test defaults."""

    def _make(**kwargs) -> OpenPosition:
        defaults = dict(
            id="trade-1",
            from_asset=Asset(
                address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
                symbol="USDC",
                chain="evm",
                specific_chain="eth",
            ),
            from_amount=1000.0,
            to_asset=weth.asset,
            to_amount=10.0,
            entry_price=100.0,
            opened_at="2024-05-01T12:00:00+00:00",
            reason="test entry",
            strategy="pullback",
            amount_usd=1000.0,
        )
        defaults.update(kwargs)
        return OpenPosition(**defaults)

    return _make


@pytest.fixture
def mock_settings() -> AppSettings:
    """AppSettings with a dummy Recall key and execution enabled."""
    return AppSettings(
        log_level="DEBUG",
        trading_enabled=True,
        recall=RecallSettings(api_key="test-api-key"),  # type: ignore[arg-type]
        bot=BotSettings(strategy="pullback", trading_enabled=True),
    )


@pytest.fixture
def strategy_config() -> StrategyConfig:
    return StrategyConfig()
