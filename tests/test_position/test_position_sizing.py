"""Tests for position sizers and funding-source selection."""

import pytest

from autotrader.config import StrategyConfig
from autotrader.models import USDC_SVM_ADDRESS, Opportunity, StableBalance, StableBalances
from autotrader.position.sizing import (
    FixedUsdSizer,
    PercentOfCapitalSizer,
    TokenTableSizer,
    select_funding_source,
)


def _make_opportunity(token, **kwargs) -> Opportunity:
    defaults = dict(strategy="test", token=token, price=2000.0, is_opportunity=True)
    defaults.update(kwargs)
    return Opportunity(**defaults)


def _balances(**evm: float) -> StableBalances:
    return StableBalances(
        evm={chain: StableBalance(amount=amount, address=f"usdc-{chain}") for chain, amount in evm.items()}
    )


# ---- sizers ----


class TestFixedUsdSizer:
    def test_fixed_amount(self, weth) -> None:
        assert FixedUsdSizer(500.0).size(_make_opportunity(weth), 10_000.0) == 500.0

    def test_preset_amount_wins(self, weth) -> None:
        opp = _make_opportunity(weth, amount_usd=25.0)
        assert FixedUsdSizer(500.0).size(opp, 10_000.0) == 25.0


class TestPercentOfCapitalSizer:
    def test_scaled_by_volatility_and_confidence(self, weth) -> None:
        sizer = PercentOfCapitalSizer(StrategyConfig(max_position_fraction=0.1), volatility=0.5)
        opp = _make_opportunity(weth, confidence=0.8)
        assert sizer.size(opp, 10_000.0) == pytest.approx(10_000 * 0.1 * 0.5 * 0.8)

    def test_minimum_floor(self, weth) -> None:
        sizer = PercentOfCapitalSizer(StrategyConfig(), minimum=10.0)
        assert sizer.size(_make_opportunity(weth), 50.0) == 10.0

    def test_follows_config_changes(self, weth) -> None:
        config = StrategyConfig(max_position_fraction=0.1)
        sizer = PercentOfCapitalSizer(config, volatility=0.0)
        config.max_position_fraction = 0.05
        assert sizer.size(_make_opportunity(weth), 10_000.0) == pytest.approx(500.0)


class TestTokenTableSizer:
    def test_token_units_priced_at_entry(self, weth) -> None:
        sizer = TokenTableSizer({}, token_units={"WETH": 1})
        assert sizer.size(_make_opportunity(weth, price=2500.0), 0.0) == 2500.0

    def test_table_lookup_and_default(self, sol) -> None:
        assert TokenTableSizer({"sol": 300.0}).size(_make_opportunity(sol), 0.0) == 300.0
        assert TokenTableSizer({}).size(_make_opportunity(sol), 0.0) is None
        assert TokenTableSizer({}, default=1000.0).size(_make_opportunity(sol), 0.0) == 1000.0


# ---- funding source ----


class TestSelectFundingSource:
    def test_svm_token_uses_svm_usdc(self, sol) -> None:
        source = select_funding_source(_make_opportunity(sol), StableBalances(svm=500.0), 100.0)
        assert source is not None
        assert (source.chain, source.specific_chain) == ("svm", "svm")
        assert source.token_address == USDC_SVM_ADDRESS

    def test_svm_token_ignores_evm_balances(self, sol) -> None:
        assert select_funding_source(_make_opportunity(sol), _balances(eth=10_000.0), 100.0) is None

    def test_prefers_token_chain(self, weth) -> None:
        source = select_funding_source(_make_opportunity(weth), _balances(base=5000.0, eth=5000.0), 1000.0)
        assert source is not None
        assert source.specific_chain == "eth"
        assert source.token_address == "usdc-eth"

    def test_falls_back_in_preference_order(self, weth) -> None:
        balances = _balances(eth=10.0, optimism=5000.0, polygon=5000.0)
        source = select_funding_source(_make_opportunity(weth), balances, 1000.0)
        assert source is not None
        assert source.specific_chain == "polygon"

    def test_none_when_nothing_covers_amount(self, weth) -> None:
        assert select_funding_source(_make_opportunity(weth), _balances(eth=999.0), 1000.0) is None
