"""Tests for performance reporting and risk adaptation."""

from unittest.mock import AsyncMock

import pytest

from autotrader.config import StrategyConfig
from autotrader.exchange.client import ExecutionGateway
from autotrader.pnl.performance import PerformanceReport, PerformanceTracker, portfolio_value, win_rate


def _report(pnl: float, rate: float) -> PerformanceReport:
    return PerformanceReport(portfolio_value=10_000 * (1 + pnl), pnl=pnl, win_rate=rate, trade_count=10)


class TestWinRate:
    def test_fraction_of_winners(self) -> None:
        trades = [{"pnl": 5}, {"pnl": -2}, {"pnl": 0}, {"pnl": "1.5"}]
        assert win_rate(trades) == pytest.approx(0.5)

    def test_no_trades(self) -> None:
        assert win_rate([]) == 0.0


def test_portfolio_value_prefers_total_value() -> None:
    assert portfolio_value({"totalValue": 12_000, "balance": 1}) == 12_000.0
    assert portfolio_value({"balance": 900}) == 900.0
    assert portfolio_value({}) == 0.0


class TestReport:
    @pytest.mark.asyncio
    async def test_report_against_starting_capital(self) -> None:
        execution = AsyncMock(spec=ExecutionGateway)
        execution.get_portfolio.return_value = {"totalValue": 11_000}
        execution.get_trade_history.return_value = [{"pnl": 3}, {"pnl": -1}]

        report = await PerformanceTracker(execution, starting_capital=10_000).report()
        assert report.portfolio_value == 11_000
        assert report.pnl == pytest.approx(0.1)
        assert report.win_rate == pytest.approx(0.5)
        assert report.trade_count == 2


class TestAdapt:
    def test_tightens_after_poor_run(self) -> None:
        config = StrategyConfig()
        assert PerformanceTracker.adapt(config, _report(-0.15, 0.4)) is True
        assert config.max_position_fraction == 0.05
        assert config.stop_loss == 0.03

    def test_loosens_after_strong_run(self) -> None:
        config = StrategyConfig()
        assert PerformanceTracker.adapt(config, _report(0.15, 0.7)) is True
        assert config.max_position_fraction == 0.12
        assert config.take_profit == 0.20

    def test_mixed_results_leave_config_alone(self) -> None:
        config = StrategyConfig()
        assert PerformanceTracker.adapt(config, _report(-0.15, 0.7)) is False
        assert config == StrategyConfig()
