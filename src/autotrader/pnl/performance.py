"""Portfolio performance tracking and rule-based risk adaptation.

Performance is measured against a fixed starting capital:
    pnl = portfolio_value / starting_capital - 1
and the win rate is the share of agent trades with positive P&L. The
adaptation rules tighten risk after a poor run and loosen it after a
strong one by mutating the bot's StrategyConfig in place.
"""

from dataclasses import dataclass
from typing import Any

from autotrader.config import StrategyConfig
from autotrader.exchange.client import ExecutionGateway
from autotrader.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PerformanceReport:
    portfolio_value: float
    pnl: float
    win_rate: float
    trade_count: int


def _trade_pnl(trade: dict[str, Any]) -> float:
    try:
        return float(trade.get("pnl") or 0)
    except (TypeError, ValueError):
        return 0.0


def win_rate(trades: list[dict[str, Any]]) -> float:
    """Fraction of trades with positive P&L, 0.0 for no trades."""
    if not trades:
        return 0.0
    wins = sum(1 for t in trades if _trade_pnl(t) > 0)
    return wins / len(trades)


def portfolio_value(portfolio: dict[str, Any]) -> float:
    for key in ("totalValue", "balance"):
        value = portfolio.get(key)
        if isinstance(value, (int, float)):
            return float(value)
    return 0.0


class PerformanceTracker:
    """Builds performance reports from the execution gateway.

    Args:
        execution: Gateway providing the portfolio and trade history.
        starting_capital: Capital the P&L is measured against.
    """

    def __init__(self, execution: ExecutionGateway, starting_capital: float = 10000.0) -> None:
        self._execution = execution
        self._starting_capital = starting_capital

    win_rate = staticmethod(win_rate)

    async def report(self) -> PerformanceReport:
        """Fetch portfolio and trades and summarise them.

        Raises:
            GatewayError: If the portfolio or trade history is unavailable.
        """
        portfolio = await self._execution.get_portfolio()
        trades = await self._execution.get_trade_history()
        value = portfolio_value(portfolio)
        report = PerformanceReport(
            portfolio_value=value,
            pnl=value / self._starting_capital - 1 if self._starting_capital else 0.0,
            win_rate=win_rate(trades),
            trade_count=len(trades),
        )
        logger.info(
            "performance_report",
            portfolio_value=round(report.portfolio_value, 2),
            pnl_pct=round(report.pnl * 100, 2),
            win_rate_pct=round(report.win_rate * 100, 2),
            trades=report.trade_count,
        )
        return report

    @staticmethod
    def adapt(config: StrategyConfig, report: PerformanceReport) -> bool:
        """Adjust risk parameters from a report.

        Returns:
            True if ``config`` was changed.
        """
        if report.pnl < -0.1 and report.win_rate < 0.5:
            config.max_position_fraction = 0.05
            config.stop_loss = 0.03
            logger.warning("strategy_risk_tightened", pnl=report.pnl, win_rate=report.win_rate)
            return True
        if report.pnl > 0.1 and report.win_rate > 0.6:
            config.max_position_fraction = 0.12
            config.take_profit = 0.20
            logger.info("strategy_risk_loosened", pnl=report.pnl, win_rate=report.win_rate)
            return True
        return False
