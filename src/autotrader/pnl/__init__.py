"""Performance tracking and strategy adaptation."""

from autotrader.pnl.performance import PerformanceReport, PerformanceTracker, win_rate

__all__ = ["PerformanceReport", "PerformanceTracker", "win_rate"]
