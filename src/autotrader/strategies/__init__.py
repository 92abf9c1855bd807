"""Pluggable opportunity predicates for the trading cycle.

Each bot variant is a Strategy (entry predicate) paired with a sizer and
an exit policy; ``build_strategy`` assembles the bundle for a configured
strategy name.
"""

from autotrader.strategies.base import CycleContext, Strategy
from autotrader.strategies.downtrend import DowntrendStrategy
from autotrader.strategies.intraday import IntradayStrategy
from autotrader.strategies.mean_reversion import MeanReversionStrategy
from autotrader.strategies.memecoin import MemeCoinStrategy
from autotrader.strategies.momentum import MomentumStrategy
from autotrader.strategies.pullback import PullbackStrategy, classify_pullback
from autotrader.strategies.rebalance import RebalanceStrategy
from autotrader.strategies.registry import StrategyBundle, build_strategy
from autotrader.strategies.trend import fetch_market_trend, market_trend
from autotrader.strategies.trend_adaptive import TrendAdaptiveStrategy

__all__ = [
    "CycleContext",
    "DowntrendStrategy",
    "IntradayStrategy",
    "MeanReversionStrategy",
    "MemeCoinStrategy",
    "MomentumStrategy",
    "PullbackStrategy",
    "RebalanceStrategy",
    "Strategy",
    "StrategyBundle",
    "TrendAdaptiveStrategy",
    "build_strategy",
    "classify_pullback",
    "fetch_market_trend",
    "market_trend",
]
