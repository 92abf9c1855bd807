"""Strategy bundles: which predicate, sizer and exit policy each bot runs."""

from dataclasses import dataclass

from autotrader.config import BotSettings, StrategyConfig
from autotrader.market_data.dexscreener import DexScreenerClient
from autotrader.position.exits import (
    DollarTakeProfitExit,
    ExitPolicy,
    NoExit,
    PercentExit,
    TrailingStopExit,
)
from autotrader.position.sizing import (
    FixedUsdSizer,
    PercentOfCapitalSizer,
    PositionSizer,
    TokenTableSizer,
)
from autotrader.strategies.base import Strategy
from autotrader.strategies.downtrend import DowntrendStrategy
from autotrader.strategies.intraday import IntradayStrategy
from autotrader.strategies.mean_reversion import MeanReversionStrategy
from autotrader.strategies.memecoin import MemeCoinStrategy
from autotrader.strategies.momentum import MomentumStrategy
from autotrader.strategies.pullback import PullbackStrategy
from autotrader.strategies.rebalance import RebalanceStrategy
from autotrader.strategies.tokens import (
    PULLBACK_TAKE_PROFIT_DOLLARS,
    TREND_ADAPTIVE_POSITION_SIZES,
    TREND_ADAPTIVE_TAKE_PROFIT_DOLLARS,
)
from autotrader.strategies.trend_adaptive import TrendAdaptiveStrategy

# Token units bought instead of a USD notional.
WETH_ONE_TOKEN = {"WETH": 1.0}

STRATEGY_DEFAULTS: dict[str, dict] = {
    "pullback": {"take_profit_dollars": PULLBACK_TAKE_PROFIT_DOLLARS},
    "trend_adaptive": {
        "take_profit_dollars": TREND_ADAPTIVE_TAKE_PROFIT_DOLLARS,
        "position_sizes": TREND_ADAPTIVE_POSITION_SIZES,
    },
    "mean_reversion": {
        "take_profit_dollars": TREND_ADAPTIVE_TAKE_PROFIT_DOLLARS,
        "position_sizes": TREND_ADAPTIVE_POSITION_SIZES,
    },
    "downtrend": {
        "take_profit_dollars": TREND_ADAPTIVE_TAKE_PROFIT_DOLLARS,
        "position_sizes": TREND_ADAPTIVE_POSITION_SIZES,
    },
    "intraday": {"max_concurrent_positions": 5, "max_position_fraction": 0.05},
    "momentum": {"max_concurrent_positions": 5},
    "memecoin": {"stop_loss": 0.5, "take_profit": 9.0},
    "rebalancer": {"max_concurrent_positions": 5},
}


@dataclass
class StrategyBundle:
    strategy: Strategy
    sizer: PositionSizer
    exit_policy: ExitPolicy
    config: StrategyConfig


def build_strategy(
    settings: BotSettings,
    dex: DexScreenerClient | None = None,
) -> StrategyBundle:
    """Assemble the policies for ``settings.strategy``.

    Raises:
        ValueError: If the strategy needs a collaborator that was not given.
    """
    name = settings.strategy
    config = StrategyConfig.from_settings(settings, **STRATEGY_DEFAULTS.get(name, {}))

    if name == "pullback":
        return StrategyBundle(
            strategy=PullbackStrategy(),
            sizer=TokenTableSizer({}, token_units=WETH_ONE_TOKEN, default=config.fixed_position_usd),
            exit_policy=DollarTakeProfitExit(config.take_profit_dollars),
            config=config,
        )
    if name in ("trend_adaptive", "mean_reversion", "downtrend"):
        strategy = {
            "trend_adaptive": TrendAdaptiveStrategy,
            "mean_reversion": MeanReversionStrategy,
            "downtrend": DowntrendStrategy,
        }[name]()
        return StrategyBundle(
            strategy=strategy,
            sizer=TokenTableSizer(config.position_sizes, token_units=WETH_ONE_TOKEN),
            exit_policy=DollarTakeProfitExit(config.take_profit_dollars, per_position=True),
            config=config,
        )
    if name == "intraday":
        return StrategyBundle(
            strategy=IntradayStrategy(),
            sizer=FixedUsdSizer(config.fixed_position_usd),
            exit_policy=TrailingStopExit(config.trailing_stop),
            config=config,
        )
    if name == "momentum":
        return StrategyBundle(
            strategy=MomentumStrategy(),
            sizer=PercentOfCapitalSizer(config),
            exit_policy=PercentExit(config=config),
            config=config,
        )
    if name == "memecoin":
        if dex is None:
            raise ValueError("memecoin strategy requires a DexScreenerClient")
        return StrategyBundle(
            strategy=MemeCoinStrategy(dex),
            sizer=FixedUsdSizer(25.0),
            exit_policy=PercentExit(config=config),
            config=config,
        )
    if name == "rebalancer":
        return StrategyBundle(
            strategy=RebalanceStrategy(),
            sizer=FixedUsdSizer(),
            exit_policy=NoExit(),
            config=config,
        )
    raise ValueError(f"Unknown strategy: {name}")
