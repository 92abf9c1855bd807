"""Configuration system using pydantic-settings with environment variable loading."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

StrategyName = Literal[
    "pullback",
    "mean_reversion",
    "downtrend",
    "trend_adaptive",
    "intraday",
    "momentum",
    "memecoin",
    "rebalancer",
]


class RecallSettings(BaseSettings):
    """Recall Network trade-execution API settings."""

    model_config = SettingsConfigDict(env_prefix="RECALL_")

    api_key: SecretStr = SecretStr("")
    url: str = "https://api.sandbox.competitions.recall.network/api"
    read_timeout: float = 10.0
    trade_timeout: float = 30.0
    slippage_tolerance: str = "0.5"  # percent, sent as a string


class CoinGeckoSettings(BaseSettings):
    """CoinGecko market data API settings."""

    model_config = SettingsConfigDict(env_prefix="COINGECKO_")

    api_key: SecretStr = SecretStr("")  # demo key, optional
    base_url: str = "https://api.coingecko.com/api/v3"
    read_timeout: float = 5.0
    chart_timeout: float = 10.0


class DexScreenerSettings(BaseSettings):
    """DEX Screener pair discovery settings (meme-coin strategy only)."""

    model_config = SettingsConfigDict(env_prefix="DEXSCREENER_")

    base_url: str = "https://api.dexscreener.com/latest/dex"
    timeout: float = 10.0
    trending_query: str = "usd > 100000 AND age < 24h"


class OracleSettings(BaseSettings):
    """LLM confidence endpoint settings."""

    model_config = SettingsConfigDict(env_prefix="ORACLE_")

    url: str = "http://localhost:3000/api/agent"
    timeout: float = 30.0


class BotSettings(BaseSettings):
    """Bot-level switches and scheduling.

    Mirrors the environment flags the bots have always used
    (BOT_OVERRIDE_ENABLED, BOT_CONFIDENCE_THRESHOLD, BOT_CLOSE_ALL_POSITIONS)
    plus TRADING_ENABLED via the validation alias below.
    """

    model_config = SettingsConfigDict(env_prefix="BOT_")

    strategy: StrategyName = "trend_adaptive"
    trading_enabled: bool = False
    override_enabled: bool = False
    confidence_threshold: float = 0.75  # override mode threshold
    default_confidence_threshold: float = 0.70  # predicate AND threshold mode
    close_all_positions: bool = False
    poll_interval: int = 300  # seconds between trading cycles
    monitor_interval: int = 0  # 0 = monitor only inside the trading cycle
    history_refresh_interval: int = 900
    performance_interval: int = 3600
    max_concurrent_positions: int = 15
    starting_capital: float = 10000.0
    state_dir: Path = Path("state")
    trade_log_path: Path = Path("trades.log")


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # LOG_FORMAT: "console" or "json"
    trading_enabled: bool | None = None  # legacy TRADING_ENABLED, wins over BOT_
    recall: RecallSettings = RecallSettings()
    coingecko: CoinGeckoSettings = CoinGeckoSettings()
    dexscreener: DexScreenerSettings = DexScreenerSettings()
    oracle: OracleSettings = OracleSettings()
    bot: BotSettings = BotSettings()

    @property
    def execution_enabled(self) -> bool:
        if self.trading_enabled is not None:
            return self.trading_enabled
        return self.bot.trading_enabled

    def store_path(self) -> Path:
        """Backing JSON file for the configured strategy's open positions."""
        return self.bot.state_dir / f"{self.bot.strategy}_open_positions.json"


@dataclass
class StrategyConfig:
    """Mutable per-bot strategy parameters.

    One instance per bot, passed explicitly into the cycle. The performance
    tracker may tighten or loosen the risk fields between cycles.
    """

    max_concurrent_positions: int = 15
    stop_loss: float = 0.05
    take_profit: float = 0.15
    trailing_stop: float = 0.015
    max_position_fraction: float = 0.10
    fixed_position_usd: float = 1000.0
    market_trend_sma_short: int = 20
    market_trend_sma_long: int = 50
    entry_ema_period: int = 20
    long_term_ema_period: int = 200
    atr_period: int = 14
    atr_multiplier: float = 1.0
    atr_volatility_threshold: float = 0.5  # ATR as percent of price
    rsi_period: int = 14
    rsi_oversold: float = 30.0
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0
    daily_loss_limit: float = -0.2
    take_profit_dollars: dict[str, float] = field(default_factory=dict)
    position_sizes: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: BotSettings, **overrides) -> "StrategyConfig":
        """Build a config from bot settings and per-strategy defaults.

        An explicitly configured BOT_MAX_CONCURRENT_POSITIONS wins over the
        strategy default passed in ``overrides``.
        """
        params: dict = {"max_concurrent_positions": settings.max_concurrent_positions}
        params.update(overrides)
        if "max_concurrent_positions" in settings.model_fields_set:
            params["max_concurrent_positions"] = settings.max_concurrent_positions
        return cls(**params)
