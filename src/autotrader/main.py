"""Entry point for the Recall autotrader.

Wires all components for the configured strategy (BOT_STRATEGY) and runs
the orchestrator until SIGINT/SIGTERM.

Component wiring order (in _build_components):
1. CoinGeckoClient (market data)
2. DexScreenerClient (meme-coin discovery and price fallback)
3. RecallClient (trade execution)
4. ConfidenceOracle (LLM confidence endpoint)
5. StrategyBundle (strategy, sizer, exit policy, config)
6. PositionStore (per-strategy open positions file)
7. TradeJournal and PerformanceTracker
8. Orchestrator (trading loop)
"""

import asyncio
import signal
from typing import Any

from autotrader.config import AppSettings
from autotrader.exchange.recall_client import RecallClient
from autotrader.journal import TradeJournal
from autotrader.logging import get_logger, setup_logging
from autotrader.market_data.coingecko import CoinGeckoClient
from autotrader.market_data.dexscreener import DexScreenerClient
from autotrader.oracle.confidence import ConfidenceOracle
from autotrader.orchestrator import Orchestrator
from autotrader.pnl.performance import PerformanceTracker
from autotrader.position.store import PositionStore
from autotrader.strategies.registry import build_strategy


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all bot components from settings.

    Does not touch the network or the filesystem; the store is loaded in
    ``run``.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    logger = get_logger("autotrader.main")

    market_data = CoinGeckoClient(settings.coingecko)
    dex = DexScreenerClient(settings.dexscreener)
    execution = RecallClient(settings.recall)
    oracle = ConfidenceOracle(settings.oracle)

    if not settings.recall.api_key.get_secret_value():
        logger.warning(
            "no_recall_api_key",
            note="Market data will work; balances and trades will fail.",
        )

    bundle = build_strategy(settings.bot, dex=dex)
    store = PositionStore(settings.store_path())
    journal = TradeJournal(settings.bot.trade_log_path)
    performance = PerformanceTracker(execution, settings.bot.starting_capital)

    orchestrator = Orchestrator(
        settings=settings,
        market_data=market_data,
        execution=execution,
        oracle=oracle,
        store=store,
        strategy=bundle.strategy,
        sizer=bundle.sizer,
        exit_policy=bundle.exit_policy,
        config=bundle.config,
        journal=journal,
        performance=performance,
        dex=dex,
    )

    return {
        "market_data": market_data,
        "dex": dex,
        "execution": execution,
        "oracle": oracle,
        "bundle": bundle,
        "store": store,
        "journal": journal,
        "performance": performance,
        "orchestrator": orchestrator,
    }


def _setup_signal_handlers(orchestrator: Orchestrator) -> None:
    """Register SIGINT/SIGTERM to stop the orchestrator gracefully.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("autotrader.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(orchestrator.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


async def _close_clients(components: dict[str, Any]) -> None:
    for name in ("market_data", "dex", "execution", "oracle"):
        await components[name].close()


async def run() -> None:
    """Run the configured bot until a shutdown signal arrives."""
    settings = AppSettings()
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("autotrader.main")

    components = _build_components(settings)
    orchestrator: Orchestrator = components["orchestrator"]

    try:
        positions = await components["store"].load()
        logger.info(
            "autotrader_starting",
            strategy=settings.bot.strategy,
            open_positions=len(positions),
            store=str(settings.store_path()),
        )

        if settings.bot.close_all_positions:
            await orchestrator.close_all_positions()

        _setup_signal_handlers(orchestrator)
        await orchestrator.start()
    finally:
        await _close_clients(components)
        logger.info("autotrader_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
