"""Trading cycle orchestrator -- wires the gateways, strategy and store.

Each cycle:
  1. GATHER: stable balances, market listing (and portfolio) concurrently
  2. MONITOR: price every open position and apply the exit policy
  3. CAP: stop when the open-position limit is reached
  4. SCAN: ask the strategy for candidate entries
  5. SCORE: consult the confidence oracle and filter by mode
  6. EXECUTE: size, pick a funding chain, trade and record the position

The same orchestrator runs every bot variant; behaviour differences live in
the Strategy, PositionSizer and ExitPolicy it is constructed with.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from autotrader.exceptions import ConfigurationError, PersistenceError, TradeExecutionError
from autotrader.exchange.recall_client import parse_usdc_balances
from autotrader.logging import get_logger
from autotrader.models import (
    USDC_EVM_ADDRESS,
    USDC_SVM_ADDRESS,
    Asset,
    OpenPosition,
    Opportunity,
    TradeRequest,
    TradeSide,
    utc_now_iso,
)
from autotrader.position.sizing import select_funding_source
from autotrader.strategies.base import CycleContext, Strategy

if TYPE_CHECKING:
    from autotrader.config import AppSettings, StrategyConfig
    from autotrader.exchange.client import ExecutionGateway
    from autotrader.journal import TradeJournal
    from autotrader.market_data.coingecko import CoinGeckoClient
    from autotrader.market_data.dexscreener import DexScreenerClient
    from autotrader.oracle.confidence import ConfidenceOracle
    from autotrader.pnl.performance import PerformanceTracker
    from autotrader.position.exits import ExitPolicy
    from autotrader.position.sizing import PositionSizer
    from autotrader.position.store import PositionStore

logger = get_logger(__name__)

# Errors that abort a single trade but not the cycle
_TRADE_ERRORS = (TradeExecutionError, ConfigurationError, ValueError)


class OracleMode(str, Enum):
    """How the oracle score combines with the strategy's own verdict."""

    DEFAULT = "default"  # predicate AND score >= default threshold
    OVERRIDE = "override"  # score >= override threshold, predicate ignored


def _stable_for(asset: Asset) -> str:
    return USDC_SVM_ADDRESS if asset.chain == "svm" else USDC_EVM_ADDRESS


class Orchestrator:
    """Runs one bot: a strategy plus sizing and exit rules over a position store.

    Args:
        settings: Application-wide settings.
        market_data: CoinGecko client.
        execution: Trade execution gateway.
        oracle: Confidence oracle.
        store: Open-position store (already loaded).
        strategy: Entry predicate.
        sizer: Position sizing rule.
        exit_policy: Exit rule applied while monitoring.
        config: Mutable strategy parameters for this bot.
        journal: Optional human-readable trade log.
        performance: Optional performance tracker run on its own timer.
        dex: Optional DEX Screener client used as a price fallback.
    """

    def __init__(
        self,
        settings: AppSettings,
        market_data: CoinGeckoClient,
        execution: ExecutionGateway,
        oracle: ConfidenceOracle,
        store: PositionStore,
        strategy: Strategy,
        sizer: PositionSizer,
        exit_policy: ExitPolicy,
        config: StrategyConfig,
        journal: TradeJournal | None = None,
        performance: PerformanceTracker | None = None,
        dex: DexScreenerClient | None = None,
    ) -> None:
        self._settings = settings
        self._market_data = market_data
        self._execution = execution
        self._oracle = oracle
        self._store = store
        self._strategy = strategy
        self._sizer = sizer
        self._exit_policy = exit_policy
        self._config = config
        self._journal = journal
        self._performance = performance
        self._dex = dex

        self._running = False
        self._stop_event = asyncio.Event()
        self._cycle_in_progress = False
        self._cycle_count = 0
        self._monitor_lock = asyncio.Lock()

    @property
    def mode(self) -> OracleMode:
        if self._settings.bot.override_enabled:
            return OracleMode.OVERRIDE
        return OracleMode.DEFAULT

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    # ---- lifecycle ----

    async def start(self) -> None:
        """Run the trading loop and its optional timers until ``stop``."""
        self._running = True
        self._stop_event.clear()
        logger.info(
            "orchestrator_starting",
            strategy=self._strategy.name,
            mode=self.mode.value,
            execution_enabled=self._settings.execution_enabled,
            open_positions=len(self._store),
        )

        await self._refresh_history()

        bot = self._settings.bot
        tasks = [asyncio.create_task(self._run_loop())]
        if bot.monitor_interval > 0:
            tasks.append(
                asyncio.create_task(
                    self._every(bot.monitor_interval, self.monitor_positions, "monitor")
                )
            )
        if type(self._strategy).refresh_history is not Strategy.refresh_history:
            tasks.append(
                asyncio.create_task(
                    self._every(bot.history_refresh_interval, self._refresh_history, "history")
                )
            )
        if self._performance is not None and bot.performance_interval > 0:
            tasks.append(
                asyncio.create_task(
                    self._every(bot.performance_interval, self.run_performance, "performance")
                )
            )

        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("orchestrator_stopped")

    async def stop(self) -> None:
        """Signal the loop and timers to exit after the current step."""
        logger.info("orchestrator_stopping_gracefully")
        self._running = False
        self._stop_event.set()

    async def _wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _run_loop(self) -> None:
        """Run a cycle immediately, then every ``poll_interval`` seconds."""
        while self._running:
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                break
            if await self._wait(self._settings.bot.poll_interval):
                break

    async def _every(
        self, interval: float, job: Callable[[], Awaitable[object]], name: str
    ) -> None:
        while self._running:
            if await self._wait(interval):
                break
            try:
                await job()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("timer_job_failed", job=name, error=str(e), exc_info=True)

    async def _refresh_history(self) -> None:
        await self._strategy.refresh_history(self._market_data)

    # ---- trading cycle ----

    async def run_cycle(self) -> bool:
        """Run one trading cycle.

        Returns:
            False if the cycle was skipped because another one is still running.
        """
        if self._cycle_in_progress:
            logger.warning("cycle_skipped_overlap")
            return False

        self._cycle_in_progress = True
        self._cycle_count += 1
        structlog.contextvars.bind_contextvars(cycle=self._cycle_count)
        try:
            await self._cycle()
        except Exception as e:
            logger.error("cycle_failed", error=str(e), exc_info=True)
        finally:
            self._cycle_in_progress = False
            structlog.contextvars.unbind_contextvars("cycle")
        return True

    async def _cycle(self) -> None:
        logger.info("cycle_started", strategy=self._strategy.name)
        ctx = await self._gather_context()

        await self.monitor_positions()

        if self._at_capacity():
            return

        ctx.market_trend = await self._strategy.assess_market(ctx)
        candidates = await self._strategy.find_opportunities(ctx)
        await self._score_candidates(candidates, ctx)
        accepted = self.filter_candidates(candidates)
        logger.info(
            "cycle_candidates",
            market_trend=ctx.market_trend.value,
            candidates=len(candidates),
            accepted=len(accepted),
        )

        for candidate in accepted:
            if self._at_capacity():
                break
            await self._enter(candidate, ctx)

    async def _gather_context(self) -> CycleContext:
        jobs = [
            self._execution.get_balances(),
            self._strategy.fetch_listing(self._market_data),
        ]
        if self._strategy.needs_portfolio:
            jobs.append(self._execution.get_portfolio())
        results = await asyncio.gather(*jobs, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result

        ctx = CycleContext(
            market_data=self._market_data,
            execution=self._execution,
            store=self._store,
            config=self._config,
            market_listing=results[1],
            balances=parse_usdc_balances(results[0]),
        )
        if self._strategy.needs_portfolio:
            ctx.portfolio = results[2]
        logger.info(
            "stable_balances",
            total=round(ctx.balances.total, 2),
            svm=round(ctx.balances.svm, 2),
            evm={chain: round(b.amount, 2) for chain, b in ctx.balances.evm.items()},
        )
        return ctx

    def _at_capacity(self) -> bool:
        if not self._strategy.records_positions:
            return False
        limit = self._config.max_concurrent_positions
        if len(self._store) >= limit:
            logger.info("max_positions_reached", open_positions=len(self._store), limit=limit)
            return True
        return False

    async def _score_candidates(self, candidates: list[Opportunity], ctx: CycleContext) -> None:
        if not self._strategy.uses_oracle:
            return
        for candidate in candidates:
            # In default mode a failed predicate cannot be rescued by the score
            if self.mode is OracleMode.DEFAULT and not candidate.is_opportunity:
                continue
            result = await self._oracle.evaluate(candidate, ctx.market_trend)
            candidate.confidence = result.confidence
            candidate.confidence_reason = result.reason

    def filter_candidates(
        self, candidates: list[Opportunity], mode: OracleMode | None = None
    ) -> list[Opportunity]:
        """Keep the candidates the oracle gate lets through.

        DEFAULT requires the strategy predicate and a score at or above
        ``default_confidence_threshold``; OVERRIDE requires only a score at or
        above ``confidence_threshold``. Strategies that bypass the oracle
        are filtered on the predicate alone.
        """
        mode = mode or self.mode
        if not self._strategy.uses_oracle:
            return [c for c in candidates if c.is_opportunity]

        bot = self._settings.bot
        if mode is OracleMode.OVERRIDE:
            return [
                c
                for c in candidates
                if c.confidence is not None and c.confidence >= bot.confidence_threshold
            ]
        return [
            c
            for c in candidates
            if c.is_opportunity
            and c.confidence is not None
            and c.confidence >= bot.default_confidence_threshold
        ]

    def _entry_reason(self, candidate: Opportunity) -> str:
        reason = f"{self._strategy.name} {candidate.side.value} {candidate.symbol}"
        if candidate.confidence is not None:
            reason += f" (AI confidence {candidate.confidence:.2f})"
        return reason

    async def _enter(self, candidate: Opportunity, ctx: CycleContext) -> None:
        log = logger.bind(symbol=candidate.symbol, side=candidate.side.value)

        if self._strategy.records_positions and self._store.opened_today(candidate.symbol):
            log.info("entry_skipped_opened_today")
            return

        if candidate.side is TradeSide.SELL:
            await self._sell(candidate, log)
            return

        amount = self._sizer.size(candidate, ctx.balances.total)
        if amount is None or amount <= 0:
            log.info("entry_skipped_no_size")
            return

        source = select_funding_source(candidate, ctx.balances, amount)
        if source is None:
            log.warning(
                "entry_skipped_insufficient_balance",
                amount_usd=round(amount, 2),
                available=round(ctx.balances.total, 2),
            )
            return

        asset = candidate.token.asset
        reason = self._entry_reason(candidate)
        request = TradeRequest(
            from_token=source.token_address,
            to_token=asset.address,
            amount=amount,
            reason=reason,
            from_chain=source.chain,
            from_specific_chain=source.specific_chain,
            to_chain=asset.chain,
            to_specific_chain=asset.specific_chain,
        )

        if not self._settings.execution_enabled:
            log.info(
                "dry_run_entry",
                amount_usd=round(amount, 2),
                price=candidate.price,
                funding_chain=source.specific_chain,
            )
            return

        try:
            result = await self._execution.execute_trade(request)
        except _TRADE_ERRORS as e:
            log.error("entry_failed", error=str(e))
            return

        ctx.balances.debit(source.specific_chain, amount)
        to_amount = result.to_amount or (amount / candidate.price if candidate.price else 0.0)
        log.info(
            "position_opened",
            trade_id=result.id,
            amount_usd=round(amount, 2),
            to_amount=to_amount,
            price=candidate.price,
        )

        if self._strategy.records_positions:
            position = OpenPosition(
                id=result.id,
                from_asset=Asset(
                    address=source.token_address,
                    symbol="USDC",
                    chain=source.chain,
                    specific_chain=source.specific_chain,
                ),
                from_amount=amount,
                to_asset=asset,
                to_amount=to_amount,
                entry_price=candidate.price,
                opened_at=utc_now_iso(),
                reason=reason,
                strategy=candidate.strategy,
                amount_usd=amount,
                high_water_mark=candidate.price,
            )
            try:
                await self._store.add(position)
            except (PersistenceError, ValueError) as e:
                log.error("position_record_failed", trade_id=result.id, error=str(e))

        if self._journal is not None:
            await self._journal.opened(candidate.symbol, to_amount, candidate.price, reason)

    async def _sell(self, candidate: Opportunity, log: structlog.stdlib.BoundLogger) -> None:
        """Sell ``token_amount`` of the candidate's token into USDC on its chain."""
        asset = candidate.token.asset
        if not candidate.token_amount or candidate.token_amount <= 0:
            log.info("sell_skipped_no_amount")
            return

        request = TradeRequest(
            from_token=asset.address,
            to_token=_stable_for(asset),
            amount=candidate.token_amount,
            reason=self._entry_reason(candidate),
            from_chain=asset.chain,
            from_specific_chain=asset.specific_chain,
            to_chain=asset.chain,
            to_specific_chain=asset.specific_chain,
        )
        if not self._settings.execution_enabled:
            log.info("dry_run_sell", token_amount=candidate.token_amount, price=candidate.price)
            return

        try:
            result = await self._execution.execute_trade(request)
        except _TRADE_ERRORS as e:
            log.error("sell_failed", error=str(e))
            return
        log.info("sell_executed", trade_id=result.id, token_amount=candidate.token_amount)
        if self._journal is not None:
            await self._journal.record(
                f"SOLD: {candidate.symbol.upper()} - Amount: {candidate.token_amount} - "
                f"Price: {candidate.price} - Reason: {request.reason}"
            )

    # ---- position monitoring ----

    async def _current_price(self, position: OpenPosition) -> float | None:
        asset = position.to_asset
        price = await self._execution.get_price(asset.address, asset.chain, asset.specific_chain)
        if price is None and self._dex is not None:
            price = await self._dex.get_pair_price(asset.address)
        return price

    async def monitor_positions(self) -> int:
        """Apply the exit policy to every open position.

        Returns:
            Number of positions closed.
        """
        closed = 0
        async with self._monitor_lock:
            for position in self._store.list():
                price = await self._current_price(position)
                if price is None:
                    logger.warning("position_price_unavailable", symbol=position.symbol)
                    continue

                updates = self._exit_policy.track(position, price)
                if updates:
                    try:
                        position = await self._store.update(position.id, **updates) or position
                    except PersistenceError as e:
                        logger.error(
                            "position_update_failed", position_id=position.id, error=str(e)
                        )

                signal = self._exit_policy.check(position, price)
                if signal is None:
                    continue
                logger.info(
                    "exit_triggered",
                    symbol=position.symbol,
                    reason=signal.reason,
                    pnl=round(signal.pnl, 4),
                    price=price,
                )
                if await self._close(position, signal.reason, price):
                    closed += 1
        return closed

    async def _close(
        self,
        position: OpenPosition,
        reason: str,
        price: float,
        respect_dry_run: bool = True,
    ) -> bool:
        asset = position.to_asset
        request = TradeRequest(
            from_token=asset.address,
            to_token=_stable_for(asset),
            amount=position.to_amount,
            reason=reason,
            from_chain=asset.chain,
            from_specific_chain=asset.specific_chain,
            to_chain=asset.chain,
            to_specific_chain=asset.specific_chain,
        )
        if respect_dry_run and not self._settings.execution_enabled:
            logger.info("dry_run_exit", symbol=position.symbol, reason=reason, price=price)
            return False

        try:
            await self._execution.execute_trade(request)
        except _TRADE_ERRORS as e:
            logger.error("exit_failed", symbol=position.symbol, error=str(e))
            return False

        try:
            await self._store.remove(position.id)
        except PersistenceError as e:
            logger.error("position_remove_failed", position_id=position.id, error=str(e))
            return False

        logger.info(
            "position_closed",
            symbol=position.symbol,
            entry_price=position.entry_price,
            exit_price=price,
            reason=reason,
        )
        if self._journal is not None:
            await self._journal.closed(
                position.symbol, position.entry_price, price, position.to_amount, reason
            )
        return True

    async def close_all_positions(self, reason: str = "Manual close all positions") -> int:
        """Sell every open position back to USDC.

        Runs even when trade execution is disabled: it is an explicit
        operator request at startup.

        Returns:
            Number of positions closed.
        """
        closed = 0
        async with self._monitor_lock:
            for position in self._store.list():
                price = await self._current_price(position)
                if await self._close(
                    position,
                    reason,
                    price if price is not None else position.entry_price,
                    respect_dry_run=False,
                ):
                    closed += 1
        logger.info("close_all_finished", closed=closed, remaining=len(self._store))
        return closed

    # ---- performance ----

    async def run_performance(self) -> bool:
        """Report performance and adapt the strategy config.

        Returns:
            True if the config changed.
        """
        if self._performance is None:
            return False
        report = await self._performance.report()
        return self._performance.adapt(self._config, report)
