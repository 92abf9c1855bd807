"""Exit-condition policies for open positions.

Each policy answers one question per monitoring pass: should this position
be closed at the current price? P&L conventions are fixed per policy type:

- PercentExit: fractional return ``(current - entry) / entry``.
- TrailingStopExit: fractional drawdown from the high-water mark.
- DollarTakeProfitExit: dollar delta, per unit ``current - entry`` or per
  position ``(current - entry) * to_amount``.
"""

from abc import ABC, abstractmethod
from typing import Any

from autotrader.models import ExitSignal, OpenPosition


class ExitPolicy(ABC):
    """Decides whether an open position should be closed."""

    def track(self, position: OpenPosition, current_price: float) -> dict[str, Any]:
        """Return position fields to persist before checking, e.g. a raised HWM."""
        return {}

    @abstractmethod
    def check(self, position: OpenPosition, current_price: float) -> ExitSignal | None:
        """Return an ExitSignal if the position should be closed."""


class NoExit(ExitPolicy):
    """Never closes positions (the rebalancer manages holdings directly)."""

    def check(self, position: OpenPosition, current_price: float) -> ExitSignal | None:
        return None


class PercentExit(ExitPolicy):
    """Fixed percentage stop-loss and take-profit.

    Thresholds are read through ``config`` on every check when given, so
    adaptive tuning of the strategy config takes effect immediately.

    Args:
        stop_loss: Loss fraction that triggers a close (0.05 = 5%).
        take_profit: Gain fraction that triggers a close.
        config: Optional StrategyConfig whose ``stop_loss``/``take_profit``
            override the static values.
    """

    def __init__(
        self,
        stop_loss: float = 0.05,
        take_profit: float = 0.15,
        config: Any = None,
    ) -> None:
        self._stop_loss = stop_loss
        self._take_profit = take_profit
        self._config = config

    @property
    def stop_loss(self) -> float:
        return self._config.stop_loss if self._config is not None else self._stop_loss

    @property
    def take_profit(self) -> float:
        return self._config.take_profit if self._config is not None else self._take_profit

    def check(self, position: OpenPosition, current_price: float) -> ExitSignal | None:
        if position.entry_price <= 0:
            return None
        pnl = (current_price - position.entry_price) / position.entry_price
        if pnl >= self.take_profit:
            return ExitSignal(reason="Take-profit triggered", pnl=pnl)
        if pnl <= -self.stop_loss:
            return ExitSignal(reason="Stop-loss triggered", pnl=pnl)
        return None


class TrailingStopExit(ExitPolicy):
    """Close when price falls ``trail`` below the highest price seen.

    The high-water mark starts at the entry price and is raised through
    ``track`` whenever the current price exceeds it.
    """

    def __init__(self, trail: float = 0.015) -> None:
        self._trail = trail

    @staticmethod
    def _high_water_mark(position: OpenPosition) -> float:
        if position.high_water_mark is not None:
            return position.high_water_mark
        return position.entry_price

    def track(self, position: OpenPosition, current_price: float) -> dict[str, Any]:
        if current_price > self._high_water_mark(position):
            return {"high_water_mark": current_price}
        return {}

    def check(self, position: OpenPosition, current_price: float) -> ExitSignal | None:
        hwm = max(self._high_water_mark(position), current_price)
        stop_price = hwm * (1 - self._trail)
        if current_price <= stop_price:
            pnl = (current_price - hwm) / hwm if hwm else 0.0
            return ExitSignal(
                reason=f"Trailing stop triggered at {current_price:.6f} (high {hwm:.6f})",
                pnl=pnl,
            )
        return None


class DollarTakeProfitExit(ExitPolicy):
    """Take profit once a per-symbol dollar gain target is reached.

    Args:
        targets: Symbol -> dollar target. Symbols without a target never fire.
        per_position: Compare the total position gain
            ``(current - entry) * to_amount`` instead of the per-unit delta.
    """

    def __init__(self, targets: dict[str, float], per_position: bool = False) -> None:
        self._targets = {symbol.upper(): target for symbol, target in targets.items()}
        self._per_position = per_position

    def check(self, position: OpenPosition, current_price: float) -> ExitSignal | None:
        target = self._targets.get(position.symbol.upper())
        if target is None:
            return None
        pnl = current_price - position.entry_price
        if self._per_position:
            pnl *= position.to_amount
        if pnl >= target:
            return ExitSignal(
                reason=f"Take-profit triggered: ${pnl:.2f} gain reached ${target:.2f} target",
                pnl=pnl,
            )
        return None


class CompositeExit(ExitPolicy):
    """Combine policies; the first one to fire wins."""

    def __init__(self, *policies: ExitPolicy) -> None:
        self._policies = policies

    def track(self, position: OpenPosition, current_price: float) -> dict[str, Any]:
        updates: dict[str, Any] = {}
        for policy in self._policies:
            updates.update(policy.track(position, current_price))
        return updates

    def check(self, position: OpenPosition, current_price: float) -> ExitSignal | None:
        for policy in self._policies:
            signal = policy.check(position, current_price)
            if signal is not None:
                return signal
        return None
