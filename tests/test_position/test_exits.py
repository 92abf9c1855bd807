"""Tests for exit-condition policies."""

import pytest

from autotrader.config import StrategyConfig
from autotrader.position.exits import (
    CompositeExit,
    DollarTakeProfitExit,
    NoExit,
    PercentExit,
    TrailingStopExit,
)


class TestPercentExit:
    def test_take_profit_at_threshold(self, make_position) -> None:
        signal = PercentExit(stop_loss=0.05, take_profit=0.15).check(make_position(), 115.0)
        assert signal is not None
        assert signal.reason == "Take-profit triggered"
        assert signal.pnl == pytest.approx(0.15)

    def test_stop_loss(self, make_position) -> None:
        signal = PercentExit(stop_loss=0.05, take_profit=0.15).check(make_position(), 94.0)
        assert signal is not None
        assert signal.reason == "Stop-loss triggered"
        assert signal.pnl == pytest.approx(-0.06)

    def test_inside_band_holds(self, make_position) -> None:
        assert PercentExit().check(make_position(), 104.0) is None

    def test_reads_live_config(self, make_position) -> None:
        config = StrategyConfig(stop_loss=0.05, take_profit=0.15)
        policy = PercentExit(config=config)
        assert policy.check(make_position(), 97.0) is None

        config.stop_loss = 0.02
        assert policy.check(make_position(), 97.0) is not None


class TestTrailingStopExit:
    def test_track_raises_high_water_mark(self, make_position) -> None:
        policy = TrailingStopExit(trail=0.015)
        assert policy.track(make_position(), 110.0) == {"high_water_mark": 110.0}
        assert policy.track(make_position(high_water_mark=120.0), 110.0) == {}

    def test_fires_below_trail(self, make_position) -> None:
        policy = TrailingStopExit(trail=0.015)
        position = make_position(high_water_mark=120.0)
        assert policy.check(position, 119.0) is None
        signal = policy.check(position, 118.0)
        assert signal is not None
        assert signal.pnl == pytest.approx((118.0 - 120.0) / 120.0)

    def test_defaults_to_entry_price(self, make_position) -> None:
        assert TrailingStopExit(trail=0.015).check(make_position(), 98.0) is not None


class TestDollarTakeProfitExit:
    def test_per_unit_target(self, make_position) -> None:
        policy = DollarTakeProfitExit({"WETH": 10.0})
        assert policy.check(make_position(), 109.0) is None
        signal = policy.check(make_position(), 110.0)
        assert signal is not None
        assert signal.pnl == pytest.approx(10.0)

    def test_per_position_target(self, make_position) -> None:
        policy = DollarTakeProfitExit({"weth": 10.0}, per_position=True)
        signal = policy.check(make_position(to_amount=10.0), 101.0)
        assert signal is not None
        assert signal.pnl == pytest.approx(10.0)

    def test_symbol_without_target_never_fires(self, make_position) -> None:
        assert DollarTakeProfitExit({"SOL": 0.1}).check(make_position(), 1000.0) is None


class TestCompositeExit:
    def test_first_signal_wins(self, make_position) -> None:
        policy = CompositeExit(PercentExit(take_profit=0.05), DollarTakeProfitExit({"WETH": 1.0}))
        signal = policy.check(make_position(), 110.0)
        assert signal is not None
        assert signal.reason == "Take-profit triggered"

    def test_track_merges_updates(self, make_position) -> None:
        policy = CompositeExit(NoExit(), TrailingStopExit())
        assert policy.track(make_position(), 105.0) == {"high_water_mark": 105.0}


def test_no_exit_never_fires(make_position) -> None:
    assert NoExit().check(make_position(), 0.01) is None
