"""Tests for RSI and MACD."""

import pytest

from autotrader.indicators import MacdResult, macd, rsi


class TestRsi:
    def test_strictly_increasing_series_is_100(self) -> None:
        series = [float(i) for i in range(1, 16)]
        values = rsi(series, 14)
        assert values == [100.0]

    def test_strictly_decreasing_series_is_0(self) -> None:
        series = [float(i) for i in range(30, 0, -1)]
        assert rsi(series, 14)[-1] == pytest.approx(0.0)

    @pytest.mark.parametrize("length", [0, 5, 13, 14])
    def test_insufficient_data_returns_empty(self, length: int) -> None:
        assert rsi([float(i) for i in range(length)], 14) == []

    def test_values_bounded(self) -> None:
        series = [100, 102, 101, 105, 103, 99, 98, 104, 107, 106, 103, 101, 104, 108, 110, 107]
        values = rsi([float(p) for p in series], 14)
        assert values
        assert all(0 <= v <= 100 for v in values)


class TestMacd:
    def test_none_below_long_period(self) -> None:
        assert macd([float(i) for i in range(25)]) is None

    def test_line_and_signal_aligned(self) -> None:
        result = macd([float(i) for i in range(60)])
        assert result is not None
        assert len(result.line) == len(result.signal)

    def test_uptrend_line_positive(self) -> None:
        result = macd([float(i) for i in range(1, 61)])
        assert result is not None
        assert result.last_line > 0


class TestMacdCrossover:
    def test_crossed_up(self) -> None:
        result = MacdResult(line=[-1.0, 0.5], signal=[0.0, 0.0])
        assert result.crossed_up() is True
        assert result.histogram == pytest.approx(0.5)

    def test_already_above_is_not_a_cross(self) -> None:
        result = MacdResult(line=[1.0, 2.0], signal=[0.0, 0.0])
        assert result.crossed_up() is False

    def test_single_point_is_not_a_cross(self) -> None:
        assert MacdResult(line=[1.0], signal=[0.0]).crossed_up() is False
