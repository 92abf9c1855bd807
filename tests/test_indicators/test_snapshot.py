"""Tests for compute_snapshot."""

from autotrader.indicators import compute_snapshot, synthetic_bars


def test_short_series_leaves_indicators_empty() -> None:
    snapshot = compute_snapshot([1.0, 2.0, 3.0])
    assert snapshot.price == 3.0
    assert snapshot.sma is None
    assert snapshot.rsi is None
    assert snapshot.macd is None
    assert snapshot.bollinger is None
    assert snapshot.atr is None


def test_full_series_populates_everything() -> None:
    prices = [100.0 + (i % 5) + i * 0.5 for i in range(60)]
    bars = synthetic_bars(list(enumerate(prices)))
    snapshot = compute_snapshot(prices, bars)
    values = snapshot.as_dict()
    assert all(value is not None for value in values.values())
    assert values["bollinger_lower"] < values["bollinger_middle"] < values["bollinger_upper"]
