"""Tests for the trend pullback strategy."""

import pytest

from autotrader.indicators import atr, ema
from autotrader.models import MarketTrend, OHLCBar
from autotrader.strategies.pullback import PullbackStrategy, classify_pullback

# Ascending for twenty points, then flat
CLOSES = [100.0 + i for i in range(20)] + [119.5] * 10


def _bars(closes: list[float], spread: float = 1.0) -> list[OHLCBar]:
    return [
        OHLCBar(timestamp=i, open=c, high=c + spread, low=c - spread, close=c)
        for i, c in enumerate(closes)
    ]


class TestClassifyPullback:
    def test_price_at_ema_is_near(self) -> None:
        signal = classify_pullback(100.0, 100.0, 2.0)
        assert signal.is_near_ema is True

    def test_above_ema_within_atr_is_opportunity(self) -> None:
        signal = classify_pullback(101.5, 100.0, 2.0)
        assert signal.is_opportunity is True

    def test_below_ema_is_not_opportunity(self) -> None:
        signal = classify_pullback(99.0, 100.0, 2.0)
        assert signal.is_near_ema is True
        assert signal.is_opportunity is False

    def test_far_above_ema_is_not_near(self) -> None:
        signal = classify_pullback(105.0, 100.0, 2.0, multiplier=1.0)
        assert signal.is_near_ema is False
        assert signal.is_opportunity is False

    def test_end_to_end_with_real_indicators(self) -> None:
        atr_values = atr(_bars(CLOSES), 14)
        assert atr_values
        assert atr_values[-1] > 0
        last_ema = ema(CLOSES, 20)[-1]
        assert classify_pullback(last_ema, last_ema, atr_values[-1]).is_near_ema is True


class TestPullbackStrategy:
    @pytest.mark.asyncio
    async def test_skips_unless_uptrend(self, make_ctx, weth, market_data) -> None:
        strategy = PullbackStrategy(tokens={"weth": weth})
        ctx = make_ctx([{"id": "weth", "current_price": 120.0}], trend=MarketTrend.DOWNTREND)
        assert await strategy.find_opportunities(ctx) == []
        market_data.get_ohlc.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_near_ema_candidate(self, make_ctx, weth, market_data, execution) -> None:
        market_data.get_ohlc.return_value = _bars(CLOSES)
        market_data.get_historical_chart.return_value = list(enumerate(CLOSES))
        last_ema = ema(CLOSES, 20)[-1]
        execution.get_price.return_value = last_ema + 0.5

        strategy = PullbackStrategy(tokens={"weth": weth})
        ctx = make_ctx([{"id": "weth", "current_price": 120.0}], trend=MarketTrend.UPTREND)
        candidates = await strategy.find_opportunities(ctx)

        assert len(candidates) == 1
        assert candidates[0].is_opportunity is True
        assert candidates[0].strategy == "pullback"
        assert candidates[0].price == pytest.approx(last_ema + 0.5)
        market_data.get_ohlc.assert_awaited_once_with("weth", "usd", 14)

    @pytest.mark.asyncio
    async def test_rejected_tokens_still_returned(self, make_ctx, weth, market_data, execution) -> None:
        market_data.get_ohlc.return_value = _bars(CLOSES)
        market_data.get_historical_chart.return_value = list(enumerate(CLOSES))
        execution.get_price.return_value = 200.0

        ctx = make_ctx([{"id": "weth"}], trend=MarketTrend.UPTREND)
        candidates = await PullbackStrategy(tokens={"weth": weth}).find_opportunities(ctx)
        assert [c.is_opportunity for c in candidates] == [False]

    @pytest.mark.asyncio
    async def test_zero_atr_skips_token(self, make_ctx, weth, market_data, execution) -> None:
        market_data.get_ohlc.return_value = _bars([100.0] * 30, spread=0.0)

        ctx = make_ctx([{"id": "weth"}], trend=MarketTrend.UPTREND)
        assert await PullbackStrategy(tokens={"weth": weth}).find_opportunities(ctx) == []
        execution.get_price.assert_not_awaited()
