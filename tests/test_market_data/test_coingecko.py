"""Tests for CoinGeckoClient against an httpx MockTransport."""

import httpx
import pytest

from autotrader.config import CoinGeckoSettings
from autotrader.market_data.coingecko import CoinGeckoClient


def _client(handler, **settings) -> CoinGeckoClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CoinGeckoClient(CoinGeckoSettings(**settings), client=http)


class TestCurrentPrice:
    @pytest.mark.asyncio
    async def test_parses_simple_price(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"weth": {"usd": 3012.5}})

        client = _client(handler, api_key="demo-key")
        assert await client.get_current_price("weth") == 3012.5
        assert seen[0].url.path.endswith("/simple/price")
        assert seen[0].url.params["ids"] == "weth"
        assert seen[0].headers["x-cg-demo-api-key"] == "demo-key"

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self) -> None:
        client = _client(lambda request: httpx.Response(429, json={"error": "rate limited"}))
        assert await client.get_current_price("weth") is None

    @pytest.mark.asyncio
    async def test_network_error_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        assert await _client(handler).get_current_price("weth") is None

    @pytest.mark.asyncio
    async def test_missing_coin_returns_none(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={}))
        assert await client.get_current_price("weth") is None


class TestCharts:
    @pytest.mark.asyncio
    async def test_historical_chart_points(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/coins/wrapped-bitcoin/market_chart")
            assert request.url.params["days"] == "14"
            return httpx.Response(200, json={"prices": [[1000, 1.5], [2000, 2.5], ["bad"]]})

        points = await _client(handler).get_historical_chart("wrapped-bitcoin", "usd", 14)
        assert points == [(1000, 1.5), (2000, 2.5)]

    @pytest.mark.asyncio
    async def test_ohlc_bars(self) -> None:
        client = _client(lambda request: httpx.Response(200, json=[[1, 10, 12, 9, 11]]))
        bars = await client.get_ohlc("weth", days=14)
        assert len(bars) == 1
        assert (bars[0].high, bars[0].low, bars[0].close) == (12.0, 9.0, 11.0)

    @pytest.mark.asyncio
    async def test_chart_failure_returns_empty(self) -> None:
        client = _client(lambda request: httpx.Response(500))
        assert await client.get_historical_chart("weth") == []
        assert await client.get_ohlc("weth") == []


class TestListings:
    @pytest.mark.asyncio
    async def test_market_listing_params(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["ids"] == "weth,solana"
            assert request.url.params["price_change_percentage"] == "1h"
            return httpx.Response(200, json=[{"id": "weth"}, {"id": "solana"}])

        rows = await _client(handler).get_market_listing(
            ids=["weth", "solana"], price_change_percentage="1h"
        )
        assert [r["id"] for r in rows] == ["weth", "solana"]

    @pytest.mark.asyncio
    async def test_trending_ids(self) -> None:
        payload = {"coins": [{"item": {"id": "pepe"}}, {"item": {"id": "bonk"}}]}
        client = _client(lambda request: httpx.Response(200, json=payload))
        assert await client.get_trending_tokens() == ["pepe", "bonk"]

    @pytest.mark.asyncio
    async def test_top_movers_ranked(self) -> None:
        key = "price_change_percentage_24h_in_currency"
        rows = [{"id": f"c{i}", key: float(i)} for i in range(25)]
        client = _client(lambda request: httpx.Response(200, json=rows))

        movers = await client.get_top_movers()
        assert [r["id"] for r in movers["gainers"][:2]] == ["c24", "c23"]
        assert [r["id"] for r in movers["losers"][:2]] == ["c0", "c1"]
        assert len(movers["gainers"]) == 10

    @pytest.mark.asyncio
    async def test_global_metrics_unwrapped(self) -> None:
        payload = {"data": {"market_cap_percentage": {"btc": 52.1}}}
        client = _client(lambda request: httpx.Response(200, json=payload))
        assert (await client.get_global_metrics())["market_cap_percentage"]["btc"] == 52.1
