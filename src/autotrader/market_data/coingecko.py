"""CoinGecko market data gateway.

Wraps the public REST API (demo key optional) with an httpx.AsyncClient.
Every call carries an explicit timeout. Transient failures (HTTP errors,
timeouts, undecodable JSON) are logged and mapped to a sentinel: None for
scalars, an empty list or dict for collections.
"""

from typing import Any

import httpx

from autotrader.config import CoinGeckoSettings
from autotrader.logging import get_logger
from autotrader.models import OHLCBar

logger = get_logger(__name__)

TOP_MOVERS_LIMIT = 10


class CoinGeckoClient:
    """Async CoinGecko client.

    Args:
        settings: Base URL, API key and timeouts.
        client: Optional pre-built httpx.AsyncClient (tests inject one with a
            MockTransport). When omitted, one is created and owned here.
    """

    def __init__(
        self,
        settings: CoinGeckoSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        headers = {"Accept": "application/json"}
        api_key = settings.api_key.get_secret_value()
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=settings.base_url)
        self._headers = headers

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        url = f"{self._settings.base_url}{path}"
        try:
            response = await self._client.get(
                url,
                params=params,
                headers=self._headers,
                timeout=timeout or self._settings.read_timeout,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "coingecko_http_error",
                path=path,
                status=exc.response.status_code,
            )
        except httpx.HTTPError as exc:
            logger.warning("coingecko_request_failed", path=path, error=str(exc))
        except ValueError as exc:
            logger.warning("coingecko_bad_json", path=path, error=str(exc))
        return None

    async def get_current_price(self, token_id: str, vs_currency: str = "usd") -> float | None:
        """Spot price for one coin id via /simple/price."""
        data = await self._get(
            "/simple/price",
            params={"ids": token_id, "vs_currencies": vs_currency},
        )
        try:
            return float(data[token_id][vs_currency])
        except (TypeError, KeyError, ValueError):
            if data is not None:
                logger.warning("coingecko_price_missing", token_id=token_id)
            return None

    async def get_market_listing(
        self,
        vs_currency: str = "usd",
        ids: list[str] | None = None,
        per_page: int | None = None,
        price_change_percentage: str | None = None,
    ) -> list[dict[str, Any]]:
        """Market rows (price, volume, market cap, changes) via /coins/markets."""
        params: dict[str, Any] = {"vs_currency": vs_currency}
        if ids:
            params["ids"] = ",".join(ids)
        if per_page:
            params["per_page"] = per_page
        if price_change_percentage:
            params["price_change_percentage"] = price_change_percentage
        data = await self._get("/coins/markets", params=params)
        return data if isinstance(data, list) else []

    async def get_historical_chart(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int | str = 7,
        interval: str | None = None,
    ) -> list[tuple[int, float]]:
        """Chronological ``(timestamp_ms, price)`` pairs from /coins/{id}/market_chart."""
        params: dict[str, Any] = {"vs_currency": vs_currency, "days": str(days)}
        if interval:
            params["interval"] = interval
        data = await self._get(
            f"/coins/{coin_id}/market_chart",
            params=params,
            timeout=self._settings.chart_timeout,
        )
        if not isinstance(data, dict):
            return []
        points = []
        for row in data.get("prices") or []:
            try:
                points.append((int(row[0]), float(row[1])))
            except (TypeError, ValueError, IndexError):
                continue
        return points

    async def get_ohlc(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int | str = 14,
    ) -> list[OHLCBar]:
        """OHLC candles from /coins/{id}/ohlc."""
        data = await self._get(
            f"/coins/{coin_id}/ohlc",
            params={"vs_currency": vs_currency, "days": str(days)},
            timeout=self._settings.chart_timeout,
        )
        if not isinstance(data, list):
            return []
        bars = []
        for row in data:
            try:
                bars.append(OHLCBar.from_tuple(row))
            except (TypeError, ValueError, IndexError):
                continue
        return bars

    async def get_trending_tokens(self) -> list[str]:
        """Coin ids currently trending on CoinGecko search."""
        data = await self._get("/search/trending")
        if not isinstance(data, dict):
            return []
        return [
            coin["item"]["id"]
            for coin in data.get("coins") or []
            if isinstance(coin, dict) and coin.get("item", {}).get("id")
        ]

    async def get_top_movers(
        self,
        vs_currency: str = "usd",
        duration: str = "24h",
    ) -> dict[str, list[dict[str, Any]]]:
        """Top gainers and losers for ``duration``, ranked from /coins/markets.

        Returns:
            ``{"gainers": [...], "losers": [...]}`` with at most ten rows each,
            or an empty dict on failure.
        """
        rows = await self.get_market_listing(
            vs_currency=vs_currency,
            per_page=250,
            price_change_percentage=duration,
        )
        if not rows:
            return {}
        key = f"price_change_percentage_{duration}_in_currency"
        ranked = [r for r in rows if isinstance(r.get(key), (int, float))]
        ranked.sort(key=lambda r: r[key], reverse=True)
        return {
            "gainers": ranked[:TOP_MOVERS_LIMIT],
            "losers": list(reversed(ranked[-TOP_MOVERS_LIMIT:])) if ranked else [],
        }

    async def get_global_metrics(self) -> dict[str, Any]:
        """Global market metrics (total market cap, dominance) via /global."""
        data = await self._get("/global")
        if not isinstance(data, dict):
            return {}
        return data.get("data", data)
