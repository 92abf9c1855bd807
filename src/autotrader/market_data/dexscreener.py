"""DEX Screener pair discovery for meme-coin strategies."""

from dataclasses import dataclass
from typing import Any

import httpx

from autotrader.config import DexScreenerSettings
from autotrader.logging import get_logger

logger = get_logger(__name__)

# DEX Screener chainId -> (Recall chain, specific chain)
CHAIN_MAP: dict[str, tuple[str, str]] = {
    "solana": ("svm", "svm"),
    "ethereum": ("evm", "eth"),
    "bsc": ("evm", "bsc"),
    "polygon": ("evm", "polygon"),
    "arbitrum": ("evm", "arbitrum"),
    "optimism": ("evm", "optimism"),
    "base": ("evm", "base"),
}


@dataclass(frozen=True)
class DexPair:
    """A DEX pair mapped onto a Recall-tradable chain."""

    symbol: str
    token_address: str
    price_usd: float
    liquidity: float
    chain: str
    specific_chain: str


def _liquidity(pair: dict[str, Any]) -> float:
    return float((pair.get("liquidity") or {}).get("usd") or 0)


class DexScreenerClient:
    """Async DEX Screener client. Errors are logged and yield ``[]`` or None."""

    def __init__(
        self,
        settings: DexScreenerSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_pairs(self, path: str, params: dict[str, str] | None = None) -> list[dict]:
        try:
            response = await self._client.get(
                f"{self._settings.base_url}{path}",
                params=params,
                timeout=self._settings.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("dexscreener_request_failed", path=path, error=str(exc))
            return []
        pairs = data.get("pairs") if isinstance(data, dict) else None
        return pairs or []

    async def get_new_pairs(self, chain: str) -> list[dict[str, Any]]:
        """Raw newly created pairs on ``chain``."""
        return await self._get_pairs(f"/pairs/{chain}/new")

    async def get_top_trending_pairs(self, min_liquidity: float) -> list[DexPair]:
        """Recently created high-volume pairs with at least ``min_liquidity`` USD."""
        raw = await self._get_pairs("/search", params={"q": self._settings.trending_query})
        pairs: list[DexPair] = []
        for pair in raw:
            chain = CHAIN_MAP.get(pair.get("chainId", ""))
            try:
                price = float(pair.get("priceUsd") or 0)
            except ValueError:
                continue
            liquidity = _liquidity(pair)
            base = pair.get("baseToken") or {}
            if chain is None or not price or liquidity < min_liquidity or not base.get("address"):
                continue
            pairs.append(
                DexPair(
                    symbol=base.get("symbol", ""),
                    token_address=base["address"],
                    price_usd=price,
                    liquidity=liquidity,
                    chain=chain[0],
                    specific_chain=chain[1],
                )
            )
        logger.info("dexscreener_trending_pairs", fetched=len(raw), kept=len(pairs))
        return pairs

    async def get_pair_price(self, token_address: str) -> float | None:
        """USD price of the most liquid pair trading ``token_address``."""
        raw = await self._get_pairs("/search", params={"q": token_address})
        if not raw:
            return None
        best = max(raw, key=_liquidity)
        try:
            return float(best["priceUsd"]) if best.get("priceUsd") else None
        except ValueError:
            return None
