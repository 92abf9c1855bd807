"""Market data gateways: CoinGecko prices and charts, DEX Screener discovery."""

from autotrader.market_data.coingecko import CoinGeckoClient
from autotrader.market_data.dexscreener import CHAIN_MAP, DexPair, DexScreenerClient

__all__ = ["CHAIN_MAP", "CoinGeckoClient", "DexPair", "DexScreenerClient"]
