"""Tradable token universes, keyed by CoinGecko coin id."""

from autotrader.models import Asset, TokenInfo


def _evm(coin_id: str, symbol: str, address: str, specific_chain: str = "eth") -> TokenInfo:
    return TokenInfo(coin_id, Asset(address, symbol, "evm", specific_chain))


WBTC = _evm("wrapped-bitcoin", "WBTC", "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599")
WETH = _evm("weth", "WETH", "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2")
LINK = _evm("chainlink", "LINK", "0x514910771af9ca656af840dff83e8264ecf986ca")
WXRP = _evm("wrapped-xrp", "WXRP", "0x39fbbabf11738317a448031930706cd3e612e1b9")
UNI = _evm("uniswap", "UNI", "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984")
POL = _evm("polygon-ecosystem-token", "POL", "0x455e53cbb86018ac2b8092fdcd39d8444affc3f6")
YBR = _evm("yieldbricks", "YBR", "0x11920f139a3121c2836e01551d43f95b3c31159c", "arbitrum")
BONK = _evm("bonk", "BONK", "0x1151cb3d861920e07a38e03eead12c32178567f6")
PEPE = _evm("pepe", "PEPE", "0x6982508145454ce325ddbe47a25d4ec3d2311933")
SOL = TokenInfo(
    "solana",
    Asset("So11111111111111111111111111111111111111112", "SOL", "svm", "svm"),
)

# Market trend gauge
MARKET_TREND_ASSET = WBTC.coingecko_id


def universe(*tokens: TokenInfo) -> dict[str, TokenInfo]:
    return {t.coingecko_id: t for t in tokens}


PULLBACK_TOKENS = universe(WETH, LINK, SOL, WXRP, UNI, POL)
TREND_ADAPTIVE_TOKENS = universe(WETH, LINK, SOL, WXRP, UNI, POL, YBR)
INTRADAY_TOKENS = universe(WBTC, WETH, SOL)
MOMENTUM_TOKENS = universe(WBTC, WETH, LINK, SOL, UNI, PEPE, BONK)

# Rebalancer prices WETH via the "ethereum" coin id.
REBALANCE_TOKENS = {
    "wrapped-bitcoin": WBTC,
    "ethereum": TokenInfo("ethereum", WETH.asset),
    "solana": SOL,
    "chainlink": LINK,
    "bonk": BONK,
    "pepe": PEPE,
}

# Dollar take-profit targets per unit (pullback bot).
PULLBACK_TAKE_PROFIT_DOLLARS = {
    "WETH": 50.0,
    "SOL": 0.3,
    "LINK": 0.2,
    "UNI": 0.2,
    "POL": 0.02,
    "WXRP": 0.02,
}

# Dollar take-profit targets per position (trend-adaptive bot).
TREND_ADAPTIVE_TAKE_PROFIT_DOLLARS = {
    "WETH": 10.0,
    "SOL": 0.2,
    "LINK": 0.1,
    "UNI": 0.1,
    "POL": 0.02,
    "WXRP": 0.02,
    "YBR": 0.0003,
}

TREND_ADAPTIVE_POSITION_SIZES = {
    "LINK": 1500.0,
    "SOL": 1500.0,
    "UNI": 1000.0,
    "POL": 2000.0,
    "WXRP": 2000.0,
    "YBR": 1000.0,
}

TARGET_ALLOCATIONS = {
    "WBTC": 0.30,
    "WETH": 0.30,
    "SOL": 0.20,
    "LINK": 0.10,
    "BONK": 0.05,
    "PEPE": 0.05,
}
