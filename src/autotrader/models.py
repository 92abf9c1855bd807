"""Shared data models for the autotrader bots.

Prices and amounts are floats: the indicator library works on float series
and the Recall API reports amounts as JSON numbers.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

USDC_EVM_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDC_SVM_ADDRESS = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class MarketTrend(str, Enum):
    """Broad market regime derived from the trend asset's SMAs."""

    UPTREND = "UPTREND"
    DOWNTREND = "DOWNTREND"
    SIDEWAYS = "SIDEWAYS"


class TradeSide(str, Enum):
    """Trade direction relative to the stablecoin."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Asset:
    """A token on a specific chain."""

    address: str
    symbol: str
    chain: str  # "evm" or "svm"
    specific_chain: str  # e.g. "eth", "base", "svm"

    def to_dict(self) -> dict[str, str]:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "chain": self.chain,
            "specificChain": self.specific_chain,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Asset":
        return cls(
            address=data["address"],
            symbol=data["symbol"],
            chain=data["chain"],
            specific_chain=data.get("specificChain", data.get("specific_chain", "")),
        )


@dataclass(frozen=True)
class TokenInfo:
    """A tradable token as configured for a strategy."""

    coingecko_id: str
    asset: Asset

    @property
    def symbol(self) -> str:
        return self.asset.symbol


@dataclass(frozen=True)
class OHLCBar:
    """One OHLC candle (CoinGecko returns [ts, open, high, low, close])."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float

    @classmethod
    def from_tuple(cls, row: list[float]) -> "OHLCBar":
        return cls(
            timestamp=int(row[0]),
            open=float(row[1]),
            high=float(row[2]),
            low=float(row[3]),
            close=float(row[4]),
        )


# camelCase JSON key -> dataclass attribute for OpenPosition
_POSITION_KEYS = {
    "id": "id",
    "fromAsset": "from_asset",
    "fromAmount": "from_amount",
    "toAsset": "to_asset",
    "toAmount": "to_amount",
    "entryPrice": "entry_price",
    "openedAt": "opened_at",
    "reason": "reason",
    "strategy": "strategy",
    "amountUsd": "amount_usd",
    "highWaterMark": "high_water_mark",
    "error": "error",
}


@dataclass
class OpenPosition:
    """A recorded, not-yet-closed trade awaiting an exit condition."""

    id: str
    from_asset: Asset
    from_amount: float
    to_asset: Asset
    to_amount: float
    entry_price: float
    opened_at: str
    reason: str
    strategy: str = ""
    amount_usd: float = 0.0
    high_water_mark: float | None = None
    error: str | None = None

    @property
    def symbol(self) -> str:
        return self.to_asset.symbol

    def opened_at_datetime(self) -> datetime:
        return datetime.fromisoformat(self.opened_at.replace("Z", "+00:00"))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for key, attr in _POSITION_KEYS.items():
            value = getattr(self, attr)
            if isinstance(value, Asset):
                value = value.to_dict()
            if value is None and attr in ("high_water_mark", "error"):
                continue
            data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OpenPosition":
        kwargs: dict[str, Any] = {}
        for key, attr in _POSITION_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
            elif attr in data:
                kwargs[attr] = data[attr]
        kwargs["from_asset"] = Asset.from_dict(kwargs["from_asset"])
        kwargs["to_asset"] = Asset.from_dict(kwargs["to_asset"])
        for attr in ("from_amount", "to_amount", "entry_price", "amount_usd"):
            if attr in kwargs:
                kwargs[attr] = float(kwargs[attr])
        if kwargs.get("high_water_mark") is not None:
            kwargs["high_water_mark"] = float(kwargs["high_water_mark"])
        return cls(**kwargs)

    def merged(self, updates: dict[str, Any]) -> "OpenPosition":
        """Return a copy with ``updates`` shallow-merged in."""
        known = {f.name for f in fields(self)}
        unknown = set(updates) - known
        if unknown:
            raise ValueError(f"Unknown position fields: {sorted(unknown)}")
        return replace(self, **updates)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TradeRequest:
    """Parameters for a Recall trade execution or quote."""

    from_token: str
    to_token: str
    amount: float
    reason: str
    from_chain: str | None = None
    from_specific_chain: str | None = None
    to_chain: str | None = None
    to_specific_chain: str | None = None
    slippage_tolerance: str | None = None

    def validate(self) -> None:
        if self.amount <= 0:
            raise ValueError("Amount must be a positive number.")
        if self.from_token == self.to_token:
            raise ValueError("fromToken and toToken cannot be the same.")
        if bool(self.from_chain) != bool(self.from_specific_chain):
            raise ValueError("Both fromChain and fromSpecificChain must be provided if one is.")
        if bool(self.to_chain) != bool(self.to_specific_chain):
            raise ValueError("Both toChain and toSpecificChain must be provided if one is.")


@dataclass
class TradeResult:
    """Transaction record returned by a successful trade."""

    id: str
    to_amount: float
    price: float
    from_amount: float = 0.0
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class StableBalance:
    """USDC held on one EVM specific chain."""

    amount: float
    address: str


@dataclass
class StableBalances:
    """Stablecoin capital available for new entries, grouped by chain."""

    evm: dict[str, StableBalance] = field(default_factory=dict)
    svm: float = 0.0

    @property
    def total(self) -> float:
        return sum(b.amount for b in self.evm.values()) + self.svm

    def debit(self, specific_chain: str, amount: float) -> None:
        """Reduce the cached balance after an entry is funded from it."""
        if specific_chain == "svm":
            self.svm -= amount
        elif specific_chain in self.evm:
            self.evm[specific_chain].amount -= amount


@dataclass
class Opportunity:
    """A candidate entry produced by a strategy's opportunity predicate.

    ``is_opportunity`` is the technical verdict; candidates where it is False
    may still be traded in override mode if the oracle is confident enough.
    """

    strategy: str
    token: TokenInfo
    price: float
    is_opportunity: bool
    side: TradeSide = TradeSide.BUY
    indicators: dict[str, Any] = field(default_factory=dict)
    amount_usd: float | None = None  # preset size (rebalancer, meme coins)
    token_amount: float | None = None  # sell legs: token units to sell
    confidence: float | None = None
    confidence_reason: str = ""

    @property
    def symbol(self) -> str:
        return self.token.symbol


@dataclass
class ExitSignal:
    """An exit condition that fired for an open position."""

    reason: str
    pnl: float
