"""Open-position lifecycle: persistence, exit conditions and sizing."""

from autotrader.position.exits import (
    CompositeExit,
    DollarTakeProfitExit,
    ExitPolicy,
    NoExit,
    PercentExit,
    TrailingStopExit,
)
from autotrader.position.sizing import (
    FixedUsdSizer,
    FundingSource,
    PercentOfCapitalSizer,
    PositionSizer,
    TokenTableSizer,
    select_funding_source,
)
from autotrader.position.store import PositionStore

__all__ = [
    "CompositeExit",
    "DollarTakeProfitExit",
    "ExitPolicy",
    "FixedUsdSizer",
    "FundingSource",
    "NoExit",
    "PercentExit",
    "PercentOfCapitalSizer",
    "PositionSizer",
    "PositionStore",
    "TokenTableSizer",
    "select_funding_source",
]
