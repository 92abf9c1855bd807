"""Custom exceptions for the autotrader bots.

All gateway, execution and persistence exceptions live here
to avoid circular imports between modules.
"""


class TraderError(Exception):
    """Base exception for all autotrader errors."""


class ConfigurationError(TraderError):
    """Raised when a required credential or setting is missing at first use."""


class GatewayError(TraderError):
    """Raised when an external API call fails and no sentinel is appropriate."""


class TradeExecutionError(TraderError):
    """Raised when the execution gateway rejects or fails a trade."""


class PersistenceError(TraderError):
    """Raised when the position store cannot write its backing file."""
