"""Recall Network autotrader -- indicator-driven crypto trading bots."""

__version__ = "0.1.0"
