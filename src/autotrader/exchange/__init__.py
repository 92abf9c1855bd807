"""Execution gateway layer -- Recall Network trade API integration via httpx."""

from autotrader.exchange.client import ExecutionGateway
from autotrader.exchange.recall_client import RecallClient, parse_usdc_balances

__all__ = ["ExecutionGateway", "RecallClient", "parse_usdc_balances"]
