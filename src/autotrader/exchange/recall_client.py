"""Recall Network trade-execution gateway.

Thin async wrapper over the Recall competition REST API using httpx with
Bearer authentication. Reads use the read timeout and trades the longer
trade timeout. The API key is checked on first use rather than at
construction so a missing key aborts a single tick, not the process.
"""

from typing import Any

import httpx

from autotrader.config import RecallSettings
from autotrader.exceptions import ConfigurationError, GatewayError, TradeExecutionError
from autotrader.exchange.client import ExecutionGateway
from autotrader.logging import get_logger
from autotrader.models import StableBalance, StableBalances, TradeRequest, TradeResult

logger = get_logger(__name__)

STABLE_SYMBOLS = frozenset({"USDC", "USDbC"})


class RecallClient(ExecutionGateway):
    """Recall API implementation of ExecutionGateway.

    Args:
        settings: Base URL, API key, timeouts and default slippage.
        client: Optional pre-built httpx.AsyncClient (tests inject a
            MockTransport-backed one).
    """

    def __init__(
        self,
        settings: RecallSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        api_key = self._settings.api_key.get_secret_value()
        if not api_key:
            raise ConfigurationError("RECALL_API_KEY is not set.")
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        headers = self._headers()
        url = f"{self._settings.url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=body,
                headers=headers,
                timeout=timeout or self._settings.read_timeout,
            )
        except httpx.HTTPError as exc:
            raise GatewayError(f"Recall request {path} failed: {exc}") from exc

        if response.is_error:
            raise GatewayError(
                f"Recall request {path} failed: {response.status_code} {response.text}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"Recall request {path} returned invalid JSON") from exc

    async def get_portfolio(self) -> dict[str, Any]:
        return await self._request("GET", "/agent/portfolio")

    async def get_balances(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/agent/balances")
        return data.get("balances", []) if isinstance(data, dict) else []

    async def get_price(
        self, token_address: str, chain: str, specific_chain: str
    ) -> float | None:
        try:
            data = await self._request(
                "GET",
                "/price",
                params={"token": token_address, "chain": chain, "specificChain": specific_chain},
            )
        except GatewayError as exc:
            logger.warning("recall_price_unavailable", token=token_address, error=str(exc))
            return None
        price = data.get("price") if isinstance(data, dict) else None
        if not price:
            return None
        try:
            return float(price)
        except (TypeError, ValueError):
            return None

    def _trade_body(self, request: TradeRequest) -> dict[str, Any]:
        request.validate()
        body: dict[str, Any] = {
            "fromToken": request.from_token,
            "toToken": request.to_token,
            "amount": str(request.amount),
            "reason": request.reason,
            "slippageTolerance": request.slippage_tolerance or self._settings.slippage_tolerance,
        }
        if request.from_chain:
            body["fromChain"] = request.from_chain
            body["fromSpecificChain"] = request.from_specific_chain
        if request.to_chain:
            body["toChain"] = request.to_chain
            body["toSpecificChain"] = request.to_specific_chain
        return body

    async def execute_trade(self, request: TradeRequest) -> TradeResult:
        """Execute a swap via POST /trade/execute.

        Raises:
            ValueError: If the request fails validation.
            ConfigurationError: If no API key is configured.
            TradeExecutionError: If the API rejects the trade or is unreachable.
        """
        body = self._trade_body(request)
        try:
            data = await self._request(
                "POST",
                "/trade/execute",
                body=body,
                timeout=self._settings.trade_timeout,
            )
        except GatewayError as exc:
            raise TradeExecutionError(str(exc)) from exc

        transaction = data.get("transaction") if isinstance(data, dict) else None
        if not transaction or (isinstance(data, dict) and data.get("success") is False):
            raise TradeExecutionError(f"Trade rejected: {data}")
        logger.info(
            "trade_executed",
            trade_id=transaction.get("id"),
            from_token=request.from_token,
            to_token=request.to_token,
            amount=request.amount,
        )
        return TradeResult(
            id=str(transaction["id"]),
            to_amount=float(transaction.get("toAmount", 0)),
            price=float(transaction.get("price", 0)),
            from_amount=float(transaction.get("fromAmount", request.amount)),
            raw=transaction,
        )

    async def get_trade_quote(self, request: TradeRequest) -> dict[str, Any]:
        body = self._trade_body(request)
        params = {k: v for k, v in body.items() if k not in ("reason", "slippageTolerance")}
        return await self._request("GET", "/trade/quote", params=params)

    async def get_trade_history(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/agent/trades")
        return data.get("trades", []) if isinstance(data, dict) else []


def parse_usdc_balances(balances: list[dict[str, Any]]) -> StableBalances:
    """Group USDC/USDbC holdings by EVM specific chain and total SVM USDC.

    Args:
        balances: Rows from ``get_balances`` with ``symbol``, ``amount``,
            ``chain``, ``specificChain`` and ``tokenAddress``.
    """
    result = StableBalances()
    for row in balances:
        if row.get("symbol") not in STABLE_SYMBOLS:
            continue
        amount = float(row.get("amount") or 0)
        if row.get("chain") == "svm":
            result.svm += amount
            continue
        specific_chain = row.get("specificChain", "")
        existing = result.evm.get(specific_chain)
        if existing is None:
            result.evm[specific_chain] = StableBalance(
                amount=amount, address=row.get("tokenAddress", "")
            )
        else:
            existing.amount += amount
            existing.address = row.get("tokenAddress", existing.address)
    return result
