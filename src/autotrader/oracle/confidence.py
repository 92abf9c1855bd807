"""HTTP client for the LLM confidence endpoint."""

import httpx

from autotrader.config import OracleSettings
from autotrader.logging import get_logger
from autotrader.models import MarketTrend, Opportunity
from autotrader.oracle.parsing import ConfidenceResult, parse_confidence
from autotrader.oracle.prompts import build_prompt

logger = get_logger(__name__)


class ConfidenceOracle:
    """Scores trade candidates by asking an external LLM agent.

    Sends ``{"userMessage": prompt}`` and expects ``{"response": text}``.
    Every failure degrades to confidence 0.0; ``score`` never raises.

    Args:
        settings: Endpoint URL and timeout.
        client: Optional pre-built httpx.AsyncClient.
    """

    def __init__(
        self,
        settings: OracleSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def score(self, prompt: str) -> ConfidenceResult:
        try:
            response = await self._client.post(
                self._settings.url,
                json={"userMessage": prompt},
                timeout=self._settings.timeout,
            )
        except httpx.HTTPError as exc:
            logger.error("oracle_request_failed", error=str(exc))
            return ConfidenceResult(0.0, f"Error fetching confidence: {exc}")

        if response.is_error:
            logger.error("oracle_http_error", status=response.status_code)
            return ConfidenceResult(0.0, f"Error fetching confidence: HTTP {response.status_code}")

        try:
            text = response.json()["response"]
        except (ValueError, KeyError, TypeError):
            logger.error("oracle_malformed_body", body=response.text[:200])
            return ConfidenceResult(0.0, "Malformed oracle response.")
        if not isinstance(text, str):
            logger.error("oracle_malformed_body", body=response.text[:200])
            return ConfidenceResult(0.0, "Malformed oracle response.")

        return parse_confidence(text)

    async def evaluate(
        self, candidate: Opportunity, market_trend: MarketTrend | str
    ) -> ConfidenceResult:
        """Build the prompt for ``candidate`` and score it."""
        result = await self.score(build_prompt(candidate, market_trend))
        logger.info(
            "oracle_confidence",
            symbol=candidate.symbol,
            strategy=candidate.strategy,
            confidence=result.confidence,
        )
        return result
