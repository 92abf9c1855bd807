"""Append-only human-readable trade log."""

import asyncio
from datetime import datetime, timezone
from pathlib import Path

from autotrader.logging import get_logger

logger = get_logger(__name__)


class TradeJournal:
    """Writes ``[ISO timestamp] OPENED: ...`` / ``CLOSED: ...`` lines.

    Write failures are logged and swallowed; the journal is informational
    and must not interrupt trading.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def record(self, message: str) -> None:
        line = f"[{datetime.now(timezone.utc).isoformat()}] {message}\n"
        try:
            await asyncio.to_thread(self._append, line)
        except OSError as exc:
            logger.error("trade_journal_write_failed", path=str(self._path), error=str(exc))

    def _append(self, line: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)

    async def opened(self, symbol: str, amount: float, price: float, reason: str) -> None:
        await self.record(
            f"OPENED: {symbol.upper()} - Amount: {amount} - Price: {price} - Reason: {reason}"
        )

    async def closed(
        self,
        symbol: str,
        entry_price: float,
        exit_price: float,
        amount: float,
        reason: str,
    ) -> None:
        per_unit = exit_price - entry_price
        await self.record(
            f"CLOSED: {symbol.upper()} - Open Price: {entry_price:.4f} - "
            f"Close Price: {exit_price:.4f} - Profit Per Token: {per_unit:.2f} - "
            f"Total Profit: {per_unit * amount:.2f} - Reason: {reason}"
        )
