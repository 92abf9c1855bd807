"""Tests for the append-only trade journal."""

from pathlib import Path

import pytest

from autotrader.journal import TradeJournal


@pytest.mark.asyncio
async def test_opened_and_closed_lines(tmp_path: Path) -> None:
    journal = TradeJournal(tmp_path / "logs" / "trades.log")
    await journal.opened("weth", 0.5, 3000.0, "pullback entry")
    await journal.closed("weth", 3000.0, 3010.0, 0.5, "Take-profit triggered")

    lines = journal.path.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("[")
    assert "OPENED: WETH - Amount: 0.5 - Price: 3000.0 - Reason: pullback entry" in lines[0]
    assert "Profit Per Token: 10.00 - Total Profit: 5.00" in lines[1]


@pytest.mark.asyncio
async def test_write_failure_is_swallowed(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    journal = TradeJournal(blocker / "trades.log")
    await journal.record("OPENED: X")
