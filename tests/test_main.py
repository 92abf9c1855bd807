"""Tests for component wiring in the entry point."""

from pathlib import Path

import pytest

from autotrader.config import AppSettings, BotSettings, RecallSettings
from autotrader.main import _build_components, _close_clients
from autotrader.orchestrator import Orchestrator
from autotrader.position.exits import PercentExit
from autotrader.position.sizing import FixedUsdSizer
from autotrader.strategies.memecoin import MemeCoinStrategy


def _settings(tmp_path: Path, strategy: str, **bot) -> AppSettings:
    return AppSettings(
        _env_file=None,
        recall=RecallSettings(api_key="test-key"),  # type: ignore[arg-type]
        bot=BotSettings(strategy=strategy, state_dir=tmp_path, **bot),
    )


class TestBuildComponents:
    @pytest.mark.asyncio
    async def test_wires_memecoin_bot(self, tmp_path: Path) -> None:
        components = _build_components(_settings(tmp_path, "memecoin"))
        try:
            bundle = components["bundle"]
            assert isinstance(bundle.strategy, MemeCoinStrategy)
            assert isinstance(bundle.sizer, FixedUsdSizer)
            assert isinstance(bundle.exit_policy, PercentExit)
            assert isinstance(components["orchestrator"], Orchestrator)
            assert components["store"].path == tmp_path / "memecoin_open_positions.json"
        finally:
            await _close_clients(components)

    @pytest.mark.asyncio
    async def test_does_not_touch_filesystem(self, tmp_path: Path) -> None:
        state_dir = tmp_path / "state"
        components = _build_components(_settings(state_dir, "intraday"))
        try:
            assert not state_dir.exists()
            assert len(components["store"]) == 0
        finally:
            await _close_clients(components)

    @pytest.mark.asyncio
    async def test_explicit_position_limit_wins(self, tmp_path: Path) -> None:
        components = _build_components(
            _settings(tmp_path, "momentum", max_concurrent_positions=3)
        )
        try:
            assert components["bundle"].config.max_concurrent_positions == 3
        finally:
            await _close_clients(components)
