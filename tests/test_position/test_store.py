"""Tests for the JSON-backed PositionStore."""

import json
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio

from autotrader.exceptions import PersistenceError
from autotrader.position.store import PositionStore


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "pullback_open_positions.json"


@pytest_asyncio.fixture
async def store(store_path: Path) -> PositionStore:
    s = PositionStore(store_path)
    await s.load()
    return s


class TestLoad:
    @pytest.mark.asyncio
    async def test_missing_file_creates_empty_store(self, store_path: Path) -> None:
        store = PositionStore(store_path)
        assert await store.load() == []
        assert store_path.exists()
        assert json.loads(store_path.read_text()) == {"version": 1, "positions": []}

    @pytest.mark.asyncio
    async def test_corrupt_file_resets_to_empty(self, store_path: Path) -> None:
        store_path.parent.mkdir(parents=True)
        store_path.write_text("{not json")
        store = PositionStore(store_path)
        assert await store.load() == []
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_undecodable_bytes_reset_to_empty(self, store_path: Path) -> None:
        store_path.parent.mkdir(parents=True)
        store_path.write_bytes(b'\xff\xfe[{"id": "x"}]')
        store = PositionStore(store_path)
        assert await store.load() == []
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_legacy_array_format(self, store_path: Path, make_position) -> None:
        store_path.parent.mkdir(parents=True)
        store_path.write_text(json.dumps([make_position().to_dict()]))
        store = PositionStore(store_path)
        loaded = await store.load()
        assert loaded == [make_position()]

    @pytest.mark.asyncio
    async def test_load_twice_is_idempotent(self, store_path: Path, make_position) -> None:
        store = PositionStore(store_path)
        await store.load()
        await store.add(make_position(id="a"))
        await store.add(make_position(id="b"))

        first = await store.load()
        second = await store.load()
        assert first == second
        assert [p.id for p in second] == ["a", "b"]


class TestMutations:
    @pytest.mark.asyncio
    async def test_add_then_list_round_trip(self, store: PositionStore, make_position) -> None:
        position = make_position()
        await store.add(position)
        assert store.list() == [position]

        reloaded = PositionStore(store.path)
        assert await reloaded.load() == [position]

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self, store: PositionStore, make_position) -> None:
        await store.add(make_position(id="t1"))
        with pytest.raises(ValueError):
            await store.add(make_position(id="t1", entry_price=200.0))

        assert len(store) == 1
        assert store.get("t1").entry_price == 100.0
        reloaded = PositionStore(store.path)
        assert [p.id for p in await reloaded.load()] == ["t1"]

    @pytest.mark.asyncio
    async def test_remove(self, store: PositionStore, make_position) -> None:
        position = make_position()
        await store.add(position)
        assert await store.remove(position.id) is True
        assert store.list() == []
        assert json.loads(store.path.read_text())["positions"] == []

    @pytest.mark.asyncio
    async def test_remove_unknown_id(self, store: PositionStore) -> None:
        assert await store.remove("missing") is False

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, store: PositionStore, make_position) -> None:
        await store.add(make_position())
        updated = await store.update("trade-1", high_water_mark=120.0)
        assert updated is not None
        assert updated.high_water_mark == 120.0
        assert store.get("trade-1").high_water_mark == 120.0

        reloaded = PositionStore(store.path)
        assert (await reloaded.load())[0].high_water_mark == 120.0

    @pytest.mark.asyncio
    async def test_update_unknown_id_returns_none(self, store: PositionStore) -> None:
        assert await store.update("missing", high_water_mark=1.0) is None

    @pytest.mark.asyncio
    async def test_update_unknown_field_raises(self, store: PositionStore, make_position) -> None:
        await store.add(make_position())
        with pytest.raises(ValueError):
            await store.update("trade-1", bogus=1)

    @pytest.mark.asyncio
    async def test_failed_write_leaves_memory_untouched(
        self, tmp_path: Path, make_position
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = PositionStore(blocker / "positions.json")

        with pytest.raises(PersistenceError):
            await store.add(make_position())
        assert store.list() == []


class TestQueries:
    @pytest.mark.asyncio
    async def test_has_by_address(self, store: PositionStore, make_position) -> None:
        position = make_position()
        await store.add(position)
        assert store.has(lambda p: p.to_asset.address == position.to_asset.address)
        assert not store.has(lambda p: p.to_asset.address == "0xdead")

    @pytest.mark.asyncio
    async def test_opened_today_matches_local_date(
        self, store: PositionStore, make_position
    ) -> None:
        now = datetime.now(timezone.utc)
        await store.add(make_position(opened_at=now.isoformat()))

        today = now.astimezone().date()
        assert store.opened_today("weth", today=today)
        assert not store.opened_today("WETH", today=today - timedelta(days=1))
        assert not store.opened_today("SOL", today=today)

    @pytest.mark.asyncio
    async def test_opened_today_ignores_old_positions(
        self, store: PositionStore, make_position
    ) -> None:
        await store.add(make_position(opened_at="2020-01-01T00:00:00+00:00"))
        assert not store.opened_today("WETH", today=date(2024, 5, 1))
