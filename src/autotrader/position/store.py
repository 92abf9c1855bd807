"""JSON-backed store of open positions for one bot process.

The backing file holds ``{"version": 1, "positions": [...]}`` and is
rewritten in full on every mutation. Writes go to a temp file in the same
directory which is then renamed over the target, and the in-memory list is
only replaced once the rename succeeds. A failed write raises
PersistenceError and leaves memory untouched.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path
from typing import Any

from autotrader.exceptions import PersistenceError
from autotrader.logging import get_logger
from autotrader.models import OpenPosition

logger = get_logger(__name__)

STORE_VERSION = 1


class PositionStore:
    """Process-local collection of open positions persisted to a JSON file.

    Lifecycle: construct, ``await load()`` once, then mutate. Mutations are
    serialised by an asyncio.Lock so a monitoring pass and a trading cycle
    cannot interleave their read-modify-write steps.

    Args:
        path: Backing JSON file. Parent directories are created on demand.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._positions: list[OpenPosition] = []
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> list[OpenPosition]:
        """Read positions from disk.

        A missing file initialises an empty store and writes it out. Any
        other read or parse failure is logged and the store resets to empty.

        Returns:
            Snapshot of the loaded positions.
        """
        async with self._lock:
            try:
                raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
            except FileNotFoundError:
                logger.info("position_store_created", path=str(self._path))
                self._positions = []
                try:
                    await self._write([])
                except PersistenceError:
                    logger.error("position_store_create_failed", path=str(self._path), exc_info=True)
                return []
            except (OSError, UnicodeDecodeError) as exc:
                logger.error("position_store_read_failed", path=str(self._path), error=str(exc))
                self._positions = []
                return []

            try:
                self._positions = _decode(raw)
            except (ValueError, KeyError, TypeError) as exc:
                logger.error("position_store_parse_failed", path=str(self._path), error=str(exc))
                self._positions = []
                return []

            logger.info("position_store_loaded", path=str(self._path), count=len(self._positions))
            return list(self._positions)

    def list(self) -> list[OpenPosition]:
        return list(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def has(self, matcher: Callable[[OpenPosition], bool]) -> bool:
        return any(matcher(p) for p in self._positions)

    def get(self, position_id: str) -> OpenPosition | None:
        for position in self._positions:
            if position.id == position_id:
                return position
        return None

    def opened_today(self, symbol: str, today: date | None = None) -> bool:
        """Whether a position in ``symbol`` was opened on the given local date.

        Args:
            symbol: Token symbol, compared case-insensitively.
            today: Calendar date to check. Defaults to the local date.
        """
        today = today or datetime.now().date()
        wanted = symbol.upper()
        for position in self._positions:
            if position.symbol.upper() != wanted:
                continue
            try:
                opened = position.opened_at_datetime().astimezone().date()
            except ValueError:
                continue
            if opened == today:
                return True
        return False

    async def add(self, position: OpenPosition) -> None:
        """Append a position and persist.

        Raises:
            ValueError: If a position with the same id is already stored.
            PersistenceError: If the file could not be written.
        """
        async with self._lock:
            if self._index_of(position.id) is not None:
                raise ValueError(f"Position {position.id} is already recorded")
            updated = [*self._positions, position]
            await self._write(updated)
            self._positions = updated
        logger.info("position_recorded", position_id=position.id, symbol=position.symbol)

    async def update(self, position_id: str, **fields: Any) -> OpenPosition | None:
        """Shallow-merge ``fields`` into the matching position and persist.

        Returns:
            The updated position, or None if ``position_id`` is unknown.

        Raises:
            PersistenceError: If the file could not be written.
        """
        async with self._lock:
            index = self._index_of(position_id)
            if index is None:
                logger.warning("position_update_unknown_id", position_id=position_id)
                return None
            merged = self._positions[index].merged(fields)
            updated = list(self._positions)
            updated[index] = merged
            await self._write(updated)
            self._positions = updated
            return merged

    async def remove(self, position_id: str) -> bool:
        """Remove the matching position and persist.

        Returns:
            True if a position was removed, False if the id is unknown.

        Raises:
            PersistenceError: If the file could not be written.
        """
        async with self._lock:
            if self._index_of(position_id) is None:
                logger.warning("position_remove_unknown_id", position_id=position_id)
                return False
            updated = [p for p in self._positions if p.id != position_id]
            await self._write(updated)
            self._positions = updated
        logger.info("position_removed", position_id=position_id)
        return True

    def _index_of(self, position_id: str) -> int | None:
        for i, position in enumerate(self._positions):
            if position.id == position_id:
                return i
        return None

    async def _write(self, positions: list[OpenPosition]) -> None:
        payload = json.dumps(
            {"version": STORE_VERSION, "positions": [p.to_dict() for p in positions]},
            indent=2,
        )
        try:
            await asyncio.to_thread(_atomic_write, self._path, payload)
        except OSError as exc:
            logger.error("position_store_write_failed", path=str(self._path), error=str(exc))
            raise PersistenceError(f"Failed to write {self._path}: {exc}") from exc


def _decode(raw: str) -> list[OpenPosition]:
    data = json.loads(raw)
    if isinstance(data, list):
        records = data  # legacy bare array
    elif isinstance(data, dict):
        records = data.get("positions", [])
    else:
        raise ValueError(f"Unexpected store payload type: {type(data).__name__}")
    return [OpenPosition.from_dict(r) for r in records]


def _atomic_write(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
