"""Async data access layer for the analysis history.

The history is an append-only log of `AnalysisRecord`s serialized as one
JSON array under a single key of a key-value storage port. The port has an
in-memory implementation for tests and an `aiosqlite` implementation
compatible with `utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol
from uuid import uuid4

from models.analysis_record import AnalysisOutput, AnalysisRecord
from utils.database_init import AsyncDatabaseInitializer

LOGGER = logging.getLogger(__name__)

HISTORY_KEY = "verdant-sentinel-history"


class KeyValueStorage(Protocol):
    """Storage port holding string values under string keys."""

    async def read(self, key: str) -> Optional[str]: ...

    async def write(self, key: str, value: str) -> None: ...

    async def clear(self, key: str) -> None: ...


class InMemoryStorage:
    """Dictionary-backed storage used by tests and ephemeral deployments."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def write(self, key: str, value: str) -> None:
        self.values[key] = value

    async def clear(self, key: str) -> None:
        self.values.pop(key, None)


class SQLiteKeyValueStorage:
    """Key-value storage on the KV_STORE table of the application database."""

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def read(self, key: str) -> Optional[str]:
        async with self._db.connection() as conn:
            cur = await conn.execute("SELECT value FROM KV_STORE WHERE key = ?", (key,))
            row = await cur.fetchone()
            return row[0] if row else None

    async def write(self, key: str, value: str) -> None:
        async with self._db.connection() as conn:
            await conn.execute(
                "INSERT INTO KV_STORE (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (key, value, int(time.time())),
            )
            await conn.commit()

    async def clear(self, key: str) -> None:
        async with self._db.connection() as conn:
            await conn.execute("DELETE FROM KV_STORE WHERE key = ?", (key,))
            await conn.commit()


class HistoryStore:
    """Append-only log of completed analyses, read back newest-first.

    Writes rewrite the whole stored sequence, so concurrent writers would lose
    records. Within one process `add` is serialized by a lock; several
    processes sharing one slot is not supported.
    """

    def __init__(self, storage: KeyValueStorage, key: str = HISTORY_KEY) -> None:
        self._storage = storage
        self._key = key
        self._write_lock = asyncio.Lock()

    async def add(
        self,
        record_type: str,
        input_reference: str,
        output: AnalysisOutput,
        date: Optional[datetime] = None,
    ) -> AnalysisRecord:
        """Create a record with a fresh id and prepend it to the stored history.

        Raises:
            ValueError: If `output` does not match `record_type`.
        """
        record = AnalysisRecord(
            id=uuid4().hex,
            type=record_type,
            input=input_reference,
            output=output,
            date=date or datetime.now(timezone.utc),
        )
        async with self._write_lock:
            current = await self.list()
            updated = [record, *current]
            await self._storage.write(self._key, json.dumps([item.to_dict() for item in updated]))
        LOGGER.info("Stored %s analysis %s", record.type, record.id)
        return record

    async def list(self) -> List[AnalysisRecord]:
        """Return all records sorted by date descending; corrupted data reads as empty."""
        raw = await self._storage.read(self._key)
        if not raw:
            return []
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("History payload must be a JSON array")
            records = [AnalysisRecord.from_dict(item) for item in payload]
        except (ValueError, KeyError, TypeError) as exc:
            LOGGER.error("Failed to parse stored history: %s", exc)
            return []
        return sorted(records, key=lambda record: record.date, reverse=True)

    async def get(self, record_id: str) -> Optional[AnalysisRecord]:
        """Return the record with `record_id`, or None if absent."""
        for record in await self.list():
            if record.id == record_id:
                return record
        return None

    async def clear(self) -> None:
        """Remove the entire stored history."""
        async with self._write_lock:
            await self._storage.clear(self._key)
