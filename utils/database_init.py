import asyncio
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

LOGGER = logging.getLogger(__name__)

DB_FILENAME = "app.db"
BUSY_TIMEOUT_SECONDS = 5.0

KV_STORE_SCHEMA = """
CREATE TABLE IF NOT EXISTS KV_STORE (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at INTEGER NOT NULL
)
"""


def resolve_database_dir(database_dir: Path | str | None = None) -> Path:
    """
    Return the directory holding the database, creating it when missing.

    An explicit `database_dir` wins over the DATABASE_DIR environment variable.

    Raises:
        RuntimeError: If neither is set, the path is a file, or it cannot be created.
    """
    raw = str(database_dir) if database_dir is not None else os.getenv("DATABASE_DIR")
    if raw is None or not raw.strip():
        raise RuntimeError(
            "DATABASE_DIR environment variable must be set to a writable "
            "directory path where the SQLite database file will be stored."
        )

    db_dir = Path(raw).expanduser()
    if db_dir.exists() and not db_dir.is_dir():
        raise RuntimeError(f"DATABASE_DIR={raw!r} points to a file, not a directory ({db_dir}).")

    try:
        db_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RuntimeError(f"Failed to create or access database directory at {db_dir}") from exc
    return db_dir


class AsyncDatabaseInitializer:
    """
    Own the SQLite file behind the key-value store (<DATABASE_DIR>/app.db).

    - `ensure_database()` creates the KV_STORE table once per instance and
      keeps existing rows, so history survives restarts.
    - `connection()` hands out short-lived `aiosqlite` connections.
    """

    def __init__(self, database_dir: Path | str | None = None) -> None:
        self.db_dir = resolve_database_dir(database_dir)
        self.db_path = self.db_dir / DB_FILENAME
        self._initialized = False

    async def ensure_database(self) -> None:
        """Create the schema if missing. Later calls on the same instance do nothing."""
        if self._initialized:
            return

        attempts = 3
        for attempt in range(1, attempts + 1):
            try:
                async with aiosqlite.connect(self.db_path, timeout=BUSY_TIMEOUT_SECONDS) as db:
                    await db.execute("PRAGMA journal_mode=WAL")
                    await db.execute(KV_STORE_SCHEMA)
                    await db.commit()
                break
            except FileNotFoundError:
                # Seen right after the directory is created on some filesystems.
                if attempt == attempts:
                    raise
                await asyncio.sleep(0.1 * attempt)

        LOGGER.info("Key-value store ready at %s", self.db_path)
        self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        await self.ensure_database()
        conn = await aiosqlite.connect(self.db_path, timeout=BUSY_TIMEOUT_SECONDS)
        try:
            yield conn
        finally:
            await conn.close()
