"""
SQLite database manager for chorebot.

Holds a small key/value table partitioned by entity name. Each named entity
(e.g. "chore-state") owns its own keys: the live record plus any backups.
Uses WAL mode for concurrent read safety with single-writer asyncio pattern.
"""

import json
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import aiosqlite

from ..config import settings
from ..exceptions import StorageError

logger = logging.getLogger(__name__)


_DDL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS entity_storage (
    entity     TEXT NOT NULL,
    key        TEXT NOT NULL,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (entity, key)
);
"""


class DatabaseManager:
    """Manages the SQLite connection and schema for chorebot."""

    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = db_path or settings.db_path
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Open connection and run DDL."""
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)

        self._conn = await aiosqlite.connect(self.db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.executescript(_DDL)
        await self._conn.commit()
        logger.info("Database initialised: %s", self.db_path)

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None

    @asynccontextmanager
    async def get_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield the shared connection. Callers must not close it."""
        if self._conn is None:
            raise RuntimeError("DatabaseManager not initialised; call init() first")
        yield self._conn

    async def get(self, entity: str, key: str) -> Any | None:
        """Return the decoded JSON value stored under (entity, key), or None."""
        try:
            async with self.get_connection() as conn:
                async with conn.execute(
                    "SELECT value FROM entity_storage WHERE entity = ? AND key = ?",
                    (entity, key),
                ) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Could not read {entity}/{key}: {e}") from e
        if row is None:
            return None
        return json.loads(row["value"])

    async def put(self, entity: str, key: str, value: Any) -> None:
        """Store a JSON-serialisable value under (entity, key), replacing any prior value."""
        try:
            async with self.get_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO entity_storage (entity, key, value)
                    VALUES (?, ?, ?)
                    ON CONFLICT(entity, key) DO UPDATE SET
                        value=excluded.value,
                        updated_at=datetime('now')
                    """,
                    (entity, key, json.dumps(value)),
                )
                await conn.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Could not write {entity}/{key}: {e}") from e

    async def list_keys(self, entity: str, prefix: str = "") -> list[str]:
        """Return the keys owned by an entity, optionally filtered by prefix, sorted."""
        try:
            async with self.get_connection() as conn:
                async with conn.execute(
                    "SELECT key FROM entity_storage "
                    "WHERE entity = ? AND substr(key, 1, length(?)) = ? ORDER BY key",
                    (entity, prefix, prefix),
                ) as cursor:
                    rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageError(f"Could not list keys for {entity}: {e}") from e
        return [row["key"] for row in rows]
