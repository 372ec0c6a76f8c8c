"""SQLite store of spool usage not yet sent to InvenTree."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS pending_spool_usage (
    spool_id        INTEGER PRIMARY KEY NOT NULL,
    pending_weight  REAL    NOT NULL DEFAULT 0,
    last_updated_at TEXT    NOT NULL
)
"""


def _database_path(url: str) -> str:
    for prefix in ("sqlite://", "sqlite:"):
        if url.startswith(prefix):
            return url[len(prefix):]
    return url


def _parse_timestamp(text: str) -> datetime:
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class PendingUsage:
    spool_id: int
    pending_weight: float
    last_updated_at: datetime


class DbClient:
    """A single SQLite connection shared behind a lock."""

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection
        self._lock = asyncio.Lock()

    @classmethod
    async def connect(cls, path: str) -> DbClient:
        """Open (creating if missing) the database at ``path`` or a sqlite: URL."""
        connection = await aiosqlite.connect(_database_path(path), isolation_level=None)
        await connection.execute("PRAGMA auto_vacuum = INCREMENTAL")
        return cls(connection)

    async def close(self) -> None:
        await self._conn.close()

    async def migrate(self) -> None:
        """Create the tables this service needs."""
        async with self._lock:
            await self._conn.execute(_SCHEMA)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Exclusive use of the connection; each statement commits on its own."""
        async with self._lock:
            yield self._conn

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[aiosqlite.Connection]:
        """A transaction committed on normal exit and rolled back on error."""
        async with self._lock:
            await self._conn.execute("BEGIN")
            try:
                yield self._conn
            except BaseException:
                await self._conn.execute("ROLLBACK")
                raise
            await self._conn.execute("COMMIT")

    async def update_pending_spool_usage(
        self, conn: aiosqlite.Connection, spool_id: int, pending_weight: float
    ) -> None:
        """Add ``pending_weight`` to the spool's pending usage."""
        now = datetime.now(timezone.utc)
        await conn.execute(
            """
            INSERT INTO pending_spool_usage (spool_id, pending_weight, last_updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT (spool_id) DO UPDATE SET
                pending_weight = pending_weight + excluded.pending_weight,
                last_updated_at = excluded.last_updated_at
            """,
            (int(spool_id), float(pending_weight), now.isoformat()),
        )

    async def select_pending_spool_usage(
        self, conn: aiosqlite.Connection, spool_id: int
    ) -> float | None:
        async with conn.execute(
            "SELECT pending_weight FROM pending_spool_usage WHERE spool_id = ?",
            (int(spool_id),),
        ) as cursor:
            row = await cursor.fetchone()
        return None if row is None else float(row[0])

    async def list_pending_spool_usage(
        self, conn: aiosqlite.Connection
    ) -> list[PendingUsage]:
        """All spools with a positive pending weight."""
        async with conn.execute(
            "SELECT spool_id, pending_weight, last_updated_at "
            "FROM pending_spool_usage WHERE pending_weight > 0"
        ) as cursor:
            rows = await cursor.fetchall()
        return [
            PendingUsage(int(spool_id), float(weight), _parse_timestamp(updated))
            for spool_id, weight, updated in rows
        ]

    async def delete_pending_spool_usage(
        self, conn: aiosqlite.Connection, spool_id: int
    ) -> None:
        await conn.execute(
            "DELETE FROM pending_spool_usage WHERE spool_id = ?", (int(spool_id),)
        )

    async def reset_pending_spool_usage(
        self, conn: aiosqlite.Connection, spool_id: int
    ) -> None:
        await conn.execute(
            "UPDATE pending_spool_usage SET pending_weight = 0 WHERE spool_id = ?",
            (int(spool_id),),
        )