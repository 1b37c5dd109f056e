"""SQLite engine handle backed by aiosqlite.

aiosqlite runs the stdlib ``sqlite3`` connection on a dedicated worker
thread and hands each call's result back to the event loop, so awaiting a
primitive is exactly "statement handed to the engine, waiting for its
completion". Calls on one handle are processed by that thread one at a
time, in submission order.
"""

from __future__ import annotations

from typing import Any

import aiosqlite

from spine_sqlite.logging import get_logger
from spine_sqlite.types import QueryValue, Rows, WriteOutcome

logger = get_logger(__name__)


class AiosqliteEngine:
    """Adapter: ``aiosqlite.Connection`` → ``EngineHandle`` protocol."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn
        self._conn.row_factory = aiosqlite.Row

    async def all(self, sql: str, params: tuple[QueryValue, ...] = ()) -> Rows:
        async with self._conn.execute(sql, params) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def run(self, sql: str, params: tuple[QueryValue, ...] = ()) -> WriteOutcome:
        async with self._conn.execute(sql, params) as cursor:
            return WriteOutcome(changes=cursor.rowcount, last_id=cursor.lastrowid)

    async def close(self) -> None:
        """Close the native handle, then stop the worker thread.

        ``aiosqlite.Connection.close`` drops its handle and thread even when
        the native close raises. Closing natively first keeps the handle and
        thread usable on failure, so the caller can keep querying or retry.
        """
        native = self._conn._conn
        await self._conn._execute(native.close)
        await self._conn.close()

    def __repr__(self) -> str:
        return f"AiosqliteEngine({self._conn!r})"


async def open_engine(path: str, *, timeout: float = 5.0, **kwargs: Any) -> AiosqliteEngine:
    """Open a SQLite database and wrap it as an engine handle.

    The connection runs in autocommit mode (``isolation_level=None``) so that
    ``BEGIN TRANSACTION;`` / ``COMMIT;`` / ``ROLLBACK;`` submitted as plain
    statements control transactions; the stdlib module would otherwise open
    implicit transactions of its own.

    Raises:
        aiosqlite.Error: The database could not be opened.
    """
    uri = path.startswith("file:")
    conn = await aiosqlite.connect(
        path,
        timeout=timeout,
        isolation_level=None,
        uri=uri,
        **kwargs,
    )
    logger.debug("engine_opened", path=path, uri=uri)
    return AiosqliteEngine(conn)


__all__ = [
    "AiosqliteEngine",
    "open_engine",
]
