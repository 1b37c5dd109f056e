"""SQLite driver: the factory that turns a path into managed connections.

Usage::

    from spine_sqlite import SQLiteDriver

    driver = SQLiteDriver("./database.sqlite")   # file-based, persistent
    driver = SQLiteDriver(":memory:")            # in-memory, lost on close

    connection = await driver.create()
    rows = await connection.query("SELECT * FROM users WHERE id = ?", [1])
    await connection.close()

A driver is immutable and can create any number of independent
connections. Each ``create()`` opens one new engine handle, enables foreign
key enforcement on it and wraps it in a :class:`SQLiteConnection`.
"""

from __future__ import annotations

import os
from typing import Any
from uuid import UUID, uuid4

from spine_sqlite import engine as _engine
from spine_sqlite.connection import SQLiteConnection
from spine_sqlite.errors import CreateConnectionError, ErrorCategory, ErrorContext
from spine_sqlite.logging import get_logger
from spine_sqlite.settings import DriverSettings, get_settings
from spine_sqlite.types import MEMORY

logger = get_logger(__name__)

FOREIGN_KEYS_SQL = "PRAGMA foreign_keys = ON"


class SQLiteDriver:
    """
    Creates SQLite connections for one database path.

    Args:
        path: Database file path like ``./database.sqlite`` (``str`` or
            ``os.PathLike``), or ``":memory:"`` for an in-memory database.
        timeout: Seconds the engine waits on a locked database.

    Raises:
        CreateConnectionError: ``path`` is not a string or path-like object.
            Raised here, before any I/O.
    """

    def __init__(self, path: Any, *, timeout: float = 5.0):
        if isinstance(path, os.PathLike):
            path = os.fspath(path)
        if not isinstance(path, str):
            raise CreateConnectionError(
                f"Invalid SQLite path: {path!s}",
                category=ErrorCategory.VALIDATION,
            )

        self._path = path
        self._timeout = timeout
        self._id = uuid4()

    @classmethod
    def from_settings(cls, settings: DriverSettings | None = None) -> SQLiteDriver:
        """Build a driver from :class:`DriverSettings` (cached env settings by default)."""
        settings = settings or get_settings()
        return cls(settings.path, timeout=settings.timeout)

    @property
    def id(self) -> UUID:
        """Unique identity of this driver."""
        return self._id

    @property
    def path(self) -> str:
        return self._path

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def is_memory(self) -> bool:
        """Whether connections from this driver are non-persistent."""
        return self._path == MEMORY

    def _context(self) -> ErrorContext:
        return ErrorContext(operation="create", path=self._path, driver_id=str(self._id))

    async def create(self) -> SQLiteConnection:
        """
        Open a new connection.

        Raises:
            CreateConnectionError: The database could not be opened or the
                foreign key pragma failed. In the latter case the handle is
                closed before the error is raised.
        """
        try:
            handle = await _engine.open_engine(self._path, timeout=self._timeout)
        except Exception as e:
            logger.warning("connection_open_failed", path=self._path, stage="open", error=str(e))
            raise CreateConnectionError(str(e), context=self._context(), cause=e) from e

        try:
            await handle.run(FOREIGN_KEYS_SQL)
        except Exception as e:
            logger.warning("connection_open_failed", path=self._path, stage="init", error=str(e))
            try:
                await handle.close()
            except Exception as close_error:
                # the init failure is the one reported to the caller
                logger.warning("engine_close_failed", path=self._path, error=str(close_error))
            raise CreateConnectionError(str(e), context=self._context(), cause=e) from e

        connection = SQLiteConnection(self, handle)
        logger.info(
            "connection_opened",
            path=self._path,
            driver_id=str(self._id),
            connection_id=str(connection.id),
        )
        return connection

    def __repr__(self) -> str:
        return f"SQLiteDriver(path={self._path!r}, id={self._id})"


__all__ = [
    "SQLiteDriver",
    "FOREIGN_KEYS_SQL",
]
