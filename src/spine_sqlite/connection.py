"""
Managed SQLite connection.

Manifesto:
    A connection wraps exactly one engine handle and gives every caller the
    same contract regardless of the engine underneath: one ``query``
    coroutine whose result shape is decided by the statement, three
    transaction coroutines that go through that same path, and a ``close``
    that permanently retires the object.

Architecture:
    ::

        SQLiteConnection.query(sql, values)
            │
            ├── state check          CLOSED → QueryError(CLOSED_MESSAGE)
            ├── validate_statement   bad sql / values → QueryError (VALIDATION)
            ├── classify(sql)
            │     READ   → engine.all(...)  → rows
            │     INSERT → engine.run(...)  → last id if 1 change, else None
            │     WRITE  → engine.run(...)  → None
            └── engine failure        → QueryError(engine message)

        State machine:  OPEN ──close() ok──▶ CLOSED   (terminal)
                          ▲        │
                          └────────┘ close() failed: stays OPEN

Features:
    - Explicit ``ConnectionState`` checked at the top of every operation
    - Post-close calls fail with the kind of the called operation and one
      fixed message
    - ``begin_transaction`` / ``commit`` / ``rollback`` submit
      ``BEGIN TRANSACTION;`` / ``COMMIT;`` / ``ROLLBACK;`` through ``query``
    - Async context manager closes the connection on exit; if the body
      raised, a close failure is logged and the body's exception propagates

Guardrails:
    ❌ DON'T: Issue overlapping queries on one connection before the
       previous one settles; ordering between them is not guaranteed here
    ✅ DO: Await each statement, or use one connection per concurrent task

    ❌ DON'T: Expect nesting or automatic rollback from transactions
    ✅ DO: Pair every ``begin_transaction()`` with one ``commit()`` or
       ``rollback()``

    ❌ DON'T: Construct ``SQLiteConnection`` directly
    ✅ DO: ``connection = await SQLiteDriver(path).create()``

Tags:
    connection, lifecycle, state-machine, transactions, sqlite, async

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from spine_sqlite.classifier import classify, shape_write, validate_statement
from spine_sqlite.errors import (
    CLOSED_MESSAGE,
    BeginTransactionError,
    CloseConnectionError,
    CommitTransactionError,
    DatabaseError,
    ErrorContext,
    QueryError,
    RollbackTransactionError,
)
from spine_sqlite.logging import get_logger
from spine_sqlite.protocols import EngineHandle
from spine_sqlite.types import ConnectionState, QueryResult, StatementKind

if TYPE_CHECKING:
    from spine_sqlite.driver import SQLiteDriver

logger = get_logger(__name__)

BEGIN_SQL = "BEGIN TRANSACTION;"
COMMIT_SQL = "COMMIT;"
ROLLBACK_SQL = "ROLLBACK;"


class SQLiteConnection:
    """
    One open SQLite database handle behind the shared connection contract.

    Created by :meth:`SQLiteDriver.create`; owns its engine handle
    exclusively and keeps a reference to the driver that made it.
    """

    def __init__(self, driver: SQLiteDriver, engine: EngineHandle):
        self._id = uuid4()
        self._driver = driver
        self._engine: EngineHandle | None = engine
        self._state = ConnectionState.OPEN

    # -- identity / state --------------------------------------------------

    @property
    def id(self) -> UUID:
        """Unique identity of this connection."""
        return self._id

    @property
    def driver(self) -> SQLiteDriver:
        """The driver that created this connection."""
        return self._driver

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._state is ConnectionState.CLOSED

    def _context(self, operation: str, sql: str | None = None) -> ErrorContext:
        return ErrorContext(
            operation=operation,
            sql=sql,
            path=self._driver.path,
            connection_id=str(self._id),
            driver_id=str(self._driver.id),
        )

    def _ensure_open(self, error_cls: type[DatabaseError], operation: str) -> EngineHandle:
        if self._state is ConnectionState.CLOSED or self._engine is None:
            raise error_cls(CLOSED_MESSAGE, context=self._context(operation))
        return self._engine

    # -- statements --------------------------------------------------------

    async def query(self, sql: str, values: Any = None) -> QueryResult:
        """
        Run one statement and return its classified result.

        Args:
            sql: Statement text.
            values: Optional list/tuple of ``str`` / ``int`` / ``float`` bind values.

        Returns:
            ``list[dict]`` for ``SELECT``; the inserted row id for an
            ``INSERT`` that changed exactly one row; ``None`` otherwise.

        Raises:
            QueryError: Invalid input, engine failure, or closed connection.
        """
        engine = self._ensure_open(QueryError, "query")
        params = validate_statement(sql, values)
        kind = classify(sql)

        try:
            if kind is StatementKind.READ:
                result: QueryResult = await engine.all(sql, params)
            else:
                result = shape_write(kind, await engine.run(sql, params))
        except Exception as e:
            logger.warning(
                "query_failed",
                connection_id=str(self._id),
                kind=kind.value,
                error=str(e),
            )
            raise QueryError(str(e), context=self._context("query", sql), cause=e) from e

        logger.debug(
            "query_executed",
            connection_id=str(self._id),
            kind=kind.value,
            params=len(params),
        )
        return result

    # -- lifecycle ---------------------------------------------------------

    async def close(self) -> None:
        """
        Close the engine handle and retire this connection.

        On failure the connection stays open and ``close`` may be retried.
        On success every later call to any operation raises its own error
        kind with :data:`CLOSED_MESSAGE`.

        Raises:
            CloseConnectionError: The engine failed to close, or the
                connection is already closed.
        """
        engine = self._ensure_open(CloseConnectionError, "close")

        try:
            await engine.close()
        except Exception as e:
            logger.warning("connection_close_failed", connection_id=str(self._id), error=str(e))
            raise CloseConnectionError(str(e), context=self._context("close"), cause=e) from e

        self._engine = None
        self._state = ConnectionState.CLOSED
        logger.info("connection_closed", connection_id=str(self._id), path=self._driver.path)

    async def __aenter__(self) -> SQLiteConnection:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._state is not ConnectionState.OPEN:
            return
        if exc_type is None:
            await self.close()
            return
        # The body's exception wins; a close failure is only logged.
        try:
            await self.close()
        except CloseConnectionError as e:
            logger.warning(
                "connection_close_on_error_failed",
                connection_id=str(self._id),
                error=e.message,
                body_error=repr(exc_val),
            )

    # -- transactions ------------------------------------------------------

    async def _transaction_statement(
        self, sql: str, error_cls: type[DatabaseError], operation: str
    ) -> None:
        self._ensure_open(error_cls, operation)
        try:
            await self.query(sql)
        except QueryError as e:
            raise error_cls(e.message, context=self._context(operation, sql), cause=e) from e
        logger.debug(f"transaction_{operation}", connection_id=str(self._id))

    async def begin_transaction(self) -> None:
        """Submit ``BEGIN TRANSACTION;``.

        Raises:
            BeginTransactionError: The statement failed or the connection is closed.
        """
        await self._transaction_statement(BEGIN_SQL, BeginTransactionError, "begin")

    async def commit(self) -> None:
        """Submit ``COMMIT;``.

        Raises:
            CommitTransactionError: The statement failed or the connection is closed.
        """
        await self._transaction_statement(COMMIT_SQL, CommitTransactionError, "commit")

    async def rollback(self) -> None:
        """Submit ``ROLLBACK;``.

        Raises:
            RollbackTransactionError: The statement failed or the connection is closed.
        """
        await self._transaction_statement(ROLLBACK_SQL, RollbackTransactionError, "rollback")

    def __repr__(self) -> str:
        return (
            f"SQLiteConnection(id={self._id}, path={self._driver.path!r}, "
            f"state={self._state.value})"
        )


__all__ = [
    "SQLiteConnection",
    "BEGIN_SQL",
    "COMMIT_SQL",
    "ROLLBACK_SQL",
]
