"""End-to-end tests against real SQLite databases through aiosqlite."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from spine_sqlite import (
    CLOSED_MESSAGE,
    BeginTransactionError,
    CloseConnectionError,
    CommitTransactionError,
    CreateConnectionError,
    QueryError,
    SQLiteDriver,
)

USERS_DDL = "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL)"


class FailingFirstClose:
    """Native sqlite3 connection whose first close() fails."""

    def __init__(self, native: sqlite3.Connection):
        self._native = native
        self.close_calls = 0
        self.closed = False

    def __getattr__(self, name):
        return getattr(self._native, name)

    def close(self) -> None:
        self.close_calls += 1
        if self.close_calls == 1:
            raise sqlite3.OperationalError("unable to close due to unfinalized statements")
        self._native.close()
        self.closed = True


class TestMemoryDatabase:
    @pytest.mark.asyncio
    async def test_result_shapes(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            assert await conn.query(USERS_DDL) is None
            assert await conn.query("INSERT INTO users (name) VALUES (?)", ["simon"]) == 1
            assert await conn.query("INSERT INTO users (name) VALUES (?)", ["ana"]) == 2
            assert await conn.query("INSERT INTO users (name) VALUES (?), (?)", ["a", "b"]) is None
            assert await conn.query("UPDATE users SET name = ? WHERE id = ?", ["sam", 1]) is None
            assert await conn.query("DELETE FROM users WHERE id = ?", [4]) is None

            rows = await conn.query("  select id, name from users order by id")
            assert rows == [
                {"id": 1, "name": "sam"},
                {"id": 2, "name": "ana"},
                {"id": 3, "name": "a"},
            ]

    @pytest.mark.asyncio
    async def test_select_with_no_rows_is_empty_list(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            await conn.query(USERS_DDL)
            assert await conn.query("SELECT * FROM users WHERE id = ?", [99]) == []

    @pytest.mark.asyncio
    async def test_insert_matching_nothing_returns_none(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            await conn.query(USERS_DDL)
            await conn.query("CREATE TABLE archive (name TEXT)")
            assert await conn.query("INSERT INTO archive SELECT name FROM users") is None

    @pytest.mark.asyncio
    async def test_foreign_keys_enforced(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            await conn.query("CREATE TABLE parent (id INTEGER PRIMARY KEY)")
            await conn.query(
                "CREATE TABLE child (id INTEGER PRIMARY KEY, parent_id INTEGER REFERENCES parent(id))"
            )
            with pytest.raises(QueryError, match="FOREIGN KEY constraint failed"):
                await conn.query("INSERT INTO child (parent_id) VALUES (?)", [42])

    @pytest.mark.asyncio
    async def test_engine_error_message_is_verbatim(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            with pytest.raises(QueryError, match="no such table: missing"):
                await conn.query("SELECT * FROM missing")

    @pytest.mark.asyncio
    async def test_only_single_statements_are_accepted(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            with pytest.raises(QueryError, match="one statement at a time"):
                await conn.query("SELECT 1 AS a; SELECT 2 AS b")

    @pytest.mark.asyncio
    async def test_memory_databases_are_independent(self):
        driver = SQLiteDriver(":memory:")
        async with await driver.create() as first, await driver.create() as second:
            await first.query(USERS_DDL)
            with pytest.raises(QueryError, match="no such table"):
                await second.query("SELECT * FROM users")


class TestTransactions:
    @pytest.mark.asyncio
    async def test_rollback_discards_changes(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            await conn.query(USERS_DDL)
            await conn.begin_transaction()
            await conn.query("INSERT INTO users (name) VALUES (?)", ["simon"])
            await conn.rollback()
            assert await conn.query("SELECT * FROM users") == []

    @pytest.mark.asyncio
    async def test_commit_keeps_changes(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            await conn.query(USERS_DDL)
            await conn.begin_transaction()
            await conn.query("INSERT INTO users (name) VALUES (?)", ["simon"])
            await conn.commit()
            assert await conn.query("SELECT name FROM users") == [{"name": "simon"}]

    @pytest.mark.asyncio
    async def test_nested_begin_fails(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            await conn.begin_transaction()
            with pytest.raises(BeginTransactionError, match="within a transaction"):
                await conn.begin_transaction()
            await conn.rollback()

    @pytest.mark.asyncio
    async def test_commit_without_transaction_fails(self):
        async with await SQLiteDriver(":memory:").create() as conn:
            with pytest.raises(CommitTransactionError, match="no transaction is active"):
                await conn.commit()


class TestFileDatabase:
    @pytest.mark.asyncio
    async def test_data_persists_across_connections(self, tmp_path: Path):
        driver = SQLiteDriver(tmp_path / "app.sqlite")

        conn = await driver.create()
        await conn.query(USERS_DDL)
        assert await conn.query("INSERT INTO users (name) VALUES (?)", ["simon"]) == 1
        await conn.close()

        async with await driver.create() as conn:
            assert await conn.query("SELECT name FROM users") == [{"name": "simon"}]

    @pytest.mark.asyncio
    async def test_unopenable_path_raises_create_connection_error(self, tmp_path: Path):
        driver = SQLiteDriver(str(tmp_path / "missing" / "dir" / "app.sqlite"))
        with pytest.raises(CreateConnectionError, match="unable to open database file"):
            await driver.create()

    @pytest.mark.asyncio
    async def test_closed_connection_is_poisoned(self, tmp_path: Path):
        conn = await SQLiteDriver(tmp_path / "app.sqlite").create()
        await conn.close()
        with pytest.raises(QueryError, match=CLOSED_MESSAGE):
            await conn.query("SELECT 1")


class TestCloseFailure:
    @pytest.mark.asyncio
    async def test_failed_close_keeps_connection_usable(self):
        conn = await SQLiteDriver(":memory:").create()
        aio_conn = conn._engine._conn
        native = FailingFirstClose(aio_conn._connection)
        aio_conn._connection = native

        with pytest.raises(CloseConnectionError, match="unfinalized statements"):
            await conn.close()

        assert not conn.is_closed
        assert await conn.query("SELECT 1 AS one") == [{"one": 1}]

        await conn.close()
        assert native.closed
        assert conn.is_closed
        with pytest.raises(QueryError, match=CLOSED_MESSAGE):
            await conn.query("SELECT 1")
