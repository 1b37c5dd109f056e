"""
Protocol definitions for the driver contract.

The surrounding data-access layer talks to every backend through the same
two shapes: a ``Driver`` that produces connections and a ``Connection``
that runs statements and drives transactions. The ``EngineHandle`` protocol
is the narrow seam between a connection and the embedded engine it wraps.

Architecture:
    ::

        protocols.py
        ├── EngineHandle : three engine primitives (all / run / close)
        ├── Driver       : connection factory contract
        └── Connection   : query + lifecycle + transaction contract

Tags:
    protocol, connection, driver, async, decoupling
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from spine_sqlite.types import QueryResult, QueryValue, Rows, WriteOutcome


@runtime_checkable
class EngineHandle(Protocol):
    """
    Native engine connection as seen by a :class:`Connection`.

    Each primitive hands one statement to the engine and suspends until the
    engine reports completion. Failures propagate as the engine's own
    exception type; the connection maps them to driver error kinds.
    """

    async def all(self, sql: str, params: tuple[QueryValue, ...] = ()) -> Rows:
        """Execute a read statement and return every row. ASYNC."""
        ...

    async def run(self, sql: str, params: tuple[QueryValue, ...] = ()) -> WriteOutcome:
        """Execute a write statement and report affected rows / last id. ASYNC."""
        ...

    async def close(self) -> None:
        """Release the native handle. ASYNC."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Managed connection contract shared by every backend."""

    @property
    def id(self) -> UUID: ...

    @property
    def driver(self) -> Driver: ...

    async def query(self, sql: str, values: Any = None) -> QueryResult:
        """Run one statement and return its classified result. ASYNC."""
        ...

    async def close(self) -> None:
        """Close the connection permanently. ASYNC."""
        ...

    async def begin_transaction(self) -> None:
        """Start a transaction. ASYNC."""
        ...

    async def commit(self) -> None:
        """Commit the current transaction. ASYNC."""
        ...

    async def rollback(self) -> None:
        """Roll back the current transaction. ASYNC."""
        ...


@runtime_checkable
class Driver(Protocol):
    """Connection factory contract shared by every backend."""

    @property
    def id(self) -> UUID: ...

    async def create(self) -> Connection:
        """Open and return a new connection. ASYNC."""
        ...


__all__ = [
    "EngineHandle",
    "Connection",
    "Driver",
]
