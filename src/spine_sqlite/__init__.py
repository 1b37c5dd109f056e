"""
spine-sqlite - SQLite backend for the spine data-access layer.

Turns an aiosqlite database handle into a managed asynchronous connection
with classified query results, statement-driven transactions and a strict
open/closed lifecycle.

Modules:
    driver          SQLiteDriver: validates the path, opens connections
    connection      SQLiteConnection: query / close / transactions
    classifier      Statement classification and result shaping
    engine          aiosqlite-backed engine handle
    protocols       Driver / Connection / EngineHandle contracts
    errors          Typed error hierarchy
    types           Result, state and value types
    settings        DriverSettings (pydantic-settings)
    logging         structlog configuration helpers
"""

from spine_sqlite.connection import SQLiteConnection
from spine_sqlite.driver import SQLiteDriver
from spine_sqlite.errors import (
    CLOSED_MESSAGE,
    BeginTransactionError,
    CloseConnectionError,
    CommitTransactionError,
    ConfigError,
    CreateConnectionError,
    DatabaseError,
    DriverError,
    ErrorCategory,
    ErrorContext,
    QueryError,
    RollbackTransactionError,
)
from spine_sqlite.protocols import Connection, Driver, EngineHandle
from spine_sqlite.settings import DriverSettings, get_settings
from spine_sqlite.types import (
    MEMORY,
    ConnectionState,
    QueryResult,
    QueryValue,
    Row,
    Rows,
    StatementKind,
    WriteOutcome,
)

__version__ = "0.1.0"

__all__ = [
    # Driver / connection
    "SQLiteDriver",
    "SQLiteConnection",
    # Protocols
    "Driver",
    "Connection",
    "EngineHandle",
    # Errors
    "CLOSED_MESSAGE",
    "ErrorCategory",
    "ErrorContext",
    "DriverError",
    "DatabaseError",
    "CreateConnectionError",
    "QueryError",
    "CloseConnectionError",
    "BeginTransactionError",
    "CommitTransactionError",
    "RollbackTransactionError",
    "ConfigError",
    # Settings
    "DriverSettings",
    "get_settings",
    # Types
    "MEMORY",
    "ConnectionState",
    "StatementKind",
    "WriteOutcome",
    "QueryValue",
    "QueryResult",
    "Row",
    "Rows",
]
