"""
Structured error types for the SQLite driver.

Every failure this package surfaces is a typed ``DriverError`` carrying a
category, structured context and the chained underlying exception. The six
database error kinds map one-to-one onto the public operations so callers
can pattern-match on the kind while still reading the raw engine message.

Manifesto:
    - **One kind per operation:** create, query, close, begin, commit and
      rollback each fail with their own exception class
    - **Verbatim messages:** the engine's message is passed through unchanged
    - **Error chaining:** the original exception is kept as ``cause``
    - **No swallowing:** nothing here is retried or suppressed internally

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        DriverError                            │
        │               (category, context, cause)                      │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  DatabaseError (DATABASE)               ConfigError (CONFIG)  │
        │       │                                                       │
        │  CreateConnectionError    QueryError    CloseConnectionError  │
        │  BeginTransactionError    CommitTransactionError              │
        │  RollbackTransactionError                                     │
        └──────────────────────────────────────────────────────────────┘

Examples:
    Matching on kind and inspecting the cause:

    >>> try:
    ...     await connection.query("SELEC 1")
    ... except QueryError as e:
    ...     e.message
    'near "SELEC": syntax error'

    Post-close failures share one message but keep their kind:

    >>> await connection.close()
    >>> await connection.commit()
    Traceback (most recent call last):
    ...
    CommitTransactionError: Cannot perform further operations once the connection is closed

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from driver code
    ✅ DO: Raise the kind matching the operation that failed

    ❌ DON'T: Rewrite the engine message
    ✅ DO: Pass it verbatim and chain the original as ``cause=``

Tags:
    error-handling, exception-hierarchy, error-context, sqlite, driver

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

CLOSED_MESSAGE = "Cannot perform further operations once the connection is closed"


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    DATABASE = "DATABASE"         # Engine open/execute/close failures
    VALIDATION = "VALIDATION"     # Bad SQL text, bad bind values, bad path
    CONFIG = "CONFIG"             # Invalid settings


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a driver error.

    Only the fields relevant to the failing operation are set; ``to_dict()``
    drops the rest so log lines stay small.

    Attributes:
        operation: Public operation that failed (``query``, ``close``, ...)
        sql: Statement text, when a statement was involved
        path: Database path of the owning driver
        connection_id: Identity of the connection, as a string
        driver_id: Identity of the driver, as a string
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    sql: str | None = None
    path: str | None = None
    connection_id: str | None = None
    driver_id: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "sql", "path", "connection_id", "driver_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DriverError(Exception):
    """
    Base exception for all driver errors.

    Subclasses set ``default_category``; callers may override it per
    instance (input-validation failures use ``VALIDATION`` while keeping
    their operation kind).
    """

    default_category: ErrorCategory = ErrorCategory.DATABASE

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DriverError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("no such table: t").with_context(sql=sql)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(DriverError):
    """Failure of a database operation."""

    default_category = ErrorCategory.DATABASE


class CreateConnectionError(DatabaseError):
    """Opening or initializing a connection failed, or the path is invalid."""

    pass


class QueryError(DatabaseError):
    """SQL statement was rejected, failed in the engine, or hit a closed connection."""

    pass


class CloseConnectionError(DatabaseError):
    """Closing the engine handle failed, or the connection is already closed."""

    pass


class BeginTransactionError(DatabaseError):
    """``BEGIN TRANSACTION`` failed."""

    pass


class CommitTransactionError(DatabaseError):
    """``COMMIT`` failed."""

    pass


class RollbackTransactionError(DatabaseError):
    """``ROLLBACK`` failed."""

    pass


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(DriverError):
    """Invalid driver configuration."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "CLOSED_MESSAGE",
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "DriverError",
    # Database
    "DatabaseError",
    "CreateConnectionError",
    "QueryError",
    "CloseConnectionError",
    "BeginTransactionError",
    "CommitTransactionError",
    "RollbackTransactionError",
    # Config
    "ConfigError",
]
