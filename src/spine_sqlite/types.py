"""Value types shared by the driver, connection and classifier."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

MEMORY = ":memory:"

QueryValue = Union[str, int, float]
Row = dict[str, Any]
Rows = list[Row]
QueryResult = Union[Rows, int, None]


class ConnectionState(str, Enum):
    """Lifecycle state of a connection. ``CLOSED`` is terminal."""

    OPEN = "open"
    CLOSED = "closed"


class StatementKind(str, Enum):
    """How a statement's result is shaped."""

    READ = "read"        # rows
    WRITE = "write"      # no payload
    INSERT = "insert"    # identity for single-row inserts, else no payload


@dataclass(frozen=True)
class WriteOutcome:
    """What the engine reports after a write statement."""

    changes: int
    """Rows affected by the statement."""

    last_id: int | None
    """Row id of the most recent successful insert on the handle."""


__all__ = [
    "MEMORY",
    "QueryValue",
    "Row",
    "Rows",
    "QueryResult",
    "ConnectionState",
    "StatementKind",
    "WriteOutcome",
]
