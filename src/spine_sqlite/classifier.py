"""Statement classification and result shaping.

Pure functions, no I/O. The connection asks :func:`classify` which engine
primitive to use and asks :func:`shape_write` what a write statement should
resolve with:

==============  ==================  ==========================================
Leading word    Primitive           Result
==============  ==================  ==========================================
``SELECT``      read                rows (``list[dict]``)
``INSERT``      write               last inserted id if exactly one row
                                    changed, otherwise ``None``
anything else   write               ``None``
==============  ==================  ==========================================

Matching is case-insensitive and tolerates leading whitespace. A bulk
insert never returns an id: the engine's last id only describes the final
row, which would be a misleading answer for the whole statement.
"""

from __future__ import annotations

import re
from typing import Any

from spine_sqlite.errors import ErrorCategory, QueryError
from spine_sqlite.types import QueryValue, StatementKind, WriteOutcome

_SELECT_RE = re.compile(r"^\s*SELECT", re.IGNORECASE)
_INSERT_RE = re.compile(r"^\s*INSERT", re.IGNORECASE)


def classify(sql: str) -> StatementKind:
    """Return the result-shaping strategy for ``sql``."""
    if _SELECT_RE.match(sql):
        return StatementKind.READ
    if _INSERT_RE.match(sql):
        return StatementKind.INSERT
    return StatementKind.WRITE


def shape_write(kind: StatementKind, outcome: WriteOutcome) -> int | None:
    """Reduce a write outcome to the value ``query`` resolves with."""
    if kind is StatementKind.INSERT and outcome.changes == 1:
        return outcome.last_id
    return None


def _is_query_value(value: Any) -> bool:
    # bool is an int subclass but is not a valid bind value here
    if isinstance(value, bool):
        return False
    return isinstance(value, (str, int, float))


def validate_statement(sql: Any, values: Any = None) -> tuple[QueryValue, ...]:
    """Check a statement submission and return its bind tuple.

    Raises:
        QueryError: ``sql`` is not a string, ``values`` is not a list/tuple,
            or an element of ``values`` is not a string or number.
    """
    if not isinstance(sql, str):
        raise QueryError(f"Invalid query: {sql!s}", category=ErrorCategory.VALIDATION)

    if values is None:
        return ()

    if not isinstance(values, (list, tuple)):
        raise QueryError(
            f"Invalid query values: {values!s}",
            category=ErrorCategory.VALIDATION,
        ).with_context(sql=sql)

    for value in values:
        if not _is_query_value(value):
            raise QueryError(
                f"Invalid query value: {value!s}",
                category=ErrorCategory.VALIDATION,
            ).with_context(sql=sql)

    return tuple(values)


__all__ = [
    "classify",
    "shape_write",
    "validate_statement",
]
