"""
Shared pytest fixtures and configuration for spine-sqlite tests.

This module provides:
- A fake engine handle that records every statement it is handed
- Driver / connection fixtures wired to that fake engine
- Settings and structlog cleanup for test isolation
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Generator

import pytest
import structlog

from spine_sqlite.connection import SQLiteConnection
from spine_sqlite.driver import SQLiteDriver
from spine_sqlite.settings import clear_settings_cache
from spine_sqlite.types import QueryValue, Rows, WriteOutcome


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(str(item.path)).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache_fixture() -> Generator[None, None, None]:
    """Drop cached settings before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_structlog_fixture() -> Generator[None, None, None]:
    """Restore structlog defaults after tests that call configure_logging."""
    yield
    structlog.reset_defaults()


# =============================================================================
# Fake Engine
# =============================================================================


class FakeEngine:
    """
    In-memory stand-in for an engine handle.

    Records ``(primitive, sql, params)`` for every call. Set ``failures``
    to make a primitive raise, e.g. ``engine.failures["run"] = Exception("ops")``.
    """

    def __init__(
        self,
        rows: Rows | None = None,
        outcome: WriteOutcome | None = None,
    ) -> None:
        self.rows: Rows = rows if rows is not None else []
        self.outcome = outcome or WriteOutcome(changes=0, last_id=None)
        self.calls: list[tuple[str, str | None, tuple[QueryValue, ...]]] = []
        self.failures: dict[str, BaseException] = {}
        self.closed = False

    def _maybe_fail(self, primitive: str) -> None:
        if primitive in self.failures:
            raise self.failures[primitive]

    async def all(self, sql: str, params: tuple[QueryValue, ...] = ()) -> Rows:
        self.calls.append(("all", sql, params))
        self._maybe_fail("all")
        return self.rows

    async def run(self, sql: str, params: tuple[QueryValue, ...] = ()) -> WriteOutcome:
        self.calls.append(("run", sql, params))
        self._maybe_fail("run")
        return self.outcome

    async def close(self) -> None:
        self.calls.append(("close", None, ()))
        self._maybe_fail("close")
        self.closed = True

    @property
    def statements(self) -> list[Any]:
        """Statements submitted through all/run, in order."""
        return [sql for primitive, sql, _ in self.calls if primitive != "close"]


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def driver() -> SQLiteDriver:
    return SQLiteDriver(":memory:")


@pytest.fixture
def connection(driver: SQLiteDriver, fake_engine: FakeEngine) -> SQLiteConnection:
    """Connection bound to the fake engine (bypasses ``driver.create()``)."""
    return SQLiteConnection(driver, fake_engine)


@pytest.fixture
def make_engine() -> type[FakeEngine]:
    """The ``FakeEngine`` class, for tests that need several engines."""
    return FakeEngine
