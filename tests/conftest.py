"""Pytest configuration: env isolation, the opt-in MySQL suite and a fake connection.

.sqltk_env is loaded FIRST with override=True so that a developer's local
MySQL credentials for the opt-in suite never come from the system environment.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

_SQLTK_ENV_FILE = Path(__file__).parent.parent / ".sqltk_env"
if _SQLTK_ENV_FILE.exists():
    load_dotenv(_SQLTK_ENV_FILE, override=True)

import os
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Generator, List, Optional, Sequence, Tuple

import pytest

from sql_table_kit.config import get_settings
from sql_table_kit.io.connectors.exceptions import StatementError

MYSQL_OPTION = "run_mysql_tests"
MYSQL_MARK = "mysql_suite"
MYSQL_ENV = "RUN_MYSQL_TESTS"


def _validate_test_database(db_name: Optional[str]) -> bool:
    """Ensure destructive suites only run against a test database.

    Raises:
        RuntimeError: If the database name doesn't look like a test database
    """
    if os.getenv("SQLTK_SKIP_DB_VALIDATION") == "1":
        return True

    if not db_name:
        raise RuntimeError(
            "Refusing to run tests against empty/missing database name. "
            "Test databases must contain one of: test, tmp, dev, local, sandbox."
        )

    if not re.search(r"(test|tmp|dev|local|sandbox)", db_name, re.IGNORECASE):
        raise RuntimeError(
            f"Refusing to run tests against non-test database: {db_name}. "
            "Test databases must contain one of: test, tmp, dev, local, sandbox. "
            "Override with SQLTK_SKIP_DB_VALIDATION=1 (DANGEROUS)."
        )
    return True


def _env_enabled(name: str) -> bool:
    """Return True when the opt-in environment flag is set to '1'."""
    return os.getenv(name) == "1"


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-mysql-tests",
        action="store_true",
        dest=MYSQL_OPTION,
        default=_env_enabled(MYSQL_ENV),
        help="Run the suite against a live MySQL server "
        "(set RUN_MYSQL_TESTS=1 or pass --run-mysql-tests).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", f"{MYSQL_MARK}: needs a live MySQL server (opt-in)"
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip the opt-in MySQL suite unless its flag is enabled."""
    if config.getoption(MYSQL_OPTION):
        return

    skip_mysql = pytest.mark.skip(
        reason="Set RUN_MYSQL_TESTS=1 or pass --run-mysql-tests to run the MySQL suite."
    )
    for item in items:
        if MYSQL_MARK in item.keywords:
            item.add_marker(skip_mysql)


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Reload settings for every test so monkeypatched env vars apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mysql_test_database() -> str:
    """Name of the live MySQL database used by the opt-in suite."""
    db_name = get_settings().mysql_database
    _validate_test_database(db_name)
    return db_name


# ============================================================================
# In-memory connection double
# ============================================================================


@dataclass
class ExecutedStatement:
    sql: str
    types: str
    params: Tuple[Any, ...]


class FakePreparedStatement:
    """Prepared statement that records bindings and serves scripted rows."""

    def __init__(self, connection: "FakeConnection", sql: str):
        self._connection = connection
        self.sql = sql
        self.types = ""
        self.params: Tuple[Any, ...] = ()
        self.closed = False
        self._rows: List[Dict[str, Any]] = []
        self._affected_rows = 0

    @property
    def affected_rows(self) -> int:
        return self._affected_rows

    def bind(self, types: str, params: Sequence[Any]) -> None:
        self.types = types
        self.params = tuple(params)

    def execute(self) -> bool:
        conn = self._connection
        conn.executed.append(ExecutedStatement(self.sql, self.types, self.params))
        for fragment in conn.execute_failures:
            if fragment in self.sql:
                raise StatementError(f"Failed to execute statement: {fragment}", sql=self.sql)
        self._rows = [dict(row) for row in conn.rows_for(self.sql)]
        self._affected_rows = conn.affected_rows
        return not any(fragment in self.sql for fragment in conn.false_executions)

    def fetch_all(self) -> List[Dict[str, Any]]:
        return list(self._rows)

    def close(self) -> None:
        self.closed = True
        self._connection.closed_statements += 1


class FakeConnection:
    """SqlConnection double.

    ``results`` maps SQL fragments to the rows returned by any statement
    containing the fragment (first match wins). ``prepare_failures`` and
    ``execute_failures`` hold fragments that make prepare() return None or
    execute() raise. ``false_executions`` fragments make execute() return
    False while leaving the scripted rows fetchable.
    """

    def __init__(
        self,
        results: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        prepare_failures: Sequence[str] = (),
        execute_failures: Sequence[str] = (),
        false_executions: Sequence[str] = (),
        insert_id: int = 0,
        affected_rows: int = 1,
    ):
        self.results = dict(results or {})
        self.prepare_failures = list(prepare_failures)
        self.execute_failures = list(execute_failures)
        self.false_executions = list(false_executions)
        self.insert_id = insert_id
        self.affected_rows = affected_rows
        self.connected = False
        self.session_depth = 0
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.closed_statements = 0
        self.prepared: List[str] = []
        self.executed: List[ExecutedStatement] = []
        self._last_error: Optional[str] = None

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def rows_for(self, sql: str) -> List[Dict[str, Any]]:
        for fragment, rows in self.results.items():
            if fragment in sql:
                return rows
        return []

    def connect(self) -> bool:
        if not self.connected:
            self.connect_calls += 1
        self.connected = True
        return True

    def disconnect(self) -> None:
        if self.connected:
            self.disconnect_calls += 1
        self.connected = False

    @contextmanager
    def session(self) -> Generator["FakeConnection", None, None]:
        self.connect()
        self.session_depth += 1
        try:
            yield self
        finally:
            self.session_depth -= 1
            if self.session_depth == 0:
                self.disconnect()

    def prepare(self, sql: str) -> Optional[FakePreparedStatement]:
        self.prepared.append(sql)
        for fragment in self.prepare_failures:
            if fragment in sql:
                self._last_error = f"You have an error in your SQL syntax near '{fragment}'"
                return None
        return FakePreparedStatement(self, sql)

    def query(self, sql: str) -> Optional[List[Dict[str, Any]]]:
        return self.rows_for(sql)

    def last_insert_id(self) -> int:
        return self.insert_id

    def begin_transaction(self) -> bool:
        return True

    def commit(self) -> bool:
        return True

    def rollback(self) -> bool:
        return True

    def is_alive(self) -> bool:
        return self.connected


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def make_connection():
    """Factory for FakeConnection with scripted results/failures."""

    def _make(**kwargs: Any) -> FakeConnection:
        return FakeConnection(**kwargs)

    return _make
