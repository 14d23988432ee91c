"""Connection contract used by StatementBuilder and TableSchema.

Any object satisfying SqlConnection can be handed to the builder or to a
TableSchema; MySQLConnection is the PyMySQL-backed implementation and tests
use an in-memory double.
"""

from __future__ import annotations

from typing import Any, ContextManager, Dict, List, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class PreparedStatement(Protocol):
    """A statement prepared on a connection, ready for binding."""

    @property
    def affected_rows(self) -> int:
        """Rows affected by the last execute() call."""
        ...

    def bind(self, types: str, params: Sequence[Any]) -> None:
        """Bind positional parameters; ``types`` holds one tag per parameter."""
        ...

    def execute(self) -> bool:
        """Execute with the bound parameters."""
        ...

    def fetch_all(self) -> List[Dict[str, Any]]:
        """Fetch every row of the result set as a column->value mapping."""
        ...

    def close(self) -> None:
        """Release the statement."""
        ...


@runtime_checkable
class SqlConnection(Protocol):
    """Lazily connecting database handle."""

    @property
    def last_error(self) -> Optional[str]:
        """Driver diagnostic text of the most recent failure."""
        ...

    def connect(self) -> bool:
        ...

    def disconnect(self) -> None:
        ...

    def session(self) -> ContextManager["SqlConnection"]:
        """Connect on entry and disconnect on every exit path."""
        ...

    def prepare(self, sql: str) -> Optional[PreparedStatement]:
        ...

    def query(self, sql: str) -> Optional[List[Dict[str, Any]]]:
        ...

    def last_insert_id(self) -> int:
        ...

    def begin_transaction(self) -> bool:
        ...

    def commit(self) -> bool:
        ...

    def rollback(self) -> bool:
        ...

    def is_alive(self) -> bool:
        ...
