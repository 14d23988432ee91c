"""
Schema-aware table gateway.

A TableSchema reads the structure of one table from the catalog when it is
created and keeps it as a snapshot: later registry edits are in-memory only
and the live database is consulted again only through reload().

CRUD methods never raise. A failure is logged, kept in ``last_error`` and
turned into a sentinel result (None for insert, [] for select, False for
update and delete), so callers check return values. Introspection failures
are handled the same way: whatever metadata was read before the failure is
kept and the error is available from ``load_error``.

Usage:
    conn = MySQLConnection(database="shop")
    users = TableSchema("users", conn)
    new_id = users.insert({"name": "Ann", "age": 31})
    rows = users.select(["id", "name"], {"age": 31}, order_by={"name": "asc"})
    users.update({"age": 32}, {"id": new_id})
    users.delete({"id": new_id})
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from sql_table_kit.config import get_settings
from sql_table_kit.infrastructure.sql.operations.mutation import (
    BoundStatement,
    MutationBuilder,
)
from sql_table_kit.infrastructure.sql.operations.select import StatementBuilder
from sql_table_kit.io.connectors.exceptions import (
    CrudOperation,
    DataAccessError,
    IntrospectionError,
    OperationError,
    StatementError,
)
from sql_table_kit.io.connectors.protocols import SqlConnection
from sql_table_kit.utils.logging import get_logger

from .catalog import (
    column_query,
    index_query,
    parse_column,
    parse_indexes,
    parse_table_comment,
    table_comment_query,
)
from .models import ColumnMeta, IndexMeta

logger = get_logger(__name__)

OR_PREFIX = "OR "

# Failures recovered locally by the gateway; anything else is a bug and propagates.
_RECOVERABLE = (DataAccessError, LookupError, TypeError, ValueError)


class TableSchema:
    """
    Table metadata plus parameterized CRUD for a single table.

    Args:
        name: Table name in the connection's current database
        connection: Connection used for introspection and every operation.
            Besides the core connect/prepare/query calls it must provide
            the ``session()`` and ``last_error`` extensions of SqlConnection
        mutations: Builder for INSERT/UPDATE/DELETE text (MySQL by default)
    """

    def __init__(
        self,
        name: str,
        connection: SqlConnection,
        mutations: Optional[MutationBuilder] = None,
    ):
        self._name = name
        self._connection = connection
        self._mutations = mutations or MutationBuilder()
        self._columns: Dict[str, ColumnMeta] = {}
        self._indexes: Dict[str, IndexMeta] = {}
        self._comment: Optional[str] = None
        self.load_error: Optional[IntrospectionError] = None
        self.last_error: Optional[OperationError] = None

        self._load()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def _load(self) -> None:
        self.load_error = None
        try:
            with self._connection.session():
                comment_rows = table_comment_query(self._name).execute(self._connection)
                self._comment = parse_table_comment(comment_rows)

                for row in column_query(self._name).execute(self._connection):
                    self.add_column(parse_column(row))

                index_rows = index_query(self._name).execute(self._connection)
                for index_name, index in parse_indexes(index_rows).items():
                    self._indexes[index_name] = index
        except _RECOVERABLE as e:
            self.load_error = IntrospectionError(self._name, e)
            logger.error("table_schema.load_failed", **self.load_error.to_dict())
            return

        logger.info(
            "table_schema.loaded",
            table=self._name,
            columns=len(self._columns),
            indexes=len(self._indexes),
        )

    def reload(self) -> bool:
        """
        Discard the cached structure and read it from the catalog again.

        Returns:
            True if every introspection query succeeded
        """
        self._columns.clear()
        self._indexes.clear()
        self._comment = None
        self._load()
        return self.load_error is None

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def comment(self) -> Optional[str]:
        return self._comment

    @comment.setter
    def comment(self, value: Optional[str]) -> None:
        self._comment = value

    @property
    def connection(self) -> SqlConnection:
        return self._connection

    @property
    def columns(self) -> Dict[str, ColumnMeta]:
        """Columns keyed by name, in discovery order (a copy)."""
        return dict(self._columns)

    @property
    def indexes(self) -> Dict[str, IndexMeta]:
        """Indexes keyed by name (a copy)."""
        return dict(self._indexes)

    # ------------------------------------------------------------------
    # Column / index registry
    # ------------------------------------------------------------------

    def add_column(self, column: ColumnMeta) -> None:
        self._columns[column.name] = column

    def remove_column(self, name: str) -> bool:
        return self._columns.pop(name, None) is not None

    def get_column(self, name: str) -> Optional[ColumnMeta]:
        return self._columns.get(name)

    def has_column(self, name: str) -> bool:
        return name in self._columns

    def add_index(self, name: str, columns: Sequence[str], unique: bool = False) -> None:
        self._indexes[name] = IndexMeta(columns=tuple(columns), unique=unique)

    def remove_index(self, name: str) -> bool:
        return self._indexes.pop(name, None) is not None

    def get_index(self, name: str) -> Optional[IndexMeta]:
        return self._indexes.get(name)

    def has_index(self, name: str) -> bool:
        return name in self._indexes

    @property
    def primary_key(self) -> Optional[ColumnMeta]:
        return next((c for c in self._columns.values() if c.is_primary), None)

    @property
    def unique_columns(self) -> Dict[str, ColumnMeta]:
        return {name: c for name, c in self._columns.items() if c.is_unique}

    @property
    def auto_increment_column(self) -> Optional[ColumnMeta]:
        return next((c for c in self._columns.values() if c.is_auto_increment), None)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def insert(self, data: Mapping[str, Any]) -> Optional[int]:
        """
        Insert one row.

        Returns:
            The id generated by the database (0 when the table has no
            auto-increment column), or None on failure
        """
        self.last_error = None
        try:
            statement = self._mutations.insert(self._name, data)
            with self._connection.session():
                self._run(statement)
                return self._connection.last_insert_id()
        except _RECOVERABLE as e:
            self._fail(CrudOperation.INSERT, e)
            return None

    def select(
        self,
        columns: Optional[Sequence[str]] = None,
        conditions: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        order_by: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch rows matching equality ``conditions``.

        Condition keys are AND-ed; a key starting with ``"OR "`` (any case)
        is OR-ed instead, e.g. ``{"status": "new", "or status": "open"}``.

        Args:
            columns: Columns to return, all when empty
            conditions: Column -> value equality conditions
            limit: Maximum rows; the configured default (20) when None
            offset: Rows to skip
            order_by: Column -> direction, applied in iteration order

        Returns:
            Rows as column -> value mappings, or [] on failure
        """
        self.last_error = None
        try:
            if limit is None:
                limit = get_settings().default_select_limit

            query = StatementBuilder(self._name).with_projection(columns or ["*"])

            for key, value in (conditions or {}).items():
                if key[: len(OR_PREFIX)].upper() == OR_PREFIX:
                    query = query.or_where(key[len(OR_PREFIX) :], "=", value)
                else:
                    query = query.where(key, "=", value)

            for column, direction in (order_by or {}).items():
                query = query.order_by(column, direction)

            query = query.limit(limit).offset(offset)

            with self._connection.session():
                return query.execute(self._connection)
        except _RECOVERABLE as e:
            self._fail(CrudOperation.SELECT, e)
            return []

    def update(self, data: Mapping[str, Any], conditions: Mapping[str, Any]) -> bool:
        """Update rows matching ``conditions``; False on failure."""
        self.last_error = None
        try:
            statement = self._mutations.update(self._name, data, conditions)
            with self._connection.session():
                self._run(statement)
            return True
        except _RECOVERABLE as e:
            self._fail(CrudOperation.UPDATE, e)
            return False

    def delete(self, conditions: Mapping[str, Any]) -> bool:
        """Delete rows matching ``conditions``; False on failure."""
        self.last_error = None
        try:
            statement = self._mutations.delete(self._name, conditions)
            with self._connection.session():
                self._run(statement)
            return True
        except _RECOVERABLE as e:
            self._fail(CrudOperation.DELETE, e)
            return False

    def _run(self, statement: BoundStatement) -> int:
        """Prepare, bind and execute; returns the affected row count."""
        prepared = self._connection.prepare(statement.sql)
        if prepared is None:
            raise StatementError(
                f"Failed to prepare statement: {self._connection.last_error}",
                sql=statement.sql,
            )

        try:
            if statement.params:
                prepared.bind(statement.types, statement.params)
            if not prepared.execute():
                raise StatementError("Statement execution failed", sql=statement.sql)
            affected = prepared.affected_rows
        finally:
            prepared.close()

        logger.debug("table_schema.statement_run", table=self._name, affected_rows=affected)
        return affected

    def _fail(self, operation: CrudOperation, error: Exception) -> None:
        self.last_error = OperationError(operation, self._name, str(error), error)
        logger.error(f"table_schema.{operation.value}_failed", **self.last_error.to_dict())

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "columns": {name: c.to_dict() for name, c in self._columns.items()},
            "indexes": {name: i.to_dict() for name, i in self._indexes.items()},
            "comment": self._comment,
        }
