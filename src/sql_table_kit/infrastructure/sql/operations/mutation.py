"""
SQL INSERT / UPDATE / DELETE statement builders.

UPDATE and DELETE reuse StatementBuilder for their WHERE clause: the
conditions are added with where(), and the rendered text from the WHERE
keyword onward is appended to the statement together with the builder's
bindings.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Protocol, Tuple

from ..core.parameters import bind_types, build_placeholders
from ..dialects.mysql import MySQLDialect
from .select import StatementBuilder


class Dialect(Protocol):
    """Protocol for SQL dialects."""

    name: str

    def quote(self, identifier: str) -> str: ...
    def qualify(self, table: str, schema: Optional[str] = None) -> str: ...
    def build_insert(
        self, table: str, columns: List[str], placeholders: List[str], schema: Optional[str] = None
    ) -> str: ...
    def build_update(
        self, table: str, columns: List[str], where_fragment: str, schema: Optional[str] = None
    ) -> str: ...
    def build_delete(
        self, table: str, where_fragment: str, schema: Optional[str] = None
    ) -> str: ...


@dataclass(frozen=True)
class BoundStatement:
    """SQL text together with its parameters in placeholder order."""

    sql: str
    params: Tuple[Any, ...]

    @property
    def types(self) -> str:
        return bind_types(self.params)


class MutationBuilder:
    """
    High-level builder for data-modifying statements.

    Example:
        >>> builder = MutationBuilder()
        >>> stmt = builder.update("users", {"name": "Ann"}, {"id": 5})
        >>> stmt.sql
        'UPDATE `users` SET `name` = ? WHERE `id` = ?'
        >>> stmt.params
        ('Ann', 5)
    """

    def __init__(self, dialect: Optional[Dialect] = None):
        """
        Initialize the MutationBuilder.

        Args:
            dialect: SQL dialect to use for statement generation (MySQL by default)
        """
        self.dialect = dialect or MySQLDialect()

    def insert(self, table: str, data: Mapping[str, Any]) -> BoundStatement:
        """
        Build an INSERT with one placeholder per field.

        Raises:
            ValueError: If ``data`` is empty
        """
        if not data:
            raise ValueError("INSERT requires at least one column value")

        columns = list(data.keys())
        sql = self.dialect.build_insert(table, columns, build_placeholders(len(columns)))
        return BoundStatement(sql, tuple(data.values()))

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
    ) -> BoundStatement:
        """
        Build an UPDATE binding ``data`` values first, then condition values.

        Raises:
            ValueError: If ``data`` or ``conditions`` is empty
        """
        if not data:
            raise ValueError("UPDATE requires at least one column value")

        where = self.where_clause(table, conditions)
        sql = self.dialect.build_update(table, list(data.keys()), where.where_fragment())
        return BoundStatement(sql, tuple(data.values()) + tuple(where.bindings()))

    def delete(self, table: str, conditions: Mapping[str, Any]) -> BoundStatement:
        """
        Build a DELETE restricted by ``conditions``.

        Raises:
            ValueError: If ``conditions`` is empty
        """
        where = self.where_clause(table, conditions)
        sql = self.dialect.build_delete(table, where.where_fragment())
        return BoundStatement(sql, tuple(where.bindings()))

    @staticmethod
    def where_clause(table: str, conditions: Mapping[str, Any]) -> StatementBuilder:
        """AND-joined equality conditions; unrestricted statements are refused."""
        if not conditions:
            raise ValueError("Refusing to build a statement without conditions")

        query = StatementBuilder(table)
        for column, value in conditions.items():
            query = query.where(column, "=", value)
        return query
