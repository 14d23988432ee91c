"""
MySQL-specific SQL dialect implementation.

Provides MySQL syntax for INSERT, UPDATE and DELETE statements and backtick
identifier quoting.
"""

from typing import List, Optional

from ..core.identifier import qualify_table, quote_identifier
from ..core.parameters import PLACEHOLDER


class MySQLDialect:
    """MySQL SQL dialect implementation."""

    name = "mysql"

    def quote(self, identifier: str) -> str:
        """Quote an identifier using MySQL syntax (backticks)."""
        return quote_identifier(identifier)

    def qualify(self, table: str, schema: Optional[str] = None) -> str:
        """Create a fully qualified table reference."""
        return qualify_table(table, schema)

    def build_insert(
        self,
        table: str,
        columns: List[str],
        placeholders: List[str],
        schema: Optional[str] = None,
    ) -> str:
        """
        Build a simple INSERT statement.

        Args:
            table: Table name
            columns: List of column names
            placeholders: List of parameter placeholders
            schema: Optional schema name

        Returns:
            INSERT SQL statement
        """
        qualified_table = self.qualify(table, schema)
        quoted_cols = ", ".join(self.quote(c) for c in columns)
        values = ", ".join(placeholders)
        return f"INSERT INTO {qualified_table} ({quoted_cols}) VALUES ({values})"

    def build_set_clause(self, columns: List[str]) -> str:
        """Build the ``SET col = ?, ...`` clause of an UPDATE."""
        assignments = ", ".join(f"{self.quote(c)} = {PLACEHOLDER}" for c in columns)
        return f"SET {assignments}"

    def build_update(
        self,
        table: str,
        columns: List[str],
        where_fragment: str,
        schema: Optional[str] = None,
    ) -> str:
        """
        Build an UPDATE statement.

        Args:
            table: Table name
            columns: Columns assigned through placeholders, in binding order
            where_fragment: Clause starting at the ``WHERE`` keyword
            schema: Optional schema name

        Returns:
            UPDATE SQL statement
        """
        qualified_table = self.qualify(table, schema)
        return f"UPDATE {qualified_table} {self.build_set_clause(columns)} {where_fragment}"

    def build_delete(
        self,
        table: str,
        where_fragment: str,
        schema: Optional[str] = None,
    ) -> str:
        """
        Build a DELETE statement.

        Args:
            table: Table name
            where_fragment: Clause starting at the ``WHERE`` keyword
            schema: Optional schema name

        Returns:
            DELETE SQL statement
        """
        qualified_table = self.qualify(table, schema)
        return f"DELETE FROM {qualified_table} {where_fragment}"
