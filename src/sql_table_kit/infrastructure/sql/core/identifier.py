"""
SQL identifier handling utilities.

Provides backtick quoting for MySQL identifiers (table and column names),
including names with non-ASCII characters.
"""

from typing import Optional


def quote_identifier(name: str) -> str:
    """
    Quote a MySQL identifier (table or column name).

    Args:
        name: The identifier to quote

    Returns:
        Backtick-quoted identifier with internal backticks doubled

    Raises:
        ValueError: If name is empty

    Examples:
        >>> quote_identifier("年金计划号")
        '`年金计划号`'
        >>> quote_identifier("column`name")
        '`column``name`'
    """
    if not name or not isinstance(name, str):
        raise ValueError("Identifier name must be non-empty string")

    escaped = name.replace("`", "``")
    return f"`{escaped}`"


def qualify_table(table: str, schema: Optional[str] = None) -> str:
    """
    Create a fully qualified table name with optional schema prefix.

    Args:
        table: Table name
        schema: Optional schema (database) name

    Returns:
        Qualified table name

    Examples:
        >>> qualify_table("users")
        '`users`'
        >>> qualify_table("users", schema="shop")
        '`shop`.`users`'
    """
    quoted_table = quote_identifier(table)
    if schema:
        return f"{quote_identifier(schema)}.{quoted_table}"
    return quoted_table
