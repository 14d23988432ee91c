"""
Catalog introspection queries and row parsers.

Table structure is read from three information_schema views, each filtered
to the current database (``DATABASE()``, rendered inline) and the table name
(bound):

- ``information_schema.tables``: table comment
- ``information_schema.columns``: column list, in ordinal order
- ``information_schema.statistics``: index columns, in key order

MySQL 8 labels information_schema result columns in upper case whatever
the case used in the query, so row keys are matched case-insensitively.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from sql_table_kit.infrastructure.sql.operations.select import (
    DATABASE_LITERAL,
    StatementBuilder,
)

from .models import ColumnMeta, IndexMeta

TABLES_VIEW = "information_schema.tables"
COLUMNS_VIEW = "information_schema.columns"
STATISTICS_VIEW = "information_schema.statistics"

COLUMN_FIELDS = [
    "COLUMN_NAME",
    "DATA_TYPE",
    "COLUMN_KEY",
    "IS_NULLABLE",
    "COLUMN_DEFAULT",
    "EXTRA",
    "COLUMN_COMMENT",
    "CHARACTER_MAXIMUM_LENGTH",
]

INDEX_FIELDS = ["INDEX_NAME", "COLUMN_NAME", "NON_UNIQUE"]


def _scoped(view: str, table: str) -> StatementBuilder:
    return (
        StatementBuilder(view)
        .where("TABLE_SCHEMA", "=", DATABASE_LITERAL)
        .where("TABLE_NAME", "=", table)
    )


def table_comment_query(table: str) -> StatementBuilder:
    return _scoped(TABLES_VIEW, table).with_projection(["TABLE_COMMENT"])


def column_query(table: str) -> StatementBuilder:
    return (
        _scoped(COLUMNS_VIEW, table)
        .with_projection(COLUMN_FIELDS)
        .order_by("ORDINAL_POSITION")
    )


def index_query(table: str) -> StatementBuilder:
    return (
        _scoped(STATISTICS_VIEW, table)
        .with_projection(INDEX_FIELDS)
        .order_by("INDEX_NAME")
        .order_by("SEQ_IN_INDEX")
    )


def row_value(row: Mapping[str, Any], name: str, required: bool = True) -> Any:
    """
    Look up ``name`` in a catalog row, ignoring key case.

    Raises:
        KeyError: If a required field is missing from the row
    """
    if name in row:
        return row[name]
    wanted = name.lower()
    for key, value in row.items():
        if key.lower() == wanted:
            return value
    if required:
        raise KeyError(f"Catalog row has no field {name!r}")
    return None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value or None


def parse_table_comment(rows: List[Mapping[str, Any]]) -> Optional[str]:
    if not rows:
        return None
    return _blank_to_none(row_value(rows[0], "TABLE_COMMENT"))


def parse_column(row: Mapping[str, Any]) -> ColumnMeta:
    key = row_value(row, "COLUMN_KEY") or ""
    extra = row_value(row, "EXTRA") or ""
    length = row_value(row, "CHARACTER_MAXIMUM_LENGTH", required=False)

    return ColumnMeta(
        name=row_value(row, "COLUMN_NAME"),
        type=row_value(row, "DATA_TYPE"),
        is_primary=key == "PRI",
        is_nullable=row_value(row, "IS_NULLABLE") == "YES",
        default=row_value(row, "COLUMN_DEFAULT"),
        is_unique=key == "UNI",
        is_auto_increment="auto_increment" in extra.lower(),
        length=int(length) if length is not None else None,
        comment=_blank_to_none(row_value(row, "COLUMN_COMMENT")),
    )


def parse_indexes(rows: Iterable[Mapping[str, Any]]) -> Dict[str, IndexMeta]:
    """Group statistics rows by index name, keeping first-seen order."""
    grouped: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        name = row_value(row, "INDEX_NAME")
        entry = grouped.setdefault(
            name,
            {"columns": [], "unique": int(row_value(row, "NON_UNIQUE")) == 0},
        )
        entry["columns"].append(row_value(row, "COLUMN_NAME"))

    return {
        name: IndexMeta(columns=tuple(entry["columns"]), unique=entry["unique"])
        for name, entry in grouped.items()
    }
