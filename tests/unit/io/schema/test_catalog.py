"""
Unit tests for catalog introspection queries and row parsing.
"""

import pytest

from sql_table_kit.io.schema.catalog import (
    column_query,
    index_query,
    parse_column,
    parse_indexes,
    parse_table_comment,
    row_value,
    table_comment_query,
)
from sql_table_kit.io.schema.models import ColumnMeta, IndexMeta


def column_row(**overrides):
    row = {
        "COLUMN_NAME": "id",
        "DATA_TYPE": "int",
        "COLUMN_KEY": "PRI",
        "IS_NULLABLE": "NO",
        "COLUMN_DEFAULT": None,
        "EXTRA": "auto_increment",
        "COLUMN_COMMENT": "",
        "CHARACTER_MAXIMUM_LENGTH": None,
    }
    row.update(overrides)
    return row


class TestCatalogQueries:
    """Introspection queries are scoped to DATABASE() and bind the table name."""

    def test_table_comment_query(self):
        query = table_comment_query("users")
        assert query.render() == (
            "SELECT TABLE_COMMENT FROM information_schema.tables"
            " WHERE `TABLE_SCHEMA` = DATABASE() AND `TABLE_NAME` = ?"
        )
        assert query.bindings() == ["users"]

    def test_column_query(self):
        query = column_query("users")
        sql = query.render()
        assert sql.startswith("SELECT COLUMN_NAME, DATA_TYPE, COLUMN_KEY, IS_NULLABLE, ")
        assert "FROM information_schema.columns" in sql
        assert sql.endswith(
            "WHERE `TABLE_SCHEMA` = DATABASE() AND `TABLE_NAME` = ? ORDER BY `ORDINAL_POSITION` ASC"
        )
        assert query.bindings() == ["users"]

    def test_index_query(self):
        query = index_query("users")
        sql = query.render()
        assert sql.startswith(
            "SELECT INDEX_NAME, COLUMN_NAME, NON_UNIQUE FROM information_schema.statistics"
        )
        assert sql.endswith("ORDER BY `INDEX_NAME` ASC, `SEQ_IN_INDEX` ASC")
        assert query.bindings() == ["users"]


class TestRowValue:
    """Tests for case-insensitive row lookup."""

    def test_exact_key(self):
        assert row_value({"COLUMN_NAME": "id"}, "COLUMN_NAME") == "id"

    def test_lower_case_key(self):
        assert row_value({"column_name": "id"}, "COLUMN_NAME") == "id"

    def test_missing_required_key_raises(self):
        with pytest.raises(KeyError, match="COLUMN_NAME"):
            row_value({}, "COLUMN_NAME")

    def test_missing_optional_key(self):
        assert row_value({}, "CHARACTER_MAXIMUM_LENGTH", required=False) is None


class TestParseTableComment:
    def test_no_rows(self):
        assert parse_table_comment([]) is None

    def test_blank_comment(self):
        assert parse_table_comment([{"TABLE_COMMENT": ""}]) is None

    def test_comment(self):
        assert parse_table_comment([{"table_comment": "Registered users"}]) == "Registered users"


class TestParseColumn:
    """Tests for parse_column."""

    def test_primary_auto_increment(self):
        column = parse_column(column_row())
        assert column == ColumnMeta(
            name="id",
            type="int",
            is_primary=True,
            is_nullable=False,
            is_auto_increment=True,
        )

    def test_unique_nullable_varchar(self):
        column = parse_column(
            column_row(
                COLUMN_NAME="email",
                DATA_TYPE="varchar",
                COLUMN_KEY="UNI",
                IS_NULLABLE="YES",
                EXTRA="",
                COLUMN_COMMENT="Login address",
                CHARACTER_MAXIMUM_LENGTH=255,
            )
        )
        assert column.is_unique
        assert not column.is_primary
        assert column.is_nullable
        assert not column.is_auto_increment
        assert column.length == 255
        assert column.comment == "Login address"

    def test_default_value_kept(self):
        column = parse_column(column_row(COLUMN_KEY="", EXTRA="", COLUMN_DEFAULT="new"))
        assert column.default == "new"

    def test_multiple_key_is_neither_primary_nor_unique(self):
        column = parse_column(column_row(COLUMN_KEY="MUL", EXTRA=""))
        assert not column.is_primary
        assert not column.is_unique

    def test_extra_flags_matched_case_insensitively(self):
        column = parse_column(column_row(EXTRA="AUTO_INCREMENT"))
        assert column.is_auto_increment

    def test_lower_case_row_keys(self):
        row = {key.lower(): value for key, value in column_row().items()}
        assert parse_column(row).name == "id"

    def test_missing_length_field(self):
        row = column_row()
        del row["CHARACTER_MAXIMUM_LENGTH"]
        assert parse_column(row).length is None


class TestParseIndexes:
    """Tests for parse_indexes."""

    def test_groups_columns_in_key_order(self):
        rows = [
            {"INDEX_NAME": "PRIMARY", "COLUMN_NAME": "id", "NON_UNIQUE": 0},
            {"INDEX_NAME": "idx_name_age", "COLUMN_NAME": "name", "NON_UNIQUE": 1},
            {"INDEX_NAME": "idx_name_age", "COLUMN_NAME": "age", "NON_UNIQUE": 1},
            {"INDEX_NAME": "uniq_email", "COLUMN_NAME": "email", "NON_UNIQUE": "0"},
        ]
        indexes = parse_indexes(rows)

        assert list(indexes) == ["PRIMARY", "idx_name_age", "uniq_email"]
        assert indexes["PRIMARY"] == IndexMeta(columns=("id",), unique=True)
        assert indexes["idx_name_age"] == IndexMeta(columns=("name", "age"), unique=False)
        assert indexes["uniq_email"].unique is True

    def test_no_rows(self):
        assert parse_indexes([]) == {}

    def test_to_dict(self):
        assert IndexMeta(columns=("a", "b"), unique=True).to_dict() == {
            "columns": ["a", "b"],
            "unique": True,
        }
