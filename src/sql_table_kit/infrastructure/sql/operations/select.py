"""
Immutable SELECT statement builder.

Every chained call returns a new StatementBuilder; the receiver is never
modified, so a partially built query can be shared and extended freely::

    base = StatementBuilder("users").with_projection(["id", "name"])
    active = base.where("status", "active").order_by("name").limit(10)
    active.render()
    # SELECT id, name FROM users WHERE `status` = ? ORDER BY `name` ASC LIMIT ?
    active.bindings()
    # ['active', 10]

WHERE clauses are stored as an ordered sequence of tokens, each either a
Condition or a Connective, and rendered exactly in that order. The binding
list is derived from the same tokens, so it always lines up with the ``?``
placeholders of render().
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

from sql_table_kit.infrastructure.sql.core.identifier import quote_identifier
from sql_table_kit.infrastructure.sql.core.parameters import (
    PLACEHOLDER,
    bind_types,
    placeholder_positions,
)
from sql_table_kit.io.connectors.exceptions import StatementError
from sql_table_kit.io.connectors.protocols import SqlConnection
from sql_table_kit.utils.logging import get_logger

logger = get_logger(__name__)

# Rendered inline instead of being bound, e.g. where("TABLE_SCHEMA", DATABASE_LITERAL)
DATABASE_LITERAL = "DATABASE()"

_UNSET: Any = object()


class Connective(str, Enum):
    AND = "AND"
    OR = "OR"


class JoinKind(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


@dataclass(frozen=True)
class Condition:
    """A single ``column operator value`` comparison."""

    column: str
    operator: str
    value: Any

    @property
    def is_bound(self) -> bool:
        """True when the value travels as a parameter instead of inline SQL."""
        return self.value is not None and not _is_literal_marker(self.value)

    def render(self) -> str:
        if self.value is None:
            rendered_value = "NULL"
        elif _is_literal_marker(self.value):
            rendered_value = DATABASE_LITERAL
        else:
            rendered_value = PLACEHOLDER
        return f"{quote_identifier(self.column)} {self.operator} {rendered_value}"


@dataclass(frozen=True)
class JoinSpec:
    kind: JoinKind
    table: str
    left: str
    operator: str
    right: str

    def render(self) -> str:
        return (
            f"{self.kind.value} JOIN {quote_identifier(self.table)} "
            f"ON {self.left} {self.operator} {self.right}"
        )


@dataclass(frozen=True)
class OrderSpec:
    column: str
    direction: str = "ASC"

    def render(self) -> str:
        return f"{quote_identifier(self.column)} {self.direction}"


WhereToken = Union[Condition, Connective]


def _is_literal_marker(value: Any) -> bool:
    return isinstance(value, str) and value == DATABASE_LITERAL


def _render_token(token: WhereToken) -> str:
    if isinstance(token, Connective):
        return token.value
    return token.render()


def _literal(value: Any) -> str:
    """Format a bound value for debug output only."""
    if isinstance(value, str):
        escaped = (
            value.replace("\\", "\\\\")
            .replace("'", "\\'")
            .replace('"', '\\"')
            .replace("\0", "\\0")
        )
        return f"'{escaped}'"
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


@dataclass(frozen=True)
class StatementBuilder:
    """
    Fluent, immutable SELECT builder.

    Attributes:
        table: Table or view name, rendered as given after FROM
        projection: Selected columns, rendered as given
        where_tokens: Conditions and connectives in render order
        joins: Join specifications in render order
        orders: ORDER BY specifications
        row_limit: LIMIT value, None for no LIMIT
        row_offset: OFFSET value, 0 omits the OFFSET clause
        last_condition: Most recent condition added through where()
    """

    table: str
    projection: Tuple[str, ...] = ("*",)
    where_tokens: Tuple[WhereToken, ...] = ()
    joins: Tuple[JoinSpec, ...] = ()
    orders: Tuple[OrderSpec, ...] = ()
    row_limit: Optional[int] = None
    row_offset: int = 0
    last_condition: Optional[Condition] = None

    def with_projection(self, columns: Sequence[str]) -> StatementBuilder:
        return replace(self, projection=tuple(columns))

    def where(self, column: str, operator: Any, value: Any = _UNSET) -> StatementBuilder:
        """
        Add a condition joined with AND to any previous where() condition.

        ``where("a", 1)`` is shorthand for ``where("a", "=", 1)``.
        """
        if value is _UNSET:
            operator, value = "=", operator

        condition = Condition(column, operator, value)
        tokens = self.where_tokens
        if self.last_condition is not None:
            tokens += (Connective.AND,)
        return replace(
            self,
            where_tokens=tokens + (condition,),
            last_condition=condition,
        )

    def or_where(self, column: str, operator: Any, value: Any = _UNSET) -> StatementBuilder:
        """
        Add a condition preceded by OR.

        The OR token is emitted even when no condition precedes it, and
        last_condition is left untouched.
        """
        if value is _UNSET:
            operator, value = "=", operator

        condition = Condition(column, operator, value)
        return replace(
            self, where_tokens=self.where_tokens + (Connective.OR, condition)
        )

    def where_null(self, column: str) -> StatementBuilder:
        # No connective is inserted: where("b", 1).where_null("a") renders
        # "`b` = ? `a` IS NULL".
        return replace(
            self, where_tokens=self.where_tokens + (Condition(column, "IS", None),)
        )

    def where_not_null(self, column: str) -> StatementBuilder:
        return replace(
            self,
            where_tokens=self.where_tokens + (Condition(column, "IS NOT", None),),
        )

    def order_by(self, column: str, direction: str = "ASC") -> StatementBuilder:
        return replace(
            self, orders=self.orders + (OrderSpec(column, direction.upper()),)
        )

    def limit(self, limit: int) -> StatementBuilder:
        if limit < 0:
            raise ValueError(f"LIMIT must be non-negative, got {limit}")
        return replace(self, row_limit=limit)

    def offset(self, offset: int) -> StatementBuilder:
        if offset < 0:
            raise ValueError(f"OFFSET must be non-negative, got {offset}")
        return replace(self, row_offset=offset)

    def join(self, table: str, left: str, operator: str, right: str) -> StatementBuilder:
        return self._add_join(JoinKind.INNER, table, left, operator, right)

    def left_join(self, table: str, left: str, operator: str, right: str) -> StatementBuilder:
        return self._add_join(JoinKind.LEFT, table, left, operator, right)

    def right_join(self, table: str, left: str, operator: str, right: str) -> StatementBuilder:
        return self._add_join(JoinKind.RIGHT, table, left, operator, right)

    def _add_join(
        self, kind: JoinKind, table: str, left: str, operator: str, right: str
    ) -> StatementBuilder:
        spec = JoinSpec(kind, table, left, operator, right)
        return replace(self, joins=self.joins + (spec,))

    def render(self) -> str:
        """Render the SELECT statement with positional placeholders."""
        sql = f"SELECT {', '.join(self.projection)} FROM {self.table}"

        for join in self.joins:
            sql += f" {join.render()}"

        if self.where_tokens:
            sql += " WHERE " + " ".join(_render_token(t) for t in self.where_tokens)

        if self.orders:
            sql += " ORDER BY " + ", ".join(order.render() for order in self.orders)

        if self.row_limit is not None:
            sql += f" LIMIT {PLACEHOLDER}"

        if self.row_offset > 0:
            sql += f" OFFSET {PLACEHOLDER}"

        return sql

    def bindings(self) -> List[Any]:
        """
        Parameters in placeholder order.

        Bound condition values in token order, then LIMIT (if set), then
        OFFSET (if positive).
        """
        values = [
            token.value
            for token in self.where_tokens
            if isinstance(token, Condition) and token.is_bound
        ]
        if self.row_limit is not None:
            values.append(self.row_limit)
        if self.row_offset > 0:
            values.append(self.row_offset)
        return values

    def where_fragment(self) -> str:
        """
        The rendered text from the WHERE keyword onward.

        Used to reuse the condition rendering in UPDATE and DELETE
        statements; empty when there are no conditions.
        """
        sql = self.render()
        position = sql.find(" WHERE ")
        if position < 0:
            return ""
        return sql[position + 1 :]

    def render_literal(self) -> str:
        """
        Render with the bindings substituted inline.

        For logs and debugging only; never execute the result.
        """
        sql = self.render()
        parts: List[str] = []
        cursor = 0
        for value, position in zip(self.bindings(), placeholder_positions(sql)):
            parts.append(sql[cursor:position])
            parts.append(_literal(value))
            cursor = position + len(PLACEHOLDER)
        parts.append(sql[cursor:])
        return "".join(parts)

    def debug(self) -> None:
        """Log the rendered SQL and its bindings at DEBUG level."""
        logger.debug("statement.debug", sql=self.render(), bindings=self.bindings())

    def execute(self, connection: SqlConnection) -> List[dict]:
        """
        Run the statement and return every row.

        The connection is connected for the call and always disconnected
        afterwards, whether the statement succeeds or not.

        Raises:
            StatementError: If the statement cannot be prepared or executed
        """
        sql = self.render()
        with connection.session():
            statement = connection.prepare(sql)
            if statement is None:
                raise StatementError(
                    f"Failed to prepare statement: {connection.last_error}", sql=sql
                )

            try:
                params = self.bindings()
                if params:
                    statement.bind(bind_types(params), params)
                if not statement.execute():
                    raise StatementError("Statement execution failed", sql=sql)
                rows = statement.fetch_all()
            finally:
                statement.close()

        logger.debug("statement.fetched", table=self.table, rows=len(rows))
        return rows
