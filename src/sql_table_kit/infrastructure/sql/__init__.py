"""
SQL module for centralized SQL generation.

This module provides the immutable SELECT builder, INSERT/UPDATE/DELETE
statement builders, backtick identifier quoting and bind-type derivation
for the MySQL dialect.
"""

from .core.identifier import qualify_table, quote_identifier
from .core.parameters import BindType, bind_type_for, bind_types
from .dialects.mysql import MySQLDialect
from .operations.mutation import BoundStatement, MutationBuilder
from .operations.select import (
    DATABASE_LITERAL,
    Condition,
    Connective,
    JoinKind,
    JoinSpec,
    OrderSpec,
    StatementBuilder,
)

__all__ = [
    "quote_identifier",
    "qualify_table",
    "BindType",
    "bind_type_for",
    "bind_types",
    "MySQLDialect",
    "BoundStatement",
    "MutationBuilder",
    "DATABASE_LITERAL",
    "Condition",
    "Connective",
    "JoinKind",
    "JoinSpec",
    "OrderSpec",
    "StatementBuilder",
]
