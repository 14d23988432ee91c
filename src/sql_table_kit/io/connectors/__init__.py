"""Database connectors and the connection contract.

Keep this package import lightweight: the SQL builders import the exceptions
and protocols from here, so the PyMySQL-backed connection is loaded lazily.
"""

from __future__ import annotations

import importlib
from typing import Any

from .exceptions import (
    CrudOperation,
    DataAccessError,
    DatabaseConnectionError,
    IntrospectionError,
    OperationError,
    StatementError,
)
from .protocols import PreparedStatement, SqlConnection

__all__ = [
    "CrudOperation",
    "DataAccessError",
    "DatabaseConnectionError",
    "IntrospectionError",
    "OperationError",
    "StatementError",
    "PreparedStatement",
    "SqlConnection",
    "MySQLConnection",
    "MySQLPreparedStatement",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "MySQLConnection": (".mysql_connection", "MySQLConnection"),
    "MySQLPreparedStatement": (".mysql_connection", "MySQLPreparedStatement"),
}


def __getattr__(name: str) -> Any:
    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _LAZY_IMPORTS[name]
    module = importlib.import_module(module_name, __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
