"""Data access exceptions.

Low-level failures (connecting, preparing or executing a statement) are
raised. TableSchema converts introspection and CRUD failures into
IntrospectionError / OperationError values that are logged and kept on the
instance instead of being raised.
"""

from enum import Enum
from typing import Dict, Optional


class CrudOperation(str, Enum):
    """CRUD operations that can fail inside TableSchema."""

    INSERT = "insert"
    SELECT = "select"
    UPDATE = "update"
    DELETE = "delete"


class DataAccessError(Exception):
    """Base exception for all data access failures."""

    def to_dict(self) -> Dict[str, str]:
        """Convert to structured dict for logging."""
        return {
            "error_type": type(self).__name__,
            "message": str(self),
        }


class DatabaseConnectionError(DataAccessError):
    """Raised when a connection to the database cannot be established."""


class StatementError(DataAccessError):
    """Raised when the driver fails to prepare or execute a statement."""

    def __init__(self, message: str, sql: Optional[str] = None):
        self.sql = sql
        super().__init__(message)

    def to_dict(self) -> Dict[str, str]:
        data = super().to_dict()
        if self.sql is not None:
            data["sql"] = self.sql
        return data


class IntrospectionError(DataAccessError):
    """Catalog metadata for a table could not be (fully) loaded."""

    def __init__(self, table: str, original_error: Exception):
        self.table = table
        self.original_error = original_error
        super().__init__(str(original_error))

    def __str__(self) -> str:
        return f"Failed to load structure of table '{self.table}': {self.args[0]}"

    def to_dict(self) -> Dict[str, str]:
        return {
            "error_type": "IntrospectionError",
            "table": self.table,
            "message": str(self),
            "original_error_type": type(self.original_error).__name__,
            "original_error_message": str(self.original_error),
        }


class OperationError(DataAccessError):
    """A CRUD operation on a table failed."""

    def __init__(
        self,
        operation: CrudOperation,
        table: str,
        message: str,
        original_error: Optional[Exception] = None,
    ):
        self.operation = operation
        self.table = table
        self.original_error = original_error
        super().__init__(message)

    def __str__(self) -> str:
        return f"Error in {self.operation.value} on table '{self.table}': {self.args[0]}"

    def to_dict(self) -> Dict[str, str]:
        data = {
            "error_type": "OperationError",
            "operation": self.operation.value,
            "table": self.table,
            "message": str(self),
        }
        if self.original_error is not None:
            data["original_error_type"] = type(self.original_error).__name__
            data["original_error_message"] = str(self.original_error)
        return data
