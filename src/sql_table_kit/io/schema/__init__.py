"""Table structure introspection and the schema-aware table gateway."""

from .models import ColumnMeta, IndexMeta
from .table import TableSchema

__all__ = [
    "ColumnMeta",
    "IndexMeta",
    "TableSchema",
]
