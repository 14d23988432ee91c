"""Column and index metadata held by TableSchema."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass
class ColumnMeta:
    """Metadata of a single table column as reported by the catalog."""

    name: str
    type: str
    is_primary: bool = False
    is_nullable: bool = True
    default: Any = None
    is_unique: bool = False
    is_auto_increment: bool = False
    length: Optional[int] = None
    comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class IndexMeta:
    """An index: its columns in key order and whether it is unique."""

    columns: Tuple[str, ...] = field(default_factory=tuple)
    unique: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"columns": list(self.columns), "unique": self.unique}


__all__ = [
    "ColumnMeta",
    "IndexMeta",
]
