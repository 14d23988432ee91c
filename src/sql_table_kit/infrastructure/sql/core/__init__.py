"""Core SQL utilities package."""

from .identifier import qualify_table, quote_identifier
from .parameters import (
    PLACEHOLDER,
    BindType,
    bind_type_for,
    bind_types,
    build_placeholders,
    placeholder_positions,
)

__all__ = [
    "quote_identifier",
    "qualify_table",
    "PLACEHOLDER",
    "BindType",
    "bind_type_for",
    "bind_types",
    "build_placeholders",
    "placeholder_positions",
]
