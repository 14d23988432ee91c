"""
SQL parameter binding utilities.

Positional ``?`` placeholders are used throughout; every bound value is also
given a single-character type tag that prepared statements check before
execution.
"""

from enum import Enum
from typing import Any, Iterable, List

PLACEHOLDER = "?"


class BindType(str, Enum):
    """Type tags for bound parameters."""

    INTEGER = "i"
    FLOAT = "d"
    TEXT = "s"
    BINARY = "b"


def bind_type_for(value: Any) -> BindType:
    """
    Derive the bind type tag for a single value.

    Booleans bind as integers. Anything that is not an int, float or str
    (bytes, None, Decimal, datetime, ...) binds as binary.

    Examples:
        >>> bind_type_for(5)
        <BindType.INTEGER: 'i'>
        >>> bind_type_for("abc")
        <BindType.TEXT: 's'>
    """
    if isinstance(value, int):
        return BindType.INTEGER
    if isinstance(value, float):
        return BindType.FLOAT
    if isinstance(value, str):
        return BindType.TEXT
    return BindType.BINARY


def bind_types(values: Iterable[Any]) -> str:
    """
    Build the type tag string for a sequence of values.

    Examples:
        >>> bind_types([1, 2.5, "x", b"raw"])
        'idsb'
    """
    return "".join(bind_type_for(value).value for value in values)


def build_placeholders(count: int) -> List[str]:
    """
    Build ``count`` positional placeholders.

    Examples:
        >>> build_placeholders(3)
        ['?', '?', '?']
    """
    if count < 0:
        raise ValueError("Placeholder count must be non-negative")
    return [PLACEHOLDER] * count


def placeholder_positions(sql: str) -> List[int]:
    """
    Offsets of the ``?`` placeholders in ``sql``.

    Characters inside backtick-quoted identifiers are skipped, so a column
    named ``why?`` is not mistaken for a placeholder. A doubled backtick
    inside an identifier toggles the quoting state twice and leaves it
    unchanged.

    Examples:
        >>> placeholder_positions("SELECT * FROM t WHERE `why?` = ?")
        [31]
    """
    positions: List[int] = []
    quoted = False
    for offset, char in enumerate(sql):
        if char == "`":
            quoted = not quoted
        elif char == PLACEHOLDER and not quoted:
            positions.append(offset)
    return positions
