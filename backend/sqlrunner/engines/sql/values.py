"""
Cell values of captured rows.

Drivers return whatever Python type they like; rows handed back to callers
only ever contain None, int, float, str, bool or bytes. Anything else is
stringified.
"""

from enum import Enum
from typing import Any, Union

CellValue = Union[None, bool, int, float, str, bytes]


class ValueKind(str, Enum):
    NULL = "null"
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BOOLEAN = "boolean"
    BINARY = "binary"
    OTHER = "other"


def classify(value: Any) -> ValueKind:
    if value is None:
        return ValueKind.NULL
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    return ValueKind.OTHER


def normalize_value(value: Any) -> CellValue:
    kind = classify(value)
    if kind is ValueKind.BINARY:
        return bytes(value)
    if kind is ValueKind.OTHER:
        return str(value)
    return value


def format_cell(value: Any) -> str:
    """Text form used on progress lines; NULL for None."""
    if value is None:
        return "NULL"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return str(value)
