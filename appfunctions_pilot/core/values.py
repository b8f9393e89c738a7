"""
Loose value model and explicit coercions

Arguments and results cross the library boundary as JSON-like values:
None, bool, int, float, str, list and str-keyed dict. Every coercion below
accepts exactly those shapes and raises TypeError for a wrong shape or
ValueError/OverflowError for content that does not fit the target type.
"""
import math
import re
import struct
from typing import Any, Dict, List, Mapping, Union

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

INT_MIN, INT_MAX = -(2 ** 31), 2 ** 31 - 1
LONG_MIN, LONG_MAX = -(2 ** 63), 2 ** 63 - 1

# JSON integer text: optional sign, ASCII digits only
_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")


def is_null(value: Any) -> bool:
    return value is None


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def as_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise TypeError(f"Expected a string, got {_kind(value)}")


def _as_integer(value: Any, low: int, high: int, label: str) -> int:
    if isinstance(value, bool):
        raise TypeError(f"Expected {label}, got boolean")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} is not an integral number")
        result = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _INTEGER_TEXT.fullmatch(text):
            raise ValueError(f"'{value}' is not an integer")
        result = int(text)
    else:
        raise TypeError(f"Expected {label}, got {_kind(value)}")

    if not low <= result <= high:
        raise OverflowError(f"{result} is out of range for {label}")
    return result


def as_int(value: Any) -> int:
    """Coerce to a signed 32-bit integer"""
    return _as_integer(value, INT_MIN, INT_MAX, "int")


def as_long(value: Any) -> int:
    """Coerce to a signed 64-bit integer"""
    return _as_integer(value, LONG_MIN, LONG_MAX, "long")


def as_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "false"):
            return text == "true"
        raise ValueError(f"'{value}' is not a boolean")
    raise TypeError(f"Expected a boolean, got {_kind(value)}")


def as_double(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("Expected a number, got boolean")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise TypeError(f"Expected a number, got {_kind(value)}")


def as_float(value: Any) -> float:
    """Coerce to a number representable as a 32-bit float"""
    result = as_double(value)
    if math.isfinite(result):
        # struct raises OverflowError past the float32 range
        struct.pack("f", result)
    return result


def as_object(value: Any) -> Dict[str, Any]:
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Expected an object, got {_kind(value)}")


def as_array(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    raise TypeError(f"Expected an array, got {_kind(value)}")


__all__ = [
    'JsonValue',
    'is_null',
    'as_string',
    'as_int',
    'as_long',
    'as_boolean',
    'as_double',
    'as_float',
    'as_object',
    'as_array',
]
