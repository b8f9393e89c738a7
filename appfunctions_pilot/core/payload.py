"""
Typed Call/Response Container

FunctionData is the payload exchanged with the transport: named fields holding
primitives, nested FunctionData, string lists, packed int/long arrays, or lists
of nested FunctionData. Each field remembers the kind it was stored with, so a
reader asking for the wrong kind gets a PayloadTypeError instead of a silently
reinterpreted value.
"""
from array import array
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .exceptions import PayloadTypeError

# Key under which a successful call stores its return value
RETURN_VALUE_KEY = "androidAppfunctionsReturnValue"


class FieldKind(str, Enum):
    STRING = "string"
    INT = "int"
    LONG = "long"
    BOOLEAN = "boolean"
    FLOAT = "float"
    DOUBLE = "double"
    DATA = "data"
    STRING_LIST = "string_list"
    INT_ARRAY = "int_array"
    LONG_ARRAY = "long_array"
    DATA_LIST = "data_list"


class FunctionData:
    """
    Immutable payload container

    Build instances with FunctionDataBuilder. Typed getters return `default`
    when the key is absent.
    """

    EMPTY: "FunctionData"

    def __init__(self, qualified_name: str = "", fields: Optional[Dict[str, Tuple[FieldKind, Any]]] = None):
        self.qualified_name = qualified_name
        self._fields = MappingProxyType(dict(fields or {}))

    def contains_key(self, key: str) -> bool:
        return key in self._fields

    def keys(self) -> List[str]:
        return list(self._fields.keys())

    def kind_of(self, key: str) -> Optional[FieldKind]:
        entry = self._fields.get(key)
        return entry[0] if entry else None

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FunctionData):
            return NotImplemented
        return self.qualified_name == other.qualified_name and dict(self._fields) == dict(other._fields)

    def __repr__(self) -> str:
        return f"FunctionData({self.qualified_name!r}, {self.to_dict()!r})"

    # Typed getters

    def _get(self, key: str, kind: FieldKind, default: Any) -> Any:
        entry = self._fields.get(key)
        if entry is None:
            return default
        stored_kind, value = entry
        if stored_kind != kind:
            raise PayloadTypeError(key, kind.value, stored_kind.value)
        return value

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._get(key, FieldKind.STRING, default)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self._get(key, FieldKind.INT, default)

    def get_long(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self._get(key, FieldKind.LONG, default)

    def get_boolean(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        return self._get(key, FieldKind.BOOLEAN, default)

    def get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        return self._get(key, FieldKind.FLOAT, default)

    def get_double(self, key: str, default: Optional[float] = None) -> Optional[float]:
        return self._get(key, FieldKind.DOUBLE, default)

    def get_data(self, key: str) -> Optional["FunctionData"]:
        return self._get(key, FieldKind.DATA, None)

    def get_string_list(self, key: str) -> Optional[List[str]]:
        value = self._get(key, FieldKind.STRING_LIST, None)
        return list(value) if value is not None else None

    def get_int_array(self, key: str) -> Optional[array]:
        return self._copy_array(self._get(key, FieldKind.INT_ARRAY, None))

    def get_long_array(self, key: str) -> Optional[array]:
        return self._copy_array(self._get(key, FieldKind.LONG_ARRAY, None))

    def get_data_list(self, key: str) -> Optional[List["FunctionData"]]:
        value = self._get(key, FieldKind.DATA_LIST, None)
        return list(value) if value is not None else None

    @staticmethod
    def _copy_array(value: Optional[array]) -> Optional[array]:
        # Stored arrays are shared; callers get their own copy
        return array(value.typecode, value) if value is not None else None

    def to_dict(self) -> Dict[str, Any]:
        """Loose JSON view of the payload, for logging and display"""
        result: Dict[str, Any] = {}
        for key, (kind, value) in self._fields.items():
            if kind == FieldKind.DATA:
                result[key] = value.to_dict()
            elif kind == FieldKind.DATA_LIST:
                result[key] = [item.to_dict() for item in value]
            elif kind in (FieldKind.STRING_LIST, FieldKind.INT_ARRAY, FieldKind.LONG_ARRAY):
                result[key] = list(value)
            else:
                result[key] = value
        return result


FunctionData.EMPTY = FunctionData()


class FunctionDataBuilder:
    """
    Builder for FunctionData

    Setters validate the Python type of the value (not its loose form; coercion
    happens in the encoder) and return the builder for chaining.
    """

    def __init__(self, qualified_name: str = ""):
        self.qualified_name = qualified_name
        self._fields: Dict[str, Tuple[FieldKind, Any]] = {}

    def _set(self, key: str, kind: FieldKind, value: Any, expected: type) -> "FunctionDataBuilder":
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise TypeError(f"Field '{key}' expects {kind.value}, got {type(value).__name__}")
        self._fields[key] = (kind, value)
        return self

    def set_string(self, key: str, value: str) -> "FunctionDataBuilder":
        return self._set(key, FieldKind.STRING, value, str)

    def set_int(self, key: str, value: int) -> "FunctionDataBuilder":
        return self._set(key, FieldKind.INT, value, int)

    def set_long(self, key: str, value: int) -> "FunctionDataBuilder":
        return self._set(key, FieldKind.LONG, value, int)

    def set_boolean(self, key: str, value: bool) -> "FunctionDataBuilder":
        return self._set(key, FieldKind.BOOLEAN, value, bool)

    def set_float(self, key: str, value: float) -> "FunctionDataBuilder":
        return self._set(key, FieldKind.FLOAT, float(value), float)

    def set_double(self, key: str, value: float) -> "FunctionDataBuilder":
        return self._set(key, FieldKind.DOUBLE, float(value), float)

    def set_data(self, key: str, value: FunctionData) -> "FunctionDataBuilder":
        return self._set(key, FieldKind.DATA, value, FunctionData)

    def set_string_list(self, key: str, values: Iterable[str]) -> "FunctionDataBuilder":
        items = tuple(values)
        if not all(isinstance(item, str) for item in items):
            raise TypeError(f"Field '{key}' expects a list of strings")
        self._fields[key] = (FieldKind.STRING_LIST, items)
        return self

    def set_int_array(self, key: str, values: Iterable[int]) -> "FunctionDataBuilder":
        # array('i') rejects values outside the C int range with OverflowError
        self._fields[key] = (FieldKind.INT_ARRAY, array("i", values))
        return self

    def set_long_array(self, key: str, values: Iterable[int]) -> "FunctionDataBuilder":
        self._fields[key] = (FieldKind.LONG_ARRAY, array("q", values))
        return self

    def set_data_list(self, key: str, values: Iterable[FunctionData]) -> "FunctionDataBuilder":
        items = tuple(values)
        if not all(isinstance(item, FunctionData) for item in items):
            raise TypeError(f"Field '{key}' expects a list of FunctionData")
        self._fields[key] = (FieldKind.DATA_LIST, items)
        return self

    def build(self) -> FunctionData:
        return FunctionData(self.qualified_name, self._fields)


__all__ = ['RETURN_VALUE_KEY', 'FieldKind', 'FunctionData', 'FunctionDataBuilder']
