"""
AppFunctions Pilot - Response Decoder
Turns a typed response payload back into loose (JSON-like) values

Decoding mirrors the encoder with one deliberate asymmetry: a required,
non-nullable property missing from a response object is logged and left out
of the result instead of failing the call. The payload comes from another
process and a partially filled answer is still shown to the caller.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.exceptions import UnsupportedSchemaShapeError
from ..core.payload import RETURN_VALUE_KEY, FunctionData
from ..core.schema import DataType, Schema
from ..core.values import JsonValue

logger = logging.getLogger(__name__)

_SCALAR_GETTERS = {
    DataType.STRING: FunctionData.get_string,
    DataType.INT: FunctionData.get_int,
    DataType.LONG: FunctionData.get_long,
    DataType.BOOLEAN: FunctionData.get_boolean,
    DataType.FLOAT: FunctionData.get_float,
    DataType.DOUBLE: FunctionData.get_double,
}


class ResponseDecoder:
    """
    Response Decoder

    `last_warnings` lists the properties reported missing by the most recent
    decode() call.
    """

    def __init__(self):
        self.last_warnings: List[str] = []

    def decode(self, schema: Optional[Schema], payload: FunctionData) -> JsonValue:
        """
        Decode a response payload

        Args:
            schema: Response schema of the called function
            payload: Returned FunctionData (value under RETURN_VALUE_KEY)

        Returns:
            Loose value, or None when the function produced no return value

        Raises:
            UnsupportedSchemaShapeError: Schema type not decodable at that position
            PayloadTypeError: Payload field stored with a different kind than declared
        """
        self.last_warnings = []

        if schema is None or schema.type == DataType.UNIT:
            return None
        if not payload.contains_key(RETURN_VALUE_KEY):
            return None

        return self._read_value(payload, RETURN_VALUE_KEY, schema)

    def decode_object(self, data: FunctionData, schema: Schema) -> Dict[str, Any]:
        """Convert a FunctionData holding an object into a dict"""
        result: Dict[str, Any] = {}
        for name, prop_schema in schema.properties.items():
            value = self._read_value(data, name, prop_schema)
            if value is not None:
                result[name] = value
            elif schema.is_required(name):
                logger.warning(
                    "Property %s (%s) is missing in the function data",
                    name, prop_schema.type.value
                )
                self.last_warnings.append(name)
        return result

    def _read_value(self, data: FunctionData, key: str, schema: Schema) -> JsonValue:
        if not data.contains_key(key):
            return None

        getter = _SCALAR_GETTERS.get(schema.type)
        if getter is not None:
            return getter(data, key)

        if schema.type == DataType.OBJECT:
            nested = data.get_data(key)
            return self.decode_object(nested, schema) if nested is not None else None

        if schema.type == DataType.ARRAY:
            return self._read_array(data, key, schema)

        raise UnsupportedSchemaShapeError(key, schema.type, "unsupported type for parsing")

    def _read_array(self, data: FunctionData, key: str, schema: Schema) -> Optional[List[Any]]:
        items = schema.items
        if items is None:
            raise UnsupportedSchemaShapeError(key, schema.type, "array schema is missing 'items' definition")

        if items.type == DataType.STRING:
            return data.get_string_list(key)
        if items.type == DataType.INT:
            packed = data.get_int_array(key)
        elif items.type == DataType.LONG:
            packed = data.get_long_array(key)
        elif items.type == DataType.OBJECT:
            entries = data.get_data_list(key)
            if entries is None:
                return None
            return [self.decode_object(entry, items) for entry in entries]
        else:
            raise UnsupportedSchemaShapeError(
                key, f"ARRAY<{items.type.value}>", "unsupported array item type for parsing"
            )

        return packed.tolist() if packed is not None else None


def decode_response(schema: Optional[Schema], payload: FunctionData) -> JsonValue:
    """Convenience function: decode with a fresh ResponseDecoder"""
    return ResponseDecoder().decode(schema, payload)


__all__ = ['ResponseDecoder', 'decode_response']
