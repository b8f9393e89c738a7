"""
AppFunctions Pilot - Argument Encoder
Builds a typed call payload from loosely-typed arguments

Walks the parameter Schema (not the arguments): every declared property is
looked up by name, coerced to its declared type and stored in a
FunctionData. Arguments the schema does not declare are ignored.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..core.exceptions import (
    ArgumentTypeMismatchError,
    MissingRequiredParameterError,
    UnsupportedSchemaShapeError,
)
from ..core.payload import FunctionData, FunctionDataBuilder
from ..core.schema import DataType, Schema
from ..core.values import (
    as_array,
    as_boolean,
    as_double,
    as_float,
    as_int,
    as_long,
    as_object,
    as_string,
    is_null,
)

logger = logging.getLogger(__name__)

# DataType -> (coercion, builder setter)
_SCALAR_SETTERS: Dict[DataType, Tuple[Callable[[Any], Any], Callable]] = {
    DataType.STRING: (as_string, FunctionDataBuilder.set_string),
    DataType.INT: (as_int, FunctionDataBuilder.set_int),
    DataType.LONG: (as_long, FunctionDataBuilder.set_long),
    DataType.BOOLEAN: (as_boolean, FunctionDataBuilder.set_boolean),
    DataType.FLOAT: (as_float, FunctionDataBuilder.set_float),
    DataType.DOUBLE: (as_double, FunctionDataBuilder.set_double),
}

_COERCION_ERRORS = (TypeError, ValueError, OverflowError)


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


class ArgumentEncoder:
    """
    Argument Encoder

    Pure and stateless: the same (schema, arguments) pair always yields the
    same payload or the same error. Errors abort the whole encode; no partial
    payload is returned.
    """

    def encode(self, schema: Optional[Schema], arguments: Optional[Mapping[str, Any]]) -> FunctionData:
        """
        Encode arguments against a parameter schema

        Args:
            schema: Object schema of the parameters (None for no parameters)
            arguments: Parameter name -> loose value (None is treated as no arguments)

        Returns:
            FunctionData conforming to `schema`

        Raises:
            MissingRequiredParameterError: Required, non-nullable argument absent or null
            ArgumentTypeMismatchError: Argument cannot be coerced to its declared type
            UnsupportedSchemaShapeError: Schema type not encodable at that position
        """
        return self._encode_object(schema, arguments or {}, "")

    def _encode_object(self, schema: Optional[Schema], arguments: Mapping[str, Any], path: str) -> FunctionData:
        if schema is None or not schema.properties:
            return FunctionData.EMPTY

        unknown = set(arguments) - set(schema.properties)
        if unknown:
            logger.debug("Ignoring undeclared arguments at '%s': %s", path or "<root>", sorted(unknown))

        builder = FunctionDataBuilder("")
        for name, prop_schema in schema.properties.items():
            value = arguments.get(name)
            if not is_null(value):
                self._set_value(builder, name, prop_schema, value, _join(path, name))
            elif schema.is_required(name):
                raise MissingRequiredParameterError(name, _join(path, name))

        return builder.build()

    def _set_value(self, builder: FunctionDataBuilder, key: str, schema: Schema, value: Any, path: str) -> None:
        scalar = _SCALAR_SETTERS.get(schema.type)
        if scalar is not None:
            coerce, setter = scalar
            try:
                setter(builder, key, coerce(value))
            except _COERCION_ERRORS as e:
                raise ArgumentTypeMismatchError(key, schema.type, e, path) from e
            return

        if schema.type == DataType.OBJECT:
            nested = self._coerce(as_object, value, key, schema.type, path)
            builder.set_data(key, self._encode_object(schema, nested, path))
            return

        if schema.type == DataType.ARRAY:
            values = self._coerce(as_array, value, key, schema.type, path)
            self._set_array(builder, key, schema, values, path)
            return

        raise UnsupportedSchemaShapeError(key, schema.type)

    def _set_array(self, builder: FunctionDataBuilder, key: str, schema: Schema, values: list, path: str) -> None:
        items = schema.items
        if items is None:
            raise UnsupportedSchemaShapeError(key, schema.type, "array schema is missing 'items' definition")

        if items.type == DataType.STRING:
            builder.set_string_list(key, [self._coerce(as_string, v, key, items.type, path) for v in values])
        elif items.type == DataType.INT:
            builder.set_int_array(key, [self._coerce(as_int, v, key, items.type, path) for v in values])
        elif items.type == DataType.LONG:
            builder.set_long_array(key, [self._coerce(as_long, v, key, items.type, path) for v in values])
        elif items.type == DataType.OBJECT:
            entries = []
            for index, v in enumerate(values):
                item_path = f"{path}[{index}]"
                entries.append(
                    self._encode_object(items, self._coerce(as_object, v, key, items.type, item_path), item_path)
                )
            builder.set_data_list(key, entries)
        else:
            raise UnsupportedSchemaShapeError(
                key, f"ARRAY<{items.type.value}>", "unsupported array item type"
            )

    @staticmethod
    def _coerce(coerce: Callable[[Any], Any], value: Any, key: str, expected: DataType, path: str) -> Any:
        try:
            return coerce(value)
        except _COERCION_ERRORS as e:
            raise ArgumentTypeMismatchError(key, expected, e, path) from e


def encode_arguments(schema: Optional[Schema], arguments: Optional[Mapping[str, Any]]) -> FunctionData:
    """Convenience function: encode with a fresh ArgumentEncoder"""
    return ArgumentEncoder().encode(schema, arguments)


__all__ = ['ArgumentEncoder', 'encode_arguments']
