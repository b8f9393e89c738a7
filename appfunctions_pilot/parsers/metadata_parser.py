"""
Metadata Parser - derives FunctionDeclarations from discovery metadata

Features:
- Recursive conversion of type descriptors into Schemas
- Named references inlined from the components table (memoized, cycle-checked)
- Single primitive parameters wrapped into a one-property object schema
- Per-batch metrics and warnings
"""
import logging
import time
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..core.exceptions import (
    CyclicReferenceError,
    ReferenceNotFoundError,
    SchemaDerivationError,
    UnsupportedTypeError,
)
from ..core.interfaces import BaseParser
from ..core.metadata import (
    TYPE_BOOLEAN,
    TYPE_DOUBLE,
    TYPE_FLOAT,
    TYPE_INT,
    TYPE_LONG,
    TYPE_STRING,
    TYPE_UNIT,
    ArrayTypeMetadata,
    ComponentsMetadata,
    FunctionMetadata,
    ObjectTypeMetadata,
    ParameterMetadata,
    PrimitiveTypeMetadata,
    ReferenceTypeMetadata,
)
from ..core.schema import DataType, FunctionDeclaration, Schema

logger = logging.getLogger(__name__)

_PRIMITIVE_TYPES = {
    TYPE_BOOLEAN: DataType.BOOLEAN,
    TYPE_LONG: DataType.LONG,
    TYPE_DOUBLE: DataType.DOUBLE,
    TYPE_FLOAT: DataType.FLOAT,
    TYPE_INT: DataType.INT,
    TYPE_STRING: DataType.STRING,
    TYPE_UNIT: DataType.UNIT,
}

UNKNOWN_SHORT_NAME = "Unknown"


def primitive_to_schema(metadata: PrimitiveTypeMetadata) -> Schema:
    data_type = _PRIMITIVE_TYPES.get(metadata.type)
    if data_type is None:
        raise UnsupportedTypeError(
            f"Unexpected primitive data type: {metadata.type}",
            {"primitive_type": metadata.type}
        )
    return Schema(type=data_type, nullable=metadata.is_nullable)


class SchemaResolver:
    """
    Converts type descriptors of one function into Schemas

    References are resolved against `components` and inlined. Each component
    is converted once; a component that (transitively) refers to itself raises
    CyclicReferenceError instead of recursing forever.
    """

    def __init__(self, components: ComponentsMetadata):
        self.components = components
        self._resolved: Dict[str, Schema] = {}
        self._resolving: List[str] = []

    def to_schema(self, metadata: Any) -> Schema:
        if isinstance(metadata, PrimitiveTypeMetadata):
            return primitive_to_schema(metadata)

        if isinstance(metadata, ArrayTypeMetadata):
            return Schema(
                type=DataType.ARRAY,
                nullable=metadata.is_nullable,
                items=self.to_schema(metadata.item_type),
            )

        if isinstance(metadata, ObjectTypeMetadata):
            try:
                return Schema(
                    type=DataType.OBJECT,
                    nullable=metadata.is_nullable,
                    properties={
                        name: self.to_schema(value)
                        for name, value in metadata.properties.items()
                    },
                    required=tuple(metadata.required),
                )
            except ValidationError as e:
                label = metadata.qualified_name or "object"
                raise SchemaDerivationError(
                    f"Invalid {label} type: {e.errors()[0]['msg']}",
                    {"qualified_name": metadata.qualified_name}
                )

        if isinstance(metadata, ReferenceTypeMetadata):
            schema = self.resolve_reference(metadata.reference_data_type)
            if metadata.is_nullable and not schema.nullable:
                schema = schema.model_copy(update={"nullable": True})
            return schema

        raise UnsupportedTypeError(
            f"Unexpected data type: {getattr(metadata, 'kind', type(metadata).__name__)}",
            {"metadata": repr(metadata)}
        )

    def resolve_reference(self, name: str) -> Schema:
        cached = self._resolved.get(name)
        if cached is not None:
            return cached

        if name in self._resolving:
            chain = self._resolving[self._resolving.index(name):] + [name]
            raise CyclicReferenceError(chain)

        target = self.components.data_types.get(name)
        if target is None:
            raise ReferenceNotFoundError(name, sorted(self.components.data_types))

        self._resolving.append(name)
        try:
            schema = self.to_schema(target)
        finally:
            self._resolving.pop()

        self._resolved[name] = schema
        return schema


class MetadataParser(BaseParser):
    """
    Schema Deriver

    Converts FunctionMetadata reported by discovery into FunctionDeclarations.
    Descriptions are always left empty.
    """

    def __init__(self, strict: bool = False):
        """
        Initialize parser with metrics tracking

        Args:
            strict: Re-raise derivation errors in parse_metadata() instead of
                skipping the offending function
        """
        self.strict = strict
        self._last_parse_duration_ms = 0.0
        self._last_function_count = 0
        self._last_warnings: List[str] = []

    def derive_declaration(self, metadata: FunctionMetadata) -> FunctionDeclaration:
        """
        Build the declaration of one function

        Args:
            metadata: Function metadata from discovery

        Returns:
            FunctionDeclaration with parameter and response schemas

        Raises:
            SchemaDerivationError: On unresolvable references or unsupported types
        """
        resolver = SchemaResolver(metadata.components)
        short_name = metadata.function_schema.name if metadata.function_schema else UNKNOWN_SHORT_NAME

        return FunctionDeclaration(
            name=metadata.id,
            short_name=short_name,
            description="",
            parameters=self._parameters_schema(metadata.parameters, resolver),
            response=self._response_schema(metadata, resolver),
        )

    def parse_metadata(
        self,
        functions: List[FunctionMetadata],
        strict: Optional[bool] = None
    ) -> List[FunctionDeclaration]:
        """
        Build declarations for a whole discovery result

        Args:
            functions: Function metadata list
            strict: Overrides the parser's strict setting for this call

        Returns:
            Declarations, in input order, of every function that could be derived

        Raises:
            SchemaDerivationError: Only in strict mode
        """
        strict = self.strict if strict is None else strict
        start_time = time.perf_counter()
        self._last_warnings = []

        declarations = []
        for metadata in functions:
            try:
                declarations.append(self.derive_declaration(metadata))
            except SchemaDerivationError as e:
                if strict:
                    raise
                logger.warning("Skipping function %s: %s", metadata.id, e.message)
                self._last_warnings.append(f"Function '{metadata.id}': {e.message}")

        self._last_parse_duration_ms = (time.perf_counter() - start_time) * 1000
        self._last_function_count = len(declarations)

        return declarations

    def get_parse_metadata(self) -> Dict[str, Any]:
        return {
            "parse_duration_ms": self._last_parse_duration_ms,
            "function_count": self._last_function_count,
            "warnings": self._last_warnings.copy()
        }

    def _parameters_schema(
        self,
        params: List[ParameterMetadata],
        resolver: SchemaResolver
    ) -> Optional[Schema]:
        if not params:
            return None

        # Wrap a lone primitive parameter so every call takes an object.
        if len(params) == 1 and isinstance(params[0].data_type, PrimitiveTypeMetadata):
            param = params[0]
            return Schema(
                type=DataType.OBJECT,
                properties={param.name: primitive_to_schema(param.data_type)},
                required=[param.name] if param.is_required else [],
            )

        return Schema(
            type=DataType.OBJECT,
            properties={param.name: resolver.to_schema(param.data_type) for param in params},
            required=[param.name for param in params if param.is_required],
        )

    def _response_schema(self, metadata: FunctionMetadata, resolver: SchemaResolver) -> Schema:
        if metadata.response is None:
            return Schema(type=DataType.UNIT)
        return resolver.to_schema(metadata.response.value_type)


def derive_declaration(metadata: FunctionMetadata) -> FunctionDeclaration:
    """Convenience wrapper around MetadataParser().derive_declaration()"""
    return MetadataParser().derive_declaration(metadata)


__all__ = ['MetadataParser', 'SchemaResolver', 'derive_declaration', 'primitive_to_schema']
