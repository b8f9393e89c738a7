"""
Core Schema Definitions
Pydantic models for value schemas, function declarations and call results
"""
import json
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


class DataType(str, Enum):
    """Type tag driving every encode/decode branch"""
    UNSPECIFIED = "UNSPECIFIED"
    BOOLEAN = "BOOLEAN"
    OBJECT = "OBJECT"
    DOUBLE = "DOUBLE"
    FLOAT = "FLOAT"
    LONG = "LONG"
    INT = "INT"
    STRING = "STRING"
    ARRAY = "ARRAY"
    UNIT = "UNIT"


SCALAR_TYPES = frozenset({
    DataType.STRING,
    DataType.INT,
    DataType.LONG,
    DataType.BOOLEAN,
    DataType.FLOAT,
    DataType.DOUBLE,
})


class Schema(BaseModel):
    """
    Recursive description of a value's shape

    `items` is set for ARRAY schemas, `properties`/`required` for OBJECT schemas.
    Instances are immutable and may be shared between declarations: `properties`
    is a read-only mapping and `required` a tuple.
    """
    model_config = ConfigDict(frozen=True)

    type: DataType = DataType.UNSPECIFIED
    description: str = ""
    nullable: bool = False
    items: Optional["Schema"] = None
    properties: Dict[str, "Schema"] = Field(default_factory=dict, validate_default=True)
    required: Tuple[str, ...] = ()

    @field_validator("properties", mode="after")
    @classmethod
    def freeze_properties(cls, value: Dict[str, "Schema"]) -> Mapping[str, "Schema"]:
        return MappingProxyType(dict(value))

    @field_serializer("properties", mode="wrap")
    def dump_properties(self, value: Mapping[str, "Schema"], handler):
        return handler(dict(value))

    @model_validator(mode="after")
    def check_shape(self) -> "Schema":
        if self.type == DataType.ARRAY and self.items is None:
            raise ValueError("Array schema is missing 'items' definition")
        if self.type == DataType.OBJECT:
            unknown = [name for name in self.required if name not in self.properties]
            if unknown:
                raise ValueError(f"Required properties not declared: {', '.join(unknown)}")
        return self

    def is_required(self, name: str) -> bool:
        """True when `name` must be present and non-null in a value of this schema"""
        prop = self.properties.get(name)
        return name in self.required and prop is not None and not prop.nullable


class FunctionDeclaration(BaseModel):
    """Declaration of one discoverable function"""
    model_config = ConfigDict(frozen=True)

    name: str
    short_name: str
    description: str = ""
    parameters: Optional[Schema] = None
    response: Optional[Schema] = None

    @property
    def key(self) -> Tuple[str, str]:
        """Identity used for lookups (identifier, short name)"""
        return (self.name, self.short_name)

    def to_json_dict(self) -> Dict[str, Any]:
        """
        Convert to JSON-serializable dictionary

        Returns:
            Dictionary ready for json.dumps()
        """
        return self.model_dump(mode="json", exclude_none=True)


class FunctionResult(BaseModel):
    """Result from function execution"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    success: bool
    result: Any = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    exception: Optional[BaseException] = Field(default=None, exclude=True, repr=False)

    @classmethod
    def ok(cls, value: Any) -> "FunctionResult":
        return cls(success=True, result=value)

    @classmethod
    def failure(cls, exc: BaseException) -> "FunctionResult":
        return cls(
            success=False,
            error=str(exc),
            error_type=exc.__class__.__name__,
            exception=exc,
        )

    def unwrap(self) -> Any:
        """Return the result value, or raise the exception that failed the call"""
        if not self.success:
            raise self.exception
        return self.result

    def describe(self) -> str:
        """Textual outcome as shown to a user"""
        if self.success:
            return json.dumps(self.result)
        return self.error or ""


# Export for convenience
__all__ = ['DataType', 'SCALAR_TYPES', 'Schema', 'FunctionDeclaration', 'FunctionResult']
