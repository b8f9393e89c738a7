"""
AppFunctions Pilot - Function Metadata Model
Pydantic models for the metadata reported by the discovery collaborator

This is the external, richer representation that the MetadataParser turns
into FunctionDeclarations:
- Type descriptors are a tagged union discriminated by `kind`
- Named types live in a components table and are referenced by name
- JSON uses camelCase keys (e.g. `isNullable`, `appFunctions`)
"""

import json
from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from .exceptions import MetadataValidationError


# =============================================================================
# PRIMITIVE TYPE CODES
# =============================================================================

TYPE_UNIT = 0
TYPE_BOOLEAN = 1
TYPE_BYTES = 2
TYPE_OBJECT = 3
TYPE_DOUBLE = 4
TYPE_FLOAT = 5
TYPE_LONG = 6
TYPE_INT = 7
TYPE_STRING = 8
TYPE_PENDING_INTENT = 9


class _MetadataModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# TYPE DESCRIPTORS
# =============================================================================

class PrimitiveTypeMetadata(_MetadataModel):
    kind: Literal["primitive"] = "primitive"
    type: int
    is_nullable: bool = False


class ArrayTypeMetadata(_MetadataModel):
    kind: Literal["array"] = "array"
    item_type: "DataTypeMetadata"
    is_nullable: bool = False


class ObjectTypeMetadata(_MetadataModel):
    kind: Literal["object"] = "object"
    properties: Dict[str, "DataTypeMetadata"] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)
    qualified_name: Optional[str] = None
    is_nullable: bool = False


class ReferenceTypeMetadata(_MetadataModel):
    kind: Literal["reference"] = "reference"
    reference_data_type: str
    is_nullable: bool = False


class AllOfTypeMetadata(_MetadataModel):
    """Composition of several types; reported by discovery but not supported by the parser"""
    kind: Literal["allOf"] = "allOf"
    match_all: List["DataTypeMetadata"] = Field(default_factory=list)
    qualified_name: Optional[str] = None
    is_nullable: bool = False


DataTypeMetadata = Annotated[
    Union[
        PrimitiveTypeMetadata,
        ArrayTypeMetadata,
        ObjectTypeMetadata,
        ReferenceTypeMetadata,
        AllOfTypeMetadata,
    ],
    Field(discriminator="kind"),
]

ArrayTypeMetadata.model_rebuild()
ObjectTypeMetadata.model_rebuild()
AllOfTypeMetadata.model_rebuild()


# =============================================================================
# FUNCTION METADATA
# =============================================================================

class ComponentsMetadata(_MetadataModel):
    """Named types shared by the functions of one package"""
    data_types: Dict[str, DataTypeMetadata] = Field(default_factory=dict)


class ParameterMetadata(_MetadataModel):
    name: str
    is_required: bool = True
    data_type: DataTypeMetadata


class ResponseMetadata(_MetadataModel):
    value_type: DataTypeMetadata


class SchemaMetadata(_MetadataModel):
    category: str = ""
    name: str
    version: int = 1


class FunctionMetadata(_MetadataModel):
    """
    Metadata of one function exposed by a package

    `function_schema` is serialized as `schema` and carries the short name.
    """
    id: str
    package_name: str = ""
    is_enabled: bool = True
    function_schema: Optional[SchemaMetadata] = Field(default=None, alias="schema")
    parameters: List[ParameterMetadata] = Field(default_factory=list)
    response: Optional[ResponseMetadata] = None
    components: ComponentsMetadata = Field(default_factory=ComponentsMetadata)


class PackageMetadata(_MetadataModel):
    package_name: str
    app_functions: List[FunctionMetadata] = Field(default_factory=list)
    description: Optional[str] = None
    display_description: Optional[str] = None

    @property
    def full_description(self) -> str:
        """Description and display description joined, as shown before any call"""
        parts = [p for p in (self.description, self.display_description) if p]
        return "\n".join(parts).strip()


_PACKAGE_LIST = TypeAdapter(List[PackageMetadata])


# =============================================================================
# LOADING
# =============================================================================

def load_package_metadata_json(text: str) -> List[PackageMetadata]:
    """
    Parse a JSON list of package metadata

    Args:
        text: JSON document (a list of packages, or a single package object)

    Returns:
        List of PackageMetadata

    Raises:
        MetadataValidationError: If the document is blank, malformed or invalid
    """
    if not text or not text.strip():
        raise MetadataValidationError("Metadata JSON is null or empty.")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MetadataValidationError(
            f"Failed to parse metadata JSON: {e.msg}",
            {"line": e.lineno, "column": e.colno}
        )

    if isinstance(data, dict):
        data = [data]

    try:
        return _PACKAGE_LIST.validate_python(data)
    except ValidationError as e:
        raise MetadataValidationError(
            f"Invalid function metadata: {e.error_count()} error(s)",
            {"errors": [err["msg"] for err in e.errors()]}
        )


def load_package_metadata_file(filepath: str) -> List[PackageMetadata]:
    """
    Load package metadata from a JSON file

    Raises:
        MetadataValidationError: If the file is missing or its content is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise MetadataValidationError(
            f"Metadata file not found: {filepath}",
            {"filepath": str(filepath)}
        )
    return load_package_metadata_json(path.read_text(encoding="utf-8"))


def dump_package_metadata_json(packages: List[PackageMetadata]) -> str:
    """Serialize packages back to the camelCase JSON form"""
    return _PACKAGE_LIST.dump_json(packages, by_alias=True, indent=2).decode("utf-8")


__all__ = [
    'TYPE_UNIT', 'TYPE_BOOLEAN', 'TYPE_BYTES', 'TYPE_OBJECT', 'TYPE_DOUBLE',
    'TYPE_FLOAT', 'TYPE_LONG', 'TYPE_INT', 'TYPE_STRING', 'TYPE_PENDING_INTENT',
    'PrimitiveTypeMetadata',
    'ArrayTypeMetadata',
    'ObjectTypeMetadata',
    'ReferenceTypeMetadata',
    'AllOfTypeMetadata',
    'DataTypeMetadata',
    'ComponentsMetadata',
    'ParameterMetadata',
    'ResponseMetadata',
    'SchemaMetadata',
    'FunctionMetadata',
    'PackageMetadata',
    'load_package_metadata_json',
    'load_package_metadata_file',
    'dump_package_metadata_json',
]
