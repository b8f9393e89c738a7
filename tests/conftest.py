"""
Shared pytest fixtures for AppFunctions Pilot tests.

Provides fixtures for:
- Sample tool package metadata (the demo tool app's functions)
- An in-process transport that runs the sample functions
- Metadata JSON files
- Logging capture
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

import pytest

from appfunctions_pilot.core.interfaces import (
    ExecuteError,
    ExecuteRequest,
    ExecuteResponse,
    ExecuteSuccess,
    FunctionTransport,
    MetadataProvider,
    TransportErrorCode,
)
from appfunctions_pilot.core.metadata import (
    TYPE_BOOLEAN,
    TYPE_INT,
    TYPE_LONG,
    TYPE_STRING,
    TYPE_UNIT,
    ArrayTypeMetadata,
    ComponentsMetadata,
    FunctionMetadata,
    ObjectTypeMetadata,
    PackageMetadata,
    ParameterMetadata,
    PrimitiveTypeMetadata,
    ReferenceTypeMetadata,
    ResponseMetadata,
    SchemaMetadata,
    dump_package_metadata_json,
)
from appfunctions_pilot.core.payload import RETURN_VALUE_KEY, FunctionData
from appfunctions_pilot.core.schema import DataType, Schema
from appfunctions_pilot.parsers import MetadataParser
from appfunctions_pilot.runtime.decoder import ResponseDecoder
from appfunctions_pilot.runtime.encoder import ArgumentEncoder

TOOL_PACKAGE = "dev.filipfan.appfunctionspilot.tool"


# ============================================================================
# Logging Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Configure logging for all tests."""
    caplog.set_level(logging.DEBUG)
    return caplog


# ============================================================================
# Metadata builders
# ============================================================================

def primitive(code: int, nullable: bool = False) -> PrimitiveTypeMetadata:
    return PrimitiveTypeMetadata(type=code, is_nullable=nullable)


def reference(name: str, nullable: bool = False) -> ReferenceTypeMetadata:
    return ReferenceTypeMetadata(reference_data_type=name, is_nullable=nullable)


def param(name: str, data_type, required: bool = True) -> ParameterMetadata:
    return ParameterMetadata(name=name, is_required=required, data_type=data_type)


def function_id(impl: str, name: str) -> str:
    return f"{TOOL_PACKAGE}.functions.{impl}#{name}"


def make_function(
    impl: str,
    name: str,
    parameters: List[ParameterMetadata] = (),
    response=None,
    components: Optional[Dict[str, Any]] = None,
    enabled: bool = True,
    with_schema: bool = True,
) -> FunctionMetadata:
    return FunctionMetadata(
        id=function_id(impl, name),
        package_name=TOOL_PACKAGE,
        is_enabled=enabled,
        function_schema=SchemaMetadata(category="sampleTool", name=name, version=1) if with_schema else None,
        parameters=list(parameters),
        response=ResponseMetadata(value_type=response or primitive(TYPE_UNIT)),
        components=ComponentsMetadata(data_types=components or {}),
    )


OPTIONAL_VALUES = ObjectTypeMetadata(
    qualified_name="ArgumentOptionalValues.OptionalValues",
    properties={
        "optionalNullableInt": primitive(TYPE_INT, nullable=True),
        "optionalNullableLong": primitive(TYPE_LONG, nullable=True),
        "optionalNullableString": primitive(TYPE_STRING, nullable=True),
    },
    required=["optionalNullableInt", "optionalNullableString"],
)

PRODUCT_INFO = ObjectTypeMetadata(
    qualified_name="ProcessProducts.ProductInfo",
    properties={
        "sku": primitive(TYPE_STRING),
        "stockQuantity": primitive(TYPE_INT),
        "isActive": primitive(TYPE_BOOLEAN),
    },
    required=["sku", "stockQuantity", "isActive"],
)

WEATHER_COMPONENTS = {
    "GetWeather.AdditionalInfo": ObjectTypeMetadata(
        qualified_name="GetWeather.AdditionalInfo",
        properties={"info": primitive(TYPE_STRING)},
        required=["info"],
    ),
    "GetWeather.QueryWeatherParams": ObjectTypeMetadata(
        qualified_name="GetWeather.QueryWeatherParams",
        properties={
            "location": primitive(TYPE_STRING),
            "unit": primitive(TYPE_STRING),
            "additional": reference("GetWeather.AdditionalInfo"),
        },
        required=["location", "unit", "additional"],
    ),
    "GetWeather.QueryWeatherResult": ObjectTypeMetadata(
        qualified_name="GetWeather.QueryWeatherResult",
        properties={
            "temperature": primitive(TYPE_STRING),
            "unit": primitive(TYPE_STRING),
            "forecast": ArrayTypeMetadata(item_type=primitive(TYPE_STRING)),
        },
        required=["temperature", "unit", "forecast"],
    ),
}


def build_tool_package() -> PackageMetadata:
    functions = [
        make_function("VoidFunctionImpl", "voidFunction"),
        make_function("DoThrowImpl", "doThrow"),
        make_function("DisabledFunctionImpl", "disabledFunction", enabled=False),
        make_function(
            "FunctionNullableImpl", "functionNullable",
            parameters=[param("s", primitive(TYPE_STRING, nullable=True))],
            response=primitive(TYPE_STRING, nullable=True),
        ),
        make_function(
            "ArgumentOptionalValuesImpl", "argumentOptionalValues",
            parameters=[param("v", reference("ArgumentOptionalValues.OptionalValues"))],
            response=reference("ArgumentOptionalValues.OptionalValues"),
            components={"ArgumentOptionalValues.OptionalValues": OPTIONAL_VALUES},
        ),
        make_function(
            "AddImpl", "add",
            parameters=[param("num1", primitive(TYPE_LONG)), param("num2", primitive(TYPE_LONG))],
            response=primitive(TYPE_LONG),
        ),
        make_function(
            "GetProductDetailsImpl", "getProductDetails",
            parameters=[param("productId", primitive(TYPE_STRING))],
            response=primitive(TYPE_STRING),
        ),
        make_function(
            "ProcessProductsImpl", "processProducts",
            parameters=[param("products", ArrayTypeMetadata(item_type=reference("ProcessProducts.ProductInfo")))],
            response=primitive(TYPE_BOOLEAN),
            components={"ProcessProducts.ProductInfo": PRODUCT_INFO},
        ),
        make_function(
            "GetWeatherImpl", "getWeather",
            parameters=[param("param", reference("GetWeather.QueryWeatherParams"))],
            response=reference("GetWeather.QueryWeatherResult"),
            components=WEATHER_COMPONENTS,
        ),
        make_function(
            "FactoryCreatedFuncAImpl", "factoryCreatedFuncA",
            parameters=[param("raw", primitive(TYPE_STRING))],
            response=primitive(TYPE_STRING),
        ),
        make_function(
            "FunctionWithoutSchemaDefinition", "functionWithoutSchemaDefinition",
            parameters=[param("raw", primitive(TYPE_STRING))],
            response=primitive(TYPE_STRING),
            with_schema=False,
        ),
    ]
    return PackageMetadata(
        package_name=TOOL_PACKAGE,
        app_functions=functions,
        description="Sample tool exposing demo functions.",
        display_description="AppFunctions Pilot Tool",
    )


# ============================================================================
# Sample tool implementations
# ============================================================================

class ToolInvalidArgument(Exception):
    """Raised by sample functions to report invalid arguments"""


def _do_throw():
    raise ToolInvalidArgument("invalid")


def _get_product_details(productId: str) -> str:
    database = {
        "p001": {"id": "p001", "name": "Premium Wireless Headphones", "price": 199.99, "stock": 50},
        "p002": {"id": "p002", "name": "Smart Fitness Watch", "price": 249.50, "stock": 30},
    }
    product = database.get(productId)
    if product is None:
        return json.dumps({"error": "Product not found", "productId": productId})
    return json.dumps(product)


def _get_weather(param: Dict[str, Any]) -> Dict[str, Any]:
    unit = param["unit"].lower()
    if unit not in ("celsius", "fahrenheit"):
        raise ToolInvalidArgument(f"Invalid unit: '{param['unit']}'. Please use 'celsius' or 'fahrenheit'.")
    if param["location"].lower() == "tokyo":
        return {"temperature": "15", "unit": unit, "forecast": ["sunny", "windy"]}
    return {"temperature": "unknown", "unit": "celsius", "forecast": []}


SAMPLE_IMPLEMENTATIONS: Dict[str, Callable[..., Any]] = {
    "voidFunction": lambda: None,
    "doThrow": _do_throw,
    "disabledFunction": lambda: None,
    "functionNullable": lambda s=None: "input was null" if s is None else None,
    "argumentOptionalValues": lambda v: v,
    "add": lambda num1, num2: num1 + num2,
    "getProductDetails": _get_product_details,
    "processProducts": lambda products: len(products) > 0,
    "getWeather": _get_weather,
    "factoryCreatedFuncA": lambda raw: f"{raw}-created by factory",
    "functionWithoutSchemaDefinition": lambda raw: f"{raw}-functionWithoutSchemaDefinition",
}


def encode_return_value(response: Optional[Schema], value: Any) -> FunctionData:
    """Pack a Python return value the way the executing side does"""
    if response is None or response.type == DataType.UNIT or value is None:
        return FunctionData.EMPTY
    wrapper = Schema(type=DataType.OBJECT, properties={RETURN_VALUE_KEY: response})
    return ArgumentEncoder().encode(wrapper, {RETURN_VALUE_KEY: value})


class FakeToolTransport(FunctionTransport):
    """
    In-process transport running the sample functions

    Decodes the incoming payload with the parameter schema, calls the Python
    implementation and encodes its return value.
    """

    def __init__(self, package: PackageMetadata, implementations: Dict[str, Callable[..., Any]]):
        self.package = package
        self.implementations = implementations
        self.declarations = {d.name: d for d in MetadataParser().parse_metadata(package.app_functions)}
        self.enabled = {m.id: m.is_enabled for m in package.app_functions}
        self.requests: List[ExecuteRequest] = []

    async def is_function_enabled(self, target_package: str, function_id: str) -> bool:
        return target_package == self.package.package_name and self.enabled.get(function_id, False)

    async def execute_function(self, request: ExecuteRequest) -> ExecuteResponse:
        self.requests.append(request)
        declaration = self.declarations.get(request.function_identifier)
        if declaration is None:
            return ExecuteError(TransportErrorCode.FUNCTION_NOT_FOUND, request.function_identifier)

        kwargs = {}
        if declaration.parameters is not None:
            kwargs = ResponseDecoder().decode_object(request.function_parameters, declaration.parameters)

        implementation = self.implementations[request.function_identifier.split("#")[-1]]
        try:
            result = implementation(**kwargs)
        except ToolInvalidArgument as e:
            return ExecuteError(TransportErrorCode.INVALID_ARGUMENT, str(e))

        return ExecuteSuccess(encode_return_value(declaration.response, result))


class StaticMetadataProvider(MetadataProvider):
    """Provider replaying a fixed sequence of discovery results"""

    def __init__(self, *updates: List[PackageMetadata]):
        self.updates = list(updates)
        self.fetch_count = 0

    async def fetch_metadata(self, target_package: str) -> List[PackageMetadata]:
        self.fetch_count += 1
        return self.updates[-1] if self.updates else []

    async def observe(self, target_package: str):
        for update in self.updates:
            yield update


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def tool_package() -> PackageMetadata:
    return build_tool_package()


@pytest.fixture
def tool_declarations(tool_package):
    """Declarations of the sample tool, keyed by short name"""
    parser = MetadataParser()
    return {d.short_name: d for d in parser.parse_metadata(tool_package.app_functions)}


@pytest.fixture
def tool_transport(tool_package) -> FakeToolTransport:
    return FakeToolTransport(tool_package, SAMPLE_IMPLEMENTATIONS)


@pytest.fixture
def metadata_file(tmp_path, tool_package):
    """Tool package metadata serialized to a JSON file"""
    path = tmp_path / "metadata.json"
    path.write_text(dump_package_metadata_json([tool_package]), encoding="utf-8")
    return path
