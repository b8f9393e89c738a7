# ============================================================================
# APPFUNCTIONS PILOT
# ============================================================================
# Discover the functions another application exposes, describe them as
# schemas, and invoke them with loosely-typed (JSON-like) arguments.
#
# Usage:
#     from appfunctions_pilot import DeclarationRegistry, FunctionExecutor
#
#     registry = DeclarationRegistry("com.example.tool")
#     await registry.refresh(provider)
#
#     executor = FunctionExecutor(transport)
#     result = await executor.execute(
#         "com.example.tool", registry.require("add"), {"num1": 10, "num2": 6}
#     )
#
# ============================================================================

from .core import (
    DataType,
    FunctionData,
    FunctionDeclaration,
    FunctionResult,
    PilotException,
    Schema,
)
from .parsers import MetadataParser
from .runtime import (
    ArgumentEncoder,
    DeclarationRegistry,
    FunctionExecutor,
    ResponseDecoder,
    decode_response,
    encode_arguments,
)
from .version import __version__

__all__ = [
    "DataType",
    "Schema",
    "FunctionDeclaration",
    "FunctionResult",
    "FunctionData",
    "PilotException",
    "MetadataParser",
    "ArgumentEncoder",
    "ResponseDecoder",
    "FunctionExecutor",
    "DeclarationRegistry",
    "encode_arguments",
    "decode_response",
    "__version__",
]
