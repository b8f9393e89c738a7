"""
AppFunctions Pilot - Exception Hierarchy
Custom exceptions for every stage of the call path

These exceptions enable:
- Distinguishable failure values (derivation, marshalling, invocation)
- Structured logging with context
- A readable description the caller can render as the call outcome
"""

from typing import Any, List, Optional


# =============================================================================
# BASE EXCEPTIONS
# =============================================================================

class PilotException(Exception):
    """Base exception for all AppFunctions Pilot errors"""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict:
        """Convert exception to structured log format"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context
        }


class MetadataValidationError(PilotException):
    """Raised when serialized function metadata is invalid or cannot be read"""
    pass


# =============================================================================
# DERIVATION EXCEPTIONS (metadata -> schema)
# =============================================================================

class ParserException(PilotException):
    """Base exception for all metadata parser errors"""
    pass


class SchemaDerivationError(ParserException):
    """Raised when function metadata cannot be converted into a Schema"""
    pass


class ReferenceNotFoundError(SchemaDerivationError):
    """Raised when a type reference names a component that does not exist"""

    def __init__(self, reference: str, available: Optional[List[str]] = None):
        super().__init__(
            f"Reference to {reference} not found.",
            {"reference": reference, "available": available or []}
        )
        self.reference = reference


class CyclicReferenceError(SchemaDerivationError):
    """Raised when component references form a cycle and cannot be inlined"""

    def __init__(self, chain: List[str]):
        super().__init__(
            f"Cyclic reference detected: {' -> '.join(chain)}",
            {"chain": list(chain)}
        )
        self.chain = list(chain)


class UnsupportedTypeError(SchemaDerivationError):
    """Raised for type descriptors (or primitive codes) with no DataType counterpart"""
    pass


# =============================================================================
# MARSHALLING EXCEPTIONS (encode / decode)
# =============================================================================

class MarshallingException(PilotException):
    """Base exception for argument encoding and response decoding errors"""
    pass


class MissingRequiredParameterError(MarshallingException):
    """Raised when a required, non-nullable argument is absent or null"""

    def __init__(self, name: str, path: Optional[str] = None):
        super().__init__(
            f"Missing required parameter: {name}",
            {"name": name, "path": path or name}
        )
        self.name = name
        self.path = path or name


class ArgumentTypeMismatchError(MarshallingException):
    """Raised when a loose argument value cannot be coerced to its declared type"""

    def __init__(self, name: str, expected_type: Any, cause: BaseException, path: Optional[str] = None):
        expected = getattr(expected_type, "value", expected_type)
        super().__init__(
            f"Failed to parse argument '{name}' for type {expected}. Reason: {cause}",
            {"name": name, "path": path or name, "expected": str(expected), "cause": str(cause)}
        )
        self.name = name
        self.expected_type = expected_type
        self.cause = cause


class UnsupportedSchemaShapeError(MarshallingException):
    """Raised when a schema describes a type/position combination that cannot be marshalled"""

    def __init__(self, name: str, data_type: Any, detail: str = ""):
        shown = getattr(data_type, "value", data_type)
        message = f"Unsupported data type: {shown} for key '{name}'"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, {"name": name, "type": str(shown)})
        self.name = name
        self.data_type = data_type


class PayloadTypeError(MarshallingException):
    """Raised when a payload field is read as a different kind than it was stored with"""

    def __init__(self, key: str, expected: str, actual: str):
        super().__init__(
            f"Field '{key}' holds {actual}, not {expected}",
            {"key": key, "expected": expected, "actual": actual}
        )
        self.key = key


# =============================================================================
# INVOCATION EXCEPTIONS
# =============================================================================

class InvocationException(PilotException):
    """Base exception for function invocation errors"""
    pass


class FunctionNotFoundError(InvocationException):
    """Raised when requested function is not among the discovered declarations"""

    def __init__(self, function_name: str, available_functions: list = None):
        super().__init__(
            f"Function '{function_name}' not found",
            {"function_name": function_name, "available": available_functions or []}
        )
        self.function_name = function_name
        self.available_functions = available_functions or []


class FunctionDisabledError(InvocationException):
    """Raised when the target function is administratively disabled"""

    def __init__(self, function_id: str, target_package: str):
        super().__init__(
            f"Function ({function_id}) is disabled",
            {"function": function_id, "target": target_package}
        )
        self.function_id = function_id


class TransportError(InvocationException):
    """Failure reported by the transport collaborator, passed through as-is"""

    def __init__(self, code: Any, message: str, context: dict = None):
        super().__init__(message, {"code": code, **(context or {})})
        self.code = code

    def __str__(self) -> str:
        return f"TransportError(code={self.code}): {self.message}"
