"""
AppFunctions Pilot - Core Interfaces
Abstract Base Classes for the parser and the two external collaborators

This module defines the contracts the library is written against:
- BaseParser: turns discovery metadata into FunctionDeclarations
- MetadataProvider: the discovery collaborator (pull, or a stream of full lists)
- FunctionTransport: the collaborator that actually executes a function
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, AsyncIterator, Dict, List, Union

from .metadata import FunctionMetadata, PackageMetadata
from .payload import RETURN_VALUE_KEY, FunctionData
from .schema import FunctionDeclaration


# =============================================================================
# PARSER INTERFACE
# =============================================================================

class BaseParser(ABC):
    """
    Abstract Parser Interface

    Contract for converting discovery metadata into the FunctionDeclaration
    format used for encoding arguments and decoding responses.
    """

    @property
    def parser_version(self) -> str:
        """
        Return parser version (SemVer format)
        Override this in subclasses for version tracking
        """
        return "1.0.0"

    @abstractmethod
    def derive_declaration(self, metadata: FunctionMetadata) -> FunctionDeclaration:
        """
        Build the declaration of a single function

        Raises:
            SchemaDerivationError: If the metadata cannot be expressed as a Schema
        """
        pass

    @abstractmethod
    def parse_metadata(self, functions: List[FunctionMetadata]) -> List[FunctionDeclaration]:
        """
        Build declarations for every function of a discovery result

        Args:
            functions: Function metadata as reported by discovery

        Returns:
            List of FunctionDeclaration objects
        """
        pass

    def get_parse_metadata(self) -> Dict[str, Any]:
        """
        Return observability metrics from last parse operation

        Returns:
            Dictionary with keys:
            - parse_duration_ms: Time taken to parse (float)
            - function_count: Number of declarations produced (int)
            - warnings: List of non-fatal issues (List[str])
        """
        return {
            "parse_duration_ms": 0.0,
            "function_count": 0,
            "warnings": []
        }


# =============================================================================
# DISCOVERY INTERFACE
# =============================================================================

class MetadataProvider(ABC):
    """
    Discovery collaborator

    Reports the functions exposed by a target package, either on demand or as
    a stream that emits the full list again whenever it changes.
    """

    @abstractmethod
    async def fetch_metadata(self, target_package: str) -> List[PackageMetadata]:
        """Return the current metadata of `target_package` (empty if unknown)"""
        pass

    async def observe(self, target_package: str) -> AsyncIterator[List[PackageMetadata]]:
        """
        Stream full metadata lists for `target_package`

        Note:
            Default implementation emits a single fetch_metadata() result.
            Override for providers that push updates.
        """
        yield await self.fetch_metadata(target_package)


# =============================================================================
# TRANSPORT INTERFACE
# =============================================================================

class TransportErrorCode(IntEnum):
    """Error codes a transport may report for a failed call"""
    DENIED = 1000
    INVALID_ARGUMENT = 1001
    DISABLED = 1002
    FUNCTION_NOT_FOUND = 1003
    RESOURCE_NOT_FOUND = 1500
    LIMIT_EXCEEDED = 1501
    RESOURCE_ALREADY_EXISTS = 1502
    SYSTEM_ERROR = 2000
    CANCELLED = 2001
    APP_UNKNOWN_ERROR = 3000


@dataclass(frozen=True)
class ExecuteRequest:
    """Request handed to the transport"""
    target_package: str
    function_identifier: str
    function_parameters: FunctionData


@dataclass(frozen=True)
class ExecuteSuccess:
    """Successful call; the return value (if any) is stored under RETURN_VALUE_KEY"""
    return_value: FunctionData

    PROPERTY_RETURN_VALUE = RETURN_VALUE_KEY


@dataclass(frozen=True)
class ExecuteError:
    """Failed call, as reported by the executing side"""
    code: Union[TransportErrorCode, int]
    message: str


ExecuteResponse = Union[ExecuteSuccess, ExecuteError]


class FunctionTransport(ABC):
    """
    Transport collaborator

    Executes a function by identifier inside the target package. Retries, if
    any, are the transport's own business.
    """

    @abstractmethod
    async def is_function_enabled(self, target_package: str, function_id: str) -> bool:
        pass

    @abstractmethod
    async def execute_function(self, request: ExecuteRequest) -> ExecuteResponse:
        """
        Execute a function call

        Returns:
            ExecuteSuccess with the returned payload, or ExecuteError
        """
        pass


__all__ = [
    'BaseParser',
    'MetadataProvider',
    'FunctionTransport',
    'TransportErrorCode',
    'ExecuteRequest',
    'ExecuteSuccess',
    'ExecuteError',
    'ExecuteResponse',
]
