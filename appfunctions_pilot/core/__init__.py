"""
AppFunctions Pilot - Core Module
Schemas, metadata models, payload container, interfaces and exceptions
"""

from .exceptions import *
from .interfaces import (
    BaseParser,
    ExecuteError,
    ExecuteRequest,
    ExecuteSuccess,
    FunctionTransport,
    MetadataProvider,
    TransportErrorCode,
)
from .metadata import FunctionMetadata, PackageMetadata
from .payload import RETURN_VALUE_KEY, FunctionData, FunctionDataBuilder
from .schema import DataType, FunctionDeclaration, FunctionResult, Schema

__all__ = [
    'BaseParser',
    'MetadataProvider',
    'FunctionTransport',
    'TransportErrorCode',
    'ExecuteRequest',
    'ExecuteSuccess',
    'ExecuteError',
    'FunctionMetadata',
    'PackageMetadata',
    'RETURN_VALUE_KEY',
    'FunctionData',
    'FunctionDataBuilder',
    'DataType',
    'Schema',
    'FunctionDeclaration',
    'FunctionResult',
    'PilotException',
]
