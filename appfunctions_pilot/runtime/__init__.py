"""
AppFunctions Pilot - Runtime Module
Argument encoding, response decoding, execution and the declaration cache
"""

from .decoder import ResponseDecoder, decode_response
from .discovery import JsonMetadataProvider
from .encoder import ArgumentEncoder, encode_arguments
from .executor import FunctionExecutor
from .registry import DeclarationRegistry, DeclarationSnapshot

__all__ = [
    'ArgumentEncoder',
    'encode_arguments',
    'ResponseDecoder',
    'decode_response',
    'FunctionExecutor',
    'DeclarationRegistry',
    'DeclarationSnapshot',
    'JsonMetadataProvider',
]
