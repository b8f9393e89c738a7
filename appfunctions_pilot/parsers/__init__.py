"""
Parser Module - derives FunctionDeclarations from discovery metadata
"""
from .metadata_parser import MetadataParser, SchemaResolver, derive_declaration

__all__ = [
    'MetadataParser',
    'SchemaResolver',
    'derive_declaration',
]
