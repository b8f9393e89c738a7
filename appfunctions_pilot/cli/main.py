"""
AppFunctions Pilot - Developer CLI
Inspect function metadata and preview encoded call payloads

Usage:
    appfunctions-pilot describe --metadata <file> [--package <name>]
    appfunctions-pilot encode --metadata <file> --function <id-or-short-name> --args <json>

Example:
    appfunctions-pilot encode --metadata tool.json --function add --args '{"num1": 10, "num2": 6}'

Output is one JSON document on stdout. Exit code 0 = success, 1 = error.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from ..core.config import get_settings
from ..core.exceptions import PilotException
from ..core.log import configure_logging
from ..parsers.metadata_parser import MetadataParser
from ..runtime.discovery import JsonMetadataProvider
from ..runtime.encoder import ArgumentEncoder
from ..runtime.registry import DeclarationRegistry


def load_registry(metadata_path: str, package: str, strict: bool) -> DeclarationRegistry:
    """
    Build a registry from a metadata JSON file

    Raises:
        MetadataValidationError: If the file is missing or invalid
        SchemaDerivationError: In strict mode, if a function cannot be derived
    """
    registry = DeclarationRegistry(package, MetadataParser(strict=strict))
    asyncio.run(registry.refresh(JsonMetadataProvider(metadata_path)))
    return registry


def describe(metadata_path: str, package: str, strict: bool = False) -> Dict[str, Any]:
    registry = load_registry(metadata_path, package, strict)
    return {
        "status": "success",
        "package": package,
        "description": registry.app_description,
        "functions": [decl.to_json_dict() for decl in registry.declarations],
        "warnings": registry.parser.get_parse_metadata()["warnings"],
    }


def encode(metadata_path: str, package: str, function: str, args_json: str, strict: bool = False) -> Dict[str, Any]:
    try:
        arguments = json.loads(args_json)
    except json.JSONDecodeError as e:
        return {
            "status": "error",
            "error": f"Invalid JSON arguments: {str(e)}"
        }
    if not isinstance(arguments, dict):
        return {
            "status": "error",
            "error": "Arguments must be a JSON object"
        }

    registry = load_registry(metadata_path, package, strict)
    declaration = registry.require(function)
    payload = ArgumentEncoder().encode(declaration.parameters, arguments)

    return {
        "status": "success",
        "function": declaration.name,
        "payload": payload.to_dict(),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="appfunctions-pilot",
        description="AppFunctions Pilot - inspect function metadata and encoded payloads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  appfunctions-pilot describe --metadata tool.json
  appfunctions-pilot encode --metadata tool.json --function add --args '{"num1": 10, "num2": 6}'

Settings (PILOT_TARGET_PACKAGE, PILOT_METADATA_PATH, PILOT_LOG_LEVEL,
PILOT_STRICT_DERIVATION) supply the defaults for the options below.
        """
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--metadata', help='Path to the package metadata JSON file')
    common.add_argument('--package', help='Target package name')
    common.add_argument('--strict', action='store_true', help='Fail on the first function that cannot be derived')
    common.add_argument('--log-level', help='Logging level (default: from settings)')

    commands = parser.add_subparsers(dest='command', required=True)
    commands.add_parser('describe', parents=[common], help='Print the derived function declarations')

    encode_cmd = commands.add_parser('encode', parents=[common], help='Print the payload built for a call')
    encode_cmd.add_argument('--function', required=True, help='Function identifier or short name')
    encode_cmd.add_argument('--args', default='{}', help='Arguments as JSON object (e.g., \'{"num1": 10}\')')

    return parser


def run(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    configure_logging(args.log_level or settings.log_level)

    metadata_path = args.metadata or settings.metadata_path
    package = args.package or settings.target_package
    strict = args.strict or settings.strict_derivation

    if not metadata_path:
        return {
            "status": "error",
            "error": "No metadata file given (use --metadata or PILOT_METADATA_PATH)"
        }

    try:
        if args.command == 'describe':
            return describe(metadata_path, package, strict)
        return encode(metadata_path, package, args.function, args.args, strict)
    except PilotException as e:
        return {
            "status": "error",
            "error": e.message,
            "type": type(e).__name__,
            "context": e.context,
        }


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point
    """
    result = run(argv)
    print(json.dumps(result, ensure_ascii=False, default=str))
    return 0 if result["status"] == "success" else 1


if __name__ == "__main__":
    sys.exit(main())
