"""Command line entry point.

Usage:
    msgkit check registry.toml                  # compile and verify, exit 1 on error
    msgkit check registry.toml --types mytypes  # resolve custom types from a module
    msgkit messages registry.toml               # wire names per generated type
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from msgkit.compiler import CompiledSchema, compile_schema
from msgkit.config import CompilerSettings
from msgkit.core.schema import load_schema
from msgkit.errors import SchemaError

logger = logging.getLogger(__name__)


def _module_types(names: list[str]) -> dict[str, Any]:
    """Classes defined in the given modules, by name."""
    types: dict[str, Any] = {}
    for name in names:
        module = importlib.import_module(name)
        types.update(
            (attr, value)
            for attr, value in vars(module).items()
            if isinstance(value, type) and not attr.startswith("_")
        )
    return types


def _compile(path: Path, types: Mapping[str, Any], settings: CompilerSettings) -> CompiledSchema:
    schema = load_schema(path)
    logger.info(
        "Loaded %s: %d interface(s), %d contract(s)",
        path,
        len(schema.interfaces),
        len(schema.contracts),
    )
    return compile_schema(schema, types=types, settings=settings)


def _print_messages(compiled: CompiledSchema) -> None:
    for name, iface in compiled.interfaces.items():
        print(f"interface {name}")
        for category, message_type in iface.messages.items():
            print(f"  {category.value}: {', '.join(message_type.messages()) or '-'}")
    for name, item in compiled.contracts.items():
        print(f"contract {name}")
        for category, entry in item.entrypoints.items():
            print(f"  {category.value}: {', '.join(entry.messages()) or '-'}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="msgkit",
        description="Compile interface and contract declarations into message types",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log build steps")
    commands = parser.add_subparsers(dest="command", required=True)
    for command, help_text in (
        ("check", "Compile a declaration file and verify it"),
        ("messages", "Print the wire names of every generated type"),
    ):
        sub = commands.add_parser(command, help=help_text)
        sub.add_argument("schema", type=Path, help="Declaration file (.json, .toml, .yaml)")
        sub.add_argument(
            "--types",
            action="append",
            default=[],
            metavar="MODULE",
            help="Module whose classes resolve custom type names (repeatable)",
        )

    args = parser.parse_args(argv)
    settings = CompilerSettings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        compiled = _compile(args.schema, _module_types(args.types), settings)
    except SchemaError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.command == "messages":
        _print_messages(compiled)
    else:
        print(
            f"ok: {len(compiled.interfaces)} interface(s), "
            f"{len(compiled.contracts)} contract(s) in {args.schema}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
