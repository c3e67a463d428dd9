"""Main CLI entry point for protoreflect."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .analyze import analyze_file, load_schema
from ..exceptions import ProtoreflectError
from ..utils.convert import from_plain, to_plain

logger = logging.getLogger(__name__)


def _read_input(path: Optional[str]) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _encode(args: argparse.Namespace) -> int:
    root = load_schema(Path(args.schema))
    message_type = root.lookup_type(args.encode)
    obj = json.loads(_read_input(args.input))
    # Checked before create(), which fills required fields with defaults
    reason = message_type.verify(obj)
    if reason is not None:
        print(f"Error: {reason}", file=sys.stderr)
        return 1
    message = from_plain(message_type, obj)
    if args.delimited:
        data = message_type.encode_delimited(message).finish()
    else:
        data = message_type.encode(message).finish()
    logger.debug("Encoded %s into %d bytes", message_type, len(data))
    print(data.hex())
    return 0


def _decode(args: argparse.Namespace) -> int:
    root = load_schema(Path(args.schema))
    message_type = root.lookup_type(args.decode)
    try:
        data = bytes.fromhex(_read_input(args.input).strip())
    except ValueError as e:
        print(f"Error: input is not hex: {e}", file=sys.stderr)
        return 1
    if args.delimited:
        message = message_type.decode_delimited(data)
    else:
        message = message_type.decode(data)
    print(json.dumps(to_plain(message_type, message, enums_as_names=args.enum_names), indent=2))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the protoreflect CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        prog="protoreflect",
        description="protoreflect: Reflective Schema Engine and Binary Wire Codec",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  protoreflect --analyze schema.json                         List message types
  protoreflect --schema schema.json --encode pkg.Person      JSON (stdin) -> hex
  protoreflect --schema schema.json --decode pkg.Person      hex (stdin) -> JSON
  protoreflect --version                                     Show version
        """,
    )

    parser.add_argument(
        "--analyze",
        metavar="FILE",
        type=str,
        help="Analyze a JSON schema and list its message types",
    )
    parser.add_argument("--schema", metavar="FILE", type=str, help="JSON schema file")
    parser.add_argument("--encode", metavar="TYPE", type=str, help="Encode a JSON message as TYPE")
    parser.add_argument("--decode", metavar="TYPE", type=str, help="Decode hex bytes as TYPE")
    parser.add_argument("--input", metavar="FILE", type=str, help="Read input from FILE instead of stdin")
    parser.add_argument(
        "--delimited",
        action="store_true",
        help="Use a varint length prefix around the message",
    )
    parser.add_argument(
        "--enum-names",
        action="store_true",
        help="Print enum values by name when decoding",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--version",
        action="version",
        version="protoreflect 0.1.0",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Handle --analyze
    if args.analyze:
        file_path = Path(args.analyze)
        if not file_path.exists():
            print(f"Error: File not found: {file_path}", file=sys.stderr)
            return 1

        try:
            analyze_file(file_path)
            return 0
        except (ProtoreflectError, ValueError, OSError) as e:
            print(f"Error analyzing file: {e}", file=sys.stderr)
            return 1

    if args.encode or args.decode:
        if args.encode and args.decode:
            parser.error("--encode and --decode are mutually exclusive")
        if not args.schema:
            parser.error("--schema is required with --encode/--decode")
        if not Path(args.schema).exists():
            print(f"Error: File not found: {args.schema}", file=sys.stderr)
            return 1
        try:
            return _encode(args) if args.encode else _decode(args)
        except (ProtoreflectError, ValueError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    # If no command specified, show help
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
