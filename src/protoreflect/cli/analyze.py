"""Schema analysis CLI command."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..reflection.enum import Enum
from ..reflection.namespace import Namespace
from ..reflection.root import Root
from ..reflection.service import Service
from ..reflection.type import Type
from ..utils.sizing import varint_size


def load_schema(file_path: Path, **kwargs: Any) -> Root:
    """Load a JSON schema file into a root namespace.

    Args:
        file_path: Path to a JSON file with a top-level ``nested`` member
        **kwargs: Passed to ``Root.from_json`` (e.g. ``codec_options``)

    Returns:
        The populated root
    """
    with open(file_path, encoding="utf-8") as f:
        schema = json.load(f)
    return Root.from_json(schema, **kwargs)


def analyze_file(file_path: Path) -> None:
    """Print every message type of a JSON schema file.

    Args:
        file_path: Path to the JSON schema
    """
    root = load_schema(file_path)
    root.resolve_all()

    types = list(_iter_types(root))
    if not types:
        print(f"No message types found in {file_path}")
        return

    print("|" * 7, "protoreflect: Reflective Schema Engine", "|" * 7)
    print(f"{len(types)} type{'s' if len(types) != 1 else ''} loaded.")
    print("Tag sizes are in bytes.")
    print()

    for message_type in types:
        analyze_type(message_type)


def _iter_types(namespace: Namespace) -> Any:
    for child in namespace.nested_list:
        if isinstance(child, Type):
            yield child
        if isinstance(child, Namespace) and not isinstance(child, Service):
            yield from _iter_types(child)


def analyze_type(message_type: Type) -> None:
    """Print the field table of a single message type.

    Args:
        message_type: Type to analyze
    """
    message_type.resolve_extends()
    name = message_type.full_name
    print(f"{'=' * 19} {name} {'=' * 19}")

    for i, field_name in enumerate(message_type.field_names, 1):
        field = message_type.fields[field_name].resolve()
        type_name = f"map<{field.key_type}, {field.type}>" if field.map else field.type
        info_parts = [field.rule, type_name]
        if isinstance(field.resolved_type, Enum):
            info_parts.append(f"(enum: {len(field.resolved_type.values)} values)")
        if field.packed:
            info_parts.append("[packed]")
        if field.declaring_field is not None:
            info_parts.append("[extension]")

        tag_bytes = varint_size(field.id << 3)
        field_desc = f"{i}. {field_name} = {field.id}"
        dots = "." * max(1, 40 - len(field_desc))
        print(f"        {field_desc}{dots}{tag_bytes} tag byte{'s' if tag_bytes != 1 else ''}  {' '.join(info_parts)}")

    if message_type.oneofs:
        for oneof in message_type.oneofs.values():
            print(f"        oneof {oneof.name}: {', '.join(oneof.oneof)}")
    if message_type.extensions:
        print(f"        extensions: {message_type.extensions}")
    if message_type.reserved:
        print(f"        reserved: {message_type.reserved}")
    print()
