"""protoreflect: Reflective Schema Engine and Binary Wire Codec

A Python library that builds an in-memory type graph from a JSON schema
description, instantiates dynamic message objects from it, and losslessly
encodes/decodes them in the protobuf tag-value binary wire format.

Key Features:
- JSON schema descriptions validated with Pydantic
- Namespaces, message types, fields, one-ofs, enums and services
- Deferred extension fields bound on demand
- Shared default templates for cheap message instances
- Pure Python implementation of the wire format

Quick Start:
    >>> from protoreflect import Type
    >>>
    >>> person = Type.from_json("Person", {"fields": {
    ...     "id": {"id": 1, "rule": "required", "type": "uint32"},
    ...     "name": {"id": 2, "rule": "optional", "type": "string"},
    ... }})
    >>>
    >>> msg = person.create({"id": 7, "name": "x"})
    >>> data = person.encode(msg).finish()
    >>> data.hex()
    '0807120178'
    >>> person.decode(data).name
    'x'
"""

from __future__ import annotations

from .codec import Reader, Tag, Writer
from .config import DEFAULT_OPTIONS, CodecOptions
from .exceptions import (
    BufferUnderrunError,
    DecodeError,
    DuplicateIdError,
    DuplicateNameError,
    EncodeError,
    MalformedWireFormatError,
    NotMemberError,
    ProtoreflectError,
    SchemaError,
    UnsupportedWireTypeError,
)
from .models import Message, MessageTemplate
from .reflection import Enum, Field, Namespace, OneOf, ReflectionObject, Root, Service, Type
from .utils import encoded_size, field_sizes, from_plain, to_plain

__version__ = "0.1.0"

__all__ = [
    # Schema tree
    "ReflectionObject",
    "Namespace",
    "Root",
    "Type",
    "Field",
    "OneOf",
    "Enum",
    "Service",
    # Instances
    "Message",
    "MessageTemplate",
    # Wire primitives
    "Reader",
    "Writer",
    "Tag",
    # Configuration
    "CodecOptions",
    "DEFAULT_OPTIONS",
    # Exceptions
    "ProtoreflectError",
    "SchemaError",
    "DuplicateNameError",
    "DuplicateIdError",
    "NotMemberError",
    "EncodeError",
    "DecodeError",
    "MalformedWireFormatError",
    "UnsupportedWireTypeError",
    "BufferUnderrunError",
    # Utilities
    "encoded_size",
    "field_sizes",
    "to_plain",
    "from_plain",
    # Version
    "__version__",
]
