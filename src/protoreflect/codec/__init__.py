"""Wire primitives for protoreflect.

This module provides the schema-unaware Reader and Writer used to encode and
decode varints, fixed-width numbers, tags and length-delimited byte runs.
"""

from __future__ import annotations

from .reader import Reader, Tag
from .wire import FIXED32, FIXED64, LENGTH_DELIMITED, VARINT
from .writer import Writer, encode_varint

__all__ = [
    "Reader",
    "Writer",
    "Tag",
    "encode_varint",
    "VARINT",
    "FIXED64",
    "LENGTH_DELIMITED",
    "FIXED32",
]
