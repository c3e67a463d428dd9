"""Utility functions for protoreflect.

This module provides default-equality helpers, size calculation and
JSON-friendly conversion of message instances.
"""

from __future__ import annotations

from .convert import from_plain, to_plain
from .equality import loose_equals, strict_equals
from .sizing import encoded_size, field_sizes, varint_size

__all__ = [
    # Equality
    "loose_equals",
    "strict_equals",
    # Sizing
    "encoded_size",
    "field_sizes",
    "varint_size",
    # Conversion
    "to_plain",
    "from_plain",
]
