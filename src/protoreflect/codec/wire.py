"""Wire type codes and scalar type tables.

Every field on the wire is ``varint(tag) || payload`` where
``tag = (field_id << 3) | wire_type``.
"""

from __future__ import annotations

from typing import Any

VARINT = 0
FIXED64 = 1
LENGTH_DELIMITED = 2
FIXED32 = 5

WIRE_TYPES = (VARINT, FIXED64, LENGTH_DELIMITED, FIXED32)

# Scalar type name -> wire type
SCALAR_WIRE_TYPES: dict[str, int] = {
    "double": FIXED64,
    "float": FIXED32,
    "int32": VARINT,
    "uint32": VARINT,
    "sint32": VARINT,
    "fixed32": FIXED32,
    "sfixed32": FIXED32,
    "int64": VARINT,
    "uint64": VARINT,
    "sint64": VARINT,
    "fixed64": FIXED64,
    "sfixed64": FIXED64,
    "bool": VARINT,
    "string": LENGTH_DELIMITED,
    "bytes": LENGTH_DELIMITED,
}

# Scalar type name -> default value
SCALAR_DEFAULTS: dict[str, Any] = {
    "double": 0.0,
    "float": 0.0,
    "int32": 0,
    "uint32": 0,
    "sint32": 0,
    "fixed32": 0,
    "sfixed32": 0,
    "int64": 0,
    "uint64": 0,
    "sint64": 0,
    "fixed64": 0,
    "sfixed64": 0,
    "bool": False,
    "string": "",
    "bytes": b"",
}

# Types that may be packed into a single length-delimited run when repeated
PACKABLE_TYPES = frozenset(
    name for name, wire_type in SCALAR_WIRE_TYPES.items() if wire_type != LENGTH_DELIMITED
)

# Types usable as map keys
MAP_KEY_TYPES = frozenset(
    name for name in SCALAR_WIRE_TYPES if name not in ("double", "float", "bytes")
)

# Varints are at most 10 bytes for 64-bit values
MAX_VARINT_BYTES = 10


def make_tag(field_id: int, wire_type: int) -> int:
    """Combine a field id and wire type into a tag value."""
    return (field_id << 3) | wire_type


def split_tag(value: int) -> tuple[int, int]:
    """Split a tag value into ``(field_id, wire_type)``."""
    return value >> 3, value & 7


def zigzag_encode(value: int, bits: int = 64) -> int:
    """Map a signed integer onto an unsigned one (0, -1, 1, -2 -> 0, 1, 2, 3)."""
    return ((value << 1) ^ (value >> (bits - 1))) & ((1 << bits) - 1)


def zigzag_decode(value: int) -> int:
    """Inverse of :func:`zigzag_encode`."""
    return (value >> 1) ^ -(value & 1)
