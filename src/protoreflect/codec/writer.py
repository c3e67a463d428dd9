"""Append-only writer for the tag-value wire format.

This module provides the Writer class, a growable byte builder with
fork/ldelim support so nested length-delimited runs can be written without a
separate length pre-pass.
"""

from __future__ import annotations

import struct

from ..exceptions import EncodeError
from .wire import make_tag, zigzag_encode

_FIXED32 = struct.Struct("<I")
_SFIXED32 = struct.Struct("<i")
_FLOAT = struct.Struct("<f")
_FIXED64 = struct.Struct("<Q")
_SFIXED64 = struct.Struct("<q")
_DOUBLE = struct.Struct("<d")

_UINT32_MAX = (1 << 32) - 1
_UINT64_MAX = (1 << 64) - 1


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as a base-128 varint.

    Args:
        value: Unsigned integer (0 to 2**64 - 1)

    Returns:
        Encoded bytes, least significant group first

    Raises:
        EncodeError: If value is negative or wider than 64 bits
    """
    if value < 0 or value > _UINT64_MAX:
        raise EncodeError(f"Varint value out of range: {value}")
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _check_int(value: object, low: int, high: int, type_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodeError(f"{type_name}: expected int, got {type(value).__name__}")
    if value < low or value > high:
        raise EncodeError(f"{type_name}: value {value} out of range [{low}, {high}]")
    return value


class Writer:
    """Builds wire-format bytes.

    Values are appended to the current buffer. ``fork()`` starts a nested
    buffer; ``ldelim()`` closes it and appends it to the parent prefixed with
    its byte length; ``reset()`` discards it.

    Example:
        >>> writer = Writer()
        >>> writer.write_tag(1, 0).write_uint32(7)
        >>> writer.finish()
        b'\\x08\\x07'
    """

    def __init__(self) -> None:
        """Initialize an empty writer."""
        self._buffer = bytearray()
        self._stack: list[bytearray] = []

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        return f"Writer(length={len(self._buffer)}, depth={len(self._stack)})"

    # Raw

    def write_raw(self, data: bytes) -> Writer:
        """Append bytes without a length prefix."""
        self._buffer.extend(data)
        return self

    def write_varint(self, value: int) -> Writer:
        self._buffer.extend(encode_varint(value))
        return self

    def write_tag(self, field_id: int, wire_type: int) -> Writer:
        """Write a field tag.

        Args:
            field_id: Positive field number
            wire_type: Wire type code (0, 1, 2 or 5)
        """
        return self.write_varint(make_tag(field_id, wire_type))

    # Varint-encoded integers

    def write_uint32(self, value: int) -> Writer:
        return self.write_varint(_check_int(value, 0, _UINT32_MAX, "uint32"))

    def write_int32(self, value: int) -> Writer:
        value = _check_int(value, -(1 << 31), (1 << 31) - 1, "int32")
        # Negative int32 values are sign-extended to ten bytes
        return self.write_varint(value & _UINT64_MAX)

    def write_sint32(self, value: int) -> Writer:
        value = _check_int(value, -(1 << 31), (1 << 31) - 1, "sint32")
        return self.write_varint(zigzag_encode(value, 32))

    def write_uint64(self, value: int) -> Writer:
        return self.write_varint(_check_int(value, 0, _UINT64_MAX, "uint64"))

    def write_int64(self, value: int) -> Writer:
        value = _check_int(value, -(1 << 63), (1 << 63) - 1, "int64")
        return self.write_varint(value & _UINT64_MAX)

    def write_sint64(self, value: int) -> Writer:
        value = _check_int(value, -(1 << 63), (1 << 63) - 1, "sint64")
        return self.write_varint(zigzag_encode(value, 64))

    def write_bool(self, value: bool) -> Writer:
        return self.write_varint(1 if value else 0)

    # Fixed-width numbers

    def write_fixed32(self, value: int) -> Writer:
        self._buffer.extend(_FIXED32.pack(_check_int(value, 0, _UINT32_MAX, "fixed32")))
        return self

    def write_sfixed32(self, value: int) -> Writer:
        value = _check_int(value, -(1 << 31), (1 << 31) - 1, "sfixed32")
        self._buffer.extend(_SFIXED32.pack(value))
        return self

    def write_fixed64(self, value: int) -> Writer:
        self._buffer.extend(_FIXED64.pack(_check_int(value, 0, _UINT64_MAX, "fixed64")))
        return self

    def write_sfixed64(self, value: int) -> Writer:
        value = _check_int(value, -(1 << 63), (1 << 63) - 1, "sfixed64")
        self._buffer.extend(_SFIXED64.pack(value))
        return self

    def write_float(self, value: float) -> Writer:
        try:
            self._buffer.extend(_FLOAT.pack(value))
        except (struct.error, OverflowError) as e:
            raise EncodeError(f"float: cannot encode {value!r}: {e}") from e
        return self

    def write_double(self, value: float) -> Writer:
        try:
            self._buffer.extend(_DOUBLE.pack(value))
        except struct.error as e:
            raise EncodeError(f"double: cannot encode {value!r}: {e}") from e
        return self

    # Length-delimited runs

    def write_bytes(self, value: bytes | bytearray) -> Writer:
        """Write a varint length prefix followed by the bytes."""
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise EncodeError(f"bytes: expected bytes, got {type(value).__name__}")
        self.write_varint(len(value))
        self._buffer.extend(value)
        return self

    def write_string(self, value: str) -> Writer:
        if not isinstance(value, str):
            raise EncodeError(f"string: expected str, got {type(value).__name__}")
        return self.write_bytes(value.encode("utf-8"))

    # Nesting

    def fork(self) -> Writer:
        """Start a nested buffer, saving the current one."""
        self._stack.append(self._buffer)
        self._buffer = bytearray()
        return self

    def reset(self) -> Writer:
        """Discard the current buffer, restoring the last forked state if any."""
        if self._stack:
            self._buffer = self._stack.pop()
        else:
            self._buffer = bytearray()
        return self

    def ldelim(self) -> Writer:
        """Close the current fork and append it to its parent, length-prefixed.

        Raises:
            EncodeError: If there is no pending fork
        """
        if not self._stack:
            raise EncodeError("ldelim() called without a matching fork()")
        nested = self._buffer
        self._buffer = self._stack.pop()
        self.write_varint(len(nested))
        self._buffer.extend(nested)
        return self

    def finish(self) -> bytes:
        """Return the bytes of the current buffer and reset.

        When called inside a fork, the forked bytes are returned and the
        parent buffer becomes current again.

        Returns:
            Contiguous encoded bytes
        """
        data = bytes(self._buffer)
        self.reset()
        return data
