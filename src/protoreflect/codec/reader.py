"""Cursor-based reader for the tag-value wire format.

This module provides the Reader class used by fields and types to pull
varints, fixed-width numbers, tags and length-delimited runs out of an
immutable byte buffer. It knows nothing about schemas.
"""

from __future__ import annotations

import struct
from typing import NamedTuple

from ..exceptions import BufferUnderrunError, DecodeError, MalformedWireFormatError
from .wire import MAX_VARINT_BYTES, split_tag

_FIXED32 = struct.Struct("<I")
_SFIXED32 = struct.Struct("<i")
_FLOAT = struct.Struct("<f")
_FIXED64 = struct.Struct("<Q")
_SFIXED64 = struct.Struct("<q")
_DOUBLE = struct.Struct("<d")


class Tag(NamedTuple):
    """A decoded field tag."""

    id: int
    wire_type: int


class Reader:
    """Reads wire primitives from a byte buffer.

    The reader maintains a cursor (``position``) into the buffer and advances
    it with every read. Reading beyond ``length`` raises BufferUnderrunError.

    Example:
        >>> reader = Reader(b"\\x08\\x07")
        >>> reader.read_tag()
        Tag(id=1, wire_type=0)
        >>> reader.read_uint32()
        7
    """

    def __init__(self, buffer: bytes | bytearray | memoryview) -> None:
        """Initialize a reader over the given buffer.

        Args:
            buffer: Bytes to read from (copied into an immutable ``bytes``)
        """
        self.buffer = bytes(buffer)
        self.position = 0
        self.length = len(self.buffer)

    def __repr__(self) -> str:
        return f"Reader(position={self.position}, length={self.length})"

    def _take(self, count: int) -> bytes:
        """Return the next ``count`` bytes and advance past them."""
        end = self.position + count
        if count < 0 or end > self.length:
            raise BufferUnderrunError(
                f"Index out of range: need {count} bytes at {self.position}, "
                f"have {self.length - self.position}"
            )
        chunk = self.buffer[self.position:end]
        self.position = end
        return chunk

    def read_varint(self) -> int:
        """Read an unsigned base-128 varint of up to 64 bits.

        Returns:
            Decoded unsigned integer

        Raises:
            BufferUnderrunError: If the buffer ends mid-varint
            MalformedWireFormatError: If the varint exceeds 10 bytes
        """
        result = 0
        shift = 0
        for _ in range(MAX_VARINT_BYTES):
            if self.position >= self.length:
                raise BufferUnderrunError(
                    f"Index out of range: varint truncated at {self.position}"
                )
            byte = self.buffer[self.position]
            self.position += 1
            result |= (byte & 0x7F) << shift
            if byte < 0x80:
                return result & 0xFFFFFFFFFFFFFFFF
            shift += 7
        raise MalformedWireFormatError(f"Varint longer than {MAX_VARINT_BYTES} bytes")

    def read_tag(self) -> Tag:
        """Read a field tag and split it into id and wire type."""
        field_id, wire_type = split_tag(self.read_varint())
        return Tag(field_id, wire_type)

    def read_uint32(self) -> int:
        return self.read_varint() & 0xFFFFFFFF

    def read_int32(self) -> int:
        value = self.read_varint() & 0xFFFFFFFF
        return value - (1 << 32) if value & 0x80000000 else value

    def read_sint32(self) -> int:
        value = self.read_varint() & 0xFFFFFFFF
        return (value >> 1) ^ -(value & 1)

    def read_uint64(self) -> int:
        return self.read_varint()

    def read_int64(self) -> int:
        value = self.read_varint()
        return value - (1 << 64) if value & (1 << 63) else value

    def read_sint64(self) -> int:
        value = self.read_varint()
        return (value >> 1) ^ -(value & 1)

    def read_bool(self) -> bool:
        return self.read_varint() != 0

    def read_fixed32(self) -> int:
        return _FIXED32.unpack(self._take(4))[0]

    def read_sfixed32(self) -> int:
        return _SFIXED32.unpack(self._take(4))[0]

    def read_float(self) -> float:
        return _FLOAT.unpack(self._take(4))[0]

    def read_fixed64(self) -> int:
        return _FIXED64.unpack(self._take(8))[0]

    def read_sfixed64(self) -> int:
        return _SFIXED64.unpack(self._take(8))[0]

    def read_double(self) -> float:
        return _DOUBLE.unpack(self._take(8))[0]

    def read_bytes(self) -> bytes:
        """Read a varint length prefix followed by that many bytes."""
        return self._take(self.read_uint32())

    def read_string(self) -> str:
        """Read a length-delimited UTF-8 string.

        Raises:
            DecodeError: If the bytes are not valid UTF-8
        """
        raw = self.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid UTF-8 encoding: {e}") from e

    def skip(self, count: int | None = None) -> Reader:
        """Advance the cursor without decoding.

        Args:
            count: Number of bytes to skip, or None to skip exactly one varint

        Returns:
            This reader

        Raises:
            BufferUnderrunError: If fewer bytes remain than requested
        """
        if count is None:
            self.read_varint()
        else:
            self._take(count)
        return self

    def remaining(self) -> int:
        """Return the number of unread bytes."""
        return self.length - self.position
