"""Unit tests for the wire Reader and Writer."""

from __future__ import annotations

import math

import pytest

from protoreflect import BufferUnderrunError, DecodeError, EncodeError, MalformedWireFormatError, Reader, Writer
from protoreflect.codec import encode_varint
from protoreflect.codec.wire import LENGTH_DELIMITED, VARINT, make_tag, split_tag, zigzag_decode, zigzag_encode


class TestVarint:
    """Test base-128 varints."""

    def test_single_byte(self) -> None:
        """Values below 128 take one byte."""
        assert encode_varint(0) == b"\x00"
        assert encode_varint(1) == b"\x01"
        assert encode_varint(127) == b"\x7f"

    def test_multi_byte(self) -> None:
        """Test least-significant-group-first layout."""
        assert encode_varint(128) == b"\x80\x01"
        assert encode_varint(300) == b"\xac\x02"
        assert Reader(b"\xac\x02").read_varint() == 300

    def test_max_uint64(self) -> None:
        """The largest 64-bit value takes ten bytes."""
        data = encode_varint(2**64 - 1)
        assert len(data) == 10
        assert Reader(data).read_varint() == 2**64 - 1

    def test_out_of_range(self) -> None:
        """Negative and over-wide values are rejected."""
        with pytest.raises(EncodeError):
            encode_varint(-1)
        with pytest.raises(EncodeError):
            encode_varint(2**64)

    def test_truncated(self) -> None:
        """A continuation bit at the end of the buffer is an underrun."""
        with pytest.raises(BufferUnderrunError):
            Reader(b"\x80").read_varint()

    def test_too_long(self) -> None:
        """More than ten varint bytes is malformed."""
        with pytest.raises(MalformedWireFormatError):
            Reader(b"\x80" * 10 + b"\x01").read_varint()


class TestTags:
    """Test tag packing."""

    def test_make_and_split(self) -> None:
        assert make_tag(1, VARINT) == 0x08
        assert make_tag(2, LENGTH_DELIMITED) == 0x12
        assert split_tag(0x12) == (2, LENGTH_DELIMITED)

    def test_read_tag(self) -> None:
        """Test a tag needing two varint bytes."""
        tag = Reader(b"\xa2\x06").read_tag()
        assert tag.id == 100
        assert tag.wire_type == LENGTH_DELIMITED

    def test_zigzag(self) -> None:
        """Small magnitudes map to small unsigned values."""
        assert [zigzag_encode(v) for v in (0, -1, 1, -2, 2)] == [0, 1, 2, 3, 4]
        assert zigzag_encode(-(2**31), 32) == 2**32 - 1
        assert zigzag_decode(3) == -2


class TestWriterScalars:
    """Test Writer scalar encodings."""

    def test_uint32(self) -> None:
        assert Writer().write_uint32(7).finish() == b"\x07"

    def test_negative_int32_is_ten_bytes(self) -> None:
        """Negative int32 values are sign-extended to 64 bits."""
        data = Writer().write_int32(-1).finish()
        assert data == b"\xff" * 9 + b"\x01"
        assert Reader(data).read_int32() == -1

    def test_sint32(self) -> None:
        assert Writer().write_sint32(-1).finish() == b"\x01"
        assert Writer().write_sint32(1).finish() == b"\x02"
        assert Reader(b"\x03").read_sint32() == -2

    def test_int64_and_sint64(self) -> None:
        data = Writer().write_int64(-2).write_sint64(-(2**63)).finish()
        reader = Reader(data)
        assert reader.read_int64() == -2
        assert reader.read_sint64() == -(2**63)
        assert reader.remaining() == 0

    def test_fixed_width(self) -> None:
        """Fixed-width values are little-endian."""
        assert Writer().write_fixed32(1).finish() == b"\x01\x00\x00\x00"
        assert Writer().write_sfixed32(-1).finish() == b"\xff\xff\xff\xff"
        assert Writer().write_fixed64(1).finish() == b"\x01" + b"\x00" * 7
        reader = Reader(Writer().write_sfixed64(-5).write_double(1.5).write_float(0.25).finish())
        assert reader.read_sfixed64() == -5
        assert reader.read_double() == 1.5
        assert reader.read_float() == 0.25

    def test_float_special_values(self) -> None:
        reader = Reader(Writer().write_double(math.inf).write_float(math.nan).finish())
        assert reader.read_double() == math.inf
        assert math.isnan(reader.read_float())

    def test_bool(self) -> None:
        assert Writer().write_bool(True).write_bool(False).finish() == b"\x01\x00"
        reader = Reader(b"\x01\x00")
        assert reader.read_bool() is True
        assert reader.read_bool() is False

    def test_string_and_bytes(self) -> None:
        data = Writer().write_string("hé").write_bytes(b"\x00\x01").finish()
        assert data == b"\x03h\xc3\xa9\x02\x00\x01"
        reader = Reader(data)
        assert reader.read_string() == "hé"
        assert reader.read_bytes() == b"\x00\x01"

    @pytest.mark.parametrize(
        "method,value",
        [
            ("write_uint32", -1),
            ("write_uint32", 2**32),
            ("write_int32", 2**31),
            ("write_sint32", -(2**31) - 1),
            ("write_uint64", 2**64),
            ("write_fixed32", -1),
            ("write_int32", True),
            ("write_uint32", "7"),
            ("write_string", b"x"),
            ("write_bytes", "x"),
        ],
    )
    def test_rejects_invalid_values(self, method: str, value: object) -> None:
        """Out-of-range or wrongly typed values raise EncodeError."""
        with pytest.raises(EncodeError):
            getattr(Writer(), method)(value)

    def test_float_overflow(self) -> None:
        with pytest.raises(EncodeError):
            Writer().write_float(1e300)


class TestWriterNesting:
    """Test fork/ldelim/reset."""

    def test_fork_ldelim(self) -> None:
        """A forked run is length-prefixed into its parent."""
        writer = Writer().write_tag(3, LENGTH_DELIMITED).fork()
        writer.write_tag(1, VARINT).write_uint32(5)
        assert writer.ldelim().finish() == b"\x1a\x02\x08\x05"

    def test_nested_forks(self) -> None:
        writer = Writer().fork().fork().write_uint32(1).ldelim().ldelim()
        assert writer.finish() == b"\x02\x01\x01"

    def test_empty_fork(self) -> None:
        assert Writer().fork().ldelim().finish() == b"\x00"

    def test_reset_discards_fork(self) -> None:
        writer = Writer().write_uint32(1).fork().write_uint32(2)
        writer.reset()
        assert writer.finish() == b"\x01"

    def test_ldelim_without_fork(self) -> None:
        with pytest.raises(EncodeError, match="without a matching fork"):
            Writer().ldelim()

    def test_finish_resets(self) -> None:
        writer = Writer().write_uint32(1)
        assert len(writer) == 1
        assert writer.finish() == b"\x01"
        assert writer.finish() == b""


class TestReader:
    """Test Reader cursor behavior."""

    def test_underrun_on_fixed(self) -> None:
        with pytest.raises(BufferUnderrunError):
            Reader(b"\x01\x00").read_fixed32()

    def test_underrun_on_bytes(self) -> None:
        """A length prefix pointing past the end is an underrun."""
        with pytest.raises(BufferUnderrunError):
            Reader(b"\x05ab").read_bytes()

    def test_invalid_utf8(self) -> None:
        with pytest.raises(DecodeError, match="UTF-8"):
            Reader(b"\x01\xff").read_string()

    def test_skip(self) -> None:
        reader = Reader(b"\xac\x02\x01\x02\x03\x04\x07")
        reader.skip()
        assert reader.position == 2
        reader.skip(4)
        assert reader.read_uint32() == 7
        with pytest.raises(BufferUnderrunError):
            reader.skip(1)

    def test_copies_buffer(self) -> None:
        """The reader is unaffected by later changes to a mutable source."""
        source = bytearray(b"\x07")
        reader = Reader(source)
        source[0] = 0x08
        assert reader.read_uint32() == 7
