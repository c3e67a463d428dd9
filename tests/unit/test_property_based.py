"""Property-based tests using hypothesis."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from protoreflect import Reader, Root, Writer
from protoreflect.codec.wire import zigzag_decode, zigzag_encode

ROOT = Root.from_json({
    "nested": {
        "Sample": {
            "fields": {
                "u32": {"id": 1, "type": "uint32"},
                "i32": {"id": 2, "type": "int32"},
                "s64": {"id": 3, "type": "sint64"},
                "f64": {"id": 4, "type": "double"},
                "flag": {"id": 5, "type": "bool"},
                "text": {"id": 6, "type": "string"},
                "blob": {"id": 7, "type": "bytes"},
                "values": {"id": 8, "rule": "repeated", "type": "sint32", "options": {"packed": True}},
                "counts": {"id": 9, "keyType": "string", "type": "uint64"},
            }
        }
    }
})
SAMPLE = ROOT.lookup_type("Sample")

INT32 = st.integers(min_value=-(2**31), max_value=2**31 - 1)

samples = st.fixed_dictionaries({
    "u32": st.integers(min_value=0, max_value=2**32 - 1),
    "i32": INT32,
    "s64": st.integers(min_value=-(2**63), max_value=2**63 - 1),
    "f64": st.floats(allow_nan=False),
    "flag": st.booleans(),
    "text": st.text(),
    "blob": st.binary(),
    "values": st.lists(INT32),
    "counts": st.dictionaries(st.text(), st.integers(min_value=0, max_value=2**64 - 1)),
})


class TestWireProperties:
    """Property-based tests for wire primitives."""

    @given(value=st.integers(min_value=0, max_value=2**64 - 1))
    def test_varint_roundtrip(self, value: int) -> None:
        reader = Reader(Writer().write_uint64(value).finish())
        assert reader.read_uint64() == value
        assert reader.remaining() == 0

    @given(value=st.integers(min_value=-(2**63), max_value=2**63 - 1))
    def test_zigzag_roundtrip(self, value: int) -> None:
        assert zigzag_decode(zigzag_encode(value)) == value

    @given(value=INT32)
    def test_int32_roundtrip(self, value: int) -> None:
        assert Reader(Writer().write_int32(value).finish()).read_int32() == value


class TestMessageProperties:
    """Property-based tests for whole messages."""

    @given(sample=samples)
    def test_encode_decode_roundtrip(self, sample: dict) -> None:
        """Test decode(encode(m)) reproduces every field."""
        decoded = SAMPLE.decode(SAMPLE.encode(SAMPLE.create(sample)).finish())
        assert decoded.to_dict() == sample

    @given(sample=samples)
    def test_encode_deterministic(self, sample: dict) -> None:
        assert SAMPLE.encode(sample).finish() == SAMPLE.encode(SAMPLE.create(sample)).finish()

    @given(sample=samples)
    def test_reencode_is_stable(self, sample: dict) -> None:
        """Encoding a decoded message reproduces the original bytes."""
        data = SAMPLE.encode(sample).finish()
        assert SAMPLE.encode(SAMPLE.decode(data)).finish() == data
