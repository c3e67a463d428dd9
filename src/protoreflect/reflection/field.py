"""Message fields and their wire codecs.

A Field knows how to write its own value after a tag and how to read it back.
Scalars map directly onto the Reader/Writer primitives; enum-typed values are
varints; message-typed values are length-delimited sub-messages; repeated
fields may be packed; map fields are written as repeated key/value entries.
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..codec.reader import Reader
from ..codec.wire import (
    LENGTH_DELIMITED,
    MAP_KEY_TYPES,
    PACKABLE_TYPES,
    SCALAR_DEFAULTS,
    SCALAR_WIRE_TYPES,
    VARINT,
)
from ..codec.writer import Writer
from ..exceptions import (
    EncodeError,
    MalformedWireFormatError,
    SchemaError,
    UnsupportedWireTypeError,
)
from ..models.descriptors import MAX_FIELD_ID, FieldDescriptor, parse_descriptor
from .base import ReflectionObject
from .enum import Enum

if TYPE_CHECKING:
    from .namespace import Namespace
    from .type import Type

RULES = ("optional", "required", "repeated", "map")

_INT_KEY_TYPES = MAP_KEY_TYPES - {"string", "bool"}


class Field(ReflectionObject):
    """A member of a message type.

    Attributes:
        id: Field number, the field's identity on the wire
        type: Declared type, a scalar name or a type/enum reference
        rule: One of ``optional``, ``required``, ``repeated``, ``map``
        key_type: Scalar key type of a map field
        extend: Name of the extended type, for extension fields
        resolved_type: The Type or Enum a reference resolved to, once resolved
        default_value: Default value, once resolved
    """

    def __init__(
        self,
        name: str,
        id: int,
        type: str,
        rule: str = "optional",
        extend: str | None = None,
        options: Mapping[str, Any] | None = None,
        key_type: str | None = None,
    ) -> None:
        super().__init__(name, options)
        if isinstance(id, bool) or not isinstance(id, int) or not 0 < id <= MAX_FIELD_ID:
            raise SchemaError(f"Field {name}: id must be an integer in [1, {MAX_FIELD_ID}], got {id!r}")
        if not isinstance(type, str) or not type:
            raise SchemaError(f"Field {name}: type must be a non-empty string")
        if key_type is not None:
            rule = "map"
        if rule not in RULES:
            raise SchemaError(f"Field {name}: unknown rule {rule!r}")
        if rule == "map" and key_type is None:
            raise SchemaError(f"Field {name}: map fields require a key type")

        self.id = id
        self.type = type
        self.rule = rule
        self.key_type = key_type
        self.extend = extend
        self.resolved_type: Type | Enum | None = None
        self.default_value: Any = None

        # Extension fields: the declaration and its copy bound into the extended type
        self.declaring_field: Field | None = None
        self.extension_field: Field | None = None

        self._message: weakref.ReferenceType[Type] | None = None

    @property
    def required(self) -> bool:
        return self.rule == "required"

    @property
    def optional(self) -> bool:
        return self.rule != "required"

    @property
    def repeated(self) -> bool:
        return self.rule == "repeated"

    @property
    def map(self) -> bool:
        return self.rule == "map"

    @property
    def message(self) -> Type | None:
        """The owning message type (non-owning reference)."""
        return self._message() if self._message is not None else None

    @message.setter
    def message(self, value: Type | None) -> None:
        self._message = weakref.ref(value) if value is not None else None

    @property
    def packed(self) -> bool:
        """Whether repeated values are written as one packed run."""
        return self.repeated and bool(self.options.get("packed")) and self._packable

    @property
    def _packable(self) -> bool:
        return self.type in PACKABLE_TYPES or isinstance(self.resolved_type, Enum)

    @staticmethod
    def test_json(json: Any) -> bool:
        """Test if a JSON object describes an extension field declared in a namespace."""
        return isinstance(json, Mapping) and "id" in json and "extend" in json

    @classmethod
    def from_json(cls, name: str, json: Mapping[str, Any]) -> Field:
        descriptor: FieldDescriptor = parse_descriptor(FieldDescriptor, name, json)
        return cls(
            name,
            descriptor.id,
            descriptor.type,
            rule=descriptor.effective_rule,
            extend=descriptor.extend,
            options=descriptor.options,
            key_type=descriptor.key_type,
        )

    def on_add(self, parent: Namespace) -> None:
        from .type import Type

        super().on_add(parent)
        if isinstance(parent, Type):
            self.message = parent

    def on_remove(self, parent: Namespace) -> None:
        super().on_remove(parent)
        self.message = None

    def resolve(self) -> Field:
        """Resolve the declared type and compute the default value.

        Raises:
            SchemaError: If a type reference cannot be resolved
        """
        if self.resolved:
            return self
        from .type import Type

        if self.type not in SCALAR_WIRE_TYPES:
            # Extensions resolve relative to where they were declared
            scope = (self.declaring_field or self).parent
            found = scope.lookup(self.type) if scope is not None else None
            if not isinstance(found, (Type, Enum)):
                raise SchemaError(f"unresolvable field type: {self.type} in {self}")
            self.resolved_type = found
        if self.map and self.key_type not in MAP_KEY_TYPES:
            raise SchemaError(f"invalid map key type: {self.key_type} in {self}")

        if self.repeated:
            self.default_value = []
        elif self.map:
            self.default_value = {}
        elif "default" in self.options:
            default = self.options["default"]
            if isinstance(self.resolved_type, Enum) and isinstance(default, str):
                try:
                    default = self.resolved_type.values[default]
                except KeyError:
                    raise SchemaError(f"unknown default {default!r} in {self}") from None
            self.default_value = default
        elif isinstance(self.resolved_type, Enum):
            self.default_value = self.resolved_type.default_value
        elif self.resolved_type is not None:
            self.default_value = None
        else:
            self.default_value = SCALAR_DEFAULTS[self.type]

        super().resolve()
        return self

    # Encoding

    def encode(self, value: Any, writer: Writer) -> Writer:
        """Write this field's value, tags included.

        Args:
            value: Field value (a sequence for repeated fields, a mapping for maps)
            writer: Writer to append to

        Returns:
            The writer

        Raises:
            EncodeError: If the value does not fit the field's type
        """
        self.resolve()
        try:
            if self.map:
                if not isinstance(value, Mapping):
                    raise EncodeError(f"expected mapping, got {type(value).__name__}")
                for key, item in value.items():
                    writer.write_tag(self.id, LENGTH_DELIMITED).fork()
                    self._write_value(writer, 1, self.key_type, None, self._coerce_key(key))
                    self._write_value(writer, 2, self.type, self.resolved_type, item)
                    writer.ldelim()
            elif self.repeated:
                if isinstance(value, (str, bytes, Mapping)) or not hasattr(value, "__iter__"):
                    raise EncodeError(f"expected sequence, got {type(value).__name__}")
                values = list(value)
                if self.packed:
                    if values:
                        writer.write_tag(self.id, LENGTH_DELIMITED).fork()
                        for item in values:
                            self._write_payload(writer, self.type, self.resolved_type, item)
                        writer.ldelim()
                else:
                    for item in values:
                        self._write_value(writer, self.id, self.type, self.resolved_type, item)
            else:
                if value is None:
                    raise EncodeError("missing value")
                self._write_value(writer, self.id, self.type, self.resolved_type, value)
        except EncodeError as e:
            raise EncodeError(f"Field {self.full_name}: {e}") from e
        return writer

    def _coerce_key(self, key: Any) -> Any:
        # Map keys coming from JSON are always strings
        if isinstance(key, str):
            if self.key_type in _INT_KEY_TYPES:
                try:
                    return int(key)
                except ValueError:
                    raise EncodeError(f"invalid {self.key_type} map key {key!r}") from None
            if self.key_type == "bool" and key in ("true", "false"):
                return key == "true"
        return key

    @staticmethod
    def _write_value(
        writer: Writer, field_id: int, type_name: str, resolved: Type | Enum | None, value: Any
    ) -> None:
        if resolved is None:
            writer.write_tag(field_id, SCALAR_WIRE_TYPES[type_name])
        elif isinstance(resolved, Enum):
            writer.write_tag(field_id, VARINT)
        else:
            writer.write_tag(field_id, LENGTH_DELIMITED)
        Field._write_payload(writer, type_name, resolved, value)

    @staticmethod
    def _write_payload(
        writer: Writer, type_name: str, resolved: Type | Enum | None, value: Any
    ) -> None:
        if resolved is None:
            getattr(writer, f"write_{type_name}")(value)
        elif isinstance(resolved, Enum):
            writer.write_int32(resolved.value_of(value))
        else:
            if value is None:
                value = {}
            writer.fork()
            resolved.encode(value, writer)
            writer.ldelim()

    # Decoding

    def decode(self, reader: Reader, wire_type: int) -> Any:
        """Read this field's value; the tag has already been consumed.

        Returns:
            The decoded value; a list for a packed run, a ``(key, value)``
            pair for a map entry

        Raises:
            MalformedWireFormatError: If the wire type does not fit the field
        """
        self.resolve()
        if self.map:
            self._expect(wire_type, LENGTH_DELIMITED)
            return self._read_map_entry(reader)
        if self.repeated and wire_type == LENGTH_DELIMITED and self._packable:
            size = reader.read_uint32()
            end = reader.position + size
            values = []
            while reader.position < end:
                values.append(self._read_payload(reader, self.type, self.resolved_type))
            if reader.position != end:
                raise MalformedWireFormatError(
                    f"invalid packed run for {self}: index {reader.position} != {end}"
                )
            return values
        return self._read_value(reader, wire_type, self.type, self.resolved_type)

    def _read_map_entry(self, reader: Reader) -> tuple[Any, Any]:
        size = reader.read_uint32()
        end = reader.position + size
        key = SCALAR_DEFAULTS[self.key_type]  # type: ignore[index]
        value: Any = None
        while reader.position < end:
            tag = reader.read_tag()
            if tag.id == 1:
                key = self._read_value(reader, tag.wire_type, self.key_type, None)  # type: ignore[arg-type]
            elif tag.id == 2:
                value = self._read_value(reader, tag.wire_type, self.type, self.resolved_type)
            else:
                skip_field(reader, tag.wire_type)
        if reader.position != end:
            raise MalformedWireFormatError(
                f"invalid map entry for {self}: index {reader.position} != {end}"
            )
        if value is None:
            value = self._empty_value()
        return key, value

    def _empty_value(self) -> Any:
        if self.resolved_type is None:
            return SCALAR_DEFAULTS[self.type]
        if isinstance(self.resolved_type, Enum):
            return self.resolved_type.default_value
        return self.resolved_type.create()

    def _read_value(
        self, reader: Reader, wire_type: int, type_name: str, resolved: Type | Enum | None
    ) -> Any:
        if resolved is None:
            expected = SCALAR_WIRE_TYPES[type_name]
        elif isinstance(resolved, Enum):
            expected = VARINT
        else:
            expected = LENGTH_DELIMITED
        self._expect(wire_type, expected)
        return self._read_payload(reader, type_name, resolved)

    @staticmethod
    def _read_payload(reader: Reader, type_name: str, resolved: Type | Enum | None) -> Any:
        if resolved is None:
            return getattr(reader, f"read_{type_name}")()
        if isinstance(resolved, Enum):
            return reader.read_int32()
        return resolved.decode(reader, reader.read_uint32())

    def _expect(self, wire_type: int, expected: int) -> None:
        if wire_type != expected:
            raise MalformedWireFormatError(
                f"invalid wire type {wire_type} for {self}, expected {expected}"
            )


def skip_field(reader: Reader, wire_type: int) -> None:
    """Skip the payload of a field whose tag has already been read.

    Raises:
        UnsupportedWireTypeError: If the wire type is not 0, 1, 2 or 5
    """
    if wire_type == 0:
        reader.skip()
    elif wire_type == 1:
        reader.skip(8)
    elif wire_type == 2:
        reader.skip(reader.read_uint32())
    elif wire_type == 5:
        reader.skip(4)
    else:
        raise UnsupportedWireTypeError(f"unsupported wire type {wire_type}")
