"""Reflected message types: schema, dynamic instantiation, encode and decode."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional, Union

from ..codec.reader import Reader
from ..codec.wire import WIRE_TYPES
from ..codec.writer import Writer
from ..config import DEFAULT_OPTIONS, CodecOptions
from ..exceptions import (
    DecodeError,
    DuplicateIdError,
    DuplicateNameError,
    MalformedWireFormatError,
    NotMemberError,
    SchemaError,
    UnsupportedWireTypeError,
)
from ..models.descriptors import TypeDescriptor, parse_descriptor
from ..models.message import Message, MessageTemplate, field_value
from ..utils.equality import default_equality
from .base import ReflectionObject
from .field import Field, skip_field
from .namespace import Namespace
from .oneof import OneOf
from .root import Root

logger = logging.getLogger(__name__)

Constructor = Callable[[Optional[Mapping[str, Any]]], Any]
Buffer = Union[bytes, bytearray, memoryview]


def _is_container(value: Any) -> bool:
    return isinstance(value, (list, dict, Message))


class Type(Namespace):
    """A message type.

    A Type is a namespace that additionally owns fields and one-ofs, declares
    extension and reserved ranges, and encodes/decodes message instances.

    Attributes:
        fields: Field name to Field, in declaration order
        oneofs: One-of name to OneOf, or None
        extensions: Extension ranges as given, or None
        reserved: Reserved ranges, ids or names as given, or None

    Example:
        >>> person = Type.from_json("Person", {"fields": {
        ...     "id": {"id": 1, "rule": "required", "type": "uint32"},
        ...     "name": {"id": 2, "type": "string"},
        ... }})
        >>> person.encode(person.create({"id": 7, "name": "x"})).finish().hex()
        '0807120178'
    """

    def __init__(self, name: str, options: Mapping[str, Any] | None = None) -> None:
        super().__init__(name, options)
        self.fields: dict[str, Field] = {}
        self.oneofs: dict[str, OneOf] | None = None
        self.extensions: list[Any] | None = None
        self.reserved: list[Any] | None = None

        # Derived caches, rebuilt lazily after any field add/remove
        self._fields_by_id: dict[int, Field] | None = None
        self._field_names: list[str] | None = None
        self._template: MessageTemplate | None = None

    # Schema construction

    @staticmethod
    def test_json(json: Any) -> bool:
        """Test if a JSON object describes a message type."""
        return isinstance(json, Mapping) and "fields" in json

    @classmethod
    def from_json(cls, name: str, json: Mapping[str, Any]) -> Type:
        """Create a type from its JSON description.

        Args:
            name: Type name
            json: JSON object with ``fields`` and optionally ``oneofs``,
                ``extensions``, ``reserved``, ``nested`` and ``options``

        Returns:
            The created type

        Raises:
            SchemaError: If the JSON is malformed or a nested entry cannot be classified
        """
        descriptor: TypeDescriptor = parse_descriptor(TypeDescriptor, name, json)
        message_type = cls(name, descriptor.options)
        # Ranges are kept exactly as given
        message_type.extensions = json.get("extensions")
        message_type.reserved = json.get("reserved")
        for field_name, field_json in descriptor.fields.items():
            message_type.add(Field.from_json(field_name, field_json))
        if descriptor.oneofs:
            for oneof_name, oneof_json in descriptor.oneofs.items():
                message_type.add(OneOf.from_json(oneof_name, oneof_json))
        message_type.add_json(descriptor.nested)
        return message_type

    def _nested_kinds(self) -> tuple[Any, ...]:
        from .enum import Enum
        from .service import Service

        return (Enum, Type, Service)

    # Derived caches

    @property
    def fields_by_id(self) -> dict[int, Field]:
        """Fields keyed by numeric id.

        Raises:
            DuplicateIdError: If two fields share an id
        """
        if self._fields_by_id is None:
            by_id: dict[int, Field] = {}
            for name in self.field_names:
                field = self.fields[name]
                if field.id in by_id:
                    raise DuplicateIdError(f"duplicate id {field.id} in {self}")
                by_id[field.id] = field
            self._fields_by_id = by_id
            logger.debug("Built field id index for %s (%d fields)", self, len(by_id))
        return self._fields_by_id

    @property
    def field_names(self) -> list[str]:
        """Field names in declaration order."""
        if self._field_names is None:
            self._field_names = list(self.fields)
        return self._field_names

    def _invalidate(self) -> None:
        self._fields_by_id = None
        self._field_names = None
        self._template = None
        self.resolved = False

    @property
    def codec_options(self) -> CodecOptions:
        """Options of the owning root, or the defaults for a stand-alone type."""
        root = self.root
        return root.codec_options if isinstance(root, Root) else DEFAULT_OPTIONS

    # Membership

    def exists(self, name: str) -> bool:
        return (
            name in self.fields
            or (self.oneofs is not None and name in self.oneofs)
            or super().exists(name)
        )

    def add(self, obj: ReflectionObject) -> Type:
        """Add a field, one-of or nested object.

        Extension declarations (fields with ``extend``) are kept as nested
        objects until the extended type binds them.

        Raises:
            DuplicateNameError: If the name is taken by any field, one-of or nested object
        """
        if isinstance(obj, Field) and obj.extend is None:
            if self.exists(obj.name):
                raise DuplicateNameError(f"duplicate name {obj.name!r} in {self}")
            if obj.parent is not None:
                obj.parent.remove(obj)
            self.fields[obj.name] = obj
            self._invalidate()
            obj.on_add(self)
            return self
        if isinstance(obj, OneOf):
            if self.exists(obj.name):
                raise DuplicateNameError(f"duplicate name {obj.name!r} in {self}")
            if obj.parent is not None:
                obj.parent.remove(obj)
            if self.oneofs is None:
                self.oneofs = {}
            self.oneofs[obj.name] = obj
            obj.on_add(self)
            return self
        super().add(obj)
        return self

    def remove(self, obj: ReflectionObject) -> Type:
        """Remove a field, one-of or nested object.

        Raises:
            NotMemberError: If the object is not owned by this type
        """
        if isinstance(obj, Field) and obj.extend is None:
            if self.fields.get(obj.name) is not obj:
                raise NotMemberError(f"{obj} is not a member of {self}")
            del self.fields[obj.name]
            self._invalidate()
            obj.on_remove(self)
            return self
        if isinstance(obj, OneOf):
            if self.oneofs is None or self.oneofs.get(obj.name) is not obj:
                raise NotMemberError(f"{obj} is not a member of {self}")
            del self.oneofs[obj.name]
            if not self.oneofs:
                self.oneofs = None
            obj.on_remove(self)
            return self
        super().remove(obj)
        return self

    # Resolution

    def resolve(self) -> Type:
        """Resolve every field and one-of. Idempotent."""
        if self.resolved:
            return self
        for field in list(self.fields.values()):
            field.resolve()
        if self.oneofs:
            for oneof in self.oneofs.values():
                oneof.resolve()
        if self.codec_options.validate_ranges:
            self.validate_ranges()
        super().resolve()
        return self

    def resolve_extends(self) -> Type:
        """Merge extension fields declared elsewhere in the tree into this type.

        Must run before create/encode/decode should observe late-bound
        extensions; the public codec methods call it themselves. Idempotent.

        Returns:
            This type
        """
        root = self.root
        if isinstance(root, Root):
            root.handle_resolve(self)
        return self

    def validate_ranges(self) -> None:
        """Check extension and reserved ranges against each other and the fields.

        Raises:
            SchemaError: On an inverted range, an extension range overlapping a
                reserved one, or a field using a reserved id or name
        """
        extensions = [tuple(r) for r in self.extensions or []]
        reserved_ranges = []
        reserved_names = set()
        for entry in self.reserved or []:
            if isinstance(entry, str):
                reserved_names.add(entry)
            elif isinstance(entry, int):
                reserved_ranges.append((entry, entry))
            else:
                reserved_ranges.append(tuple(entry))
        for start, end in extensions + reserved_ranges:
            if start > end:
                raise SchemaError(f"invalid range [{start}, {end}] in {self}")
        for ext_start, ext_end in extensions:
            for res_start, res_end in reserved_ranges:
                if ext_start <= res_end and res_start <= ext_end:
                    raise SchemaError(
                        f"extension range [{ext_start}, {ext_end}] overlaps reserved "
                        f"range [{res_start}, {res_end}] in {self}"
                    )
        for field in self.fields.values():
            if field.name in reserved_names:
                raise SchemaError(f"field name {field.name!r} is reserved in {self}")
            if field.declaring_field is None and any(
                start <= field.id <= end for start, end in reserved_ranges
            ):
                raise SchemaError(f"field id {field.id} is reserved in {self}")

    def _prepare(self) -> list[str]:
        """Bind extensions, resolve, and validate ids; return the field names."""
        self.resolve_extends().resolve()
        # Building the id index rejects duplicate ids
        _ = self.fields_by_id
        return self.field_names

    # Instances

    def create(
        self,
        properties: Mapping[str, Any] | Constructor | None = None,
        constructor: Constructor | None = None,
    ) -> Any:
        """Create a message instance of this type.

        Args:
            properties: Initial field values
            constructor: Optional factory called as ``constructor(properties)``
                instead of building a Message (may also be passed as the only
                argument)

        Returns:
            A Message, or whatever ``constructor`` returns
        """
        if callable(properties) and not isinstance(properties, Mapping):
            constructor, properties = properties, None
        if constructor is not None:
            return constructor(properties)

        properties = properties or {}
        field_names = self._prepare()

        template = self._template
        if template is None:
            defaults = {}
            for name in field_names:
                value = self.fields[name].default_value
                # Containers are mutable and never live on the template
                if not _is_container(value):
                    defaults[name] = value
            template = self._template = MessageTemplate(self.full_name, defaults)
            logger.debug("Built default template for %s", self)

        message = Message(template)
        for name in field_names:
            field = self.fields[name]
            value = field_value(properties, name)
            if value is None:
                value = field.default_value
            if (
                field.required
                or field.repeated
                or field.map
                or value != field.default_value
                or _is_container(field.default_value)
            ):
                message[name] = self._materialize(field, value)
        return message

    @staticmethod
    def _materialize(field: Field, value: Any) -> Any:
        target = field.resolved_type
        sub_type = target if isinstance(target, Type) else None
        if field.repeated:
            if sub_type is None:
                return list(value)
            return [_as_message(sub_type, item) for item in value]
        if field.map:
            if sub_type is None:
                return dict(value)
            return {key: _as_message(sub_type, item) for key, item in value.items()}
        if sub_type is not None and value is not None:
            return _as_message(sub_type, value)
        return value

    def verify(self, message: Mapping[str, Any]) -> str | None:
        """Check that every required field is present.

        Returns:
            None if the message is valid, otherwise a reason
        """
        for name in self._prepare():
            field = self.fields[name]
            value = field_value(message, name)
            if field.required and value is None:
                return f"missing required field {name!r} in {self}"
            target = field.resolved_type
            if isinstance(target, Type) and value is not None:
                items = value if field.repeated else (value.values() if field.map else [value])
                for item in items:
                    if isinstance(item, Mapping):
                        reason = target.verify(item)
                        if reason is not None:
                            return reason
        return None

    # Encoding

    def encode(self, message: Any, writer: Writer | None = None) -> Writer:
        """Encode a message of this type.

        Fields are written in declaration order. A field is written if it is
        required or its value differs from the field default (see
        ``CodecOptions.loose_default_equality``).

        Args:
            message: Message instance, plain mapping, or object with field attributes
            writer: Writer to append to (a new one if omitted)

        Returns:
            The writer

        Raises:
            EncodeError: If a value does not fit its field
            DuplicateIdError: If two fields share an id
        """
        if writer is None:
            writer = Writer()
        field_names = self._prepare()
        equals = default_equality(self.codec_options.loose_default_equality)
        is_mapping = isinstance(message, Mapping)
        for name in field_names:
            field = self.fields[name]
            if is_mapping:
                value = field_value(message, name, field.default_value)
            else:
                value = getattr(message, name, field.default_value)
            if field.required or not equals(value, field.default_value):
                field.encode(value, writer)
        return writer

    def encode_delimited(self, message: Any, writer: Writer | None = None) -> Writer:
        """Encode a message preceded by its byte length as a varint."""
        if writer is None:
            writer = Writer()
        writer.fork()
        self.encode(message, writer)
        return writer.ldelim()

    # Decoding

    def decode(
        self,
        reader_or_buffer: Reader | Buffer,
        constructor: Constructor | int | None = None,
        length: int | None = None,
    ) -> Any:
        """Decode a message of this type.

        Args:
            reader_or_buffer: Reader positioned at the message, or raw bytes
            constructor: Optional factory for the instance (see ``create``);
                an int here is taken as ``length``
            length: Byte length of the message, if known (sub-messages)

        Returns:
            The decoded message

        Raises:
            MalformedWireFormatError: If the message does not end exactly at its limit
            UnsupportedWireTypeError: If an unknown field has an undefined wire type
            BufferUnderrunError: If the data is truncated
        """
        if isinstance(constructor, int) and not isinstance(constructor, bool):
            length, constructor = constructor, None
        self._prepare()

        reader = reader_or_buffer if isinstance(reader_or_buffer, Reader) else Reader(reader_or_buffer)
        limit = reader.length if length is None else reader.position + length
        max_size = self.codec_options.max_message_size
        if max_size is not None and limit - reader.position > max_size:
            raise DecodeError(
                f"message of {limit - reader.position} bytes exceeds max_message_size={max_size}"
            )

        message = self.create({}, constructor)
        fields_by_id = self.fields_by_id
        while reader.position < limit:
            tag = reader.read_tag()
            field = fields_by_id.get(tag.id)
            if field is None:
                if tag.wire_type not in WIRE_TYPES:
                    raise UnsupportedWireTypeError(
                        f"unsupported wire type of unknown field #{tag.id} in {self}: {tag.wire_type}"
                    )
                logger.debug("Skipping unknown field #%d (wire type %d) in %s", tag.id, tag.wire_type, self)
                skip_field(reader, tag.wire_type)
                continue

            name = field.name
            value = field.decode(reader, tag.wire_type)
            if field.map:
                entries = field_value(message, name)
                if entries is None:
                    entries = message[name] = {}
                key, item = value
                entries[key] = item
            elif field.repeated:
                items = field_value(message, name)
                if items is None:
                    items = message[name] = []
                if isinstance(value, list):
                    items.extend(value)
                else:
                    items.append(value)
            else:
                message[name] = value

        if reader.position != limit:
            raise MalformedWireFormatError(
                f"invalid wire format: index {reader.position} != {limit}"
            )
        return message

    def decode_delimited(
        self,
        reader_or_buffer: Reader | Buffer,
        constructor: Constructor | None = None,
    ) -> Any:
        """Decode a message preceded by its byte length as a varint."""
        reader = reader_or_buffer if isinstance(reader_or_buffer, Reader) else Reader(reader_or_buffer)
        return self.decode(reader.read_bytes(), constructor)


def _as_message(message_type: Type, value: Any) -> Any:
    if isinstance(value, Message) or not isinstance(value, Mapping):
        return value
    return message_type.create(value)
