"""One-of groups of mutually exclusive fields."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..exceptions import SchemaError
from ..models.descriptors import OneOfDescriptor, parse_descriptor
from ..models.message import Message, field_value
from .base import ReflectionObject


class OneOf(ReflectionObject):
    """A named group of field names of which at most one is set.

    One-ofs are a grouping concept only; they are not encoded on the wire.

    Attributes:
        oneof: Member field names, in declaration order
    """

    def __init__(
        self,
        name: str,
        field_names: Iterable[str] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(name, options)
        self.oneof: list[str] = list(field_names) if field_names else []

    @classmethod
    def from_json(cls, name: str, json: Mapping[str, Any]) -> OneOf:
        descriptor = parse_descriptor(OneOfDescriptor, name, json)
        return cls(name, descriptor.oneof, descriptor.options)

    def resolve(self) -> OneOf:
        """Check that every member names a field of the owning type.

        Raises:
            SchemaError: If a member is missing or the one-of is detached
        """
        if self.resolved:
            return self
        message = self.parent
        fields = getattr(message, "fields", None)
        if fields is None:
            raise SchemaError(f"{self} is not part of a message type")
        for field_name in self.oneof:
            if field_name not in fields:
                raise SchemaError(f"unknown field {field_name!r} in {self}")
        super().resolve()
        return self

    def get(self, message: Mapping[str, Any]) -> str | None:
        """Return the name of the member set on a message, or None.

        A member counts as set when its value differs from its field default.
        """
        fields = self.parent.fields  # type: ignore[union-attr]
        for field_name in self.oneof:
            field = fields[field_name].resolve()
            value = field_value(message, field_name, field.default_value)
            if value is not None and value != field.default_value:
                return field_name
        return None

    def set(self, message: Any, field_name: str, value: Any) -> None:
        """Set one member and clear every other member from the message.

        Raises:
            SchemaError: If the field is not a member of this one-of
        """
        if field_name not in self.oneof:
            raise SchemaError(f"{field_name!r} is not a member of {self}")
        for other in self.oneof:
            if other != field_name and other in message:
                # Message instances fall back to their template; plain dicts drop the key
                if not isinstance(message, Message) or Message.is_set(message, other):
                    del message[other]
        message[field_name] = value
