"""Enum reflection, as far as enum-typed fields need it."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..exceptions import EncodeError, SchemaError
from ..models.descriptors import EnumDescriptor, parse_descriptor
from .base import ReflectionObject


class Enum(ReflectionObject):
    """A named set of integer constants.

    Attributes:
        values: Member name to number, in declaration order
    """

    def __init__(
        self,
        name: str,
        values: Mapping[str, int] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(name, options)
        self.values: dict[str, int] = dict(values) if values else {}

    @staticmethod
    def test_json(json: Any) -> bool:
        """Test if a JSON object describes an enum."""
        return isinstance(json, Mapping) and "values" in json

    @classmethod
    def from_json(cls, name: str, json: Mapping[str, Any]) -> Enum:
        descriptor = parse_descriptor(EnumDescriptor, name, json)
        return cls(name, descriptor.values, descriptor.options)

    @property
    def default_value(self) -> int:
        """The number of the first declared member (0 for an empty enum)."""
        return next(iter(self.values.values()), 0)

    def add_value(self, name: str, number: int) -> Enum:
        if name in self.values:
            raise SchemaError(f"duplicate name {name!r} in {self}")
        self.values[name] = number
        return self

    def value_of(self, value: Any) -> int:
        """Map a member name or number to its number.

        Raises:
            EncodeError: If a name is not a member or the value is not an int
        """
        if isinstance(value, str):
            try:
                return self.values[value]
            except KeyError:
                raise EncodeError(f"{value!r} is not a member of {self}") from None
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(f"{self}: expected member name or int, got {type(value).__name__}")
        return value

    def name_of(self, number: int) -> str | None:
        """Return the first member name with that number, or None."""
        for name, value in self.values.items():
            if value == number:
                return name
        return None
