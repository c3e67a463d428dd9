"""Dynamic message instances.

A message is an open key/value mapping shaped by a Type. Scalar defaults are
not stored per instance: every instance of a Type reads unset fields through
one shared, read-only MessageTemplate, and only materialized values live in
the instance itself.
"""

from __future__ import annotations

from collections.abc import ItemsView, Iterator, Mapping, MutableMapping
from types import MappingProxyType
from typing import Any


class MessageTemplate(Mapping):
    """Read-only scalar defaults shared by every instance of one type.

    Containers (lists, dicts, sub-messages) never appear on a template, since
    they are mutable and must not be shared across instances.
    """

    __slots__ = ("type_name", "_defaults")

    def __init__(self, type_name: str, defaults: Mapping[str, Any]) -> None:
        self.type_name = type_name
        self._defaults = MappingProxyType(dict(defaults))

    def __getitem__(self, key: str) -> Any:
        return self._defaults[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._defaults)

    def __len__(self) -> int:
        return len(self._defaults)

    def __repr__(self) -> str:
        return f"MessageTemplate({self.type_name}, {dict(self._defaults)!r})"


class Message(MutableMapping):
    """A message instance backed by a shared default template.

    Items and attributes are interchangeable: ``msg["id"]`` and ``msg.id``
    read the same slot. Deleting a materialized field makes it fall back to
    the template again.

    Field names win over method names on attribute access, so a field named
    ``items`` or ``get`` reads as its value. The mapping methods stay
    reachable through the class, e.g. ``Message.items(msg)``.

    Example:
        >>> msg = person_type.create({"id": 7})
        >>> msg.id
        7
        >>> msg.name            # unset, read through the template
        ''
        >>> msg.is_set("name")
        False
    """

    __slots__ = ("_template", "_values")

    def __init__(self, template: MessageTemplate, values: Mapping[str, Any] | None = None) -> None:
        object.__setattr__(self, "_template", template)
        object.__setattr__(self, "_values", dict(values) if values else {})

    @property
    def template(self) -> MessageTemplate:
        return self._template

    def __getitem__(self, key: str) -> Any:
        if key in self._values:
            return self._values[key]
        return self._template[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        yield from self._template
        for key in self._values:
            if key not in self._template:
                yield key

    def __len__(self) -> int:
        return len(self._template) + sum(1 for key in self._values if key not in self._template)

    def __contains__(self, key: object) -> bool:
        return key in self._values or key in self._template

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return dict(ItemsView(self)) == dict(ItemsView(other))

    def __getattribute__(self, name: str) -> Any:
        if not name.startswith("_"):
            values = object.__getattribute__(self, "_values")
            if name in values:
                return values[name]
            template = object.__getattribute__(self, "_template")
            if name in template:
                return template[name]
        return object.__getattribute__(self, name)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(
                f"{self._template.type_name} message has no field {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"<{self._template.type_name} {Message.to_dict(self)!r}>"

    def is_set(self, name: str) -> bool:
        """Return True if the field is materialized on this instance."""
        return name in self._values

    @property
    def materialized(self) -> dict[str, Any]:
        """A copy of the values stored on this instance (no template values)."""
        return dict(self._values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict, recursively converting nested messages."""
        return {key: _plain(self[key]) for key in self}


def field_value(message: Any, name: str, default: Any = None) -> Any:
    """Read a field by item access, returning ``default`` if it is absent.

    Works for Message instances whatever their field names, and for any
    object supporting ``message[name]``.
    """
    try:
        return message[name]
    except KeyError:
        return default


def _plain(value: Any) -> Any:
    if isinstance(value, Message):
        return Message.to_dict(value)
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value
