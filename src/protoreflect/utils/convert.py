"""Conversion between message instances and JSON-compatible values.

JSON has no byte strings, so ``bytes`` fields travel as base64 text, and map
keys are always strings.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..exceptions import EncodeError
from ..models.message import field_value

if TYPE_CHECKING:
    from ..reflection.field import Field
    from ..reflection.type import Type


def to_plain(message_type: Type, message: Mapping[str, Any], *, enums_as_names: bool = False) -> dict[str, Any]:
    """Convert a message into a JSON-serializable dict.

    Args:
        message_type: Type describing the message
        message: Message instance or mapping
        enums_as_names: Emit enum member names instead of numbers

    Returns:
        Dict with every field of the type
    """
    message_type.resolve_extends().resolve()
    result: dict[str, Any] = {}
    for name in message_type.field_names:
        field = message_type.fields[name].resolve()
        value = field_value(message, name, field.default_value)
        if field.repeated:
            result[name] = [_value_to_plain(field, item, enums_as_names) for item in value or []]
        elif field.map:
            result[name] = {
                str(key).lower() if isinstance(key, bool) else str(key): _value_to_plain(field, item, enums_as_names)
                for key, item in (value or {}).items()
            }
        else:
            result[name] = _value_to_plain(field, value, enums_as_names)
    return result


def _value_to_plain(field: Field, value: Any, enums_as_names: bool) -> Any:
    from ..reflection.enum import Enum
    from ..reflection.type import Type

    if value is None:
        return None
    target = field.resolved_type
    if isinstance(target, Type):
        return to_plain(target, value, enums_as_names=enums_as_names)
    if isinstance(target, Enum):
        if enums_as_names and isinstance(value, int):
            name = target.name_of(value)
            return name if name is not None else value
        return value
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    return value


def from_plain(message_type: Type, obj: Mapping[str, Any]) -> Any:
    """Create a message from a JSON-compatible dict.

    Args:
        message_type: Type describing the message
        obj: Dict as produced by ``to_plain`` or parsed from JSON

    Returns:
        A message instance created through ``message_type.create``

    Raises:
        EncodeError: If a bytes field holds invalid base64 or a key is not a field
    """
    message_type.resolve_extends().resolve()
    properties: dict[str, Any] = {}
    for name, value in obj.items():
        field = message_type.fields.get(name)
        if field is None:
            raise EncodeError(f"{message_type} has no field {name!r}")
        field.resolve()
        if value is None:
            continue
        if field.repeated:
            properties[name] = [_value_from_plain(field, item) for item in value]
        elif field.map:
            properties[name] = {key: _value_from_plain(field, item) for key, item in value.items()}
        else:
            properties[name] = _value_from_plain(field, value)
    return message_type.create(properties)


def _value_from_plain(field: Field, value: Any) -> Any:
    from ..reflection.type import Type

    target = field.resolved_type
    if isinstance(target, Type):
        return from_plain(target, value)
    if field.type == "bytes" and isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise EncodeError(f"Field {field.full_name}: invalid base64: {e}") from e
    return value
