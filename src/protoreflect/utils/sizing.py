"""Message size calculation utilities.

This module provides functions to calculate the encoded size of messages and
of their individual fields.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..codec.writer import Writer
from ..models.message import field_value
from .equality import default_equality

if TYPE_CHECKING:
    from ..reflection.type import Type


def varint_size(value: int) -> int:
    """Return the number of bytes a non-negative integer takes as a varint.

    Example:
        >>> varint_size(127)
        1
        >>> varint_size(128)
        2
    """
    if value < 0:
        raise ValueError(f"varint_size requires non-negative value, got {value}")
    size = 1
    while value > 0x7F:
        value >>= 7
        size += 1
    return size


def encoded_size(message_type: Type, message: Any) -> int:
    """Calculate the encoded size of a message in bytes.

    Args:
        message_type: Type describing the message
        message: Message instance or plain mapping

    Returns:
        Size in bytes, without any length prefix

    Example:
        >>> encoded_size(person, {"id": 7, "name": "x"})
        5
    """
    return len(message_type.encode(message).finish())


def field_sizes(message_type: Type, message: Any) -> dict[str, int]:
    """Get the encoded size in bytes of each field that would be written.

    Fields suppressed because they carry their default are omitted.

    Args:
        message_type: Type describing the message
        message: Message instance or plain mapping

    Returns:
        Dictionary mapping field names to their size in bytes, tags included

    Example:
        >>> field_sizes(person, {"id": 7, "name": "x"})
        {'id': 2, 'name': 3}
    """
    message_type.resolve_extends().resolve()
    equals = default_equality(message_type.codec_options.loose_default_equality)
    sizes: dict[str, int] = {}
    for name in message_type.field_names:
        field = message_type.fields[name].resolve()
        value = field_value(message, name, field.default_value)
        if field.required or not equals(value, field.default_value):
            sizes[name] = len(field.encode(value, Writer()).finish())
    return sizes
