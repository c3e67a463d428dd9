"""Exception hierarchy for protoreflect.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from ProtoreflectError for easy catching of any
protoreflect-specific error.
"""

from __future__ import annotations


class ProtoreflectError(Exception):
    """Base exception for all protoreflect errors."""

    pass


class SchemaError(ProtoreflectError):
    """Raised when a schema description or the reflected tree is invalid.

    Examples:
        - Unclassifiable nested JSON entry
        - Malformed field descriptor
        - Unresolvable type reference
        - One-of naming a field that does not exist
    """

    pass


class DuplicateNameError(SchemaError):
    """Raised when adding a child whose name is already taken in a namespace."""

    pass


class DuplicateIdError(SchemaError):
    """Raised when two fields of one type share a numeric id."""

    pass


class NotMemberError(ProtoreflectError):
    """Raised when removing an object that the namespace does not own."""

    pass


class EncodeError(ProtoreflectError):
    """Raised when encoding a message fails.

    Examples:
        - Value of the wrong type for its field
        - Unknown enum member name
        - Integer out of range for its wire representation
    """

    pass


class DecodeError(ProtoreflectError):
    """Raised when decoding binary data fails."""

    pass


class MalformedWireFormatError(DecodeError):
    """Raised when the decode cursor does not end exactly at its limit."""

    pass


class UnsupportedWireTypeError(DecodeError):
    """Raised when an unknown field carries an undefined wire type code."""

    pass


class BufferUnderrunError(DecodeError):
    """Raised when reading past the end of the available bytes."""

    pass
