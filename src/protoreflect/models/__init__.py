"""Message instances and JSON schema descriptors for protoreflect.

This module provides the dynamic Message class with its shared default
template and the Pydantic models that validate schema JSON.
"""

from __future__ import annotations

from .descriptors import (
    EnumDescriptor,
    FieldDescriptor,
    NamespaceDescriptor,
    OneOfDescriptor,
    ServiceDescriptor,
    TypeDescriptor,
)
from .message import Message, MessageTemplate

__all__ = [
    "Message",
    "MessageTemplate",
    "FieldDescriptor",
    "OneOfDescriptor",
    "TypeDescriptor",
    "EnumDescriptor",
    "ServiceDescriptor",
    "NamespaceDescriptor",
]
