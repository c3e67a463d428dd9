"""Reflected schema tree for protoreflect.

This module provides the namespace/type/field/one-of model built from schema
JSON, including the encode/decode algorithms of message types.
"""

from __future__ import annotations

from .base import ReflectionObject
from .enum import Enum
from .field import Field
from .namespace import Namespace
from .oneof import OneOf
from .root import Root
from .service import Service
from .type import Type

__all__ = [
    "ReflectionObject",
    "Namespace",
    "Root",
    "Type",
    "Field",
    "OneOf",
    "Enum",
    "Service",
]
