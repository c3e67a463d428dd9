"""Service reflection, as far as schema classification needs it."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.descriptors import MethodDescriptor, ServiceDescriptor, parse_descriptor
from .namespace import Namespace


class Service(Namespace):
    """An RPC service. Carries its method descriptors; has no wire codec."""

    def __init__(self, name: str, options: Mapping[str, Any] | None = None) -> None:
        super().__init__(name, options)
        self.methods: dict[str, MethodDescriptor] = {}

    @staticmethod
    def test_json(json: Any) -> bool:
        """Test if a JSON object describes a service."""
        return isinstance(json, Mapping) and "methods" in json

    @classmethod
    def from_json(cls, name: str, json: Mapping[str, Any]) -> Service:
        descriptor = parse_descriptor(ServiceDescriptor, name, json)
        service = cls(name, descriptor.options)
        service.methods = dict(descriptor.methods)
        service.add_json(descriptor.nested)
        return service

    def exists(self, name: str) -> bool:
        return name in self.methods or super().exists(name)
