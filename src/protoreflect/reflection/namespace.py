"""Hierarchical containers of named schema objects."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from ..exceptions import DuplicateNameError, NotMemberError, SchemaError
from ..models.descriptors import NamespaceDescriptor, parse_descriptor
from .base import ReflectionObject

if TYPE_CHECKING:
    from .type import Type


class Namespace(ReflectionObject):
    """A named container of nested types, enums, services and namespaces.

    Children are kept in insertion order. Names are unique among all children
    of one namespace.

    Example:
        >>> ns = Namespace.from_json("pkg", {"nested": {"Ping": {"fields": {}}}})
        >>> ns.lookup("Ping")
        Type pkg.Ping
    """

    def __init__(self, name: str, options: Mapping[str, Any] | None = None) -> None:
        super().__init__(name, options)
        self.nested: dict[str, ReflectionObject] | None = None

    @staticmethod
    def test_json(json: Any) -> bool:
        """Test if a JSON object describes a plain namespace."""
        return isinstance(json, Mapping) and "nested" in json

    @classmethod
    def from_json(cls, name: str, json: Mapping[str, Any]) -> Namespace:
        descriptor = parse_descriptor(NamespaceDescriptor, name, json)
        namespace = cls(name, descriptor.options)
        namespace.add_json(descriptor.nested)
        return namespace

    def _nested_kinds(self) -> tuple[Any, ...]:
        """Candidate classes for nested JSON entries, tested in order."""
        # Import here to avoid circular dependency
        from .enum import Enum
        from .field import Field
        from .service import Service
        from .type import Type

        return (Enum, Type, Service, Field, Namespace)

    def add_json(self, nested: Mapping[str, Any] | None) -> Namespace:
        """Classify and add each nested JSON entry.

        Args:
            nested: Mapping of child name to JSON description, or None

        Returns:
            This namespace

        Raises:
            SchemaError: If an entry matches none of the candidate kinds
        """
        if not nested:
            return self
        kinds = self._nested_kinds()
        for nested_name, nested_json in nested.items():
            for kind in kinds:
                if kind.test_json(nested_json):
                    self.add(kind.from_json(nested_name, nested_json))
                    break
            else:
                raise SchemaError(f"invalid nested object in {self}: {nested_name}")
        return self

    @property
    def nested_list(self) -> list[ReflectionObject]:
        return list(self.nested.values()) if self.nested else []

    def __iter__(self) -> Iterator[ReflectionObject]:
        return iter(self.nested_list)

    def exists(self, name: str) -> bool:
        """Test if a child of that name exists in any of this namespace's collections."""
        return bool(self.nested) and name in self.nested

    def get(self, name: str) -> ReflectionObject | None:
        """Return the nested child of that name, or None."""
        return self.nested.get(name) if self.nested else None

    def add(self, obj: ReflectionObject) -> Namespace:
        """Take ownership of a child.

        A child owned by another namespace is removed from it first.

        Raises:
            DuplicateNameError: If the name is already taken
        """
        if self.exists(obj.name):
            raise DuplicateNameError(f"duplicate name {obj.name!r} in {self}")
        if obj.parent is not None:
            obj.parent.remove(obj)
        if self.nested is None:
            self.nested = {}
        self.nested[obj.name] = obj
        obj.on_add(self)
        return self

    def remove(self, obj: ReflectionObject) -> Namespace:
        """Release a child.

        Raises:
            NotMemberError: If the child is not owned by this namespace
        """
        if not self.nested or self.nested.get(obj.name) is not obj:
            raise NotMemberError(f"{obj} is not a member of {self}")
        del self.nested[obj.name]
        if not self.nested:
            self.nested = None
        obj.on_remove(self)
        return self

    def resolve_all(self) -> Namespace:
        """Resolve this namespace and every descendant."""
        for child in self.nested_list:
            if isinstance(child, Namespace):
                child.resolve_all()
            else:
                child.resolve()
        self.resolve()
        return self

    def _lookup_down(self, parts: list[str]) -> ReflectionObject | None:
        node: ReflectionObject | None = self
        for part in parts:
            if not isinstance(node, Namespace):
                return None
            node = node.get(part)
            if node is None:
                return None
        return node

    def lookup(self, path: str) -> ReflectionObject | None:
        """Look up a dotted path relative to this namespace.

        The path is searched in this namespace first and then in each
        ancestor. A leading dot searches from the root only.

        Args:
            path: Dotted name such as ``Inner`` or ``pkg.Outer.Inner``

        Returns:
            The object found, or None
        """
        if path.startswith("."):
            root = self.root
            if not isinstance(root, Namespace):
                return None
            return root._lookup_down(path[1:].split("."))
        parts = path.split(".")
        namespace: Namespace | None = self
        while namespace is not None:
            found = namespace._lookup_down(parts)
            if found is not None:
                return found
            namespace = namespace.parent
        return None

    def lookup_type(self, path: str) -> Type:
        """Look up a message type.

        Raises:
            SchemaError: If nothing or something other than a type is found
        """
        from .type import Type

        found = self.lookup(path)
        if not isinstance(found, Type):
            raise SchemaError(f"no such type: {path} in {self}")
        return found
