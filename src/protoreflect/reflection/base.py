"""Common base of every node in the reflected schema tree."""

from __future__ import annotations

import weakref
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..exceptions import SchemaError

if TYPE_CHECKING:
    from .namespace import Namespace


class ReflectionObject:
    """A named node of the schema tree.

    The tree owns its children; a child's ``parent`` is a weak back reference
    used for lookups only.

    Attributes:
        name: Name, unique among its siblings
        options: Opaque schema options
        resolved: Whether ``resolve()`` has completed
    """

    def __init__(self, name: str, options: Mapping[str, Any] | None = None) -> None:
        if not isinstance(name, str):
            raise SchemaError(f"name must be a string, got {type(name).__name__}")
        self.name = name
        self.options: dict[str, Any] = dict(options) if options else {}
        self.resolved = False
        self._parent: weakref.ReferenceType[Namespace] | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__} {self.full_name or '<root>'}"

    @property
    def parent(self) -> Namespace | None:
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, value: Namespace | None) -> None:
        self._parent = weakref.ref(value) if value is not None else None

    @property
    def root(self) -> ReflectionObject:
        """The top-most ancestor (this object if it has no parent)."""
        node: ReflectionObject = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def full_name(self) -> str:
        """Dot-separated path from the root, e.g. ``pkg.Outer.Inner``."""
        parts = []
        node: ReflectionObject | None = self
        while node is not None:
            if node.name:
                parts.append(node.name)
            node = node.parent
        return ".".join(reversed(parts))

    def get_option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)

    def on_add(self, parent: Namespace) -> None:
        """Called by a namespace after it took ownership of this object."""
        # Import here to avoid circular dependency
        from .root import Root

        self.parent = parent
        self.resolved = False
        root = parent.root
        if isinstance(root, Root):
            root.handle_add(self)

    def on_remove(self, parent: Namespace) -> None:
        """Called by a namespace after it released this object."""
        from .root import Root

        root = parent.root
        if isinstance(root, Root):
            root.handle_remove(self)
        self.parent = None
        self.resolved = False

    def resolve(self) -> ReflectionObject:
        """Resolve this object. Idempotent."""
        self.resolved = True
        return self
