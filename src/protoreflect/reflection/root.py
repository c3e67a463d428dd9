"""The root namespace and its deferred extension registry."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..config import DEFAULT_OPTIONS, CodecOptions
from ..exceptions import SchemaError
from ..models.descriptors import NamespaceDescriptor, parse_descriptor
from .base import ReflectionObject
from .field import Field
from .namespace import Namespace

if TYPE_CHECKING:
    from .type import Type

logger = logging.getLogger(__name__)


class Root(Namespace):
    """Top-level namespace of a schema tree.

    Extension fields (fields carrying ``extend``) may be declared anywhere in
    the tree. The root keeps them in a pending registry until the extended
    type asks for them through ``Type.resolve_extends()``, at which point a
    copy of each matching extension is added to that type as a normal field.

    Children hold only weak references to their parents, so keep a reference
    to the root for as long as any type below it is in use.

    Example:
        >>> root = Root.from_json({"nested": {"Ping": {"fields": {
        ...     "seq": {"id": 1, "type": "uint32"}}}}})
        >>> ping = root.lookup_type("Ping")
        >>> ping.encode({"seq": 1}).finish()
        b'\\x08\\x01'
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        codec_options: CodecOptions | None = None,
    ) -> None:
        super().__init__("", options)
        self.codec_options = codec_options or DEFAULT_OPTIONS
        self.pending_extensions: list[Field] = []

    @classmethod
    def from_json(  # type: ignore[override]
        cls,
        json: Mapping[str, Any],
        codec_options: CodecOptions | None = None,
    ) -> Root:
        """Build a root from a JSON schema object with a ``nested`` member.

        Args:
            json: Schema JSON
            codec_options: Options shared by every type below this root

        Returns:
            The populated root

        Raises:
            SchemaError: If the JSON is invalid
        """
        descriptor = parse_descriptor(NamespaceDescriptor, "<root>", json)
        root = cls(descriptor.options, codec_options)
        root.add_json(descriptor.nested)
        return root

    def handle_add(self, obj: ReflectionObject) -> None:
        """Register extension fields found in a newly added subtree."""
        if isinstance(obj, Field):
            if obj.extend is not None and obj.extension_field is None:
                self.pending_extensions.append(obj)
        elif isinstance(obj, Namespace):
            for child in obj.nested_list:
                self.handle_add(child)

    def handle_remove(self, obj: ReflectionObject) -> None:
        """Unregister extension fields of a subtree being removed."""
        if isinstance(obj, Field):
            if obj.extend is None:
                return
            if obj in self.pending_extensions:
                self.pending_extensions.remove(obj)
            bound = obj.extension_field
            if bound is not None and bound.parent is not None:
                bound.parent.remove(bound)
                bound.declaring_field = None
                obj.extension_field = None
        elif isinstance(obj, Namespace):
            for child in obj.nested_list:
                self.handle_remove(child)

    def handle_resolve(self, type_: Type) -> None:
        """Bind every pending extension whose target resolves to the given type."""
        for declaration in list(self.pending_extensions):
            scope = declaration.parent
            target = scope.lookup(declaration.extend) if scope is not None else None  # type: ignore[arg-type]
            if target is not type_:
                continue
            bound = Field(
                declaration.full_name,
                declaration.id,
                declaration.type,
                rule=declaration.rule,
                options=declaration.options,
                key_type=declaration.key_type,
            )
            bound.declaring_field = declaration
            declaration.extension_field = bound
            self.pending_extensions.remove(declaration)
            type_.add(bound)
            logger.debug("Bound extension %s to %s as field %d", declaration, type_, bound.id)

    def resolve_all(self) -> Root:
        """Resolve every node and bind every extension.

        Raises:
            SchemaError: If an extension names a type that does not exist
        """
        for declaration in list(self.pending_extensions):
            scope = declaration.parent
            target = scope.lookup(declaration.extend) if scope is not None else None  # type: ignore[arg-type]
            if target is None or not hasattr(target, "resolve_extends"):
                raise SchemaError(f"unresolvable extension target: {declaration.extend} in {declaration}")
            target.resolve_extends()
        super().resolve_all()
        return self
