"""Pydantic models for the JSON schema description.

These models validate the JSON object shapes consumed by the ``from_json``
constructors of the reflection classes before any tree node is built, so a
malformed description is rejected with a SchemaError naming the offending
node instead of failing halfway through construction.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..exceptions import SchemaError

# Largest field number representable in a tag
MAX_FIELD_ID = (1 << 29) - 1

Rule = Literal["optional", "required", "repeated", "map"]


class Descriptor(BaseModel):
    """Base class for all JSON descriptors."""

    model_config = ConfigDict(
        # Reject keys the engine does not understand
        extra="forbid",
        populate_by_name=True,
        frozen=True,
    )

    options: dict[str, Any] = Field(default_factory=dict)


class FieldDescriptor(Descriptor):
    """JSON shape of a field: ``{id, rule?, type, keyType?, extend?, options?}``."""

    id: int = Field(gt=0, le=MAX_FIELD_ID)
    type: str = Field(min_length=1)
    rule: Optional[Rule] = None
    key_type: Optional[str] = Field(default=None, alias="keyType", min_length=1)
    extend: Optional[str] = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def _check_map(self) -> FieldDescriptor:
        if self.rule == "map" and self.key_type is None:
            raise ValueError("map fields require a keyType")
        if self.key_type is not None and self.rule not in (None, "map"):
            raise ValueError(f"keyType is only valid on map fields, not rule {self.rule!r}")
        return self

    @property
    def effective_rule(self) -> str:
        if self.key_type is not None:
            return "map"
        return self.rule or "optional"


class OneOfDescriptor(Descriptor):
    """JSON shape of a one-of: ``{oneof: [fieldName, ...]}``."""

    oneof: list[str]


class TypeDescriptor(Descriptor):
    """JSON shape of a message type.

    Nested entries are kept as raw mappings; they are classified one by one by
    the owning namespace.
    """

    fields: dict[str, dict[str, Any]]
    oneofs: Optional[dict[str, dict[str, Any]]] = None
    extensions: Optional[list[tuple[int, int]]] = None
    reserved: Optional[list[Union[tuple[int, int], int, str]]] = None
    nested: Optional[dict[str, dict[str, Any]]] = None


class EnumDescriptor(Descriptor):
    """JSON shape of an enum: ``{values: {NAME: number}}``."""

    values: dict[str, int]


class MethodDescriptor(Descriptor):
    """JSON shape of a service method."""

    request_type: str = Field(alias="requestType", min_length=1)
    response_type: str = Field(alias="responseType", min_length=1)
    request_stream: bool = Field(default=False, alias="requestStream")
    response_stream: bool = Field(default=False, alias="responseStream")


class ServiceDescriptor(Descriptor):
    """JSON shape of a service: ``{methods: {name: {...}}}``."""

    methods: dict[str, MethodDescriptor]
    nested: Optional[dict[str, dict[str, Any]]] = None


class NamespaceDescriptor(Descriptor):
    """JSON shape of a plain namespace or root: ``{nested: {...}}``."""

    nested: Optional[dict[str, dict[str, Any]]] = None


def parse_descriptor(model: type[Descriptor], name: str, json: Any) -> Any:
    """Validate a JSON object against a descriptor model.

    Args:
        model: Descriptor class to validate against
        name: Name of the node being described (for error messages)
        json: JSON object to validate

    Returns:
        Validated descriptor instance

    Raises:
        SchemaError: If the JSON does not match the descriptor shape
    """
    try:
        return model.model_validate(json)
    except ValidationError as e:
        kind = model.__name__.replace("Descriptor", "").lower() or "node"
        raise SchemaError(f"Invalid {kind} {name!r}: {e}") from e
