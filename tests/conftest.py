"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from protoreflect import Root, Type


@pytest.fixture
def person_json() -> dict[str, Any]:
    """JSON description of a small two-field message type."""
    return {
        "fields": {
            "id": {"id": 1, "rule": "required", "type": "uint32"},
            "name": {"id": 2, "rule": "optional", "type": "string"},
        }
    }


@pytest.fixture
def person(person_json: dict[str, Any]) -> Type:
    """Stand-alone Person type (no root)."""
    return Type.from_json("Person", person_json)


@pytest.fixture
def schema_json() -> dict[str, Any]:
    """A package exercising nesting, enums, maps, one-ofs and extensions."""
    return {
        "nested": {
            "test": {
                "nested": {
                    "Kind": {"values": {"UNKNOWN": 0, "SENSOR": 1, "ACTUATOR": 2}},
                    "Point": {
                        "fields": {
                            "x": {"id": 1, "type": "sint32"},
                            "y": {"id": 2, "type": "sint32"},
                        }
                    },
                    "Device": {
                        "fields": {
                            "id": {"id": 1, "rule": "required", "type": "uint32"},
                            "name": {"id": 2, "type": "string"},
                            "kind": {"id": 3, "type": "Kind"},
                            "readings": {"id": 4, "rule": "repeated", "type": "int32", "options": {"packed": True}},
                            "labels": {"id": 5, "keyType": "string", "type": "int32"},
                            "position": {"id": 6, "type": "Point"},
                            "track": {"id": 7, "rule": "repeated", "type": "Point"},
                            "serial": {"id": 8, "type": "string"},
                            "slot": {"id": 9, "type": "uint32"},
                            "status": {"id": 10, "type": "Device.Status"},
                        },
                        "oneofs": {"address": {"oneof": ["serial", "slot"]}},
                        "extensions": [[100, 199]],
                        "nested": {
                            "Status": {"values": {"OK": 0, "FAULT": 1}},
                        },
                    },
                    "firmware": {"id": 100, "type": "string", "extend": "Device"},
                    "Registry": {
                        "methods": {
                            "Lookup": {"requestType": "Device", "responseType": "Device"},
                        }
                    },
                }
            }
        }
    }


@pytest.fixture
def root(schema_json: dict[str, Any]) -> Root:
    """Root built from ``schema_json``; keeps the tree alive for the test."""
    return Root.from_json(schema_json)


@pytest.fixture
def device(root: Root) -> Type:
    """The test.Device type of ``root``."""
    return root.lookup_type("test.Device")
