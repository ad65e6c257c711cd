"""
Shared fixtures for entitygen tests.

Schema documents are plain dicts in the same shape the CLI loads from JSON.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from entitygen.codegen.core.schema import Entity, Schema


@pytest.fixture
def person_document() -> dict:
    """Person with a virtual display(), Employee overriding it."""
    return {
        "namespace": "com.example",
        "entities": [
            {
                "name": "Person",
                "documentation": "A person.",
                "attributes": [
                    {"name": "name", "type": "string", "accessor": True, "mutator": True},
                    {
                        "name": "age",
                        "type": "int",
                        "default": 0,
                        "accessor": True,
                        "mutator": True,
                    },
                ],
                "methods": [{"name": "display", "const": True, "kind": "virtual"}],
            },
            {
                "name": "Employee",
                "parent": "Person",
                "attributes": [
                    {"name": "employeeId", "type": "string", "accessor": True},
                ],
                "methods": [{"name": "display", "const": True}],
            },
        ],
    }


@pytest.fixture
def staff_document() -> dict:
    """Person/Employee with derived getters and setters on both levels."""
    return {
        "entities": [
            {
                "name": "Person",
                "attributes": [
                    {"name": "name", "type": "string", "accessor": True, "mutator": True},
                    {"name": "age", "type": "int", "default": 0, "accessor": True},
                ],
                "methods": [{"name": "display", "const": True, "kind": "virtual"}],
            },
            {
                "name": "Employee",
                "parent": "Person",
                "attributes": [
                    {"name": "employeeId", "type": "string", "accessor": True},
                    {"name": "salary", "type": "double", "default": 0.0, "mutator": True},
                ],
                "methods": [{"name": "display", "const": True, "kind": "override"}],
            },
        ],
    }


@pytest.fixture
def shapes_document() -> dict:
    """Abstract Shape with a pure-virtual area(), implemented by Circle."""
    return {
        "entities": [
            {
                "name": "Shape",
                "abstract": True,
                "methods": [
                    {
                        "name": "area",
                        "returns": "double",
                        "const": True,
                        "kind": "pure_virtual",
                    }
                ],
            },
            {
                "name": "Circle",
                "parent": "Shape",
                "attributes": [{"name": "radius", "type": "double", "accessor": True}],
                "methods": [{"name": "area", "returns": "double", "const": True}],
            },
        ],
    }


@pytest.fixture
def company_document() -> dict:
    """Company holding a list of Employees, plus the Person hierarchy."""
    return {
        "namespace": "com.example",
        "entities": [
            {
                "name": "Person",
                "attributes": [{"name": "name", "type": "string"}],
            },
            {
                "name": "Employee",
                "parent": "Person",
                "attributes": [{"name": "manager", "type": "Employee"}],
            },
            {
                "name": "Company",
                "attributes": [
                    {"name": "employees", "type": "list<Employee>", "accessor": True},
                    {"name": "founder", "type": "Person", "default": "nullptr"},
                ],
            },
        ],
    }


@pytest.fixture
def cyclic_schema() -> Schema:
    """A -> B -> A; the loader accepts it, the resolver must not."""
    return Schema([Entity("A", parent="B"), Entity("B", parent="A")])


@pytest.fixture
def write_json(tmp_path: Path):
    """Write a dict to a JSON file under tmp_path and return its path."""

    def _write(data, name: str = "schema.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
