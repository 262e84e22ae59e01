"""Test configuration and fixtures."""

import copy

import pytest

from docstore.collection import Collection

FIXTURES = [
    {
        "name": "A",
        "age": 28,
        "code": ["js", "html"],
        "details": {"city": "munich"},
    },
    {
        "name": "B",
        "age": 20,
        "code": ["html", "java"],
    },
    {
        "name": "C",
        "age": 28,
    },
    {
        "name": "D",
        "age": 38,
        "code": ["python", "ruby"],
    },
    {
        "name": "E",
        "code": ["js", "css", "java"],
    },
    {
        "name": "F",
        "age": 16,
    },
]


@pytest.fixture
def fixture_records() -> list[dict]:
    """Fresh copies of the reference records (insert mutates them)."""
    return copy.deepcopy(FIXTURES)


@pytest.fixture
def collection(fixture_records) -> Collection:
    """In-memory collection holding the reference records."""
    coll = Collection("test")
    for record in fixture_records:
        coll.insert(record)
    return coll
