# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Descriptor discovery from function signatures."""

from __future__ import annotations

import enum
import functools
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Annotated, Literal, Optional

import pytest
from pydantic import BaseModel, Field as ModelField

from bridgemcp.descriptors import (
    BOOLEAN,
    INTEGER,
    MISSING,
    NUMBER,
    STRING,
    EnumType,
    ListType,
    OptionalType,
    RecordType,
)
from bridgemcp.introspect import describe_type, parameters_from_callable, record_type, summary


class Priority(enum.Enum):
    LOW = "low"
    HIGH = "high"


@dataclass
class Address:
    street: str
    city: str = "Springfield"
    tags: list[str] = field(default_factory=list)


class Customer(BaseModel):
    name: str = ModelField(description="Full name")
    address: Address
    vip: bool = False


class Product(BaseModel):
    sku: str = ModelField(examples=["A-100", "B-200"])


@dataclass
class Node:
    value: int
    children: list[Node]


# --- describe_type ---


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (str, STRING),
        (int, INTEGER),
        (float, NUMBER),
        (bool, BOOLEAN),
        (Optional[int], OptionalType(INTEGER)),
        (int | None, OptionalType(INTEGER)),
        (list[str], ListType(STRING)),
        (Sequence[int], ListType(INTEGER)),
        (tuple[float, ...], ListType(NUMBER)),
        (Annotated[int, "meta"], INTEGER),
    ],
)
def test_simple_annotations(annotation, expected):
    assert describe_type(annotation) == expected


def test_enum_class():
    descriptor = describe_type(Priority)
    assert descriptor == EnumType(("low", "high"), enum_class=Priority)


def test_literal_strings():
    assert describe_type(Literal["a", "b"]) == EnumType(("a", "b"))


def test_dataclass_record():
    descriptor = describe_type(Address)
    assert isinstance(descriptor, RecordType)
    assert descriptor.name == "Address"
    assert descriptor.factory is Address
    assert descriptor.required == ["street"]
    assert descriptor.fields[1].default == "Springfield"
    assert descriptor.fields[2].default is MISSING


def test_pydantic_record_nests_dataclass():
    descriptor = record_type(Customer)
    assert [f.name for f in descriptor.fields] == ["name", "address", "vip"]
    assert descriptor.fields[0].description == "Full name"
    assert isinstance(descriptor.fields[1].descriptor, RecordType)
    assert descriptor.required == ["name", "address"]
    assert descriptor.fields[2].default is False


@pytest.mark.parametrize("annotation", [dict, int | str, Literal[1, 2], tuple[int, str], list])
def test_unsupported_annotations(annotation):
    with pytest.raises(TypeError):
        describe_type(annotation)


def test_recursive_records_are_rejected():
    with pytest.raises(TypeError, match="Recursive"):
        describe_type(Node)


# --- parameters_from_callable ---


def search(query: str, limit: int = 10, priority: Priority | None = None) -> list[str]:
    """Search the catalogue.

    Longer explanation that is not part of the summary.

    Args:
        query: Free-text query
        limit: Maximum number of hits
    """
    return []


def test_parameters_follow_signature():
    params = parameters_from_callable(search)
    assert [p.name for p in params] == ["query", "limit", "priority"]
    assert params[0].descriptor == STRING
    assert params[0].required
    assert params[1].descriptor == OptionalType(INTEGER)
    assert params[1].default == 10
    assert params[2].descriptor == OptionalType(EnumType(("low", "high"), enum_class=Priority))


def test_descriptions_come_from_docstring_and_overrides():
    params = parameters_from_callable(search, descriptions={"limit": "Cap"})
    assert params[0].description == "Free-text query"
    assert params[1].description == "Cap"
    assert params[2].description is None


def test_annotated_model_field_supplies_description_and_examples():
    def create_user(
        username: Annotated[str, ModelField(description="Account name", examples=["john_doe", "jane_smith"])],
        age: Annotated[int, ModelField(examples=[25, 30])] = 30,
    ) -> str:
        """Create a user.

        Args:
            username: Ignored in favour of the field description
            age: Age in years
        """
        return username

    username, age = parameters_from_callable(create_user)
    assert username.description == "Account name"
    assert username.examples == ("john_doe", "jane_smith")
    assert age.description == "Age in years"
    assert age.examples == (25, 30)
    assert age.default == 30


def test_model_field_examples_reach_record_fields():
    [sku] = record_type(Product).fields
    assert sku.examples == ("A-100", "B-200")


def test_excluded_names_are_skipped():
    def handler(ctx, name: str) -> str:
        return name

    assert [p.name for p in parameters_from_callable(handler, exclude=["ctx"])] == ["name"]


def test_unannotated_parameter_is_rejected():
    def handler(name) -> str:
        return name

    with pytest.raises(TypeError, match="needs a type annotation"):
        parameters_from_callable(handler)


def test_variadic_parameters_are_rejected():
    def handler(*names: str) -> str:
        return ""

    with pytest.raises(TypeError, match="variadic"):
        parameters_from_callable(handler)


def test_bound_methods_and_partials():
    class Service:
        def lookup(self, key: str, fresh: bool = False) -> str:
            return key

    assert [p.name for p in parameters_from_callable(Service().lookup)] == ["key", "fresh"]
    partial = functools.partial(search, limit=5)
    assert [p.name for p in parameters_from_callable(partial)] == ["query", "limit", "priority"]


def test_summary_is_first_paragraph():
    assert summary(search) == "Search the catalogue."
    assert summary(lambda: None) is None
