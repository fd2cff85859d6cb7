# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Structural type descriptors.

A descriptor tree says what shape a handler parameter has, independent of how
that shape was declared. Trees are immutable and built once, when a capability
is registered; the schema synthesizer and the argument binder only ever walk
them.

Example:
    >>> from bridgemcp.descriptors import INTEGER, STRING, Field, Parameter, RecordType, list_of, optional
    >>> address = RecordType((Field("street", STRING), Field("zip", optional(STRING))), name="Address")
    >>> params = [Parameter("count", INTEGER), Parameter("to", list_of(address))]
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Union


class PrimitiveKind(str, enum.Enum):
    """Scalar kinds, valued by their JSON Schema type names."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()
"""Marks a parameter without a default value."""


@dataclass(frozen=True, slots=True)
class PrimitiveType:
    kind: PrimitiveKind


@dataclass(frozen=True, slots=True)
class OptionalType:
    """May be absent or ``None``; the owning record does not require it."""

    inner: TypeDescriptor


@dataclass(frozen=True, slots=True)
class EnumType:
    """A closed set of strings, in declaration order.

    ``enum_class`` is set when the values come from a Python :class:`enum.Enum`;
    binding then yields members instead of raw strings.
    """

    values: tuple[str, ...]
    enum_class: type[enum.Enum] | None = None

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("EnumType needs at least one value")
        if len(set(self.values)) != len(self.values):
            raise ValueError(f"EnumType values must be unique: {list(self.values)}")
        if not all(isinstance(value, str) for value in self.values):
            raise ValueError("EnumType values must be strings")

    def member(self, value: str) -> Any:
        """Return the typed member for wire string *value*."""
        if self.enum_class is None:
            return value
        for item in self.enum_class:
            if enum_wire_value(item) == value:
                return item
        raise LookupError(value)


@dataclass(frozen=True, slots=True)
class Field:
    """A named record member. See :class:`Parameter` for the options."""

    name: str
    descriptor: TypeDescriptor
    description: str | None = None
    default: Any = MISSING
    examples: tuple[Any, ...] = dataclasses.field(default=(), hash=False)
    schema: Mapping[str, Any] | None = dataclasses.field(default=None, hash=False)
    required: bool | None = None

    def __post_init__(self) -> None:
        _settle_member(self)


@dataclass(frozen=True, slots=True)
class RecordType:
    """An ordered set of named fields.

    ``name`` is the record's declared name, if it has a stable one.
    ``factory`` builds the bound value from keyword arguments (a dataclass or
    pydantic model class); without one, bound records are plain dicts.
    """

    fields: tuple[Field, ...]
    name: str | None = None
    factory: Callable[..., Any] | None = None

    def __post_init__(self) -> None:
        names = [f.name for f in self.fields]
        if len(set(names)) != len(names):
            raise ValueError(f"RecordType field names must be unique: {names}")

    @property
    def required(self) -> list[str]:
        return [f.name for f in self.fields if f.required]


@dataclass(frozen=True, slots=True)
class ListType:
    inner: TypeDescriptor


TypeDescriptor = Union[PrimitiveType, OptionalType, EnumType, RecordType, ListType]


@dataclass(frozen=True, slots=True)
class Parameter:
    """A named handler parameter.

    ``default`` is used when an optional parameter is absent; otherwise an
    absent optional parameter binds to ``None``.

    ``required`` follows the descriptor unless given: an :class:`OptionalType`
    is not required, anything else is. Passing ``required=False`` for a
    non-optional descriptor needs a ``default``. ``examples`` are advertised
    in the schema, and ``schema`` replaces the synthesized property schema
    outright.
    """

    name: str
    descriptor: TypeDescriptor
    description: str | None = None
    default: Any = MISSING
    examples: tuple[Any, ...] = dataclasses.field(default=(), hash=False)
    schema: Mapping[str, Any] | None = dataclasses.field(default=None, hash=False)
    required: bool | None = None

    def __post_init__(self) -> None:
        _settle_member(self)

    def as_field(self) -> Field:
        return Field(
            self.name,
            self.descriptor,
            self.description,
            self.default,
            examples=self.examples,
            schema=self.schema,
            required=self.required,
        )


def _settle_member(member: Parameter | Field) -> None:
    optional_descriptor = isinstance(member.descriptor, OptionalType)
    if member.required is None:
        object.__setattr__(member, "required", not optional_descriptor)
    elif not member.required and not optional_descriptor and member.default is MISSING:
        raise ValueError(f"'{member.name}' is marked not required but is neither optional nor has a default")
    object.__setattr__(member, "examples", tuple(member.examples))
    if member.schema is not None:
        object.__setattr__(member, "schema", MappingProxyType(dict(member.schema)))


STRING = PrimitiveType(PrimitiveKind.STRING)
INTEGER = PrimitiveType(PrimitiveKind.INTEGER)
NUMBER = PrimitiveType(PrimitiveKind.NUMBER)
BOOLEAN = PrimitiveType(PrimitiveKind.BOOLEAN)


def optional(inner: TypeDescriptor) -> OptionalType:
    if isinstance(inner, OptionalType):
        return inner
    return OptionalType(inner)


def list_of(inner: TypeDescriptor) -> ListType:
    return ListType(inner)


def enum_of(values: Iterable[str] | type[enum.Enum]) -> EnumType:
    """Build an :class:`EnumType` from strings or an ``Enum`` subclass."""
    if isinstance(values, type) and issubclass(values, enum.Enum):
        return EnumType(tuple(enum_wire_value(item) for item in values), enum_class=values)
    return EnumType(tuple(values))


def enum_wire_value(member: enum.Enum) -> str:
    """String used on the wire for *member*: its value if a string, else its name."""
    return member.value if isinstance(member.value, str) else member.name


def describe(descriptor: TypeDescriptor) -> str:
    """Short human-readable rendering, used in error messages."""
    if isinstance(descriptor, PrimitiveType):
        return descriptor.kind.value
    if isinstance(descriptor, OptionalType):
        return f"optional {describe(descriptor.inner)}"
    if isinstance(descriptor, EnumType):
        return "one of " + ", ".join(descriptor.values)
    if isinstance(descriptor, RecordType):
        return f"object {descriptor.name}" if descriptor.name else "object"
    if isinstance(descriptor, ListType):
        return f"array of {describe(descriptor.inner)}"
    raise TypeError(f"Not a type descriptor: {descriptor!r}")


__all__ = [
    "BOOLEAN",
    "INTEGER",
    "MISSING",
    "NUMBER",
    "STRING",
    "EnumType",
    "Field",
    "ListType",
    "OptionalType",
    "Parameter",
    "PrimitiveKind",
    "PrimitiveType",
    "RecordType",
    "TypeDescriptor",
    "describe",
    "enum_of",
    "enum_wire_value",
    "list_of",
    "optional",
]
