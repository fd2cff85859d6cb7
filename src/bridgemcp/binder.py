# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Argument binding: untyped argument maps in, shaped keyword arguments out.

:func:`bind` walks the parameter descriptors in declaration order and either
returns a complete ``dict`` of bound values or raises the first
:class:`~bridgemcp.exceptions.BindError` it meets. Nothing partially bound is
ever returned, and keys without a matching parameter are ignored.

Records bind from nested mappings (JSON) or from an instance of the record's
factory class, so a handler receives the same value whichever way the caller
sent it. :func:`unbind` goes the other way and renders bound values as plain
JSON data; binding that output again yields an equal value.
"""

from __future__ import annotations

import enum
import math
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .descriptors import (
    MISSING,
    EnumType,
    Field,
    ListType,
    OptionalType,
    Parameter,
    PrimitiveKind,
    PrimitiveType,
    RecordType,
    TypeDescriptor,
    describe,
    enum_wire_value,
)
from .exceptions import (
    InvalidEnumValueError,
    InvariantViolation,
    MissingRequiredArgumentError,
    TypeMismatchError,
)

BoundArguments = dict[str, Any]

_INT_TEXT = re.compile(r"[+-]?\d+")
# decimal or exponent notation only; "nan", "inf" and "1_000" do not match
_NUMBER_TEXT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def bind(
    raw: Mapping[str, Any] | None,
    params: Iterable[Parameter | Field],
    *,
    coerce_strings: bool = False,
) -> BoundArguments:
    """Bind *raw* against *params*.

    Args:
        raw: Caller-supplied arguments. ``None`` is treated as empty.
        params: Target parameters in declaration order.
        coerce_strings: Also accept textual scalars (``"42"``, ``"true"``).
            Used for URI template captures and prompt arguments, which are
            strings on the wire.

    Raises:
        MissingRequiredArgumentError: a required parameter is absent.
        TypeMismatchError: a value does not fit its descriptor.
        InvalidEnumValueError: a string is not among the allowed values.
    """
    return _Binder(coerce_strings).members(raw or {}, params, prefix="")


def unbind(value: Any, descriptor: TypeDescriptor) -> Any:
    """Render a bound value as plain JSON-compatible data."""
    if value is None:
        return None
    if isinstance(descriptor, OptionalType):
        return unbind(value, descriptor.inner)
    if isinstance(descriptor, PrimitiveType):
        return value
    if isinstance(descriptor, EnumType):
        return enum_wire_value(value) if isinstance(value, enum.Enum) else value
    if isinstance(descriptor, ListType):
        return [unbind(item, descriptor.inner) for item in value]
    if isinstance(descriptor, RecordType):
        if isinstance(value, Mapping):
            get = value.get
        else:
            def get(name: str, default: Any = None) -> Any:
                return getattr(value, name, default)
        return {f.name: unbind(get(f.name, None), f.descriptor) for f in descriptor.fields}
    raise TypeError(f"Not a type descriptor: {descriptor!r}")


def unbind_arguments(bound: Mapping[str, Any], params: Iterable[Parameter | Field]) -> dict[str, Any]:
    """:func:`unbind` every parameter present in *bound*."""
    return {p.name: unbind(bound[p.name], p.descriptor) for p in params if p.name in bound}


class _Binder:
    __slots__ = ("_coerce_strings",)

    def __init__(self, coerce_strings: bool) -> None:
        self._coerce_strings = coerce_strings

    def members(
        self,
        raw: Mapping[str, Any],
        members: Iterable[Parameter | Field],
        *,
        prefix: str,
    ) -> dict[str, Any]:
        bound: dict[str, Any] = {}
        for member in members:
            path = f"{prefix}{member.name}"
            if member.name in raw:
                value = self.value(raw[member.name], member.descriptor, path)
            elif member.required:
                raise MissingRequiredArgumentError(path)
            else:
                value = None
            if value is None and member.default is not MISSING:
                value = member.default
            bound[member.name] = value
        return bound

    def value(self, value: Any, descriptor: TypeDescriptor, path: str) -> Any:
        if isinstance(descriptor, OptionalType):
            if value is None:
                return None
            return self.value(value, descriptor.inner, path)
        if value is None:
            raise TypeMismatchError(path, describe(descriptor), value)
        if isinstance(descriptor, PrimitiveType):
            return self.primitive(value, descriptor.kind, path)
        if isinstance(descriptor, EnumType):
            return self.enumeration(value, descriptor, path)
        if isinstance(descriptor, RecordType):
            return self.record(value, descriptor, path)
        if isinstance(descriptor, ListType):
            return self.sequence(value, descriptor, path)
        raise InvariantViolation(f"unknown descriptor at '{path}': {descriptor!r}")

    def primitive(self, value: Any, kind: PrimitiveKind, path: str) -> Any:
        if kind is PrimitiveKind.STRING:
            if isinstance(value, str):
                return value

        elif kind is PrimitiveKind.BOOLEAN:
            if isinstance(value, bool):
                return value
            if self._coerce_strings and isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in _TRUE:
                    return True
                if lowered in _FALSE:
                    return False

        elif kind is PrimitiveKind.INTEGER:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            if isinstance(value, float) and value.is_integer():
                return int(value)
            if self._coerce_strings and isinstance(value, str) and _INT_TEXT.fullmatch(value.strip()):
                return int(value)

        elif kind is PrimitiveKind.NUMBER:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
            if self._coerce_strings and isinstance(value, str) and _NUMBER_TEXT.fullmatch(value.strip()):
                number = float(value)
                if math.isfinite(number):
                    return number

        raise TypeMismatchError(path, kind.value, value)

    def enumeration(self, value: Any, descriptor: EnumType, path: str) -> Any:
        if descriptor.enum_class is not None and isinstance(value, descriptor.enum_class):
            return value
        if isinstance(value, str) and value in descriptor.values:
            return descriptor.member(value)
        raise InvalidEnumValueError(path, value, descriptor.values)

    def record(self, value: Any, descriptor: RecordType, path: str) -> Any:
        factory = descriptor.factory
        if isinstance(factory, type) and isinstance(value, factory):
            return value
        if not isinstance(value, Mapping):
            raise TypeMismatchError(path, describe(descriptor), value)

        fields = self.members(value, descriptor.fields, prefix=f"{path}.")
        if factory is None:
            return fields
        # absent optional fields fall back to the factory's own defaults
        kwargs = {name: item for name, item in fields.items() if item is not None or name in value}
        try:
            return factory(**kwargs)
        except InvariantViolation:
            raise
        except Exception as exc:
            raise TypeMismatchError(path, describe(descriptor), value) from exc

    def sequence(self, value: Any, descriptor: ListType, path: str) -> list[Any]:
        if isinstance(value, (str, bytes, bytearray, Mapping)) or not isinstance(value, Sequence):
            raise TypeMismatchError(path, describe(descriptor), value)
        return [self.value(item, descriptor.inner, f"{path}[{index}]") for index, item in enumerate(value)]


__all__ = ["BoundArguments", "bind", "unbind", "unbind_arguments"]
