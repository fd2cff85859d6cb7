# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Descriptor discovery from Python callables.

The engine itself only walks descriptor trees. This module is the discovery
side: it reads a handler's signature once, at registration, and turns the
annotations into :class:`~bridgemcp.descriptors.Parameter` lists.

Supported annotations:

* ``str``, ``int``, ``float``, ``bool``
* ``X | None`` / ``Optional[X]`` and parameters with defaults (optional)
* ``enum.Enum`` subclasses and ``Literal["a", "b"]`` (enumerations)
* dataclasses and pydantic models (records)
* ``list[X]``, ``Sequence[X]`` and ``tuple[X, ...]`` (lists)
* ``Annotated[X, ...]``; a pydantic ``Field(...)`` in the metadata supplies the
  description and examples

Anything else raises :class:`TypeError` at registration time.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import functools
import inspect
import types
import typing
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .descriptors import (
    BOOLEAN,
    INTEGER,
    MISSING,
    NUMBER,
    STRING,
    EnumType,
    Field,
    ListType,
    OptionalType,
    Parameter,
    PrimitiveType,
    RecordType,
    TypeDescriptor,
    enum_of,
    optional,
)
from .utils import parse_docstring_params

_PRIMITIVES: dict[Any, PrimitiveType] = {
    str: STRING,
    int: INTEGER,
    float: NUMBER,
    bool: BOOLEAN,
}
_SEQUENCES = (list, collections.abc.Sequence)
_DESCRIPTORS = (PrimitiveType, OptionalType, EnumType, RecordType, ListType)


def describe_type(annotation: Any) -> TypeDescriptor:
    """Build a descriptor tree for *annotation*.

    Raises:
        TypeError: the annotation has no descriptor equivalent.
    """
    return _describe(annotation, ())


def parameters_from_callable(
    fn: Callable[..., Any],
    *,
    exclude: Iterable[str] = (),
    descriptions: Mapping[str, str] | None = None,
) -> tuple[Parameter, ...]:
    """Derive handler parameters from *fn*'s signature.

    Args:
        fn: Function, method or callable object.
        exclude: Parameter names to skip, e.g. the context parameter.
        descriptions: Explicit descriptions, overriding the docstring.

    Raises:
        TypeError: a parameter is positional-only, variadic, unannotated or
            has an unsupported annotation.
    """
    excluded = set(exclude)
    target = _target(fn)
    signature = inspect.signature(fn)
    hints = typing.get_type_hints(target, include_extras=True)
    docs = parse_docstring_params(inspect.getdoc(target))
    overrides = descriptions or {}

    params: list[Parameter] = []
    for name, param in signature.parameters.items():
        if name in excluded:
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise TypeError(f"{_qualname(fn)}: variadic parameter '{name}' is not supported")
        if param.kind is inspect.Parameter.POSITIONAL_ONLY:
            raise TypeError(f"{_qualname(fn)}: positional-only parameter '{name}' is not supported")
        if name not in hints:
            raise TypeError(f"{_qualname(fn)}: parameter '{name}' needs a type annotation")

        descriptor = describe_type(hints[name])
        info = _field_info(hints[name])
        default = MISSING
        if param.default is not inspect.Parameter.empty:
            default = param.default
            descriptor = optional(descriptor)
        description = overrides.get(name) or (info.description if info else None) or docs.get(name)
        examples = tuple(info.examples or ()) if info else ()
        params.append(Parameter(name, descriptor, description, default, examples=examples))
    return tuple(params)


def summary(fn: Callable[..., Any]) -> str | None:
    """First paragraph of *fn*'s docstring."""
    doc = inspect.getdoc(_target(fn))
    if not doc:
        return None
    return doc.split("\n\n", 1)[0].strip() or None


def record_type(cls: type) -> RecordType:
    """Describe a dataclass or pydantic model class as a record."""
    return _record(cls, ())


# ----------------------------------------------------------------------
# Internals
# ----------------------------------------------------------------------


def _describe(annotation: Any, seen: tuple[type, ...]) -> TypeDescriptor:
    if isinstance(annotation, _DESCRIPTORS):
        return annotation

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Annotated:
        return _describe(args[0], seen)

    if annotation in _PRIMITIVES:
        return _PRIMITIVES[annotation]

    if origin in (typing.Union, types.UnionType):
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == 1 and len(members) < len(args):
            return optional(_describe(members[0], seen))
        raise TypeError(f"Unions other than 'X | None' are not supported: {annotation!r}")

    if origin is typing.Literal:
        if not all(isinstance(arg, str) for arg in args):
            raise TypeError(f"Only string literals are supported: {annotation!r}")
        return EnumType(tuple(args))

    if origin in _SEQUENCES:
        if len(args) != 1:
            raise TypeError(f"Sequence annotations need an item type: {annotation!r}")
        return ListType(_describe(args[0], seen))

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return ListType(_describe(args[0], seen))
        raise TypeError(f"Only homogeneous 'tuple[X, ...]' is supported: {annotation!r}")

    if isinstance(annotation, type):
        if issubclass(annotation, enum.Enum):
            return enum_of(annotation)
        if dataclasses.is_dataclass(annotation) or issubclass(annotation, BaseModel):
            return _record(annotation, seen)

    raise TypeError(f"Unsupported annotation: {annotation!r}")


def _record(cls: type, seen: tuple[type, ...]) -> RecordType:
    if cls in seen:
        raise TypeError(f"Recursive record types are not supported: {cls.__name__}")
    seen = (*seen, cls)

    fields: list[Field] = []
    if issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            descriptor = _describe(info.annotation, seen)
            default = MISSING
            if not info.is_required():
                descriptor = optional(descriptor)
                if info.default_factory is None:
                    default = info.default
            fields.append(Field(name, descriptor, info.description, default, examples=tuple(info.examples or ())))
    elif dataclasses.is_dataclass(cls):
        hints = typing.get_type_hints(cls, include_extras=True)
        for item in dataclasses.fields(cls):
            if not item.init:
                continue
            descriptor = _describe(hints[item.name], seen)
            default = MISSING
            if item.default is not dataclasses.MISSING:
                descriptor = optional(descriptor)
                default = item.default
            elif item.default_factory is not dataclasses.MISSING:
                descriptor = optional(descriptor)
            fields.append(Field(item.name, descriptor, item.metadata.get("description"), default))
    else:
        raise TypeError(f"Not a dataclass or pydantic model: {cls!r}")

    return RecordType(tuple(fields), name=cls.__name__, factory=cls)


def _field_info(annotation: Any) -> FieldInfo | None:
    if typing.get_origin(annotation) is not typing.Annotated:
        return None
    for meta in typing.get_args(annotation)[1:]:
        if isinstance(meta, FieldInfo):
            return meta
    return None


def _target(fn: Callable[..., Any]) -> Any:
    while isinstance(fn, functools.partial):
        fn = fn.func
    if inspect.isroutine(fn):
        return inspect.unwrap(fn)
    return type(fn).__call__


def _qualname(fn: Any) -> str:
    return getattr(fn, "__qualname__", None) or type(fn).__qualname__


__all__ = ["describe_type", "parameters_from_callable", "record_type", "summary"]
