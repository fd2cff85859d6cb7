# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""JSON Schema synthesis from type descriptors.

The output is what ``tools/list`` advertises as ``inputSchema``: an object
schema with one property per parameter and a ``required`` list holding the
non-optional names in declaration order.

Synthesis is a pure function of its input. The same parameters always produce
an equal document with the same key order, so ``json.dumps`` of two runs is
byte-identical.
"""

from __future__ import annotations

import copy
import enum
from collections.abc import Collection, Iterable
from typing import Any

from .descriptors import (
    MISSING,
    EnumType,
    Field,
    ListType,
    OptionalType,
    Parameter,
    PrimitiveType,
    RecordType,
    TypeDescriptor,
    enum_wire_value,
)


def synthesize(
    params: Iterable[Parameter | Field],
    *,
    exclude: Collection[str] = (),
) -> dict[str, Any]:
    """Build the object schema wrapping *params*.

    Args:
        params: Parameters (or record fields) in declaration order.
        exclude: Names dropped before synthesis, e.g. an injected context
            parameter that callers never supply.

    Returns:
        ``{"type": "object", "properties": {...}, "required": [...]}``
    """
    properties: dict[str, Any] = {}
    required: list[str] = []

    for param in params:
        if param.name in exclude:
            continue
        properties[param.name] = member_schema(param)
        if param.required:
            required.append(param.name)

    return {"type": "object", "properties": properties, "required": required}


def member_schema(param: Parameter | Field) -> dict[str, Any]:
    """Property schema for one parameter or record field.

    An explicit ``schema`` on the member is returned as given, without the
    synthesized description, default or examples.
    """
    if param.schema is not None:
        return copy.deepcopy(dict(param.schema))

    prop = descriptor_schema(param.descriptor)
    if param.description:
        prop["description"] = param.description
    if param.default is not MISSING and _is_json_scalar(param.default):
        prop["default"] = _wire(param.default)
    if param.examples:
        prop["examples"] = [_wire(example) for example in param.examples]
    return prop


def descriptor_schema(descriptor: TypeDescriptor) -> dict[str, Any]:
    """Schema for a single descriptor node (recursive)."""
    if isinstance(descriptor, PrimitiveType):
        return {"type": descriptor.kind.value}

    if isinstance(descriptor, OptionalType):
        # Optionality lives in the parent's ``required`` list, not here.
        return descriptor_schema(descriptor.inner)

    if isinstance(descriptor, EnumType):
        return {"type": "string", "enum": list(descriptor.values)}

    if isinstance(descriptor, RecordType):
        schema = synthesize(descriptor.fields)
        if descriptor.name:
            return {"type": "object", "title": descriptor.name, **{k: v for k, v in schema.items() if k != "type"}}
        return schema

    if isinstance(descriptor, ListType):
        return {"type": "array", "items": descriptor_schema(descriptor.inner)}

    raise TypeError(f"Not a type descriptor: {descriptor!r}")


def _is_json_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool, enum.Enum))


def _wire(value: Any) -> Any:
    return enum_wire_value(value) if isinstance(value, enum.Enum) else value


__all__ = ["descriptor_schema", "member_schema", "synthesize"]
