# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Capability definitions.

One definition exists per registered capability. Definitions are frozen and
are replaced wholesale on re-registration. Each one knows its registry key,
its declared parameters, the input schema synthesized from them, and how to
render itself as the matching ``mcp`` listing type.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import mcp.types as types
from pydantic import BaseModel, ConfigDict
from pydantic import Field as ModelField

from .descriptors import Parameter
from .schema import synthesize


class CapabilityKind(str, Enum):
    TOOL = "tool"
    RESOURCE = "resource"
    RESOURCE_TEMPLATE = "resource_template"
    PROMPT = "prompt"


class ToolExample(BaseModel):
    """A worked example attached to a capability definition."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = None
    description: str | None = None
    arguments: dict[str, Any] = ModelField(default_factory=dict)

    def __hash__(self) -> int:
        return hash((self.name, self.description))


@dataclass(frozen=True, slots=True, kw_only=True)
class CapabilityDefinition:
    """Metadata shared by every capability kind.

    ``schema`` is synthesized from ``parameters`` unless given explicitly.
    ``context_parameter`` names the keyword the dispatcher uses to pass the
    caller context; it never appears in the schema.
    """

    name: str
    description: str | None = None
    version: str | None = None
    tags: frozenset[str] = frozenset()
    deprecated: bool = False
    deprecation_message: str | None = None
    examples: tuple[ToolExample, ...] = ()
    parameters: tuple[Parameter, ...] = ()
    context_parameter: str | None = None
    schema: dict[str, Any] = field(default=None, compare=False, hash=False)  # type: ignore[assignment]

    kind = CapabilityKind.TOOL

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "examples", tuple(_example(e) for e in self.examples))
        if self.schema is None:
            exclude = {self.context_parameter} if self.context_parameter else set()
            object.__setattr__(self, "schema", synthesize(self.parameters, exclude=exclude))

    @property
    def key(self) -> str:
        return self.name

    @property
    def arguments(self) -> tuple[Parameter, ...]:
        """Parameters the caller supplies (the context parameter excluded)."""
        return tuple(p for p in self.parameters if p.name != self.context_parameter)

    @property
    def required_arguments(self) -> list[str]:
        return [p.name for p in self.arguments if p.required]

    def meta(self) -> dict[str, Any] | None:
        """Version, tags and deprecation notes for the listing ``_meta`` field."""
        meta: dict[str, Any] = {}
        if self.version:
            meta["version"] = self.version
        if self.tags:
            meta["tags"] = sorted(self.tags)
        if self.deprecated:
            meta["deprecated"] = True
            if self.deprecation_message:
                meta["deprecationMessage"] = self.deprecation_message
        if self.examples:
            meta["examples"] = [e.model_dump(exclude_none=True) for e in self.examples]
        return meta or None


@dataclass(frozen=True, slots=True, kw_only=True)
class ToolDefinition(CapabilityDefinition):
    kind = CapabilityKind.TOOL

    def to_mcp(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.schema,
            **_meta_kwargs(self.meta()),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceDefinition(CapabilityDefinition):
    """A resource at one concrete URI."""

    uri: str
    mime_type: str | None = None

    kind = CapabilityKind.RESOURCE

    @property
    def key(self) -> str:
        return self.uri

    def to_mcp(self) -> types.Resource:
        return types.Resource(
            uri=self.uri,
            name=self.name,
            description=self.description,
            mimeType=self.mime_type,
            **_meta_kwargs(self.meta()),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceTemplateDefinition(CapabilityDefinition):
    """A family of resources addressed by a ``{placeholder}`` URI pattern.

    Every placeholder must be declared in ``parameters``; the resource
    registry rejects the definition otherwise.
    """

    uri_template: str
    mime_type: str | None = None

    kind = CapabilityKind.RESOURCE_TEMPLATE

    @property
    def key(self) -> str:
        return self.uri_template

    def meta(self) -> dict[str, Any] | None:
        meta = CapabilityDefinition.meta(self) or {}
        meta["arguments"] = [
            {"name": p.name, "description": p.description, "required": p.required} for p in self.arguments
        ]
        return meta

    def to_mcp(self) -> types.ResourceTemplate:
        return types.ResourceTemplate(
            uriTemplate=self.uri_template,
            name=self.name,
            description=self.description,
            mimeType=self.mime_type,
            **_meta_kwargs(self.meta()),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class PromptDefinition(CapabilityDefinition):
    kind = CapabilityKind.PROMPT

    def to_mcp(self) -> types.Prompt:
        return types.Prompt(
            name=self.name,
            description=self.description,
            arguments=[
                types.PromptArgument(name=p.name, description=p.description, required=p.required)
                for p in self.arguments
            ],
            **_meta_kwargs(self.meta()),
        )


def _meta_kwargs(meta: Mapping[str, Any] | None) -> dict[str, Any]:
    return {"_meta": dict(meta)} if meta else {}


def _example(value: ToolExample | Mapping[str, Any]) -> ToolExample:
    if isinstance(value, ToolExample):
        return value
    return ToolExample.model_validate(value)


def example_list(values: Iterable[ToolExample | Mapping[str, Any]] | None) -> tuple[ToolExample, ...]:
    return tuple(_example(v) for v in values or ())


__all__ = [
    "CapabilityDefinition",
    "CapabilityKind",
    "PromptDefinition",
    "ResourceDefinition",
    "ResourceTemplateDefinition",
    "ToolDefinition",
    "ToolExample",
    "example_list",
]
