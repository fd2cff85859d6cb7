# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Engine facade.

:class:`CapabilityEngine` owns one registry per capability kind and the
dispatcher that reads them. Nothing is global: build one engine per server
(or per test) and drop it at shutdown.

Capabilities arrive either as :class:`DiscoveryRecord` values produced by a
discovery step, or through the decorators, which introspect the function::

    engine = CapabilityEngine()

    @engine.tool(description="Add two numbers")
    def add(a: int, b: int) -> int:
        return a + b

    @engine.resource("users://{id}/profile", mime_type="application/json")
    def profile(id: int) -> str: ...

    outcome = await engine.call_tool("add", {"a": 1, "b": 2})
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

import mcp.types as types

from .config import EngineConfig, RegistrationOptions
from .definitions import (
    CapabilityDefinition,
    CapabilityKind,
    PromptDefinition,
    ResourceDefinition,
    ResourceTemplateDefinition,
    ToolDefinition,
    ToolExample,
    example_list,
)
from .descriptors import Parameter
from .dispatcher import Dispatcher
from .introspect import parameters_from_callable, summary
from .outcomes import InvocationOutcome
from .registry import Handler, PromptRegistry, RegistryEntry, ResourceRegistry, ToolRegistry
from .utils import get_logger

_logger = get_logger("bridgemcp.engine")

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True, slots=True, kw_only=True)
class DiscoveryRecord:
    """One capability as handed over by a discovery step.

    ``key`` is the tool or prompt name, the resource URI, or the resource
    template pattern. ``name`` is only needed for resources, whose display
    name differs from the key; it defaults to ``key``.
    """

    key: str
    kind: CapabilityKind
    handler: Handler
    parameters: Sequence[Parameter] = ()
    name: str | None = None
    description: str | None = None
    version: str | None = None
    tags: Iterable[str] = ()
    deprecated: bool = False
    deprecation_message: str | None = None
    examples: Sequence[ToolExample | Mapping[str, Any]] = ()
    mime_type: str | None = None
    context_parameter: str | None = None
    options: RegistrationOptions | None = field(default=None, compare=False)

    def to_definition(self) -> CapabilityDefinition:
        common: dict[str, Any] = dict(
            name=self.name or self.key,
            description=self.description,
            version=self.version,
            tags=frozenset(self.tags),
            deprecated=self.deprecated,
            deprecation_message=self.deprecation_message,
            examples=example_list(self.examples),
            parameters=tuple(self.parameters),
            context_parameter=self.context_parameter,
        )
        kind = CapabilityKind(self.kind)
        if kind is CapabilityKind.TOOL:
            return ToolDefinition(**common)
        if kind is CapabilityKind.PROMPT:
            return PromptDefinition(**common)
        if kind is CapabilityKind.RESOURCE:
            return ResourceDefinition(uri=self.key, mime_type=self.mime_type, **common)
        return ResourceTemplateDefinition(uri_template=self.key, mime_type=self.mime_type, **common)


class CapabilityEngine:
    """Registries plus dispatcher behind one object."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self.tools = ToolRegistry(options=self.config.tools)
        self.resources = ResourceRegistry(options=self.config.resources)
        self.prompts = PromptRegistry(options=self.config.prompts)
        self.dispatcher = Dispatcher(
            self.tools,
            self.resources,
            self.prompts,
            run_sync_in_thread=self.config.run_sync_in_thread,
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, record: DiscoveryRecord) -> RegistryEntry[Any]:
        definition = record.to_definition()
        if isinstance(definition, ToolDefinition):
            return self.tools.register(definition, record.handler, options=record.options)
        if isinstance(definition, PromptDefinition):
            return self.prompts.register(definition, record.handler, options=record.options)
        if isinstance(definition, ResourceTemplateDefinition):
            return self.resources.register_template(definition, record.handler, options=record.options)
        return self.resources.register(definition, record.handler, options=record.options)

    def load(self, records: Iterable[DiscoveryRecord]) -> list[RegistryEntry[Any]]:
        """Register every record in order. Stops at the first failure."""
        entries = [self.register(record) for record in records]
        _logger.info(
            "loaded %d capabilities",
            len(entries),
            extra={"event": "engine.load", "count": len(entries)},
        )
        return entries

    def add_tool(
        self,
        fn: Callable[..., Any],
        *,
        name: str | None = None,
        **metadata: Any,
    ) -> ToolDefinition:
        record = self._record(fn, name or fn.__name__, CapabilityKind.TOOL, metadata)
        return self.register(record).definition

    def add_prompt(
        self,
        fn: Callable[..., Any],
        *,
        name: str | None = None,
        **metadata: Any,
    ) -> PromptDefinition:
        record = self._record(fn, name or fn.__name__, CapabilityKind.PROMPT, metadata)
        return self.register(record).definition

    def add_resource(
        self,
        fn: Callable[..., Any],
        uri: str,
        *,
        name: str | None = None,
        **metadata: Any,
    ) -> ResourceDefinition | ResourceTemplateDefinition:
        """Register *fn* at *uri*; a URI with ``{placeholders}`` becomes a template."""
        kind = CapabilityKind.RESOURCE_TEMPLATE if "{" in uri else CapabilityKind.RESOURCE
        metadata.setdefault("name", name or fn.__name__)
        record = self._record(fn, uri, kind, metadata)
        return self.register(record).definition

    def tool(self, name: str | None = None, **metadata: Any) -> Callable[[F], F]:
        """Decorator form of :meth:`add_tool`. Returns the function unchanged."""

        def decorator(fn: F) -> F:
            self.add_tool(fn, name=name, **metadata)
            return fn

        return decorator

    def prompt(self, name: str | None = None, **metadata: Any) -> Callable[[F], F]:
        def decorator(fn: F) -> F:
            self.add_prompt(fn, name=name, **metadata)
            return fn

        return decorator

    def resource(self, uri: str, **metadata: Any) -> Callable[[F], F]:
        def decorator(fn: F) -> F:
            self.add_resource(fn, uri, **metadata)
            return fn

        return decorator

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_tools(self) -> list[types.Tool]:
        return [definition.to_mcp() for definition in self.tools.list_definitions()]

    def list_resources(self) -> list[types.Resource]:
        """Concrete resources only; templates are listed separately."""
        return [definition.to_mcp() for definition in self.resources.list_static_definitions()]

    def list_resource_templates(self) -> list[types.ResourceTemplate]:
        return [definition.to_mcp() for definition in self.resources.list_template_definitions()]

    def list_prompts(self) -> list[types.Prompt]:
        return [definition.to_mcp() for definition in self.prompts.list_definitions()]

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    async def call_tool(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> InvocationOutcome:
        return await self.dispatcher.call_tool(name, arguments, context)

    async def read_resource(
        self,
        uri: str,
        arguments: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> InvocationOutcome:
        """Read *uri*. Values captured from the URI win over *arguments*."""
        return await self.dispatcher.read_resource(uri, arguments, context)

    async def get_prompt(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> InvocationOutcome:
        return await self.dispatcher.get_prompt(name, arguments, context)

    def _record(
        self,
        fn: Callable[..., Any],
        key: str,
        kind: CapabilityKind,
        metadata: dict[str, Any],
    ) -> DiscoveryRecord:
        context_parameter = metadata.get("context_parameter")
        if "parameters" not in metadata:
            metadata["parameters"] = parameters_from_callable(
                fn,
                exclude=(context_parameter,) if context_parameter else (),
            )
        if metadata.get("description") is None:
            metadata["description"] = summary(fn)
        return DiscoveryRecord(key=key, kind=kind, handler=fn, **metadata)


__all__ = ["CapabilityEngine", "DiscoveryRecord"]
