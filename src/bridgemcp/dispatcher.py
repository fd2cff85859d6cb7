# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Invocation dispatcher.

One request runs through a fixed sequence and stops at the first failure::

    lookup -> [template match] -> bind -> invoke -> done

Resources are looked up by exact URI first and only then against the
registered templates, so a static resource always shadows a template that
would also match. Prompts additionally check every required argument up
front and report all missing names at once.

Expected failures come back as :class:`~bridgemcp.outcomes.InvocationOutcome`
values. Cancellation and :class:`~bridgemcp.exceptions.InvariantViolation`
propagate unchanged. The dispatcher applies no timeout and no retry.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import anyio.to_thread

from .binder import BoundArguments, bind
from .definitions import CapabilityDefinition, CapabilityKind
from .exceptions import (
    AggregateMissingArgumentsError,
    BindError,
    CapabilityNotFoundError,
    EngineError,
    HandlerFailureError,
    InvariantViolation,
)
from .outcomes import InvocationOutcome
from .registry import PromptRegistry, RegistryEntry, ResourceRegistry, ToolRegistry
from .results import coerce_prompt_result, coerce_resource_result, coerce_tool_result
from .utils import get_logger

_logger = get_logger("bridgemcp.dispatcher")


@dataclass(slots=True)
class Invocation:
    """Per-request state. Discarded once the request completes."""

    kind: CapabilityKind
    key: str
    raw_arguments: Mapping[str, Any]
    context: Any = None
    bound_arguments: BoundArguments = field(default_factory=dict)


class Dispatcher:
    """Route requests to registered handlers.

    The registries are injected; the dispatcher only reads them.
    """

    def __init__(
        self,
        tools: ToolRegistry,
        resources: ResourceRegistry,
        prompts: PromptRegistry,
        *,
        run_sync_in_thread: bool = False,
    ) -> None:
        self.tools = tools
        self.resources = resources
        self.prompts = prompts
        self._run_sync_in_thread = run_sync_in_thread

    async def invoke(
        self,
        kind: CapabilityKind | str,
        key: str,
        arguments: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> InvocationOutcome:
        """Dispatch one request.

        Args:
            kind: Capability kind. ``resource`` and ``resource_template`` both
                resolve *key* as a concrete URI.
            key: Tool or prompt name, or resource URI.
            arguments: Caller arguments. For resources these are merged under
                the values captured from the URI.
            context: Passed to handlers that declare a context parameter.
        """
        invocation = Invocation(CapabilityKind(kind), key, dict(arguments or {}), context)
        try:
            if invocation.kind is CapabilityKind.TOOL:
                result = await self._call_tool(invocation)
            elif invocation.kind is CapabilityKind.PROMPT:
                result = await self._get_prompt(invocation)
            else:
                result = await self._read_resource(invocation)
        except EngineError as exc:
            _logger.debug(
                "%s '%s' failed: %s",
                invocation.kind.value,
                key,
                exc,
                extra={"event": "dispatch.failed", "kind": exc.kind.value, "key": key},
            )
            return InvocationOutcome.fail(exc)
        return InvocationOutcome.ok(result)

    async def call_tool(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> InvocationOutcome:
        return await self.invoke(CapabilityKind.TOOL, name, arguments, context)

    async def read_resource(
        self,
        uri: str,
        arguments: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> InvocationOutcome:
        return await self.invoke(CapabilityKind.RESOURCE, uri, arguments, context)

    async def get_prompt(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> InvocationOutcome:
        return await self.invoke(CapabilityKind.PROMPT, name, arguments, context)

    # ------------------------------------------------------------------
    # Per-kind flows
    # ------------------------------------------------------------------

    async def _call_tool(self, invocation: Invocation) -> Any:
        entry = self.tools.lookup(invocation.key)
        if entry is None:
            raise CapabilityNotFoundError(invocation.key, capability="tool")
        self._bind(invocation, entry.definition, invocation.raw_arguments)
        result = await self._run(invocation, entry)
        return self._coerce(invocation, coerce_tool_result, result)

    async def _read_resource(self, invocation: Invocation) -> Any:
        match = self.resources.resolve(invocation.key)
        if match is None:
            raise CapabilityNotFoundError(invocation.key, capability="resource")
        definition = match.entry.definition
        raw = {**invocation.raw_arguments, **match.params}
        self._bind(invocation, definition, raw, coerce_strings=True)
        result = await self._run(invocation, match.entry)
        return self._coerce(invocation, coerce_resource_result, result, definition.mime_type)

    async def _get_prompt(self, invocation: Invocation) -> Any:
        entry = self.prompts.lookup(invocation.key)
        if entry is None:
            raise CapabilityNotFoundError(invocation.key, capability="prompt")
        definition = entry.definition
        missing = [name for name in definition.required_arguments if name not in invocation.raw_arguments]
        if missing:
            raise AggregateMissingArgumentsError(missing, capability=definition.name)
        self._bind(invocation, definition, invocation.raw_arguments, coerce_strings=True)
        result = await self._run(invocation, entry)
        return self._coerce(invocation, coerce_prompt_result, result, definition.description)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _bind(
        self,
        invocation: Invocation,
        definition: CapabilityDefinition,
        raw: Mapping[str, Any],
        *,
        coerce_strings: bool = False,
    ) -> None:
        try:
            invocation.bound_arguments = bind(raw, definition.arguments, coerce_strings=coerce_strings)
        except BindError as exc:
            _logger.debug(
                "binding '%s' failed at '%s'",
                invocation.key,
                exc.path,
                extra={"event": "dispatch.bind_failed", "key": invocation.key, "argument": exc.path},
            )
            raise

    async def _run(self, invocation: Invocation, entry: RegistryEntry[Any]) -> Any:
        kwargs = dict(invocation.bound_arguments)
        context_parameter = entry.definition.context_parameter
        if context_parameter:
            kwargs[context_parameter] = invocation.context

        handler = entry.handler
        try:
            if self._run_sync_in_thread and not _is_async_callable(handler):
                return await anyio.to_thread.run_sync(functools.partial(handler, **kwargs))
            result = handler(**kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        except InvariantViolation:
            raise
        except Exception as exc:
            raise self._handler_failure(invocation, exc) from exc

    def _coerce(self, invocation: Invocation, coerce: Any, result: Any, *extra: Any) -> Any:
        try:
            return coerce(result, *extra)
        except Exception as exc:
            raise self._handler_failure(invocation, exc) from exc

    def _handler_failure(self, invocation: Invocation, exc: Exception) -> HandlerFailureError:
        _logger.warning(
            "%s '%s' raised %s",
            invocation.kind.value,
            invocation.key,
            type(exc).__name__,
            exc_info=exc,
            extra={"event": "dispatch.handler_failed", "key": invocation.key},
        )
        return HandlerFailureError(invocation.key, exc)


def _is_async_callable(obj: Any) -> bool:
    while isinstance(obj, functools.partial):
        obj = obj.func
    return inspect.iscoroutinefunction(obj) or inspect.iscoroutinefunction(getattr(obj, "__call__", None))


__all__ = ["Dispatcher", "Invocation"]
