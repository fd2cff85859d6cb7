# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Concurrent capability registries.

Each registry maps a key (tool name, prompt name, resource URI, or URI
pattern) to a :class:`RegistryEntry` pairing the definition with its handler.

Writers serialize on a lock and publish a fresh mapping on every change, so
an entry is always swapped in whole. Readers never take the lock: a lookup
or listing reads whichever mapping is current and never sees a half-written
entry, nor waits on a concurrent registration.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from .config import RegistrationOptions
from .definitions import (
    CapabilityDefinition,
    PromptDefinition,
    ResourceDefinition,
    ResourceTemplateDefinition,
    ToolDefinition,
)
from .exceptions import DuplicateRegistrationError, InvariantViolation, TemplateValidationError
from .templates import UriTemplate
from .utils import get_logger

_logger = get_logger("bridgemcp.registry")

D = TypeVar("D", bound=CapabilityDefinition)
Handler = Callable[..., Any]


@dataclass(frozen=True)
class RegistryEntry(Generic[D]):
    definition: D
    handler: Handler
    template: UriTemplate | None = None


@dataclass(frozen=True, slots=True)
class ResourceMatch:
    """Outcome of resolving a concrete URI against the resource registry."""

    entry: RegistryEntry[Any]
    params: dict[str, str]

    @property
    def templated(self) -> bool:
        return self.entry.template is not None


class CapabilityRegistry(Generic[D]):
    """Key -> entry store with a configurable duplicate policy."""

    capability = "capability"

    def __init__(self, *, options: RegistrationOptions | None = None) -> None:
        self._options = options or RegistrationOptions()
        self._entries: Mapping[str, RegistryEntry[D]] = MappingProxyType({})
        self._write_lock = threading.Lock()

    @property
    def options(self) -> RegistrationOptions:
        return self._options

    def register(
        self,
        definition: D,
        handler: Handler,
        *,
        options: RegistrationOptions | None = None,
    ) -> RegistryEntry[D]:
        """Insert or replace the entry for ``definition.key``.

        Raises:
            DuplicateRegistrationError: the key exists and the policy neither
                allows overrides nor downgrades duplicates to a warning.
        """
        return self._put(definition.key, RegistryEntry(definition, handler), options)

    def lookup(self, key: str) -> RegistryEntry[D] | None:
        return self._entries.get(key)

    def unregister(self, key: str) -> bool:
        with self._write_lock:
            if key not in self._entries:
                return False
            entries = dict(self._entries)
            del entries[key]
            self._entries = MappingProxyType(entries)
        _logger.debug(
            "%s '%s' unregistered",
            self.capability,
            key,
            extra={"event": "registry.unregister", "capability": self.capability, "key": key},
        )
        return True

    def list_definitions(self) -> list[D]:
        """Snapshot of current definitions in registration order."""
        return [entry.definition for entry in self._entries.values()]

    def entries(self) -> list[RegistryEntry[D]]:
        return list(self._entries.values())

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def _put(
        self,
        key: str,
        entry: RegistryEntry[D],
        options: RegistrationOptions | None,
    ) -> RegistryEntry[D]:
        policy = options or self._options
        with self._write_lock:
            if key in self._entries and not policy.allow_override:
                if not policy.warn_on_duplicate:
                    raise DuplicateRegistrationError(key, capability=self.capability)
                _logger.warning(
                    "%s '%s' already exists and will be overwritten",
                    self.capability,
                    key,
                    extra={"event": "registry.duplicate", "capability": self.capability, "key": key},
                )
            entries = dict(self._entries)
            entries[key] = entry
            self._entries = MappingProxyType(entries)
        _logger.debug(
            "%s '%s' registered",
            self.capability,
            key,
            extra={"event": "registry.register", "capability": self.capability, "key": key},
        )
        return entry


class ToolRegistry(CapabilityRegistry[ToolDefinition]):
    capability = "tool"


class PromptRegistry(CapabilityRegistry[PromptDefinition]):
    capability = "prompt"


class _StaticStore(CapabilityRegistry[ResourceDefinition]):
    capability = "resource"


class _TemplateStore(CapabilityRegistry[ResourceTemplateDefinition]):
    capability = "resource template"

    def register(
        self,
        definition: ResourceTemplateDefinition,
        handler: Handler,
        *,
        options: RegistrationOptions | None = None,
    ) -> RegistryEntry[ResourceTemplateDefinition]:
        template = UriTemplate.compile(definition.uri_template)
        declared = {p.name for p in definition.arguments}
        missing = [name for name in template.placeholders if name not in declared]
        if missing:
            raise TemplateValidationError(
                definition.uri_template,
                f"contains placeholders [{', '.join(missing)}] that don't have corresponding arguments",
                placeholders=missing,
            )
        return self._put(definition.key, RegistryEntry(definition, handler, template), options)


class ResourceRegistry:
    """Static resources keyed by exact URI, plus URI-pattern templates.

    Resolution checks the exact map first and only then scans templates in
    registration order, returning the first match. Overlapping templates are
    therefore decided by registration order.
    """

    def __init__(
        self,
        *,
        options: RegistrationOptions | None = None,
    ) -> None:
        self._static = _StaticStore(options=options)
        self._templates = _TemplateStore(options=options)

    def register(
        self,
        definition: ResourceDefinition,
        handler: Handler,
        *,
        options: RegistrationOptions | None = None,
    ) -> RegistryEntry[ResourceDefinition]:
        return self._static.register(definition, handler, options=options)

    def register_template(
        self,
        definition: ResourceTemplateDefinition,
        handler: Handler,
        *,
        options: RegistrationOptions | None = None,
    ) -> RegistryEntry[ResourceTemplateDefinition]:
        """Register a templated resource.

        Raises:
            TemplateValidationError: the pattern is malformed, or one of its
                placeholders has no declared argument.
            DuplicateRegistrationError: see :meth:`CapabilityRegistry.register`.
        """
        return self._templates.register(definition, handler, options=options)

    def lookup(self, uri: str) -> RegistryEntry[ResourceDefinition] | None:
        """Exact-URI lookup among static resources only."""
        return self._static.lookup(uri)

    def lookup_template(self, pattern: str) -> RegistryEntry[ResourceTemplateDefinition] | None:
        return self._templates.lookup(pattern)

    def find_template(self, uri: str) -> ResourceMatch | None:
        for entry in self._templates.entries():
            if entry.template is None:
                raise InvariantViolation(f"template entry without compiled template: {entry.definition.key}")
            params = entry.template.match(uri)
            if params is not None:
                return ResourceMatch(entry, params)
        return None

    def resolve(self, uri: str) -> ResourceMatch | None:
        """Static entry for *uri* if any, otherwise the first matching template."""
        entry = self._static.lookup(uri)
        if entry is not None:
            return ResourceMatch(entry, {})
        return self.find_template(uri)

    def unregister(self, uri: str) -> bool:
        return self._static.unregister(uri)

    def unregister_template(self, pattern: str) -> bool:
        return self._templates.unregister(pattern)

    def list_definitions(self) -> list[ResourceDefinition | ResourceTemplateDefinition]:
        """Static definitions followed by template definitions."""
        return [*self._static.list_definitions(), *self._templates.list_definitions()]

    def list_static_definitions(self) -> list[ResourceDefinition]:
        return self._static.list_definitions()

    def list_template_definitions(self) -> list[ResourceTemplateDefinition]:
        return self._templates.list_definitions()

    def __contains__(self, key: object) -> bool:
        return key in self._static or key in self._templates

    def __len__(self) -> int:
        return len(self._static) + len(self._templates)


__all__ = [
    "CapabilityRegistry",
    "Handler",
    "PromptRegistry",
    "RegistryEntry",
    "ResourceMatch",
    "ResourceRegistry",
    "ToolRegistry",
]
