# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Typed capability registry and invocation engine for MCP servers.

The public surface:

- ``bridgemcp.descriptors`` - parameter shape descriptors
- ``bridgemcp.schema`` - JSON Schema synthesis from descriptors
- ``bridgemcp.binder`` - argument binding against descriptors
- ``bridgemcp.templates`` - URI template compilation and matching
- ``bridgemcp.registry`` - tool, resource and prompt registries
- ``bridgemcp.dispatcher`` - request routing and outcomes
- ``bridgemcp.engine`` - the facade tying them together
- ``bridgemcp.server`` - attaching an engine to an ``mcp`` server
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .binder import bind, unbind
from .config import EngineConfig, RegistrationOptions
from .definitions import (
    CapabilityKind,
    PromptDefinition,
    ResourceDefinition,
    ResourceTemplateDefinition,
    ToolDefinition,
    ToolExample,
)
from .descriptors import Field, Parameter
from .dispatcher import Dispatcher
from .engine import CapabilityEngine, DiscoveryRecord
from .exceptions import EngineError, ErrorKind, InvariantViolation
from .outcomes import InvocationError, InvocationOutcome
from .registry import PromptRegistry, ResourceRegistry, ToolRegistry
from .results import BinaryResult, MessageListResult, TextResult
from .schema import synthesize
from .templates import UriTemplate

try:
    __version__ = version("bridgemcp")
except PackageNotFoundError:
    __version__ = "0.0.0+local"

__all__ = [
    "BinaryResult",
    "CapabilityEngine",
    "CapabilityKind",
    "DiscoveryRecord",
    "Dispatcher",
    "EngineConfig",
    "EngineError",
    "ErrorKind",
    "Field",
    "InvariantViolation",
    "InvocationError",
    "InvocationOutcome",
    "MessageListResult",
    "Parameter",
    "PromptDefinition",
    "PromptRegistry",
    "RegistrationOptions",
    "ResourceDefinition",
    "ResourceRegistry",
    "ResourceTemplateDefinition",
    "TextResult",
    "ToolDefinition",
    "ToolExample",
    "ToolRegistry",
    "UriTemplate",
    "bind",
    "synthesize",
    "unbind",
]
