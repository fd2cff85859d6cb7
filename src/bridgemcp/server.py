# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Attach an engine to a low-level ``mcp`` server.

:func:`attach` installs request handlers for the tool, resource and prompt
RPCs. Transport and lifecycle stay with the server::

    server = Server("demo")
    attach(server, engine)
    async with stdio_server() as (read, write):
        await server.run(read, write, server.create_initialization_options())

Tool failures come back as ``CallToolResult(isError=True)``. Resource and
prompt failures are raised as ``McpError`` and reach the client as JSON-RPC
errors carrying the failure kind in ``data``.
"""

from __future__ import annotations

from typing import Any

import mcp.types as types
from mcp.server.lowlevel.server import Server, request_ctx

from .engine import CapabilityEngine
from .results import to_get_prompt_result, to_read_resource_result
from .utils import get_logger

_logger = get_logger("bridgemcp.server")


def attach(server: Server[Any, Any], engine: CapabilityEngine) -> Server[Any, Any]:
    """Serve *engine*'s capabilities from *server*. Returns *server*."""

    async def _list_tools(request: types.ListToolsRequest) -> types.ServerResult:
        return types.ServerResult(types.ListToolsResult(tools=engine.list_tools()))

    async def _call_tool(request: types.CallToolRequest) -> types.ServerResult:
        params = request.params
        outcome = await engine.call_tool(params.name, params.arguments or {}, _context())
        return types.ServerResult(outcome.to_call_tool_result())

    async def _list_resources(request: types.ListResourcesRequest) -> types.ServerResult:
        return types.ServerResult(types.ListResourcesResult(resources=engine.list_resources()))

    async def _list_resource_templates(request: types.ListResourceTemplatesRequest) -> types.ServerResult:
        return types.ServerResult(
            types.ListResourceTemplatesResult(resourceTemplates=engine.list_resource_templates())
        )

    async def _read_resource(request: types.ReadResourceRequest) -> types.ServerResult:
        uri = str(request.params.uri)
        outcome = await engine.read_resource(uri, context=_context())
        return types.ServerResult(to_read_resource_result(uri, outcome.unwrap()))

    async def _list_prompts(request: types.ListPromptsRequest) -> types.ServerResult:
        return types.ServerResult(types.ListPromptsResult(prompts=engine.list_prompts()))

    async def _get_prompt(request: types.GetPromptRequest) -> types.ServerResult:
        params = request.params
        outcome = await engine.get_prompt(params.name, params.arguments or {}, _context())
        return types.ServerResult(to_get_prompt_result(outcome.unwrap()))

    server.request_handlers[types.ListToolsRequest] = _list_tools
    server.request_handlers[types.CallToolRequest] = _call_tool
    server.request_handlers[types.ListResourcesRequest] = _list_resources
    server.request_handlers[types.ListResourceTemplatesRequest] = _list_resource_templates
    server.request_handlers[types.ReadResourceRequest] = _read_resource
    server.request_handlers[types.ListPromptsRequest] = _list_prompts
    server.request_handlers[types.GetPromptRequest] = _get_prompt

    _logger.debug(
        "engine attached to server '%s'",
        server.name,
        extra={"event": "server.attach", "tools": len(engine.tools), "prompts": len(engine.prompts)},
    )
    return server


def _context() -> Any:
    """Request context of the RPC being served, or ``None`` outside one."""
    try:
        return request_ctx.get()
    except LookupError:
        return None


__all__ = ["attach"]
