# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Handler result variants and their coercion.

Each capability kind fixes the variant its handlers produce:

* tools -> :class:`TextResult` (a ready ``CallToolResult`` passes through)
* resources -> :class:`TextResult` or :class:`BinaryResult`
* prompts -> :class:`MessageListResult`

Handlers may return looser values (plain strings, bytes, dicts, message
tuples); the ``coerce_*`` functions normalise them. The ``to_*`` functions
render a variant as the ``mcp`` result type a transport sends back.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

import mcp.types as types
from pydantic_core import to_jsonable_python


class UnsupportedResultError(RuntimeError):
    """A handler returned a value its capability kind cannot carry."""


@dataclass(frozen=True, slots=True)
class TextResult:
    text: str
    mime_type: str | None = None


@dataclass(frozen=True, slots=True)
class BinaryResult:
    data: bytes
    mime_type: str | None = None


@dataclass(frozen=True, slots=True)
class MessageListResult:
    messages: tuple[types.PromptMessage, ...]
    description: str | None = None


Result = Union[TextResult, BinaryResult, MessageListResult, types.CallToolResult]


# ----------------------------------------------------------------------
# Tools
# ----------------------------------------------------------------------


def coerce_tool_result(value: Any) -> TextResult | types.CallToolResult:
    if isinstance(value, (TextResult, types.CallToolResult)):
        return value
    if isinstance(value, types.ServerResult):
        raise UnsupportedResultError("Tool returned ServerResult; return the nested CallToolResult instead.")
    if isinstance(value, str):
        return TextResult(value)
    return TextResult(json.dumps(to_jsonable_python(value, fallback=str), ensure_ascii=False))


def to_call_tool_result(result: TextResult | types.CallToolResult) -> types.CallToolResult:
    if isinstance(result, types.CallToolResult):
        return result
    return types.CallToolResult(content=[types.TextContent(type="text", text=result.text)])


# ----------------------------------------------------------------------
# Resources
# ----------------------------------------------------------------------


def coerce_resource_result(value: Any, mime_type: str | None = None) -> TextResult | BinaryResult:
    if isinstance(value, TextResult):
        return value if value.mime_type else TextResult(value.text, mime_type or "text/plain")
    if isinstance(value, BinaryResult):
        return value if value.mime_type else BinaryResult(value.data, mime_type or "application/octet-stream")
    if isinstance(value, str):
        return TextResult(value, mime_type or "text/plain")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BinaryResult(bytes(value), mime_type or "application/octet-stream")
    raise UnsupportedResultError(f"Unsupported resource return type: {type(value)!r}")


def to_read_resource_result(uri: str, result: TextResult | BinaryResult) -> types.ReadResourceResult:
    if isinstance(result, BinaryResult):
        contents: types.TextResourceContents | types.BlobResourceContents = types.BlobResourceContents(
            uri=uri,
            blob=base64.b64encode(result.data).decode(),
            mimeType=result.mime_type,
        )
    else:
        contents = types.TextResourceContents(uri=uri, text=result.text, mimeType=result.mime_type)
    return types.ReadResourceResult(contents=[contents])


# ----------------------------------------------------------------------
# Prompts
# ----------------------------------------------------------------------


def coerce_prompt_result(value: Any, description: str | None = None) -> MessageListResult:
    """Normalise a prompt renderer's return value.

    Accepted shapes: ``GetPromptResult``, :class:`MessageListResult`, a
    ``{"messages": [...], "description": ...}`` mapping, ``None`` (no
    messages), or an iterable of messages. Messages may be ``PromptMessage``
    objects, ``{"role", "content"}`` mappings or ``(role, content)`` pairs.
    """
    if isinstance(value, MessageListResult):
        return value if value.description else MessageListResult(value.messages, description)

    if isinstance(value, types.GetPromptResult):
        return MessageListResult(tuple(value.messages), value.description or description)

    if isinstance(value, Mapping):
        if "messages" not in value:
            raise UnsupportedResultError("Prompt mapping must include 'messages'.")
        return MessageListResult(
            coerce_prompt_messages(value["messages"]),
            value.get("description", description),
        )

    if value is None:
        return MessageListResult((), description)

    if isinstance(value, str):
        raise UnsupportedResultError("Prompt renderer returned raw string; supply role + content.")

    if isinstance(value, Iterable):
        return MessageListResult(coerce_prompt_messages(value), description)

    raise UnsupportedResultError(f"Unsupported prompt return type: {type(value)!r}")


def coerce_prompt_messages(values: Any) -> tuple[types.PromptMessage, ...]:
    if isinstance(values, (types.PromptMessage, Mapping)):
        values = [values]
    return tuple(_coerce_message(item) for item in values)


def to_get_prompt_result(result: MessageListResult) -> types.GetPromptResult:
    return types.GetPromptResult(messages=list(result.messages), description=result.description)


def _coerce_message(item: Any) -> types.PromptMessage:
    if isinstance(item, types.PromptMessage):
        return item

    if isinstance(item, Mapping):
        role = item.get("role")
        content = item.get("content")
        if role is None or content is None:
            raise UnsupportedResultError("Prompt message mapping requires 'role' and 'content'.")
        return types.PromptMessage(role=_role(role), content=_coerce_content(content))

    if isinstance(item, (tuple, list)) and len(item) == 2:
        role, content = item
        return types.PromptMessage(role=_role(role), content=_coerce_content(content))

    raise UnsupportedResultError("Prompt message must be PromptMessage, mapping, or (role, content) tuple.")


def _role(value: Any) -> str:
    role = str(value).lower()
    if role not in ("user", "assistant"):
        raise UnsupportedResultError(f"Invalid role: {value}")
    return role


def _coerce_content(content: Any) -> Any:
    if isinstance(content, (types.TextContent, types.ImageContent, types.EmbeddedResource)):
        return content

    if isinstance(content, str):
        return types.TextContent(type="text", text=content)

    if isinstance(content, Mapping):
        kind = content.get("type")
        if kind == "text":
            return types.TextContent(**content)
        if kind == "image":
            return types.ImageContent(**content)
        if kind == "resource":
            payload = content.get("resource")
            if not isinstance(payload, Mapping):
                raise UnsupportedResultError("Embedded resource requires mapping payload.")
            resource: types.TextResourceContents | types.BlobResourceContents
            if "blob" in payload:
                resource = types.BlobResourceContents(**payload)
            else:
                resource = types.TextResourceContents(**payload)
            return types.EmbeddedResource(type="resource", resource=resource)

    raise UnsupportedResultError(f"Unsupported prompt content: {type(content)!r}")


__all__ = [
    "BinaryResult",
    "MessageListResult",
    "Result",
    "TextResult",
    "UnsupportedResultError",
    "coerce_prompt_messages",
    "coerce_prompt_result",
    "coerce_resource_result",
    "coerce_tool_result",
    "to_call_tool_result",
    "to_get_prompt_result",
    "to_read_resource_result",
]
