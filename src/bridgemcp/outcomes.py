# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Invocation outcomes.

The dispatcher never raises for expected failures. It returns an
:class:`InvocationOutcome` instead:

* ``success=True``: ``result`` holds the handler's (coerced) result.
* ``success=False``: ``error`` holds a structured :class:`InvocationError`.

Transports turn an error into their own envelope. For MCP that is
:meth:`InvocationError.to_mcp_error`, or for tools an ``isError`` result via
:meth:`InvocationOutcome.to_call_tool_result`.
"""

from __future__ import annotations

from typing import Any

import mcp.types as types
from mcp.shared.exceptions import McpError
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import EngineError, ErrorKind

# JSON-RPC codes used when an error crosses into the MCP envelope.
_ERROR_CODES: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: types.INVALID_PARAMS,
    ErrorKind.DUPLICATE_REGISTRATION: types.INVALID_REQUEST,
    ErrorKind.TEMPLATE_VALIDATION: types.INVALID_REQUEST,
    ErrorKind.MISSING_ARGUMENT: types.INVALID_PARAMS,
    ErrorKind.MISSING_ARGUMENTS: types.INVALID_PARAMS,
    ErrorKind.TYPE_MISMATCH: types.INVALID_PARAMS,
    ErrorKind.INVALID_ENUM_VALUE: types.INVALID_PARAMS,
    ErrorKind.HANDLER_FAILURE: types.INTERNAL_ERROR,
}


class InvocationError(BaseModel):
    """Structured failure handed to the transport.

    Attributes:
        kind: Machine tag for programmatic handling
        message: Human-readable message, starting with the kind's stable prefix
        details: Kind-specific fields (argument path, missing names, ...)
    """

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: EngineError) -> InvocationError:
        return cls(kind=exc.kind, message=str(exc), details=exc.details())

    @property
    def code(self) -> int:
        return _ERROR_CODES[self.kind]

    def to_error_data(self) -> types.ErrorData:
        return types.ErrorData(
            code=self.code,
            message=self.message,
            data={"kind": self.kind.value, **self.details},
        )

    def to_mcp_error(self) -> McpError:
        return McpError(self.to_error_data())


class InvocationOutcome(BaseModel):
    """Result of one dispatched request."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    success: bool
    result: Any = None
    error: InvocationError | None = None
    exception: EngineError | None = Field(default=None, exclude=True, repr=False)

    @classmethod
    def ok(cls, result: Any) -> InvocationOutcome:
        """Factory for a successful invocation."""
        return cls(success=True, result=result)

    @classmethod
    def fail(cls, exc: EngineError) -> InvocationOutcome:
        """Factory for a failed invocation."""
        return cls(success=False, error=InvocationError.from_exception(exc), exception=exc)

    def unwrap(self) -> Any:
        """Return ``result`` or raise the failure as an ``McpError``."""
        if self.error is not None:
            raise self.error.to_mcp_error() from self.exception
        return self.result

    def to_call_tool_result(self) -> types.CallToolResult:
        from .results import coerce_tool_result, to_call_tool_result

        if self.error is not None:
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=self.error.message)],
                isError=True,
            )
        return to_call_tool_result(coerce_tool_result(self.result))


__all__ = ["InvocationError", "InvocationOutcome"]
