# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Error taxonomy for the capability engine.

Every expected failure is an :class:`EngineError` with a machine-readable
:class:`ErrorKind` and a message that starts with a stable prefix, so callers
can branch on either. Engine defects raise :class:`InvariantViolation`, which
is deliberately *not* an ``EngineError`` and is never turned into a
caller-facing outcome.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine tags for engine failures.

    Lookup:
        NOT_FOUND

    Registration:
        DUPLICATE_REGISTRATION, TEMPLATE_VALIDATION

    Binding:
        MISSING_ARGUMENT, MISSING_ARGUMENTS, TYPE_MISMATCH, INVALID_ENUM_VALUE

    Invocation:
        HANDLER_FAILURE
    """

    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    TEMPLATE_VALIDATION = "TEMPLATE_VALIDATION"
    MISSING_ARGUMENT = "MISSING_ARGUMENT"
    MISSING_ARGUMENTS = "MISSING_ARGUMENTS"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
    HANDLER_FAILURE = "HANDLER_FAILURE"


# Greppable message prefixes, one per kind.
PREFIXES: dict[ErrorKind, str] = {
    ErrorKind.NOT_FOUND: "Not found: ",
    ErrorKind.DUPLICATE_REGISTRATION: "Duplicate registration: ",
    ErrorKind.TEMPLATE_VALIDATION: "Invalid template: ",
    ErrorKind.MISSING_ARGUMENT: "Invalid argument: ",
    ErrorKind.MISSING_ARGUMENTS: "Missing required arguments: ",
    ErrorKind.TYPE_MISMATCH: "Invalid argument: ",
    ErrorKind.INVALID_ENUM_VALUE: "Invalid argument: ",
    ErrorKind.HANDLER_FAILURE: "Handler failed: ",
}


class EngineError(Exception):
    """Base class for expected, caller-facing failures."""

    kind: ErrorKind = ErrorKind.HANDLER_FAILURE

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(PREFIXES[self.kind] + detail)

    @property
    def message(self) -> str:
        return str(self)

    def details(self) -> dict[str, Any]:
        """Structured fields for the error envelope."""
        return {}


class CapabilityNotFoundError(EngineError):
    """No registered capability (or template) answers to *key*."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, key: str, *, capability: str = "capability", detail: str | None = None) -> None:
        self.key = key
        self.capability = capability
        super().__init__(detail or f"{capability} '{key}'")

    def details(self) -> dict[str, Any]:
        return {"key": self.key, "capability": self.capability}


class DuplicateRegistrationError(EngineError):
    kind = ErrorKind.DUPLICATE_REGISTRATION

    def __init__(self, key: str, *, capability: str = "capability") -> None:
        self.key = key
        self.capability = capability
        super().__init__(f"{capability} '{key}' already exists")

    def details(self) -> dict[str, Any]:
        return {"key": self.key, "capability": self.capability}


class TemplateValidationError(EngineError):
    """A URI template is malformed or references undeclared arguments."""

    kind = ErrorKind.TEMPLATE_VALIDATION

    def __init__(self, pattern: str, reason: str, *, placeholders: Sequence[str] = ()) -> None:
        self.pattern = pattern
        self.reason = reason
        self.placeholders = list(placeholders)
        super().__init__(f"'{pattern}' {reason}")

    def details(self) -> dict[str, Any]:
        return {"pattern": self.pattern, "placeholders": self.placeholders}


class BindError(EngineError):
    """Base class for argument binding failures.

    ``path`` locates the offending value, e.g. ``user.tags[2]``.
    """

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(detail)

    @property
    def name(self) -> str:
        return self.path

    def details(self) -> dict[str, Any]:
        return {"argument": self.path}


class MissingRequiredArgumentError(BindError):
    kind = ErrorKind.MISSING_ARGUMENT

    def __init__(self, path: str) -> None:
        super().__init__(path, f"missing required argument '{path}'")


class TypeMismatchError(BindError):
    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, path: str, expected: str, actual: Any) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(path, f"'{path}' expected {expected}, got {_describe(actual)}")

    def details(self) -> dict[str, Any]:
        return {"argument": self.path, "expected": self.expected, "actual": _describe(self.actual)}


class InvalidEnumValueError(BindError):
    kind = ErrorKind.INVALID_ENUM_VALUE

    def __init__(self, path: str, value: Any, allowed: Iterable[str]) -> None:
        self.value = value
        self.allowed = list(allowed)
        super().__init__(path, f"'{path}' must be one of {self.allowed}, got {value!r}")

    def details(self) -> dict[str, Any]:
        return {"argument": self.path, "value": repr(self.value), "allowed": self.allowed}


class AggregateMissingArgumentsError(EngineError):
    """All required arguments that were absent, reported together."""

    kind = ErrorKind.MISSING_ARGUMENTS

    def __init__(self, names: Iterable[str], *, capability: str | None = None) -> None:
        self.names = list(names)
        self.capability = capability
        listing = ", ".join(self.names)
        super().__init__(f"{listing} (prompt '{capability}')" if capability else listing)

    def details(self) -> dict[str, Any]:
        return {"missing": self.names}


class HandlerFailureError(EngineError):
    """A handler raised. The original exception is kept as ``__cause__``.

    The prefix depends on what the handler raised: timeouts read
    ``Operation timed out:``, value/type errors ``Invalid argument:``, lookup
    errors ``Not found:``, anything else ``Handler failed:``. An
    :class:`EngineError` raised by the handler is wrapped like any other
    exception; its kind is kept in ``details()`` as ``cause_kind``.
    """

    kind = ErrorKind.HANDLER_FAILURE

    def __init__(self, key: str, original: BaseException) -> None:
        self.key = key
        self.original = original
        self.error_type = type(original).__name__
        text = str(original) or self.error_type
        Exception.__init__(self, _classify(original) + text)
        self.detail = text
        self.__cause__ = original

    def details(self) -> dict[str, Any]:
        details: dict[str, Any] = {"key": self.key, "error_type": self.error_type}
        if isinstance(self.original, EngineError):
            details["cause_kind"] = self.original.kind.value
        return details


class InvariantViolation(AssertionError):
    """The engine broke one of its own guarantees. Never caught by the engine."""


def _classify(exc: BaseException) -> str:
    if isinstance(exc, TimeoutError):
        return "Operation timed out: "
    if isinstance(exc, (ValueError, TypeError)):
        return "Invalid argument: "
    if isinstance(exc, LookupError):
        return PREFIXES[ErrorKind.NOT_FOUND]
    return PREFIXES[ErrorKind.HANDLER_FAILURE]


def _describe(value: Any) -> str:
    text = repr(value)
    if len(text) > 60:
        text = text[:57] + "..."
    return f"{type(value).__name__} {text}"


__all__ = [
    "AggregateMissingArgumentsError",
    "BindError",
    "CapabilityNotFoundError",
    "DuplicateRegistrationError",
    "EngineError",
    "ErrorKind",
    "HandlerFailureError",
    "InvalidEnumValueError",
    "InvariantViolation",
    "MissingRequiredArgumentError",
    "PREFIXES",
    "TemplateValidationError",
    "TypeMismatchError",
]
