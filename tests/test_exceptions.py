# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Error taxonomy, message prefixes, and the MCP error envelope."""

from __future__ import annotations

import mcp.types as types
import pytest
from mcp.shared.exceptions import McpError

from bridgemcp.exceptions import (
    PREFIXES,
    AggregateMissingArgumentsError,
    CapabilityNotFoundError,
    DuplicateRegistrationError,
    EngineError,
    ErrorKind,
    HandlerFailureError,
    InvalidEnumValueError,
    InvariantViolation,
    MissingRequiredArgumentError,
    TemplateValidationError,
    TypeMismatchError,
)
from bridgemcp.outcomes import InvocationError, InvocationOutcome
from bridgemcp.results import TextResult


class TestErrorKind:
    """ErrorKind values are stable strings."""

    def test_values_equal_names(self):
        for kind in ErrorKind:
            assert kind == kind.name

    def test_every_kind_has_a_prefix(self):
        assert set(PREFIXES) == set(ErrorKind)


class TestMessages:
    """Each error starts with its kind's greppable prefix."""

    def test_not_found(self):
        err = CapabilityNotFoundError("add", capability="tool")
        assert str(err) == "Not found: tool 'add'"
        assert err.details() == {"key": "add", "capability": "tool"}

    def test_duplicate(self):
        err = DuplicateRegistrationError("add", capability="tool")
        assert str(err) == "Duplicate registration: tool 'add' already exists"

    def test_template(self):
        err = TemplateValidationError("users://{id}", "has unbalanced braces")
        assert str(err).startswith("Invalid template: 'users://{id}'")

    def test_binding_errors_share_invalid_argument_prefix(self):
        errors = [
            MissingRequiredArgumentError("b"),
            TypeMismatchError("a", "integer", "x"),
            InvalidEnumValueError("c", "pink", ["red"]),
        ]
        for err in errors:
            assert str(err).startswith("Invalid argument: ")
            assert isinstance(err, EngineError)

    def test_type_mismatch_describes_actual_value(self):
        err = TypeMismatchError("a", "integer", "x")
        assert str(err) == "Invalid argument: 'a' expected integer, got str 'x'"

    def test_long_values_are_truncated(self):
        err = TypeMismatchError("a", "integer", "x" * 500)
        assert len(str(err)) < 120

    def test_aggregate_lists_every_name(self):
        err = AggregateMissingArgumentsError(["a", "b"])
        assert str(err) == "Missing required arguments: a, b"
        assert err.names == ["a", "b"]


class TestHandlerFailure:
    """Handler exceptions keep their cause and get a type-based prefix."""

    @pytest.mark.parametrize(
        ("original", "prefix"),
        [
            (TimeoutError("slow"), "Operation timed out: "),
            (TypeError("bad"), "Invalid argument: "),
            (ValueError("bad"), "Invalid argument: "),
            (IndexError("gone"), "Not found: "),
            (RuntimeError("boom"), "Handler failed: "),
        ],
    )
    def test_prefix_by_exception_type(self, original, prefix):
        err = HandlerFailureError("tool", original)
        assert str(err).startswith(prefix)
        assert err.kind is ErrorKind.HANDLER_FAILURE
        assert err.__cause__ is original
        assert err.details() == {"key": "tool", "error_type": type(original).__name__}

    def test_empty_message_falls_back_to_type_name(self):
        err = HandlerFailureError("tool", RuntimeError())
        assert str(err) == "Handler failed: RuntimeError"

    def test_wrapped_engine_error_keeps_its_message_and_kind(self):
        inner = CapabilityNotFoundError("users", capability="table")
        err = HandlerFailureError("query", inner)
        assert err.kind is ErrorKind.HANDLER_FAILURE
        assert str(err) == "Handler failed: Not found: table 'users'"
        assert err.details()["cause_kind"] == "NOT_FOUND"


def test_invariant_violation_is_not_an_engine_error():
    assert not issubclass(InvariantViolation, EngineError)
    assert issubclass(InvariantViolation, AssertionError)


# --- Outcomes ---


def test_ok_outcome():
    outcome = InvocationOutcome.ok(TextResult("hi"))
    assert outcome.success
    assert outcome.unwrap() == TextResult("hi")
    result = outcome.to_call_tool_result()
    assert not result.isError
    assert result.content[0].text == "hi"


def test_fail_outcome_carries_structured_error():
    exc = MissingRequiredArgumentError("b")
    outcome = InvocationOutcome.fail(exc)

    assert not outcome.success
    assert outcome.error == InvocationError(
        kind=ErrorKind.MISSING_ARGUMENT,
        message="Invalid argument: missing required argument 'b'",
        details={"argument": "b"},
    )
    assert "exception" not in outcome.model_dump()


def test_fail_outcome_as_tool_result():
    outcome = InvocationOutcome.fail(CapabilityNotFoundError("add", capability="tool"))
    result = outcome.to_call_tool_result()
    assert result.isError
    assert result.content[0].text == "Not found: tool 'add'"


@pytest.mark.parametrize(
    ("exc", "code"),
    [
        (CapabilityNotFoundError("x"), types.INVALID_PARAMS),
        (TypeMismatchError("a", "integer", "x"), types.INVALID_PARAMS),
        (AggregateMissingArgumentsError(["a"]), types.INVALID_PARAMS),
        (HandlerFailureError("x", RuntimeError("boom")), types.INTERNAL_ERROR),
    ],
)
def test_error_data_codes(exc, code):
    data = InvocationError.from_exception(exc).to_error_data()
    assert data.code == code
    assert data.message == str(exc)
    assert data.data["kind"] == exc.kind.value


def test_unwrap_raises_mcp_error():
    outcome = InvocationOutcome.fail(CapabilityNotFoundError("res://x", capability="resource"))
    with pytest.raises(McpError) as exc_info:
        outcome.unwrap()
    assert exc_info.value.error.code == types.INVALID_PARAMS
    assert exc_info.value.error.message == "Not found: resource 'res://x'"
