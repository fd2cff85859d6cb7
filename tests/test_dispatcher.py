# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Request dispatch: lookup, binding, invocation, and failure outcomes."""

from __future__ import annotations

import threading
from dataclasses import dataclass

import anyio
import pytest

from bridgemcp.definitions import (
    CapabilityKind,
    PromptDefinition,
    ResourceDefinition,
    ResourceTemplateDefinition,
    ToolDefinition,
)
from bridgemcp.descriptors import INTEGER, STRING, Field, Parameter, RecordType, optional
from bridgemcp.dispatcher import Dispatcher
from bridgemcp.exceptions import ErrorKind, InvariantViolation, MissingRequiredArgumentError
from bridgemcp.registry import PromptRegistry, ResourceRegistry, ToolRegistry
from bridgemcp.results import BinaryResult, MessageListResult, TextResult


ADD = ToolDefinition(name="add", parameters=(Parameter("a", INTEGER), Parameter("b", INTEGER)))


@pytest.fixture
def dispatcher(tools: ToolRegistry, resources: ResourceRegistry, prompts: PromptRegistry) -> Dispatcher:
    return Dispatcher(tools, resources, prompts)


# --- Tools ---


@pytest.mark.anyio
async def test_sync_tool_success(dispatcher: Dispatcher):
    dispatcher.tools.register(ADD, lambda a, b: a + b)

    outcome = await dispatcher.call_tool("add", {"a": 5, "b": 3})

    assert outcome.success
    assert outcome.error is None
    assert outcome.result == TextResult("8")


@pytest.mark.anyio
async def test_async_tool_is_awaited(dispatcher: Dispatcher):
    async def add(a: int, b: int) -> int:
        await anyio.sleep(0)
        return a + b

    dispatcher.tools.register(ADD, add)
    outcome = await dispatcher.invoke("tool", "add", {"a": 1, "b": 2})
    assert outcome.result == TextResult("3")


@pytest.mark.anyio
async def test_unknown_tool_is_not_found(dispatcher: Dispatcher):
    outcome = await dispatcher.call_tool("missing", {})
    assert not outcome.success
    assert outcome.error.kind is ErrorKind.NOT_FOUND
    assert outcome.error.message.startswith("Not found: ")


@pytest.mark.anyio
async def test_bind_failure_never_reaches_handler(dispatcher: Dispatcher):
    calls: list[tuple[int, int]] = []
    dispatcher.tools.register(ADD, lambda a, b: calls.append((a, b)))

    outcome = await dispatcher.call_tool("add", {"a": 5})

    assert outcome.error.kind is ErrorKind.MISSING_ARGUMENT
    assert outcome.error.details == {"argument": "b"}
    assert calls == []


@pytest.mark.anyio
async def test_type_mismatch_outcome(dispatcher: Dispatcher):
    dispatcher.tools.register(ADD, lambda a, b: a + b)
    outcome = await dispatcher.call_tool("add", {"a": "five", "b": 3})
    assert outcome.error.kind is ErrorKind.TYPE_MISMATCH
    assert outcome.error.message.startswith("Invalid argument: ")


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("exc", "prefix"),
    [
        (TimeoutError("upstream slow"), "Operation timed out: "),
        (ValueError("bad value"), "Invalid argument: "),
        (KeyError("k"), "Not found: "),
        (RuntimeError("boom"), "Handler failed: "),
    ],
)
async def test_handler_failures_are_classified(dispatcher: Dispatcher, exc: Exception, prefix: str):
    def explode(a: int, b: int) -> int:
        raise exc

    dispatcher.tools.register(ADD, explode)
    outcome = await dispatcher.call_tool("add", {"a": 1, "b": 2})

    assert outcome.error.kind is ErrorKind.HANDLER_FAILURE
    assert outcome.error.message.startswith(prefix)
    assert outcome.exception.__cause__ is exc


@pytest.mark.anyio
async def test_invariant_violations_propagate(dispatcher: Dispatcher):
    def broken(a: int, b: int) -> int:
        raise InvariantViolation("corrupt state")

    dispatcher.tools.register(ADD, broken)
    with pytest.raises(InvariantViolation):
        await dispatcher.call_tool("add", {"a": 1, "b": 2})


@pytest.mark.anyio
async def test_engine_errors_from_handlers_are_handler_failures(dispatcher: Dispatcher):
    def lookup_user(a: int, b: int) -> int:
        raise MissingRequiredArgumentError("user_id")

    dispatcher.tools.register(ADD, lookup_user)
    outcome = await dispatcher.call_tool("add", {"a": 1, "b": 2})

    assert outcome.error.kind is ErrorKind.HANDLER_FAILURE
    assert outcome.error.message == "Handler failed: Invalid argument: missing required argument 'user_id'"
    assert outcome.error.details == {
        "key": "add",
        "error_type": "MissingRequiredArgumentError",
        "cause_kind": "MISSING_ARGUMENT",
    }


@pytest.mark.anyio
async def test_record_factory_failure_is_an_outcome(dispatcher: Dispatcher):
    @dataclass
    class Window:
        start: int
        end: int

        def __post_init__(self):
            if self.end < self.start:
                raise RuntimeError("end before start")

    window = RecordType((Field("start", INTEGER), Field("end", INTEGER)), name="Window", factory=Window)
    calls: list[Window] = []
    dispatcher.tools.register(
        ToolDefinition(name="span", parameters=(Parameter("window", window),)),
        lambda window: calls.append(window),
    )

    outcome = await dispatcher.call_tool("span", {"window": {"start": 5, "end": 1}})

    assert outcome.error.kind is ErrorKind.TYPE_MISMATCH
    assert outcome.error.details["argument"] == "window"
    assert calls == []


@pytest.mark.anyio
async def test_context_is_injected_under_declared_name(dispatcher: Dispatcher):
    seen: list[object] = []

    def whoami(ctx: object, prefix: str) -> str:
        seen.append(ctx)
        return f"{prefix}:{ctx}"

    definition = ToolDefinition(
        name="whoami",
        parameters=(Parameter("ctx", STRING), Parameter("prefix", STRING)),
        context_parameter="ctx",
    )
    dispatcher.tools.register(definition, whoami)

    assert list(definition.schema["properties"]) == ["prefix"]
    outcome = await dispatcher.call_tool("whoami", {"prefix": "p", "ctx": "spoofed"}, context="caller-1")
    assert outcome.result == TextResult("p:caller-1")
    assert seen == ["caller-1"]


@pytest.mark.anyio
async def test_sync_handlers_can_run_in_worker_threads(
    tools: ToolRegistry, resources: ResourceRegistry, prompts: PromptRegistry
):
    dispatcher = Dispatcher(tools, resources, prompts, run_sync_in_thread=True)
    main = threading.get_ident()
    tools.register(ADD, lambda a, b: threading.get_ident() != main)

    outcome = await dispatcher.call_tool("add", {"a": 1, "b": 1})
    assert outcome.result == TextResult("true")


@pytest.mark.anyio
async def test_concurrent_invocations(dispatcher: Dispatcher):
    async def slow_add(a: int, b: int) -> int:
        await anyio.sleep(0.01)
        return a + b

    dispatcher.tools.register(ADD, slow_add)
    results: dict[int, str] = {}

    async def run(n: int) -> None:
        outcome = await dispatcher.call_tool("add", {"a": n, "b": n})
        results[n] = outcome.result.text

    async with anyio.create_task_group() as tg:
        for n in range(20):
            tg.start_soon(run, n)

    assert results == {n: str(2 * n) for n in range(20)}


@pytest.mark.anyio
async def test_cancellation_propagates(dispatcher: Dispatcher):
    started = anyio.Event()

    async def hang(a: int, b: int) -> int:
        started.set()
        await anyio.sleep_forever()

    dispatcher.tools.register(ADD, hang)

    with anyio.move_on_after(1) as scope:
        async with anyio.create_task_group() as tg:
            tg.start_soon(dispatcher.call_tool, "add", {"a": 1, "b": 2})
            await started.wait()
            tg.cancel_scope.cancel()
    assert not scope.cancelled_caught


# --- Resources ---


@pytest.mark.anyio
async def test_static_resource_beats_template(dispatcher: Dispatcher):
    dispatcher.resources.register_template(
        ResourceTemplateDefinition(name="any", uri_template="file://{name}", parameters=(Parameter("name", STRING),)),
        lambda name: f"template:{name}",
    )
    dispatcher.resources.register(ResourceDefinition(name="test", uri="file://test"), lambda: "static")

    assert (await dispatcher.read_resource("file://test")).result == TextResult("static", "text/plain")
    assert (await dispatcher.read_resource("file://other")).result == TextResult("template:other", "text/plain")


@pytest.mark.anyio
async def test_template_captures_are_coerced(dispatcher: Dispatcher):
    dispatcher.resources.register_template(
        ResourceTemplateDefinition(
            name="user",
            uri_template="users://{id}/avatar",
            mime_type="image/png",
            parameters=(Parameter("id", INTEGER),),
        ),
        lambda id: bytes([id]),
    )

    outcome = await dispatcher.invoke(CapabilityKind.RESOURCE_TEMPLATE, "users://7/avatar")
    assert outcome.result == BinaryResult(b"\x07", "image/png")

    outcome = await dispatcher.read_resource("users://abc/avatar")
    assert outcome.error.kind is ErrorKind.TYPE_MISMATCH


@pytest.mark.anyio
async def test_unmatched_uri_is_not_found(dispatcher: Dispatcher):
    outcome = await dispatcher.read_resource("users:///profile")
    assert outcome.error.kind is ErrorKind.NOT_FOUND


@pytest.mark.anyio
async def test_unsupported_resource_result_is_a_handler_failure(dispatcher: Dispatcher):
    dispatcher.resources.register(ResourceDefinition(name="n", uri="num://1"), lambda: 42)
    outcome = await dispatcher.read_resource("num://1")
    assert outcome.error.kind is ErrorKind.HANDLER_FAILURE
    assert outcome.error.message.startswith("Handler failed: ")


# --- Prompts ---


GREET = PromptDefinition(
    name="greet",
    description="Say hello",
    parameters=(Parameter("a", STRING), Parameter("b", STRING), Parameter("tone", optional(STRING))),
)


@pytest.mark.anyio
async def test_prompt_reports_all_missing_arguments(dispatcher: Dispatcher):
    dispatcher.prompts.register(GREET, lambda a, b, tone: [("user", a + b)])

    outcome = await dispatcher.get_prompt("greet", {})

    assert outcome.error.kind is ErrorKind.MISSING_ARGUMENTS
    assert outcome.error.details == {"missing": ["a", "b"]}
    assert outcome.error.message.startswith("Missing required arguments: a, b")


@pytest.mark.anyio
async def test_prompt_renders_messages(dispatcher: Dispatcher):
    dispatcher.prompts.register(GREET, lambda a, b, tone: [("user", f"{a} {b} {tone}")])

    outcome = await dispatcher.get_prompt("greet", {"a": "hi", "b": "there"})

    assert isinstance(outcome.result, MessageListResult)
    assert outcome.result.description == "Say hello"
    assert outcome.result.messages[0].content.text == "hi there None"


@pytest.mark.anyio
async def test_prompt_arguments_are_coerced_from_strings(dispatcher: Dispatcher):
    definition = PromptDefinition(name="repeat", parameters=(Parameter("times", INTEGER),))
    dispatcher.prompts.register(definition, lambda times: [("assistant", "x" * times)])

    outcome = await dispatcher.get_prompt("repeat", {"times": "3"})
    assert outcome.result.messages[0].content.text == "xxx"
