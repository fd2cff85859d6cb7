# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Shared fixtures."""

from __future__ import annotations

import pytest

from bridgemcp import CapabilityEngine
from bridgemcp.registry import PromptRegistry, ResourceRegistry, ToolRegistry


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def engine() -> CapabilityEngine:
    return CapabilityEngine()


@pytest.fixture
def tools() -> ToolRegistry:
    return ToolRegistry()


@pytest.fixture
def resources() -> ResourceRegistry:
    return ResourceRegistry()


@pytest.fixture
def prompts() -> PromptRegistry:
    return PromptRegistry()
