# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Engine configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class RegistrationOptions:
    """Conflict policy applied when a key is registered twice.

    ``allow_override`` skips the conflict check and replaces the entry.
    Otherwise ``warn_on_duplicate`` decides between logging a warning and
    replacing, or raising :class:`~bridgemcp.exceptions.DuplicateRegistrationError`.
    """

    allow_override: bool = False
    warn_on_duplicate: bool = True


@dataclass(slots=True, frozen=True)
class EngineConfig:
    """Tunable parameters for :class:`~bridgemcp.engine.CapabilityEngine`.

    Example:
        >>> from bridgemcp.config import EngineConfig, RegistrationOptions
        >>>
        >>> config = EngineConfig(
        ...     tools=RegistrationOptions(warn_on_duplicate=False),
        ...     run_sync_in_thread=True,
        ... )
    """

    tools: RegistrationOptions = field(default_factory=RegistrationOptions)
    """Default policy for the tool registry."""

    resources: RegistrationOptions = field(default_factory=RegistrationOptions)
    """Default policy for static resources and resource templates."""

    prompts: RegistrationOptions = field(default_factory=RegistrationOptions)
    """Default policy for the prompt registry."""

    run_sync_in_thread: bool = False
    """Run synchronous handlers on an anyio worker thread instead of inline."""


__all__ = ["EngineConfig", "RegistrationOptions"]
