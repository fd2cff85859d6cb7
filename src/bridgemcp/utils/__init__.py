# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Utility helpers for bridgemcp."""

from .docstring import parse_docstring_params
from .logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger", "parse_docstring_params"]
