# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Parameter descriptions from docstrings.

Used by the discovery helpers to attach ``description`` entries to synthesized
schemas. Google (``Args:``), NumPy (``Parameters`` + dashes) and Sphinx
(``:param name:``) layouts are recognised; the first layout that yields
anything wins.
"""

from __future__ import annotations

import inspect
import re


__all__ = ["parse_docstring_params"]

_GOOGLE_HEADER = re.compile(r"^\s*(?:Args|Arguments|Parameters)\s*:\s*$", re.IGNORECASE)
_GOOGLE_ENTRY = re.compile(r"^(\*{0,2}\w+)\s*(?:\([^)]*\))?\s*:\s*(.*)$")
_GOOGLE_SECTION = re.compile(
    r"^\s*(?:Returns|Return|Raises|Yields|Examples?|Notes?|See Also|References|Warnings?|Attributes?)\s*:\s*$",
    re.IGNORECASE,
)
_NUMPY_HEADER = re.compile(r"^\s*Parameters\s*$", re.IGNORECASE)
_NUMPY_RULE = re.compile(r"^\s*-{3,}\s*$")
_NUMPY_ENTRY = re.compile(r"^(\w+)\s*(?::\s*.*)?$")
_SPHINX_ENTRY = re.compile(r":param\s+(?:[^:\s]+\s+)?(\w+)\s*:(.*?)(?=\n\s*:|\Z)", re.DOTALL)


def parse_docstring_params(docstring: str | None) -> dict[str, str]:
    """Map parameter names to their descriptions.

    Args:
        docstring: Raw ``__doc__`` text, or ``None``.

    Returns:
        Descriptions keyed by parameter name. Empty when nothing is documented.
    """
    if not docstring or not docstring.strip():
        return {}

    lines = inspect.cleandoc(docstring).splitlines()
    for parser in (_google, _numpy):
        found = parser(lines)
        if found:
            return found
    return _sphinx(docstring)


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def _finish(entries: list[tuple[str, list[str]]]) -> dict[str, str]:
    return {name: " ".join(parts).strip() for name, parts in entries}


def _google(lines: list[str]) -> dict[str, str]:
    start = next((i + 1 for i, line in enumerate(lines) if _GOOGLE_HEADER.match(line)), None)
    if start is None:
        return {}

    entries: list[tuple[str, list[str]]] = []
    base: int | None = None
    for line in lines[start:]:
        if not line.strip():
            continue
        if _GOOGLE_SECTION.match(line):
            break
        indent = _indent(line)
        if base is None:
            base = indent
        elif indent < base:
            break

        match = _GOOGLE_ENTRY.match(line.strip())
        if match and indent == base:
            text = match.group(2)
            entries.append((match.group(1).lstrip("*"), [text] if text else []))
        elif entries:
            entries[-1][1].append(line.strip())

    return _finish(entries)


def _numpy(lines: list[str]) -> dict[str, str]:
    start = None
    for i in range(len(lines) - 1):
        if _NUMPY_HEADER.match(lines[i]) and _NUMPY_RULE.match(lines[i + 1]):
            start = i + 2
            break
    if start is None:
        return {}

    body = lines[start:]
    entries: list[tuple[str, list[str]]] = []
    base = next((_indent(line) for line in body if line.strip()), 0)
    for index, line in enumerate(body):
        if not line.strip():
            continue
        # Next section: a title line followed by its dashed rule.
        if index + 1 < len(body) and _NUMPY_RULE.match(body[index + 1]):
            break
        if _NUMPY_RULE.match(line):
            continue

        match = _NUMPY_ENTRY.match(line.strip())
        if match and _indent(line) <= base:
            entries.append((match.group(1), []))
        elif entries:
            entries[-1][1].append(line.strip())

    return _finish(entries)


def _sphinx(docstring: str) -> dict[str, str]:
    return {
        name: " ".join(part.strip() for part in text.splitlines()).strip()
        for name, text in _SPHINX_ENTRY.findall(docstring)
    }
