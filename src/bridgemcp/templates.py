# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""URI templates with ``{name}`` placeholders.

Templates are scheme-based patterns such as ``users://{id}/profile``. Each
placeholder captures one or more characters other than ``/``, literal text is
matched verbatim, and the whole URI must match::

    >>> template = UriTemplate.compile("users://{id}/profile")
    >>> template.match("users://42/profile")
    {'id': '42'}
    >>> template.match("users://42/settings") is None
    True

Only the syntax is checked here. Whether every placeholder has a declared
argument is the resource registry's concern.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .exceptions import TemplateValidationError

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")
_SEGMENT = "([^/]+)"


@dataclass(frozen=True, slots=True)
class UriTemplate:
    pattern: str
    placeholders: tuple[str, ...]
    _matcher: re.Pattern[str] = field(repr=False, compare=False)

    @classmethod
    def compile(cls, pattern: str) -> UriTemplate:
        """Compile *pattern* into an anchored matcher.

        Raises:
            TemplateValidationError: a placeholder name repeats, or braces are
                left unbalanced.
        """
        names: list[str] = []
        parts: list[str] = []
        cursor = 0
        for found in _PLACEHOLDER.finditer(pattern):
            parts.append(_literal(pattern, pattern[cursor : found.start()]))
            parts.append(_SEGMENT)
            names.append(found.group(1))
            cursor = found.end()
        parts.append(_literal(pattern, pattern[cursor:]))

        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise TemplateValidationError(
                pattern,
                f"repeats placeholders {duplicates}",
                placeholders=duplicates,
            )

        return cls(pattern, tuple(names), re.compile("".join(parts)))

    @property
    def is_template(self) -> bool:
        return bool(self.placeholders)

    def match(self, uri: str) -> dict[str, str] | None:
        """Placeholder values for *uri*, in declaration order, or ``None``."""
        found = self._matcher.fullmatch(uri)
        if found is None:
            return None
        return dict(zip(self.placeholders, found.groups()))

    def expand(self, values: dict[str, object]) -> str:
        """Inverse of :meth:`match`: substitute *values* into the pattern."""
        missing = [name for name in self.placeholders if name not in values]
        if missing:
            raise KeyError(f"no value for placeholders {missing}")
        return _PLACEHOLDER.sub(lambda found: str(values[found.group(1)]), self.pattern)


def compile_template(pattern: str) -> UriTemplate:
    return UriTemplate.compile(pattern)


def match_template(template: UriTemplate, uri: str) -> dict[str, str] | None:
    return template.match(uri)


def _literal(pattern: str, text: str) -> str:
    if "{" in text or "}" in text:
        raise TemplateValidationError(pattern, "has unbalanced braces")
    return re.escape(text)


__all__ = ["UriTemplate", "compile_template", "match_template"]
