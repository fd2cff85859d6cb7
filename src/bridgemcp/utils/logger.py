# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Logger helpers.

Library code asks for loggers through :func:`get_logger` and never touches the
root logger. Applications that want output call :func:`configure_logging` once.
"""

from __future__ import annotations

import logging

_ROOT = "bridgemcp"
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logging.getLogger(_ROOT).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the ``bridgemcp`` namespace."""
    if name != _ROOT and not name.startswith(_ROOT + "."):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)


def configure_logging(level: int | str = logging.INFO, *, fmt: str = _DEFAULT_FORMAT) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Calling it again only updates the level and format of the handler installed
    by the first call.
    """
    logger = logging.getLogger(_ROOT)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    handler = next((h for h in logger.handlers if getattr(h, "_bridgemcp", False)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler._bridgemcp = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    handler.setFormatter(logging.Formatter(fmt))
    logger.setLevel(level)
    return logger


__all__ = ["configure_logging", "get_logger"]
