"""Logger hierarchy and handler setup for pkggrade."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "pkggrade"
CONSOLE_FORMAT = "[pkggrade] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """``get_logger("walker")`` returns the ``pkggrade.walker`` logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send pkggrade records to stderr, and to ``log_file`` when given.

    Calling this again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    root.addHandler(_with_format(logging.StreamHandler(), level, CONSOLE_FORMAT))
    if log_file is not None:
        root.addHandler(
            _with_format(logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT)
        )
    return root


def _with_format(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


__all__ = ["configure_logging", "get_logger"]
