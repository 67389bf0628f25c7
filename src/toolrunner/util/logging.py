"""Logging utilities for toolrunner."""

from __future__ import annotations

import logging
from typing import Final

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_LEVELS: Final[dict[str, int]] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def configure_logging(level: str = "INFO", fmt: str | None = None) -> None:
    """Configure logging for command-line use.

    Library code never calls this; it only obtains loggers through :func:`get_logger`.

    Args:
        level: Logging level name (e.g., "INFO", "DEBUG"). Unknown names fall back to INFO.
        fmt: Optional logging format string.
    """

    logging.basicConfig(
        level=normalize_level(level),
        format=fmt or DEFAULT_LOG_FORMAT,
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger scoped under the ``toolrunner`` namespace."""

    if name != "toolrunner" and not name.startswith("toolrunner."):
        name = f"toolrunner.{name}"
    return logging.getLogger(name)


def normalize_level(level: str) -> int:
    """Translate a level name into a :mod:`logging` level number."""

    normalized = level.strip().upper()
    return _LEVELS.get(normalized, logging.INFO)
