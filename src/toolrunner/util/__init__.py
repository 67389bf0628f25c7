"""Utility helpers package."""

from toolrunner.util.logging import configure_logging, get_logger, normalize_level

__all__ = ["configure_logging", "get_logger", "normalize_level"]
