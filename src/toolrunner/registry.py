"""Process-wide default runner."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from toolrunner.base import Runner
from toolrunner.runners.dry import DryRunner
from toolrunner.util.logging import get_logger

_LOCK = threading.Lock()
_GLOBAL_RUNNER: Runner | None = None
_LOGGER = get_logger("toolrunner.registry")


def get_global_runner() -> Runner:
    """Return the default runner, installing a :class:`DryRunner` on first use."""

    global _GLOBAL_RUNNER
    with _LOCK:
        if _GLOBAL_RUNNER is None:
            _GLOBAL_RUNNER = DryRunner()
            _LOGGER.debug("No default runner set; using DryRunner.")
        return _GLOBAL_RUNNER


def set_global_runner(runner: Runner) -> None:
    """Replace the default runner.

    Executions already started from a previous runner are unaffected.
    """

    global _GLOBAL_RUNNER
    with _LOCK:
        _GLOBAL_RUNNER = runner
    _LOGGER.debug("Default runner set to %s.", type(runner).__name__)


def reset_global_runner() -> None:
    """Clear the default runner so the next lookup installs a fresh dry runner."""

    global _GLOBAL_RUNNER
    with _LOCK:
        _GLOBAL_RUNNER = None


@contextmanager
def use_runner(runner: Runner) -> Iterator[Runner]:
    """Install *runner* as the default for the duration of a ``with`` block."""

    global _GLOBAL_RUNNER
    with _LOCK:
        previous = _GLOBAL_RUNNER
        _GLOBAL_RUNNER = runner
    try:
        yield runner
    finally:
        with _LOCK:
            _GLOBAL_RUNNER = previous
