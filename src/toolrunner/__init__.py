"""Pluggable runners for executing command-line tools from generated wrappers."""

from toolrunner.base import (
    Execution,
    ExecutionPhase,
    InputPathType,
    Metadata,
    OutputHandler,
    OutputPathType,
    PhasedExecution,
    Runner,
)
from toolrunner.errors import (
    CommandFailedError,
    ExecutionStateError,
    InputResolutionError,
    MissingOutputError,
    RunnerConfigError,
    ToolRunnerError,
)
from toolrunner.registry import (
    get_global_runner,
    reset_global_runner,
    set_global_runner,
    use_runner,
)
from toolrunner.runners.dry import DryExecution, DryRunner

__version__ = "0.1.0"

__all__ = [
    "CommandFailedError",
    "DryExecution",
    "DryRunner",
    "Execution",
    "ExecutionPhase",
    "ExecutionStateError",
    "InputPathType",
    "InputResolutionError",
    "Metadata",
    "MissingOutputError",
    "OutputHandler",
    "OutputPathType",
    "PhasedExecution",
    "Runner",
    "RunnerConfigError",
    "ToolRunnerError",
    "get_global_runner",
    "reset_global_runner",
    "set_global_runner",
    "use_runner",
]
