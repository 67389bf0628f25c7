"""Runner backends."""

from toolrunner.runners.docker import DockerExecution, DockerRunner, Mount
from toolrunner.runners.dry import DryExecution, DryRunner
from toolrunner.runners.factory import create_runner
from toolrunner.runners.local import LocalExecution, LocalRunner
from toolrunner.runners.process import run_process

__all__ = [
    "DockerExecution",
    "DockerRunner",
    "DryExecution",
    "DryRunner",
    "LocalExecution",
    "LocalRunner",
    "Mount",
    "create_runner",
    "run_process",
]
