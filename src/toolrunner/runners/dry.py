"""Dry runner for debugging and inspecting generated wrappers."""

from __future__ import annotations

import threading

from toolrunner.base import (
    InputPathType,
    Metadata,
    OutputHandler,
    PhasedExecution,
    Runner,
)


class DryExecution(PhasedExecution):
    """Execution that maps every path to itself and never launches anything.

    Attributes:
        cargs: Arguments passed to :meth:`run`, or ``None`` before it is called.
        recorded_params: Parameters passed to :meth:`params`, or ``None``.
    """

    def __init__(self, runner: DryRunner, metadata: Metadata) -> None:
        super().__init__(metadata)
        self._runner = runner
        self.cargs: list[str] | None = None
        self.recorded_params: object | None = None

    def _resolve_input(
        self, host_file: InputPathType, *, resolve_parent: bool, mutable: bool
    ) -> str:
        return str(host_file)

    def _resolve_output(self, local_file: str, *, optional: bool) -> str:
        return local_file

    def _record_params(self, params: object) -> None:
        self.recorded_params = params
        with self._runner._lock:
            self._runner.last_params = params

    def _execute(
        self,
        cargs: list[str],
        handle_stdout: OutputHandler | None,
        handle_stderr: OutputHandler | None,
    ) -> None:
        self.cargs = cargs
        with self._runner._lock:
            self._runner.last_cargs = cargs


class DryRunner(Runner):
    """Runner that records what would have been executed.

    Each :meth:`start_execution` call returns a new :class:`DryExecution`. The most
    recent metadata, parameters and arguments seen by any of them are mirrored here
    for inspection. Writes to the mirror are serialized by a lock; with concurrent
    executions the last writer wins.
    """

    def __init__(self) -> None:
        self.last_metadata: Metadata | None = None
        self.last_params: object | None = None
        self.last_cargs: list[str] | None = None
        self.last_execution: DryExecution | None = None
        self._lock = threading.Lock()

    def start_execution(self, metadata: Metadata) -> DryExecution:
        execution = DryExecution(self, metadata)
        with self._lock:
            self.last_metadata = metadata
            self.last_execution = execution
        return execution
