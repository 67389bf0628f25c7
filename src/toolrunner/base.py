"""Runner and execution contract types.

Generated tool wrappers talk to a :class:`Runner` to obtain an :class:`Execution`,
then drive that execution through a fixed sequence of calls::

    execution = runner.start_execution(metadata)
    params = execution.params(params)          # at most once, before run()
    in_path = execution.input_file(host_path)  # zero or more times
    out_path = execution.output_file("out.txt")  # zero or more times, after inputs
    execution.run(cargs)                       # exactly once

Backends decide how paths are translated and how the command is launched. Callers
only ever hold the abstract types defined here.
"""

from __future__ import annotations

import enum
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Sequence, TypeVar

from toolrunner.errors import ExecutionStateError

InputPathType = str | os.PathLike[str]
"""Host path accepted by :meth:`Execution.input_file`."""

OutputPathType = str | os.PathLike[str]
"""Host path returned by :meth:`Execution.output_file`."""

OutputHandler = Callable[[str], None]
"""Callback receiving one chunk of command output."""

ParamsT = TypeVar("ParamsT")


@dataclass(frozen=True)
class Metadata:
    """Static tool metadata.

    Structured metadata known when wrapper code is generated. Runners can use it to set
    up execution environments.

    Attributes:
        id: Unique identifier of the tool.
        name: Name of the tool.
        package: Name of the package that provides the tool.
        citations: References to cite when using the tool, in citation order.
        container_image_tag: Image where the tool is installed. Example: ``bids/mriqc``.
    """

    id: str
    name: str
    package: str
    citations: tuple[str, ...] = field(default_factory=tuple)
    container_image_tag: str | None = None

    def __post_init__(self) -> None:
        for attr in ("id", "name", "package"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Metadata.{attr} must be a non-empty string.")
        object.__setattr__(self, "citations", tuple(self.citations or ()))


class Execution(ABC):
    """Execution object used to run exactly one command.

    Created by :meth:`Runner.start_execution`. An execution is owned by the caller that
    created it and is not meant to be shared between threads.
    """

    @abstractmethod
    def input_file(
        self,
        host_file: InputPathType,
        *,
        resolve_parent: bool = False,
        mutable: bool = False,
    ) -> str:
        """Resolve a host input file.

        Called (potentially multiple times) after :meth:`Runner.start_execution` and
        before any :meth:`output_file` call.

        Args:
            host_file: The input file path on the host system.
            resolve_parent: Make the parent directory of the file available instead of
                only the file itself.
            mutable: The command may write to the file during execution.

        Returns:
            The path under which the command sees the file.
        """

    @abstractmethod
    def output_file(self, local_file: str, *, optional: bool = False) -> OutputPathType:
        """Resolve a local output file.

        Called (potentially multiple times) after all :meth:`input_file` calls.

        Args:
            local_file: Output path as the command will write it.
            optional: The command is allowed to not produce this file.

        Returns:
            The host path where the file can be found once :meth:`run` returns.
        """

    @abstractmethod
    def params(self, params: ParamsT) -> ParamsT:
        """Observe the tool parameters.

        Called by wrappers once, before :meth:`run`. Implementations may log, cache or
        record the parameters and return them unchanged.
        """

    @abstractmethod
    def run(
        self,
        cargs: Sequence[str],
        handle_stdout: OutputHandler | None = None,
        handle_stderr: OutputHandler | None = None,
    ) -> None:
        """Run the command.

        Called once, after all :meth:`input_file` and :meth:`output_file` calls.

        Args:
            cargs: The argument vector, program name first.
            handle_stdout: Receives stdout chunks in production order, if given.
            handle_stderr: Receives stderr chunks in production order, if given.

        Raises:
            CommandFailedError: If the command exits non-zero or cannot be launched.
        """


class Runner(ABC):
    """Factory for :class:`Execution` objects.

    Possible examples would be ``LocalRunner``, ``DockerRunner``, ``DryRunner``.
    """

    @abstractmethod
    def start_execution(self, metadata: Metadata) -> Execution:
        """Start an execution.

        Must not touch the filesystem or launch processes. Every call returns a new,
        independent execution.

        Args:
            metadata: Static tool metadata.

        Returns:
            A fresh execution ready to receive input files.
        """


class ExecutionPhase(enum.Enum):
    """Lifecycle position of a :class:`PhasedExecution`."""

    STARTED = "started"
    INPUTS = "inputs"
    OUTPUTS = "outputs"
    RUNNING = "running"
    FINISHED = "finished"


class PhasedExecution(Execution):
    """Execution base class that enforces the call order.

    Misordered calls raise :class:`ExecutionStateError` before any mapping is touched:

    * ``input_file`` after the first ``output_file`` call or after ``run``.
    * ``output_file`` after ``run``.
    * a second ``params`` call, or ``params`` after ``run``.
    * a second ``run`` call, whether or not the first one succeeded.

    Subclasses implement :meth:`_resolve_input`, :meth:`_resolve_output` and
    :meth:`_execute`; :meth:`_record_params` is optional.
    """

    def __init__(self, metadata: Metadata) -> None:
        self.metadata = metadata
        self.phase = ExecutionPhase.STARTED
        self._params_seen = False

    def input_file(
        self,
        host_file: InputPathType,
        *,
        resolve_parent: bool = False,
        mutable: bool = False,
    ) -> str:
        if self.phase not in (ExecutionPhase.STARTED, ExecutionPhase.INPUTS):
            raise ExecutionStateError(
                f"input_file() called during phase '{self.phase.value}'; input files "
                "must be registered before any output file and before run()."
            )
        local = self._resolve_input(host_file, resolve_parent=resolve_parent, mutable=mutable)
        self.phase = ExecutionPhase.INPUTS
        return local

    def output_file(self, local_file: str, *, optional: bool = False) -> OutputPathType:
        if self.phase in (ExecutionPhase.RUNNING, ExecutionPhase.FINISHED):
            raise ExecutionStateError("output_file() called after run().")
        host = self._resolve_output(local_file, optional=optional)
        self.phase = ExecutionPhase.OUTPUTS
        return host

    def params(self, params: ParamsT) -> ParamsT:
        if self.phase in (ExecutionPhase.RUNNING, ExecutionPhase.FINISHED):
            raise ExecutionStateError("params() called after run().")
        if self._params_seen:
            raise ExecutionStateError("params() may only be called once per execution.")
        self._params_seen = True
        self._record_params(params)
        return params

    def run(
        self,
        cargs: Sequence[str],
        handle_stdout: OutputHandler | None = None,
        handle_stderr: OutputHandler | None = None,
    ) -> None:
        if self.phase in (ExecutionPhase.RUNNING, ExecutionPhase.FINISHED):
            raise ExecutionStateError("run() may only be called once per execution.")
        self.phase = ExecutionPhase.RUNNING
        try:
            self._execute(list(cargs), handle_stdout, handle_stderr)
        finally:
            self.phase = ExecutionPhase.FINISHED

    @abstractmethod
    def _resolve_input(
        self, host_file: InputPathType, *, resolve_parent: bool, mutable: bool
    ) -> str:
        """Map a host path to the path the command will see."""

    @abstractmethod
    def _resolve_output(self, local_file: str, *, optional: bool) -> OutputPathType:
        """Map a command-side output path to its host location."""

    def _record_params(self, params: object) -> None:
        """Hook invoked with the parameters passed to :meth:`params`."""

    @abstractmethod
    def _execute(
        self,
        cargs: list[str],
        handle_stdout: OutputHandler | None,
        handle_stderr: OutputHandler | None,
    ) -> None:
        """Launch the command described by *cargs*."""
