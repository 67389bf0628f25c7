"""Local process runner."""

from __future__ import annotations

import os
import tempfile
import threading
import time
import uuid
from pathlib import Path
from typing import Mapping

from toolrunner.base import (
    InputPathType,
    Metadata,
    OutputHandler,
    PhasedExecution,
    Runner,
)
from toolrunner.errors import CommandFailedError, InputResolutionError, MissingOutputError
from toolrunner.runners.process import run_process
from toolrunner.util.logging import get_logger

DEFAULT_DATA_DIR_NAME = "toolrunner_outputs"


def default_data_dir() -> Path:
    """Return the directory used for execution outputs when none is configured."""

    return Path(tempfile.gettempdir()) / DEFAULT_DATA_DIR_NAME


def output_dir_name(runner_uid: str, index: int, metadata: Metadata) -> str:
    """Name of the per-execution output directory.

    Path separators in the tool id are replaced so the name is always a single
    path component.
    """

    tool_id = metadata.id.replace("/", "_").replace("\\", "_")
    return f"{runner_uid}_{index}_{tool_id}"


class LocalExecution(PhasedExecution):
    """Run a command on the local host inside a dedicated output directory.

    Host input paths are used as-is. Outputs are written relative to ``output_dir``,
    which is also the working directory of the command. A second :meth:`run` call
    raises :class:`ExecutionStateError`.
    """

    def __init__(
        self,
        metadata: Metadata,
        output_dir: Path,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(metadata)
        self.output_dir = output_dir
        self._environ = dict(environ or {})
        self._inputs: dict[Path, str] = {}
        self._required_outputs: list[Path] = []
        self._logger = get_logger(self.__class__.__name__)

    def _resolve_input(
        self, host_file: InputPathType, *, resolve_parent: bool, mutable: bool
    ) -> str:
        resolved = Path(host_file).expanduser().resolve()
        if resolved in self._inputs:
            return self._inputs[resolved]
        required = resolved.parent if resolve_parent else resolved
        if not required.exists():
            raise InputResolutionError(f"Input path does not exist: {required}")
        self._inputs[resolved] = str(resolved)
        return str(resolved)

    def _resolve_output(self, local_file: str, *, optional: bool) -> Path:
        host = self.output_dir / local_file
        if not optional:
            self._required_outputs.append(host)
        return host

    def _record_params(self, params: object) -> None:
        self._logger.debug("Parameters for %s: %r", self.metadata.id, params)

    def _execute(
        self,
        cargs: list[str],
        handle_stdout: OutputHandler | None,
        handle_stderr: OutputHandler | None,
    ) -> None:
        if not cargs:
            raise ValueError("Command must contain at least one argument.")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        merged_env = os.environ.copy()
        merged_env.update(self._environ)

        start = time.monotonic()
        self._logger.info("Running %s: %s", self.metadata.name, cargs)
        return_code = run_process(
            cargs,
            cwd=self.output_dir,
            env=merged_env,
            handle_stdout=handle_stdout or self._log_stdout,
            handle_stderr=handle_stderr or self._log_stderr,
        )
        duration = time.monotonic() - start
        self._logger.info(
            "%s finished with exit code %s in %.2fs.",
            self.metadata.name,
            return_code,
            duration,
        )
        if return_code != 0:
            self._logger.error("%s failed with exit code %s.", self.metadata.name, return_code)
            raise CommandFailedError(return_code, cargs)
        check_required_outputs(self._required_outputs)

    def _log_stdout(self, line: str) -> None:
        self._logger.info(line)

    def _log_stderr(self, line: str) -> None:
        self._logger.warning(line)


class LocalRunner(Runner):
    """Runner that launches commands as local processes.

    Attributes:
        data_dir: Directory under which every execution gets its own output directory.
        environ: Extra environment variables merged over the current environment.
    """

    def __init__(
        self,
        data_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()
        self.environ = dict(environ or {})
        self.uid = uuid.uuid4().hex[:8]
        self._counter = 0
        self._lock = threading.Lock()

    def start_execution(self, metadata: Metadata) -> LocalExecution:
        with self._lock:
            index = self._counter
            self._counter += 1
        output_dir = self.data_dir / output_dir_name(self.uid, index, metadata)
        return LocalExecution(metadata, output_dir, environ=self.environ)


def check_required_outputs(required: list[Path]) -> None:
    """Raise :class:`MissingOutputError` if any of *required* does not exist."""

    missing = [str(path) for path in required if not path.exists()]
    if missing:
        raise MissingOutputError(missing)
