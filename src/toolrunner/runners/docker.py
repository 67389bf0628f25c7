"""Docker-based runner."""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Mapping

from toolrunner.base import (
    InputPathType,
    Metadata,
    OutputHandler,
    PhasedExecution,
    Runner,
)
from toolrunner.errors import CommandFailedError, InputResolutionError, RunnerConfigError
from toolrunner.runners.local import check_required_outputs, default_data_dir, output_dir_name
from toolrunner.runners.process import run_process
from toolrunner.util.logging import get_logger

CONTAINER_INPUT_ROOT = PurePosixPath("/toolrunner/input")
CONTAINER_OUTPUT_DIR = PurePosixPath("/toolrunner/output")


@dataclass
class Mount:
    """Bind mount from the host into the container.

    Attributes:
        source: Host path being mounted.
        target: Mount point inside the container.
        writable: Whether the container may write through the mount.
    """

    source: Path
    target: PurePosixPath
    writable: bool = False

    def as_volume(self) -> str:
        """Render the mount as a ``docker run -v`` value."""

        volume = f"{self.source}:{self.target}"
        return volume if self.writable else f"{volume}:ro"


class DockerExecution(PhasedExecution):
    """Run a command inside a Docker container.

    Every distinct host input gets its own mount under ``/toolrunner/input/<n>``.
    Registering the same host path again returns the same container path; ``mutable``
    or ``resolve_parent`` on a later registration widen the existing mount. The
    execution's output directory is mounted at ``/toolrunner/output``, which is also
    the container working directory. A second :meth:`run` call raises
    :class:`ExecutionStateError`.
    """

    def __init__(
        self,
        metadata: Metadata,
        output_dir: Path,
        *,
        image: str | None,
        docker_executable: str = "docker",
        environ: Mapping[str, str] | None = None,
        docker_user_id: int | None = None,
    ) -> None:
        super().__init__(metadata)
        self.output_dir = output_dir
        self.image = image
        self._docker_executable = docker_executable
        self._environ = dict(environ or {})
        self._docker_user_id = docker_user_id
        self._mounts: dict[Path, Mount] = {}
        self._required_outputs: list[Path] = []
        self._logger = get_logger(self.__class__.__name__)

    @property
    def mounts(self) -> list[Mount]:
        """Input mounts registered so far, in registration order."""

        return list(self._mounts.values())

    def _resolve_input(
        self, host_file: InputPathType, *, resolve_parent: bool, mutable: bool
    ) -> str:
        resolved = Path(host_file).expanduser().resolve()
        mount = self._mounts.get(resolved)
        if mount is None:
            required = resolved.parent if resolve_parent else resolved
            if not required.exists():
                raise InputResolutionError(f"Input path does not exist: {required}")
            mount_dir = CONTAINER_INPUT_ROOT / str(len(self._mounts))
            mount = Mount(source=resolved, target=mount_dir / resolved.name)
            self._mounts[resolved] = mount
        if resolve_parent and mount.source != resolved.parent:
            mount.source = resolved.parent
            mount.target = mount.target.parent
        mount.writable = mount.writable or mutable
        return str(self._container_path(resolved, mount))

    @staticmethod
    def _container_path(resolved: Path, mount: Mount) -> PurePosixPath:
        if mount.source == resolved:
            return mount.target
        return mount.target / resolved.name

    def _resolve_output(self, local_file: str, *, optional: bool) -> Path:
        host = self.output_dir / local_file
        if not optional:
            self._required_outputs.append(host)
        return host

    def _record_params(self, params: object) -> None:
        self._logger.debug("Parameters for %s: %r", self.metadata.id, params)

    def build_docker_command(self, cargs: list[str]) -> list[str]:
        """Return the full ``docker run`` argument vector for *cargs*."""

        if not self.image:
            raise RunnerConfigError(
                f"No container image configured for tool '{self.metadata.id}'."
            )
        docker_command = [
            self._docker_executable,
            "run",
            "--rm",
            "-w",
            str(CONTAINER_OUTPUT_DIR),
            "-v",
            f"{self.output_dir}:{CONTAINER_OUTPUT_DIR}",
        ]
        for mount in self._mounts.values():
            docker_command.extend(["-v", mount.as_volume()])
        for key, value in self._environ.items():
            docker_command.extend(["-e", f"{key}={value}"])
        if self._docker_user_id is not None:
            docker_command.extend(["-u", str(self._docker_user_id)])
        docker_command.append(self.image)
        docker_command.extend(cargs)
        return docker_command

    def _execute(
        self,
        cargs: list[str],
        handle_stdout: OutputHandler | None,
        handle_stderr: OutputHandler | None,
    ) -> None:
        if not cargs:
            raise ValueError("Command must contain at least one argument.")

        docker_command = self.build_docker_command(cargs)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        start = time.monotonic()
        self._logger.info("Running command in Docker (%s): %s", self.image, cargs)
        return_code = run_process(
            docker_command,
            handle_stdout=handle_stdout or self._log_stdout,
            handle_stderr=handle_stderr or self._log_stderr,
        )
        duration = time.monotonic() - start
        self._logger.info(
            "Docker command finished with exit code %s in %.2fs.",
            return_code,
            duration,
        )
        if return_code != 0:
            self._logger.error("Docker command failed with exit code %s.", return_code)
            raise CommandFailedError(return_code, cargs)
        check_required_outputs(self._required_outputs)

    def _log_stdout(self, line: str) -> None:
        self._logger.info(line)

    def _log_stderr(self, line: str) -> None:
        self._logger.warning(line)


class DockerRunner(Runner):
    """Runner that executes tools inside Docker containers.

    Attributes:
        image_override: Image used instead of ``Metadata.container_image_tag``.
        docker_executable: Docker client binary.
        data_dir: Host directory under which per-execution output directories live.
        environ: Environment variables passed into the container.
        docker_user_id: Optional user id the container runs as.
    """

    def __init__(
        self,
        image_override: str | None = None,
        docker_executable: str = "docker",
        data_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
        docker_user_id: int | None = None,
    ) -> None:
        self.image_override = image_override
        self.docker_executable = docker_executable
        self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()
        self.environ = dict(environ or {})
        self.docker_user_id = docker_user_id
        self.uid = uuid.uuid4().hex[:8]
        self._counter = 0
        self._lock = threading.Lock()

    def start_execution(self, metadata: Metadata) -> DockerExecution:
        with self._lock:
            index = self._counter
            self._counter += 1
        output_dir = (self.data_dir / output_dir_name(self.uid, index, metadata)).absolute()
        return DockerExecution(
            metadata,
            output_dir,
            image=self.image_override or metadata.container_image_tag,
            docker_executable=self.docker_executable,
            environ=self.environ,
            docker_user_id=self.docker_user_id,
        )
