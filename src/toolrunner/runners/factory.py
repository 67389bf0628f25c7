"""Runner factory."""

from __future__ import annotations

from toolrunner.base import Runner
from toolrunner.config import RunnerConfig
from toolrunner.errors import RunnerConfigError
from toolrunner.runners.docker import DockerRunner
from toolrunner.runners.dry import DryRunner
from toolrunner.runners.local import LocalRunner


def create_runner(config: RunnerConfig) -> Runner:
    """Create a runner instance from configuration.

    Args:
        config: Runner configuration settings.

    Returns:
        An initialized runner.

    Raises:
        RunnerConfigError: If the mode is unknown.
    """

    mode = config.mode.lower()
    if mode == "dry":
        return DryRunner()
    if mode == "local":
        return LocalRunner(data_dir=config.data_dir, environ=config.environ)
    if mode == "docker":
        return DockerRunner(
            image_override=config.docker_image,
            docker_executable=config.docker_executable,
            data_dir=config.data_dir,
            environ=config.environ,
            docker_user_id=config.docker_user_id,
        )
    raise RunnerConfigError(f"Unknown runner mode: {config.mode}")
