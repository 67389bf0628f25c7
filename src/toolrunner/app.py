"""Application wiring for running ad-hoc commands through a runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from toolrunner.base import Metadata, OutputHandler, OutputPathType, Runner
from toolrunner.config import RunnerConfig, load_config, update_mode
from toolrunner.registry import get_global_runner, set_global_runner
from toolrunner.runners.factory import create_runner
from toolrunner.util.logging import get_logger

_LOGGER = get_logger("toolrunner.app")


@dataclass(frozen=True)
class CommandRequest:
    """Description of an ad-hoc command.

    Attributes:
        command: Argument vector, program name first. Arguments equal to one of
            ``inputs`` are replaced by the path the runner maps that input to.
        inputs: Host paths the command reads.
        outputs: Output paths the command writes, relative to its working directory.
        optional_outputs: Outputs the command may legitimately not produce.
    """

    command: list[str]
    inputs: list[str] = field(default_factory=list)
    outputs: list[str] = field(default_factory=list)
    optional_outputs: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a successful command.

    Attributes:
        command: The argument vector after input path substitution.
        outputs: Mapping of declared output names to their host paths.
    """

    command: list[str]
    outputs: dict[str, OutputPathType]


def build_metadata(command: Sequence[str], image: str | None = None) -> Metadata:
    """Derive tool metadata for an ad-hoc command from its program name."""

    if not command:
        raise ValueError("Command must contain at least one argument.")
    program = Path(command[0]).name
    return Metadata(id=program, name=program, package="adhoc", container_image_tag=image)


def configure_default_runner(
    config_path: Path | None = None, mode: str | None = None
) -> RunnerConfig:
    """Load configuration and install the runner it describes as the default.

    Returns:
        The effective configuration.
    """

    config = load_config(config_path)
    if mode is not None:
        config = update_mode(config, mode)
    set_global_runner(create_runner(config))
    _LOGGER.debug("Configured default runner in %s mode.", config.mode)
    return config


def run_command(
    request: CommandRequest,
    metadata: Metadata,
    *,
    runner: Runner | None = None,
    handle_stdout: OutputHandler | None = None,
    handle_stderr: OutputHandler | None = None,
) -> CommandResult:
    """Drive one execution the way a generated tool wrapper does.

    Args:
        request: Command, inputs and outputs.
        metadata: Tool metadata handed to the runner.
        runner: Runner to use; the global default when omitted.
        handle_stdout: Optional stdout line handler.
        handle_stderr: Optional stderr line handler.

    Returns:
        The executed arguments and resolved output paths.
    """

    runner = runner or get_global_runner()
    execution = runner.start_execution(metadata)
    execution.params(request)

    substitutions: dict[str, str] = {}
    for host_path in request.inputs:
        substitutions[host_path] = execution.input_file(host_path)

    outputs: dict[str, OutputPathType] = {}
    for name in request.outputs:
        outputs[name] = execution.output_file(name)
    for name in request.optional_outputs:
        outputs[name] = execution.output_file(name, optional=True)

    cargs = [substitutions.get(arg, arg) for arg in request.command]
    execution.run(cargs, handle_stdout=handle_stdout, handle_stderr=handle_stderr)
    return CommandResult(command=cargs, outputs=outputs)
