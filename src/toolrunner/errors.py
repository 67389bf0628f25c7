"""Exception hierarchy for toolrunner."""

from __future__ import annotations

from typing import Sequence


class ToolRunnerError(RuntimeError):
    """Base class for all errors raised by toolrunner."""


class CommandFailedError(ToolRunnerError):
    """Raised when a command reports a non-zero return code or cannot be launched.

    Attributes:
        return_code: Return code of the failed command, if one is known.
        command_args: Arguments of the failed command, if known.
        message_extra: Additional free-text detail.
    """

    def __init__(
        self,
        return_code: int | None = None,
        command_args: Sequence[str] | None = None,
        message_extra: str | None = None,
    ) -> None:
        self.return_code = return_code
        self.command_args = list(command_args) if command_args is not None else None
        self.message_extra = message_extra
        super().__init__(
            format_failure_message(return_code, self.command_args, message_extra)
        )


class InputResolutionError(ToolRunnerError):
    """Raised when a host input path cannot be mapped into the execution environment."""


class MissingOutputError(ToolRunnerError):
    """Raised when mandatory output files were not produced by a command.

    Attributes:
        missing: Host paths of the outputs that do not exist.
    """

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        listing = "\n".join(f"- {path}" for path in self.missing)
        super().__init__(f"Expected output files were not produced:\n{listing}")


class ExecutionStateError(ToolRunnerError):
    """Raised when execution operations are called out of order."""


class RunnerConfigError(ToolRunnerError):
    """Raised when a runner cannot be configured."""


def format_failure_message(
    return_code: int | None,
    command_args: Sequence[str] | None,
    message_extra: str | None,
) -> str:
    """Build the multi-line diagnostic used by :class:`CommandFailedError`."""

    if return_code is not None:
        lines = [f"Command failed with return code {return_code}."]
    else:
        lines = ["Command failed."]
    if command_args is not None:
        lines.append(f"- Command args: {join_command_args(command_args)}")
    if message_extra is not None:
        lines.append(message_extra)
    return "\n".join(lines)


def join_command_args(command_args: Sequence[str]) -> str:
    """Render an argument vector for display.

    Arguments containing whitespace or quote characters are wrapped in double quotes.
    """

    return " ".join(_quote_arg(arg) for arg in command_args)


def _quote_arg(arg: str) -> str:
    if " " in arg or '"' in arg or "'" in arg:
        escaped = arg.replace('"', '\\"')
        return f'"{escaped}"'
    return arg
