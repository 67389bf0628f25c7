"""CLI entrypoints for toolrunner."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from toolrunner.app import CommandRequest, build_metadata, configure_default_runner, run_command
from toolrunner.config import config_to_dict, load_config
from toolrunner.errors import CommandFailedError, ToolRunnerError, join_command_args
from toolrunner.registry import get_global_runner
from toolrunner.runners.dry import DryRunner
from toolrunner.util.logging import configure_logging

app = typer.Typer(help="Run command-line tools through a pluggable runner.")


def exit_code_for(return_code: int | None) -> int:
    """Map a command return code to a process exit status in the 1-255 range.

    Negative codes (death by signal) become ``128 + signal``.
    """

    if return_code is not None and return_code < 0 and -return_code < 128:
        return 128 - return_code
    if return_code is not None and 1 <= return_code <= 255:
        return return_code
    return 1


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level (e.g., DEBUG, INFO, WARNING).",
    ),
) -> None:
    """Configure CLI-level options."""

    configure_logging(log_level)


@app.command("run")
def run_cli_command(
    command: list[str] = typer.Argument(..., help="Command to run, program name first."),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file or directory to search.",
    ),
    mode: Optional[str] = typer.Option(
        None,
        "--mode",
        "-m",
        help="Runner mode: dry|local|docker",
    ),
    image: Optional[str] = typer.Option(
        None,
        "--image",
        help="Container image for the docker runner.",
    ),
    inputs: list[str] = typer.Option(
        [],
        "--input",
        "-i",
        help="Host input path; matching command arguments are replaced by the mapped path.",
    ),
    outputs: list[str] = typer.Option(
        [],
        "--output",
        "-o",
        help="Output file the command must produce.",
    ),
    optional_outputs: list[str] = typer.Option(
        [],
        "--optional-output",
        help="Output file the command may produce.",
    ),
) -> None:
    """Run a command through the configured runner."""

    try:
        configure_default_runner(config_path, mode)
        request = CommandRequest(
            command=list(command),
            inputs=list(inputs),
            outputs=list(outputs),
            optional_outputs=list(optional_outputs),
        )
        result = run_command(
            request,
            build_metadata(command, image),
            handle_stdout=typer.echo,
            handle_stderr=lambda line: typer.echo(line, err=True),
        )
    except CommandFailedError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=exit_code_for(exc.return_code)) from exc
    except (ToolRunnerError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if isinstance(get_global_runner(), DryRunner):
        typer.echo(f"Dry run: {join_command_args(result.command)}")
    for name, host_path in result.outputs.items():
        typer.echo(f"{name}: {host_path}")


@app.command("config")
def config_command(
    path: Optional[Path] = typer.Argument(None, help="Configuration file or directory."),
) -> None:
    """Print the effective runner configuration as JSON."""

    try:
        config = load_config(path)
    except ToolRunnerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps(config_to_dict(config), indent=2))
