"""Subprocess launching with streamed output."""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from typing import IO, Mapping, Sequence

from toolrunner.base import OutputHandler
from toolrunner.errors import CommandFailedError


def run_process(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    handle_stdout: OutputHandler | None = None,
    handle_stderr: OutputHandler | None = None,
) -> int:
    """Run a process and forward its output line by line.

    Each stream is drained by its own reader thread, so lines of one stream reach their
    handler in the order they were produced. Output is decoded as UTF-8 with invalid
    bytes replaced. Both readers are joined before this function returns.

    Args:
        args: Full argument vector to launch.
        cwd: Optional working directory.
        env: Optional complete environment for the process.
        handle_stdout: Receives stdout lines without the trailing newline.
        handle_stderr: Receives stderr lines without the trailing newline.

    Returns:
        The process return code.

    Raises:
        CommandFailedError: If the process cannot be launched.
    """

    try:
        process = subprocess.Popen(
            list(args),
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
    except OSError as exc:
        raise CommandFailedError(command_args=args, message_extra=str(exc)) from exc

    errors: list[BaseException] = []
    readers = [
        threading.Thread(
            target=_pump, args=(process.stdout, handle_stdout, errors), daemon=True
        ),
        threading.Thread(
            target=_pump, args=(process.stderr, handle_stderr, errors), daemon=True
        ),
    ]
    for reader in readers:
        reader.start()
    return_code = process.wait()
    for reader in readers:
        reader.join()
    if errors:
        raise errors[0]
    return return_code


def _pump(
    stream: IO[str] | None,
    handler: OutputHandler | None,
    errors: list[BaseException],
) -> None:
    if stream is None:
        return
    with stream:
        try:
            for line in stream:
                if handler is None or errors:
                    continue
                handler(line.rstrip("\n"))
        except Exception as exc:  # re-raised by run_process after join
            errors.append(exc)
            _drain(stream)


def _drain(stream: IO[str]) -> None:
    # Keep the pipe open and empty so the child never blocks or hits a broken pipe.
    raw = getattr(stream, "buffer", None)
    if raw is None:
        return
    while raw.read(65536):
        pass
