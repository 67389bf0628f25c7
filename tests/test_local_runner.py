from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest

from toolrunner.base import Metadata
from toolrunner.errors import (
    CommandFailedError,
    ExecutionStateError,
    InputResolutionError,
    MissingOutputError,
)
from toolrunner.runners.local import LocalExecution, LocalRunner

METADATA = Metadata(id="pytool", name="pytool", package="tests")


def test_start_execution_has_no_side_effects(tmp_path: Path) -> None:
    runner = LocalRunner(data_dir=tmp_path / "data")

    first = runner.start_execution(METADATA)
    second = runner.start_execution(METADATA)

    assert first is not second
    assert first.output_dir != second.output_dir
    assert not (tmp_path / "data").exists()


def test_input_file_resolves_existing_path(tmp_path: Path) -> None:
    source = tmp_path / "in.txt"
    source.write_text("data", encoding="utf-8")
    execution = LocalRunner(data_dir=tmp_path).start_execution(METADATA)

    local = execution.input_file(source)

    assert local == str(source.resolve())
    assert execution.input_file(str(source), mutable=True) == local


def test_input_file_missing_raises(tmp_path: Path) -> None:
    execution = LocalRunner(data_dir=tmp_path).start_execution(METADATA)

    with pytest.raises(InputResolutionError):
        execution.input_file(tmp_path / "missing.txt")


def test_resolve_parent_only_requires_parent(tmp_path: Path) -> None:
    execution = LocalRunner(data_dir=tmp_path).start_execution(METADATA)
    target = tmp_path / "not-yet.txt"

    assert execution.input_file(target, resolve_parent=True) == str(target.resolve())


def test_run_writes_outputs_in_output_dir(tmp_path: Path) -> None:
    source = tmp_path / "in.txt"
    source.write_text("hello", encoding="utf-8")
    execution = LocalRunner(data_dir=tmp_path / "data").start_execution(METADATA)
    local_input = execution.input_file(source)
    output = execution.output_file("out.txt")
    stdout: list[str] = []
    script = (
        "import sys\n"
        "text = open(sys.argv[1]).read()\n"
        "open('out.txt', 'w').write(text.upper())\n"
        "print('done')\n"
    )

    execution.run([sys.executable, "-c", script, local_input], handle_stdout=stdout.append)

    assert Path(output).read_text(encoding="utf-8") == "HELLO"
    assert Path(output).parent == execution.output_dir
    assert stdout == ["done"]


def test_run_passes_environment(tmp_path: Path) -> None:
    runner = LocalRunner(data_dir=tmp_path, environ={"TOOLRUNNER_TEST": "42"})
    execution = runner.start_execution(METADATA)
    stdout: list[str] = []

    execution.run(
        [sys.executable, "-c", "import os; print(os.environ['TOOLRUNNER_TEST'])"],
        handle_stdout=stdout.append,
    )

    assert stdout == ["42"]


def test_non_zero_exit_raises(tmp_path: Path) -> None:
    execution = LocalRunner(data_dir=tmp_path).start_execution(METADATA)
    cargs = [sys.executable, "-c", "raise SystemExit(3)"]

    with pytest.raises(CommandFailedError) as excinfo:
        execution.run(cargs)

    assert excinfo.value.return_code == 3
    assert excinfo.value.command_args == cargs


def test_missing_mandatory_output_raises(tmp_path: Path) -> None:
    execution = LocalRunner(data_dir=tmp_path).start_execution(METADATA)
    expected = execution.output_file("never.txt")
    execution.output_file("maybe.txt", optional=True)

    with pytest.raises(MissingOutputError) as excinfo:
        execution.run([sys.executable, "-c", "pass"])

    assert excinfo.value.missing == [str(expected)]


def test_second_run_is_rejected(tmp_path: Path) -> None:
    execution = LocalRunner(data_dir=tmp_path).start_execution(METADATA)
    execution.run([sys.executable, "-c", "pass"])

    with pytest.raises(ExecutionStateError):
        execution.run([sys.executable, "-c", "pass"])


def test_empty_command_is_rejected(tmp_path: Path) -> None:
    execution = LocalRunner(data_dir=tmp_path).start_execution(METADATA)

    with pytest.raises(ValueError):
        execution.run([])


def test_output_is_logged_without_handlers(tmp_path: Path, caplog) -> None:
    caplog.set_level("INFO", logger="toolrunner")
    execution = LocalRunner(data_dir=tmp_path).start_execution(METADATA)

    execution.run([sys.executable, "-c", "import sys; print('to-out'); print('to-err', file=sys.stderr)"])

    messages = {(record.levelname, record.getMessage()) for record in caplog.records}
    assert ("INFO", "to-out") in messages
    assert ("WARNING", "to-err") in messages


def test_concurrent_start_execution_yields_distinct_dirs(tmp_path: Path) -> None:
    runner = LocalRunner(data_dir=tmp_path)
    executions: list[LocalExecution] = []
    lock = threading.Lock()

    def start() -> None:
        execution = runner.start_execution(METADATA)
        with lock:
            executions.append(execution)

    threads = [threading.Thread(target=start) for _ in range(32)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len({id(execution) for execution in executions}) == 32
    assert len({execution.output_dir for execution in executions}) == 32


@pytest.mark.parametrize("tool_id", ["../escape", "a/b/c", "..\\win"])
def test_output_dir_stays_inside_data_dir(tmp_path: Path, tool_id: str) -> None:
    metadata = Metadata(id=tool_id, name="tool", package="tests")

    execution = LocalRunner(data_dir=tmp_path).start_execution(metadata)

    assert execution.output_dir.parent == tmp_path
    assert "/" not in execution.output_dir.name
    assert "\\" not in execution.output_dir.name
