from __future__ import annotations

import threading
from pathlib import Path

import pytest

from toolrunner.base import Metadata
from toolrunner.errors import ExecutionStateError
from toolrunner.runners.dry import DryExecution, DryRunner


def _metadata() -> Metadata:
    return Metadata(id="tool-1", name="tool", package="pkg", citations=["a", "b"])


def test_start_execution_returns_distinct_executions() -> None:
    runner = DryRunner()

    first = runner.start_execution(_metadata())
    second = runner.start_execution(_metadata())

    assert isinstance(first, DryExecution)
    assert first is not second
    assert runner.last_execution is second
    assert runner.last_metadata == _metadata()


@pytest.mark.parametrize("resolve_parent", [False, True])
@pytest.mark.parametrize("mutable", [False, True])
def test_input_file_is_identity(resolve_parent: bool, mutable: bool) -> None:
    execution = DryRunner().start_execution(_metadata())

    local = execution.input_file(
        "/data/in put.nii", resolve_parent=resolve_parent, mutable=mutable
    )

    assert local == "/data/in put.nii"


def test_input_file_accepts_path_objects() -> None:
    execution = DryRunner().start_execution(_metadata())

    assert execution.input_file(Path("/data/x.txt")) == str(Path("/data/x.txt"))


def test_output_file_is_identity() -> None:
    execution = DryRunner().start_execution(_metadata())

    assert execution.output_file("out/result.txt") == "out/result.txt"
    assert execution.output_file("maybe.txt", optional=True) == "maybe.txt"


def test_params_passthrough_is_recorded() -> None:
    runner = DryRunner()
    execution = runner.start_execution(_metadata())
    params = {"input": "a.txt", "threshold": 0.5}

    returned = execution.params(params)

    assert returned is params
    assert execution.recorded_params is params
    assert runner.last_params is params


def test_run_records_cargs_without_calling_handlers() -> None:
    runner = DryRunner()
    execution = runner.start_execution(_metadata())
    calls: list[str] = []

    execution.run(["tool", "--flag", "a b"], calls.append, calls.append)

    assert execution.cargs == ["tool", "--flag", "a b"]
    assert runner.last_cargs == ["tool", "--flag", "a b"]
    assert calls == []


def test_second_run_is_rejected() -> None:
    execution = DryRunner().start_execution(_metadata())
    execution.run(["tool"])

    with pytest.raises(ExecutionStateError):
        execution.run(["tool", "again"])
    assert execution.cargs == ["tool"]


def test_executions_do_not_share_state() -> None:
    runner = DryRunner()
    first = runner.start_execution(_metadata())
    second = runner.start_execution(_metadata())

    first.output_file("out.txt")
    first.run(["first"])

    assert second.input_file("/in.txt") == "/in.txt"
    second.run(["second"])
    assert first.cargs == ["first"]
    assert second.cargs == ["second"]
    assert runner.last_cargs == ["second"]


def test_concurrent_runs_keep_per_execution_records() -> None:
    runner = DryRunner()
    executions = [runner.start_execution(_metadata()) for _ in range(16)]

    threads = [
        threading.Thread(target=execution.run, args=([f"tool-{index}"],))
        for index, execution in enumerate(executions)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert [execution.cargs for execution in executions] == [
        [f"tool-{index}"] for index in range(16)
    ]
    assert runner.last_cargs in [execution.cargs for execution in executions]
