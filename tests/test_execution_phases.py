from __future__ import annotations

import pytest

from toolrunner.base import (
    ExecutionPhase,
    InputPathType,
    Metadata,
    OutputHandler,
    PhasedExecution,
)
from toolrunner.errors import CommandFailedError, ExecutionStateError


class RecordingExecution(PhasedExecution):
    def __init__(self, fail_with: int | None = None) -> None:
        super().__init__(Metadata(id="rec", name="rec", package="tests"))
        self.inputs: list[str] = []
        self.outputs: list[str] = []
        self.ran: list[list[str]] = []
        self._fail_with = fail_with

    def _resolve_input(
        self, host_file: InputPathType, *, resolve_parent: bool, mutable: bool
    ) -> str:
        self.inputs.append(str(host_file))
        return f"/local/{host_file}"

    def _resolve_output(self, local_file: str, *, optional: bool) -> str:
        self.outputs.append(local_file)
        return f"/host/{local_file}"

    def _execute(
        self,
        cargs: list[str],
        handle_stdout: OutputHandler | None,
        handle_stderr: OutputHandler | None,
    ) -> None:
        self.ran.append(cargs)
        if self._fail_with is not None:
            raise CommandFailedError(self._fail_with, cargs)


def test_phases_advance_in_order() -> None:
    execution = RecordingExecution()
    assert execution.phase is ExecutionPhase.STARTED

    execution.input_file("a")
    assert execution.phase is ExecutionPhase.INPUTS
    execution.output_file("b")
    assert execution.phase is ExecutionPhase.OUTPUTS
    execution.run(["tool"])
    assert execution.phase is ExecutionPhase.FINISHED


def test_input_after_output_is_rejected_without_mapping() -> None:
    execution = RecordingExecution()
    execution.output_file("b")

    with pytest.raises(ExecutionStateError):
        execution.input_file("a")
    assert execution.inputs == []


def test_output_after_run_is_rejected() -> None:
    execution = RecordingExecution()
    execution.run(["tool"])

    with pytest.raises(ExecutionStateError):
        execution.output_file("late.txt")
    assert execution.outputs == []


def test_params_only_once_and_before_run() -> None:
    execution = RecordingExecution()
    params = {"x": 1}

    assert execution.params(params) is params
    with pytest.raises(ExecutionStateError):
        execution.params(params)

    other = RecordingExecution()
    other.run(["tool"])
    with pytest.raises(ExecutionStateError):
        other.params(params)


def test_params_may_precede_inputs() -> None:
    execution = RecordingExecution()
    execution.params({"x": 1})

    assert execution.input_file("a") == "/local/a"


def test_failed_run_cannot_be_retried() -> None:
    execution = RecordingExecution(fail_with=3)

    with pytest.raises(CommandFailedError) as excinfo:
        execution.run(["tool"])
    assert excinfo.value.return_code == 3
    assert execution.phase is ExecutionPhase.FINISHED

    with pytest.raises(ExecutionStateError):
        execution.run(["tool"])
    assert execution.ran == [["tool"]]


def test_run_receives_a_list_copy() -> None:
    execution = RecordingExecution()
    args = ("tool", "x")

    execution.run(args)

    assert execution.ran == [["tool", "x"]]


def test_metadata_validation() -> None:
    with pytest.raises(ValueError):
        Metadata(id="", name="n", package="p")
    metadata = Metadata(id="i", name="n", package="p", citations=["b", "a"])
    assert metadata.citations == ("b", "a")
    assert metadata.container_image_tag is None
