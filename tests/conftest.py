from __future__ import annotations

from typing import Iterator

import pytest

from toolrunner.registry import reset_global_runner


@pytest.fixture(autouse=True)
def clean_global_runner() -> Iterator[None]:
    reset_global_runner()
    yield
    reset_global_runner()
