from __future__ import annotations

import pytest

import project_config
from orchestrator import log


@pytest.fixture(autouse=True)
def _isolated_run_state():
    project_config.reload()
    yield
    log.reset()
