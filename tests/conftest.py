# tests/conftest.py
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from demo_steps import ALL_STEP_TYPES
from seqtask.api import create_app
from seqtask.engine import StepRegistry, TaskManager

DEFAULT_ENV = {
    "SEQTASK_LOG_LEVEL": "warning",
    # host/port are irrelevant for TestClient, but harmless if set elsewhere
}


@pytest.fixture()
def registry() -> StepRegistry:
    """
    Fresh registry holding every demo step type.
    """
    reg = StepRegistry()
    for step_cls in ALL_STEP_TYPES:
        reg.register(step_cls)
    return reg


@pytest.fixture()
def call_log() -> list:
    return []


@pytest.fixture()
def manager() -> TaskManager:
    return TaskManager()


@pytest.fixture()
def client(registry: StepRegistry, manager: TaskManager, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """
    API test client over a fresh registry and manager.
    """
    for k, v in DEFAULT_ENV.items():
        monkeypatch.setenv(k, v)

    app = create_app(registry=registry, manager=manager)
    with TestClient(app) as c:
        yield c
