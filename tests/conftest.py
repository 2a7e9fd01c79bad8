"""
DevTrace Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import pytest

from devtrace.records.enums import Complexity, Status, TestStatus


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Reset global singletons between tests."""
    import devtrace.engine.config as cfg_mod
    import devtrace.engine.logging as log_mod

    monkeypatch.delenv("DEVTRACE_CONFIG", raising=False)
    monkeypatch.delenv("DEVTRACE_DATA_FILE", raising=False)
    cfg_mod._config = None
    yield
    log_mod.shutdown_logging()
    cfg_mod._config = None


class FakeClock:
    """Deterministic clock that advances one minute per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + timedelta(minutes=1)
        return now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    from devtrace.storage.json_store import JsonTaskStore

    s = JsonTaskStore(tmp_path / "data" / "tasks.json")
    s.initialize()
    return s


@pytest.fixture
def service(store, clock):
    from devtrace.services.task_service import TaskService

    counter = iter(range(1, 10_000))
    return TaskService(store, clock=clock, id_factory=lambda: f"task-{next(counter)}")


@pytest.fixture
def config(tmp_path):
    from devtrace.engine.config import DevTraceConfig, LoggingConfig, StorageConfig

    return DevTraceConfig(
        storage=StorageConfig(path=str(tmp_path / "data" / "tasks.json")),
        logging=LoggingConfig(directory=str(tmp_path / "logs"), file_logging=False),
    )


def _make_payload(
    test_status: TestStatus = TestStatus.PASSED,
    complexity: Complexity = Complexity.LOW,
    status: Status = Status.PLANNED,
    task_name: str = "Implement login",
    developer_name: str = "Sam",
) -> Dict[str, Any]:
    """Wire-format task payload as the dashboard sends it."""
    return {
        "taskName": task_name,
        "developerName": developer_name,
        "status": status.value,
        "testStatus": test_status.value,
        "complexity": complexity.value,
    }


def _make_task(
    test_status: TestStatus = TestStatus.PASSED,
    complexity: Complexity = Complexity.LOW,
    status: Status = Status.PLANNED,
    task_id: str = "t1",
):
    from devtrace.records.task import Task

    return Task(
        id=task_id,
        task_name="Task " + task_id,
        developer_name="Sam",
        status=status,
        test_status=test_status,
        complexity=complexity,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_payload():
    """Factory for wire-format payloads."""
    return _make_payload


@pytest.fixture
def make_task():
    """Factory for Task records."""
    return _make_task
