"""
Integration test fixtures — a real app over a real task file, with file logging on.

Run: pytest tests/integration/ -v
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def live_client(tmp_path):
    """TestClient running the full lifespan (log queue started and drained)."""
    from devtrace.api.server import create_app
    from devtrace.engine.config import DevTraceConfig, LoggingConfig, StorageConfig

    config = DevTraceConfig(
        storage=StorageConfig(path=str(tmp_path / "data" / "tasks.json")),
        logging=LoggingConfig(directory=str(tmp_path / "logs"), flush_interval_ms=10),
    )
    with TestClient(create_app(config=config)) as client:
        yield client
