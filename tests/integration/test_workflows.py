"""End-to-end workflows through the HTTP API: create, score, aggregate, update."""

import json


def _create(client, test_status, complexity, status="Planned", name=None):
    resp = client.post("/api/tasks", json={
        "taskName": name or f"{test_status}/{complexity}",
        "developerName": "Dana",
        "status": status,
        "testStatus": test_status,
        "complexity": complexity,
    })
    assert resp.status_code == 201
    return resp.json()


class TestDashboardScenarios:
    def test_single_optimal_task(self, live_client):
        task = _create(live_client, "Passed", "Low")
        assert task["qualityScore"] == 90

        metrics = live_client.get("/api/metrics").json()
        assert metrics["totalTasks"] == 1
        assert metrics["testedPercentage"] == 100
        assert metrics["avgQualityScore"] == 90
        assert metrics["tasksAtRisk"] == 0

    def test_two_risky_tasks(self, live_client):
        scores = [
            _create(live_client, "Not Tested", "High")["qualityScore"],
            _create(live_client, "Failed", "Medium")["qualityScore"],
        ]
        assert scores == [30, 40]

        metrics = live_client.get("/api/metrics").json()
        assert metrics["totalTasks"] == 2
        assert metrics["testedPercentage"] == 50
        assert metrics["avgQualityScore"] == 35
        assert metrics["tasksAtRisk"] == 2

    def test_all_passed(self, live_client):
        scores = [
            _create(live_client, "Passed", complexity)["qualityScore"]
            for complexity in ("Low", "Medium", "High")
        ]
        assert scores == [90, 90, 70]

        metrics = live_client.get("/api/metrics").json()
        assert metrics["avgQualityScore"] == 83
        assert metrics["tasksAtRisk"] == 0
        assert metrics["testedPercentage"] == 100


class TestTaskLifecycle:
    def test_create_update_delete(self, live_client):
        task = _create(live_client, "Not Tested", "High", status="In Progress")
        assert live_client.get("/api/metrics").json()["tasksAtRisk"] == 1

        updated = live_client.put(
            f"/api/tasks/{task['id']}",
            json={"testStatus": "Passed", "complexity": "Low", "status": "Done"},
        ).json()
        assert updated["qualityScore"] == 90
        assert updated["createdAt"] == task["createdAt"]
        assert "updatedAt" in updated

        metrics = live_client.get("/api/metrics").json()
        assert metrics["tasksAtRisk"] == 0
        assert metrics["statusBreakdown"] == {"Planned": 0, "In Progress": 0, "Done": 1}
        assert metrics["testCoverage"] == {"Not Tested": 0, "Passed": 1, "Failed": 0}

        assert live_client.delete(f"/api/tasks/{task['id']}").status_code == 200
        assert live_client.get("/api/metrics").json()["totalTasks"] == 0

    def test_breakdowns_sum_to_total(self, live_client):
        combos = [
            ("Passed", "High", "Done"),
            ("Failed", "Low", "In Progress"),
            ("Not Tested", "Medium", "Planned"),
            ("Failed", "High", "Planned"),
        ]
        for test_status, complexity, status in combos:
            _create(live_client, test_status, complexity, status=status)

        metrics = live_client.get("/api/metrics").json()
        assert sum(metrics["statusBreakdown"].values()) == metrics["totalTasks"] == 4
        assert sum(metrics["testCoverage"].values()) == 4
        tasks = live_client.get("/api/tasks").json()
        assert metrics["tasksAtRisk"] == sum(1 for t in tasks if t["qualityScore"] < 50)


class TestPersistenceAndLogs:
    def test_task_file_and_log_files(self, tmp_path):
        from fastapi.testclient import TestClient

        from devtrace.api.server import create_app
        from devtrace.engine.config import DevTraceConfig, LoggingConfig, StorageConfig

        data_file = tmp_path / "data" / "tasks.json"
        log_dir = tmp_path / "logs"
        config = DevTraceConfig(
            storage=StorageConfig(path=str(data_file)),
            logging=LoggingConfig(directory=str(log_dir), flush_interval_ms=10),
        )
        with TestClient(create_app(config=config)) as client:
            _create(client, "Failed", "High")

        stored = json.loads(data_file.read_text())
        assert len(stored) == 1
        assert stored[0]["qualityScore"] == 20
        assert stored[0]["testStatus"] == "Failed"

        task_logs = list((log_dir / "tasks" / "execution").glob("*.jsonl"))
        assert task_logs
        entry = json.loads(task_logs[0].read_text().splitlines()[0])
        assert entry["operation"] == "create"
        assert entry["quality_score"] == 20

        api_logs = list((log_dir / "web_apis" / "execution").glob("*.jsonl"))
        assert api_logs
        assert any('"path":"/api/tasks"' in line for line in api_logs[0].read_text().splitlines())
