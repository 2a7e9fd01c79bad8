"""Unit tests for devtrace.storage.json_store — JSON file persistence."""

import json
import threading

import pytest

from devtrace.engine.errors import DevTraceStorageError
from devtrace.records.enums import Complexity, TestStatus
from devtrace.storage.json_store import JsonTaskStore


class TestInitialize:
    def test_creates_empty_list(self, tmp_path):
        path = tmp_path / "nested" / "tasks.json"
        store = JsonTaskStore(path)
        store.initialize()
        assert json.loads(path.read_text()) == []

    def test_does_not_overwrite(self, tmp_path, make_task):
        store = JsonTaskStore(tmp_path / "tasks.json")
        store.save([make_task()])
        store.initialize()
        assert len(store.load()) == 1

    def test_load_missing_file(self, tmp_path):
        store = JsonTaskStore(tmp_path / "tasks.json")
        assert store.load() == []
        assert (tmp_path / "tasks.json").exists()

    def test_empty_file_is_empty_list(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text("")
        assert JsonTaskStore(path).load() == []


class TestRoundTrip:
    def test_save_and_load(self, store, make_task):
        tasks = [
            make_task(TestStatus.PASSED, Complexity.LOW, task_id="a"),
            make_task(TestStatus.FAILED, Complexity.HIGH, task_id="b"),
        ]
        store.save(tasks)
        assert store.load() == tasks
        assert store.count() == 2

    def test_file_format(self, store, make_task):
        store.save([make_task(TestStatus.NOT_TESTED, Complexity.HIGH, task_id="a")])
        raw = json.loads(store.path.read_text())
        assert raw[0]["id"] == "a"
        assert raw[0]["testStatus"] == "Not Tested"
        assert raw[0]["qualityScore"] == 30
        assert "updatedAt" not in raw[0]

    def test_get(self, store, make_task):
        store.save([make_task(task_id="a"), make_task(task_id="b")])
        assert store.get("b").id == "b"
        assert store.get("zzz") is None

    def test_no_temp_files_left(self, store, make_task):
        store.save([make_task()])
        leftovers = [p for p in store.path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []


class TestCorruption:
    def test_invalid_json(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text("{not json")
        with pytest.raises(DevTraceStorageError, match="not valid JSON"):
            JsonTaskStore(path).load()

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text('{"a": 1}')
        with pytest.raises(DevTraceStorageError, match="JSON array"):
            JsonTaskStore(path).load()

    def test_invalid_entry(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps([{"id": "x", "taskName": "t", "developerName": "d",
                                     "status": "Nope", "testStatus": "Passed",
                                     "complexity": "Low", "createdAt": "2026-01-01T00:00:00Z"}]))
        with pytest.raises(DevTraceStorageError) as exc_info:
            JsonTaskStore(path).load()
        assert exc_info.value.context["index"] == 0


class TestTransaction:
    def test_commits_on_success(self, store, make_task):
        with store.transaction() as tasks:
            tasks.append(make_task(task_id="new"))
        assert [t.id for t in store.load()] == ["new"]

    def test_rolls_back_on_error(self, store, make_task):
        store.save([make_task(task_id="keep")])
        with pytest.raises(RuntimeError):
            with store.transaction() as tasks:
                tasks.clear()
                raise RuntimeError("boom")
        assert [t.id for t in store.load()] == ["keep"]

    def test_concurrent_appends_not_lost(self, store, make_task):
        def worker(n):
            for i in range(10):
                with store.transaction() as tasks:
                    tasks.append(make_task(task_id=f"{n}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.count() == 40
