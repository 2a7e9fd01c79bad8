"""
Task service — create / update / delete / read tasks and compute metrics.

Sits between the HTTP layer and the store: validates payloads, stamps ids
and timestamps, and (through the Task record) keeps the quality score in
step with the task's current test status and complexity.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from devtrace.engine.errors import DevTraceError, DevTraceNotFoundError, DevTraceValidationError
from devtrace.engine.logging import log, log_task_operation
from devtrace.records.enums import Status, TestStatus
from devtrace.records.metrics_summary import MetricsSummary
from devtrace.records.task import Task, TaskInput
from devtrace.rules.metrics import compute_metrics
from devtrace.rules.validate_task import ENUM_FIELDS, NAME_FIELDS, field_value, validate_task
from devtrace.storage.json_store import JsonTaskStore

logger = logging.getLogger("devtrace.services.task_service")

_FIELD_KEYS = [(wire, snake) for wire, snake, _ in NAME_FIELDS + ENUM_FIELDS]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_task_id() -> str:
    return uuid.uuid4().hex


class TaskService:
    """
    Task operations over a JsonTaskStore.

    Args:
        store: Backing store.
        clock: Returns the current time; defaults to UTC now.
        id_factory: Returns a fresh task id; defaults to a uuid4 hex string.
    """

    def __init__(
        self,
        store: JsonTaskStore,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_task_id

    # -- helpers -------------------------------------------------------------

    @staticmethod
    def _to_input(payload: Mapping[str, Any]) -> TaskInput:
        errors = validate_task(payload)
        if errors:
            raise DevTraceValidationError(
                "All fields are required" if any(e.endswith("is required") for e in errors)
                else "Invalid task data",
                validation_errors=errors,
            )
        return TaskInput.model_validate(
            {snake: field_value(payload, wire, snake) for wire, snake in _FIELD_KEYS}
        )

    @staticmethod
    def _find_index(tasks: List[Task], task_id: str, operation: str) -> int:
        for index, task in enumerate(tasks):
            if task.id == task_id:
                return index
        raise DevTraceNotFoundError("Task not found", record_id=task_id, operation=operation)

    @staticmethod
    def _log_failure(operation: str, task_id: Optional[str], error: DevTraceError) -> None:
        logger.warning("Task %s failed (id=%s): %s", operation, task_id, error.message)
        log(log_task_operation(operation, task_id, error=error.message))

    # -- operations ----------------------------------------------------------

    def create_task(self, payload: Mapping[str, Any]) -> Task:
        """Validate *payload*, assign id and createdAt, and persist the new task."""
        try:
            data = self._to_input(payload)
            with self.store.transaction() as tasks:
                task = Task.create(self._id_factory(), data, self._clock())
                tasks.append(task)
        except DevTraceError as e:
            self._log_failure("create", None, e)
            raise

        logger.info("Created task %s (%s) score=%d", task.id, task.task_name, task.quality_score)
        log(log_task_operation("create", task.id, quality_score=task.quality_score))
        return task

    def update_task(self, task_id: str, payload: Mapping[str, Any]) -> Task:
        """
        Update a task. Fields missing from *payload* keep their current values;
        id and createdAt never change; the quality score is re-derived.
        """
        try:
            with self.store.transaction() as tasks:
                index = self._find_index(tasks, task_id, "update")
                current = tasks[index]
                merged: Dict[str, Any] = current.to_input().model_dump(mode="json", by_alias=True)
                for wire, snake in _FIELD_KEYS:
                    if wire in payload or snake in payload:
                        merged[wire] = field_value(payload, wire, snake)
                updated = current.apply(self._to_input(merged), self._clock())
                tasks[index] = updated
        except DevTraceError as e:
            self._log_failure("update", task_id, e)
            raise

        changes = [
            field for field in TaskInput.model_fields
            if getattr(current, field) != getattr(updated, field)
        ]
        logger.info("Updated task %s changes=%s score=%d", task_id, changes, updated.quality_score)
        log(log_task_operation("update", task_id, quality_score=updated.quality_score, changes=changes))
        return updated

    def delete_task(self, task_id: str) -> None:
        try:
            with self.store.transaction() as tasks:
                index = self._find_index(tasks, task_id, "delete")
                del tasks[index]
        except DevTraceError as e:
            self._log_failure("delete", task_id, e)
            raise

        logger.info("Deleted task %s", task_id)
        log(log_task_operation("delete", task_id))

    def get_task(self, task_id: str) -> Task:
        task = self.store.get(task_id)
        if task is None:
            raise DevTraceNotFoundError("Task not found", record_id=task_id, operation="get")
        return task

    def list_tasks(
        self,
        status: Optional[Status] = None,
        test_status: Optional[TestStatus] = None,
        developer: Optional[str] = None,
    ) -> List[Task]:
        """All tasks, newest first, optionally filtered."""
        tasks = self.store.load()
        if status is not None:
            tasks = [t for t in tasks if t.status is status]
        if test_status is not None:
            tasks = [t for t in tasks if t.test_status is test_status]
        if developer:
            wanted = developer.strip().lower()
            tasks = [t for t in tasks if t.developer_name.lower() == wanted]
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    def get_metrics(self) -> MetricsSummary:
        return compute_metrics(self.store.load())
