"""Task record — a tracked unit of development work and its derived quality score."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from devtrace.records.enums import Complexity, Status, TestStatus
from devtrace.rules.quality_score import calculate_quality_score

NAME_MAX_LENGTH = 200


class TaskInput(BaseModel):
    """
    Caller-supplied task attributes (create / update payload).

    Unknown keys are ignored, so a client cannot smuggle in an id, a
    timestamp or a quality score.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    task_name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    developer_name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    status: Status
    test_status: TestStatus
    complexity: Complexity

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v: Any) -> Status:
        return Status.parse(v)

    @field_validator("test_status", mode="before")
    @classmethod
    def _parse_test_status(cls, v: Any) -> TestStatus:
        return TestStatus.parse(v)

    @field_validator("complexity", mode="before")
    @classmethod
    def _parse_complexity(cls, v: Any) -> Complexity:
        return Complexity.parse(v)


class Task(TaskInput):
    """
    A stored task.

    ``quality_score`` is computed from the current test status and complexity
    on every access, so it is never stale and never taken from input. A
    ``qualityScore`` key in stored JSON is ignored and re-derived on load.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps in a hand-edited file are taken as UTC
        if v is None:
            return v
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @computed_field(alias="qualityScore")
    @property
    def quality_score(self) -> int:
        return calculate_quality_score(self.test_status, self.complexity)

    @property
    def is_tested(self) -> bool:
        return self.test_status is not TestStatus.NOT_TESTED

    @classmethod
    def create(cls, task_id: str, data: TaskInput, created_at: datetime) -> "Task":
        """Build a new task from validated input."""
        return cls(id=task_id, created_at=created_at, **data.model_dump())

    def apply(self, data: TaskInput, updated_at: datetime) -> "Task":
        """Return a copy carrying *data*; id and created_at are kept."""
        return type(self)(
            id=self.id,
            created_at=self.created_at,
            updated_at=updated_at,
            **data.model_dump(),
        )

    def to_input(self) -> TaskInput:
        return TaskInput(
            task_name=self.task_name,
            developer_name=self.developer_name,
            status=self.status,
            test_status=self.test_status,
            complexity=self.complexity,
        )

    def to_json_dict(self) -> Dict[str, Any]:
        """Persisted / wire representation with camelCase keys; updatedAt only once set."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
