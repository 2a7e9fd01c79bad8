"""MetricsSummary — dashboard snapshot computed on demand, never persisted."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from devtrace.records.enums import Status, TestStatus


def _zero_status_breakdown() -> Dict[Status, int]:
    return {status: 0 for status in Status}


def _zero_test_coverage() -> Dict[TestStatus, int]:
    return {test_status: 0 for test_status in TestStatus}


class MetricsSummary(BaseModel):
    """
    Aggregate statistics over a task collection.

    Both breakdowns always carry every enumeration key, zero or not.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    total_tasks: int = Field(default=0, ge=0)
    tested_percentage: int = Field(default=0, ge=0, le=100)
    avg_quality_score: int = Field(default=0, ge=0, le=100)
    tasks_at_risk: int = Field(default=0, ge=0)
    status_breakdown: Dict[Status, int] = Field(default_factory=_zero_status_breakdown)
    test_coverage: Dict[TestStatus, int] = Field(default_factory=_zero_test_coverage)

    @classmethod
    def empty(cls) -> "MetricsSummary":
        return cls()

    def to_json_dict(self) -> Dict[str, Any]:
        """Response shape of GET /api/metrics."""
        return self.model_dump(mode="json", by_alias=True)
