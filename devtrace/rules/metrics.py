"""Aggregation rule — compute dashboard metrics over a task collection."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from devtrace.records.enums import Status, TestStatus
from devtrace.records.metrics_summary import MetricsSummary
from devtrace.records.task import Task

AT_RISK_THRESHOLD = 50


def round_half_up(numerator: int, denominator: int) -> int:
    """Round numerator / denominator to the nearest integer, halves going up.

    Integer arithmetic only, so 2.5 -> 3 and 83.33 -> 83 regardless of float
    representation. Both arguments must be non-negative, denominator > 0.
    """
    return (2 * numerator + denominator) // (2 * denominator)


def compute_metrics(tasks: Sequence[Task]) -> MetricsSummary:
    """
    Compute the dashboard summary for *tasks*.

    Uses each task's quality_score as stored on the task. An empty collection
    yields all-zero values with every breakdown key present. The input is
    only read.
    """
    total = len(tasks)
    if total == 0:
        return MetricsSummary.empty()

    tested = sum(1 for task in tasks if task.test_status is not TestStatus.NOT_TESTED)
    score_sum = sum(task.quality_score for task in tasks)
    at_risk = sum(1 for task in tasks if task.quality_score < AT_RISK_THRESHOLD)

    status_counts = Counter(task.status for task in tasks)
    test_counts = Counter(task.test_status for task in tasks)

    return MetricsSummary(
        total_tasks=total,
        tested_percentage=round_half_up(100 * tested, total),
        avg_quality_score=round_half_up(score_sum, total),
        tasks_at_risk=at_risk,
        status_breakdown={status: status_counts.get(status, 0) for status in Status},
        test_coverage={test_status: test_counts.get(test_status, 0) for test_status in TestStatus},
    )
