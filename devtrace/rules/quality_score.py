"""Scoring rule — map a task's test outcome and complexity to a quality score (0-100)."""

from __future__ import annotations

from typing import Dict, Tuple

from devtrace.records.enums import Complexity, TestStatus

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

TEST_STATUS_ADJUSTMENT: Dict[TestStatus, int] = {
    TestStatus.PASSED: 30,
    TestStatus.FAILED: -20,
    TestStatus.NOT_TESTED: -10,
}

COMPLEXITY_ADJUSTMENT: Dict[Complexity, int] = {
    Complexity.LOW: 20,
    Complexity.MEDIUM: 10,
    Complexity.HIGH: -10,
}

# Applied in order after the adjustments; a later override wins.
SCORE_OVERRIDES: Tuple[Tuple[TestStatus, Complexity, int], ...] = (
    (TestStatus.NOT_TESTED, Complexity.HIGH, 30),
    (TestStatus.PASSED, Complexity.LOW, 90),
)


def calculate_quality_score(test_status: TestStatus, complexity: Complexity) -> int:
    """
    Calculate the quality score for a task.

    Scoring:
      base 50
      + test status adjustment (Passed +30, Failed -20, Not Tested -10)
      + complexity adjustment (Low +20, Medium +10, High -10)
      then overrides: (Not Tested, High) -> 30, (Passed, Low) -> 90
      clamped to [0, 100]

    Resulting table:

        test_status \\ complexity   Low   Medium   High
        Passed                      90     90       70
        Failed                      50     40       20
        Not Tested                  60     50       30

    Raw strings are accepted and resolved through the enum lookup; an unknown
    value raises DevTraceInvalidEnumError.
    """
    test_status = TestStatus.parse(test_status)
    complexity = Complexity.parse(complexity)

    score = BASE_SCORE
    score += TEST_STATUS_ADJUSTMENT[test_status]
    score += COMPLEXITY_ADJUSTMENT[complexity]

    for override_status, override_complexity, override_score in SCORE_OVERRIDES:
        if test_status is override_status and complexity is override_complexity:
            score = override_score

    return max(MIN_SCORE, min(MAX_SCORE, score))


def quality_score_table() -> Dict[TestStatus, Dict[Complexity, int]]:
    """Every (test_status, complexity) combination and its score."""
    return {
        test_status: {
            complexity: calculate_quality_score(test_status, complexity)
            for complexity in Complexity
        }
        for test_status in TestStatus
    }
