"""DevTrace rules. Each rule is defined in its own module."""

from .quality_score import calculate_quality_score, quality_score_table
from .metrics import compute_metrics
from .validate_task import validate_task

__all__ = [
    "calculate_quality_score",
    "quality_score_table",
    "compute_metrics",
    "validate_task",
]
