"""
DevTrace — development task tracking with quality scoring and dashboard metrics.

The scoring and aggregation rules are pure functions:

    from devtrace import calculate_quality_score, compute_metrics
"""

__version__ = "1.0.0"

from devtrace.rules.metrics import compute_metrics  # noqa: E402
from devtrace.rules.quality_score import calculate_quality_score  # noqa: E402

__all__ = ["calculate_quality_score", "compute_metrics", "__version__"]
