"""DevTrace records. Each record is defined in its own module.

``Task`` lives in ``devtrace.records.task``; it is not re-exported here because
it depends on the scoring rule, which itself depends on the enumerations.
"""

from .enums import Complexity, Status, TestStatus
from .metrics_summary import MetricsSummary

__all__ = ["Complexity", "Status", "TestStatus", "MetricsSummary"]
