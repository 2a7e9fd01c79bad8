"""Closed enumerations for task attributes.

Wire values are the literal strings the dashboard client sends and stores
("In Progress", "Not Tested", ...). Lookup tolerates case, whitespace and
``_``/``-`` separators so ``"InProgress"`` and ``"in_progress"`` resolve too.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List

from devtrace.engine.errors import DevTraceInvalidEnumError


def _normalize(value: str) -> str:
    return "".join(ch for ch in value.lower() if ch not in " _-\t")


class ChoiceEnum(str, Enum):
    """Base for the string enumerations stored on a task."""

    @classmethod
    def _missing_(cls, value: Any):
        if isinstance(value, str):
            key = _normalize(value)
            for member in cls:
                if _normalize(member.value) == key:
                    return member
        return None

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: Any) -> "ChoiceEnum":
        """Resolve *value* to a member or raise DevTraceInvalidEnumError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise DevTraceInvalidEnumError(
                f"Invalid {cls.__name__}: {value!r} (expected one of {', '.join(cls.values())})",
                enum_name=cls.__name__,
                value=value,
                allowed=cls.values(),
            ) from None

    def __str__(self) -> str:
        return self.value


class Status(ChoiceEnum):
    """Workflow state of a task."""

    PLANNED = "Planned"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class TestStatus(ChoiceEnum):
    """Outcome of the task's tests."""

    __test__ = False  # not a pytest test class

    NOT_TESTED = "Not Tested"
    PASSED = "Passed"
    FAILED = "Failed"


class Complexity(ChoiceEnum):
    """Estimated complexity of a task."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
