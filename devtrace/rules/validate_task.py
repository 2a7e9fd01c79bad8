"""Validation rule — check a raw task payload before creation or update."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Type

from devtrace.engine.errors import DevTraceInvalidEnumError
from devtrace.records.enums import ChoiceEnum, Complexity, Status, TestStatus
from devtrace.records.task import NAME_MAX_LENGTH

# (wire key, snake_case key, label)
NAME_FIELDS = (
    ("taskName", "task_name", "Task name"),
    ("developerName", "developer_name", "Developer name"),
)
ENUM_FIELDS = (
    ("status", "status", Status),
    ("testStatus", "test_status", TestStatus),
    ("complexity", "complexity", Complexity),
)
REQUIRED_FIELDS = tuple(key for key, _, _ in NAME_FIELDS + ENUM_FIELDS)


def field_value(data: Mapping[str, Any], wire_key: str, snake_key: str) -> Optional[Any]:
    """Look a field up by its camelCase key, falling back to snake_case."""
    if wire_key in data:
        return data[wire_key]
    return data.get(snake_key)


def _check_enum(value: Any, enum_cls: Type[ChoiceEnum]) -> Optional[str]:
    try:
        enum_cls.parse(value)
    except DevTraceInvalidEnumError as e:
        return e.message
    return None


def validate_task(data: Mapping[str, Any]) -> List[str]:
    """
    Validate a task payload.
    Collects every error rather than stopping at the first; empty list = valid.
    """
    errors: List[str] = []

    for wire_key, snake_key, label in NAME_FIELDS:
        value = field_value(data, wire_key, snake_key)
        if value is None:
            errors.append(f"{wire_key} is required")
        elif not isinstance(value, str):
            errors.append(f"{label} must be a string")
        elif not value.strip():
            errors.append(f"{label} must not be blank")
        elif len(value.strip()) > NAME_MAX_LENGTH:
            errors.append(f"{label} must be {NAME_MAX_LENGTH} characters or fewer")

    for wire_key, snake_key, enum_cls in ENUM_FIELDS:
        value = field_value(data, wire_key, snake_key)
        if value is None or value == "":
            errors.append(f"{wire_key} is required")
            continue
        problem = _check_enum(value, enum_cls)
        if problem:
            errors.append(problem)

    return errors
