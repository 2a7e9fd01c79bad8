"""
DevTrace Error Hierarchy — Structured exceptions for the task tracker.

Every error carries a free-form context dict and serializes to JSON so the
web layer can return it and the log files can store it unchanged.

Hierarchy:
    DevTraceError
    ├── DevTraceValidationError   — Payload validation failed
    │   └── DevTraceInvalidEnumError — Value outside a closed enumeration
    ├── DevTraceRecordError       — Task operation failed
    │   └── DevTraceNotFoundError — Task id not in the store
    ├── DevTraceStorageError      — Task file unreadable / unwritable
    └── DevTraceConfigError       — Invalid devtrace.yaml
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class DevTraceError(Exception):
    """
    Base error for all DevTrace failures.
    All context is serializable to JSON.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging and responses."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "timestamp": self.timestamp,
            "context": {k: str(v) for k, v in self.context.items()},
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        for key, value in self.context.items():
            parts.append(f"{key}={value}")
        return " | ".join(parts)


class DevTraceValidationError(DevTraceError):
    """
    Input validation failed.
    Includes the full list of problems found, not just the first.
    """

    def __init__(self, message: str, **context: Any):
        self.validation_errors: List[str] = list(context.pop("validation_errors", None) or [])
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["validation_errors"] = self.validation_errors
        return d


class DevTraceInvalidEnumError(DevTraceValidationError):
    """A value is not a member of Status, TestStatus or Complexity."""

    def __init__(self, message: str, **context: Any):
        self.enum_name: Optional[str] = context.get("enum_name")
        self.value: Any = context.get("value")
        self.allowed: List[str] = list(context.get("allowed") or [])
        context.setdefault("validation_errors", [message])
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["enum_name"] = self.enum_name
        d["allowed"] = self.allowed
        return d


class DevTraceRecordError(DevTraceError):
    """Task operation failed (create, update, delete, get)."""

    def __init__(self, message: str, **context: Any):
        self.record_id: Optional[str] = context.get("record_id")
        self.operation: Optional[str] = context.get("operation")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["record_id"] = self.record_id
        d["operation"] = self.operation
        return d


class DevTraceNotFoundError(DevTraceRecordError):
    """No task with the requested id exists."""
    pass


class DevTraceStorageError(DevTraceError):
    """The task file could not be read or written."""

    def __init__(self, message: str, **context: Any):
        self.path: Optional[str] = context.get("path")
        super().__init__(message, **context)


class DevTraceConfigError(DevTraceError):
    """Configuration error — invalid devtrace.yaml."""
    pass
