"""Unit tests for devtrace.engine.errors — Error hierarchy & serialization."""

import json

from devtrace.engine.errors import (
    DevTraceConfigError,
    DevTraceError,
    DevTraceInvalidEnumError,
    DevTraceNotFoundError,
    DevTraceRecordError,
    DevTraceStorageError,
    DevTraceValidationError,
)


class TestDevTraceError:
    """Base error class tests."""

    def test_basic_creation(self):
        err = DevTraceError("something broke")
        assert err.message == "something broke"
        assert str(err) == "something broke"
        assert err.error_type == "DevTraceError"
        assert err.context == {}

    def test_to_dict(self):
        err = DevTraceError("fail", path="/x")
        d = err.to_dict()
        assert d["error_type"] == "DevTraceError"
        assert d["message"] == "fail"
        assert d["context"] == {"path": "/x"}
        assert "timestamp" in d

    def test_to_json(self):
        parsed = json.loads(DevTraceError("fail").to_json())
        assert parsed["error_type"] == "DevTraceError"

    def test_repr(self):
        r = repr(DevTraceError("fail", record_id="t1"))
        assert "DevTraceError: fail" in r
        assert "record_id=t1" in r


class TestSubclasses:
    def test_hierarchy(self):
        for cls in (
            DevTraceValidationError,
            DevTraceRecordError,
            DevTraceStorageError,
            DevTraceConfigError,
        ):
            assert issubclass(cls, DevTraceError)
        assert issubclass(DevTraceInvalidEnumError, DevTraceValidationError)
        assert issubclass(DevTraceNotFoundError, DevTraceRecordError)

    def test_validation_errors(self):
        err = DevTraceValidationError("bad", validation_errors=["a is required", "b is required"])
        assert err.validation_errors == ["a is required", "b is required"]
        assert err.to_dict()["validation_errors"] == ["a is required", "b is required"]
        assert "validation_errors" not in err.context

    def test_invalid_enum_defaults_validation_errors(self):
        err = DevTraceInvalidEnumError(
            "Invalid Status: 'x'", enum_name="Status", value="x", allowed=["Planned"]
        )
        assert err.validation_errors == ["Invalid Status: 'x'"]
        d = err.to_dict()
        assert d["enum_name"] == "Status"
        assert d["allowed"] == ["Planned"]

    def test_record_error(self):
        err = DevTraceNotFoundError("Task not found", record_id="t9", operation="delete")
        assert err.record_id == "t9"
        assert err.to_dict()["operation"] == "delete"

    def test_storage_error_path(self):
        assert DevTraceStorageError("x", path="/tmp/t.json").path == "/tmp/t.json"
