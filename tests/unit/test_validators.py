"""
Unit tests for validators.py - expected-result checks on response documents.
"""

import pytest

from camel_check.errors import MissingField, ValueMismatch
from camel_check.validators import (
    AbsentValidator,
    EqualsValidator,
    ExistsValidator,
    TypeValidator,
    ValidationResult,
    ValidationRunner,
)

DOCUMENT = {
    "jsonrpc": "2.0",
    "result": {
        "config.edit": "success",
        "abc": {"value": "xyz", "flags": []},
        "count": 3,
        "enabled": True,
        "nothing": None,
    },
    "id": 3,
}

ERROR_DOCUMENT = {"jsonrpc": "2.0", "error": {"code": -32601, "message": "Method not found"}, "id": 9}


class TestValidationResult:
    """Test suite for ValidationResult."""

    def test_truthiness_follows_success(self):
        assert ValidationResult(True, "ok")
        assert not ValidationResult(False, "bad")

    def test_str(self):
        assert str(ValidationResult(False, "bad")) == "[FAIL] bad"


class TestEqualsValidator:
    """Test suite for EqualsValidator."""

    def test_match(self):
        result = EqualsValidator().validate(DOCUMENT, ["result", "config.edit"], expected="success")

        assert result.success

    def test_mismatch(self):
        result = EqualsValidator().validate(DOCUMENT, ["result", "abc", "value"], expected="other")

        assert not result.success
        assert isinstance(result.error, ValueMismatch)
        assert result.error.actual == "xyz"
        assert result.details == {"actual": "xyz", "expected": "other"}

    def test_missing_path(self):
        result = EqualsValidator().validate(ERROR_DOCUMENT, ["result", "x"], expected=1)

        assert not result.success
        assert isinstance(result.error, MissingField)
        assert result.error.rpc_error["code"] == -32601

    @pytest.mark.parametrize("path,expected", [(["result", "enabled"], 1), (["result", "count"], True)])
    def test_bool_and_int_differ(self, path, expected):
        assert not EqualsValidator().validate(DOCUMENT, path, expected=expected).success

    def test_null_value(self):
        assert EqualsValidator().validate(DOCUMENT, ["result", "nothing"], expected=None).success

    def test_nested_object(self):
        result = EqualsValidator().validate(
            DOCUMENT, ["result", "abc"], expected={"value": "xyz", "flags": []}
        )

        assert result.success


class TestPresenceValidators:
    """Test suite for ExistsValidator and AbsentValidator."""

    def test_exists(self):
        assert ExistsValidator().validate(DOCUMENT, ["result", "abc"]).success
        assert ExistsValidator().validate(DOCUMENT, ["result", "nothing"]).success

    def test_exists_fails(self):
        result = ExistsValidator().validate(DOCUMENT, ["result", "missing"])

        assert not result.success
        assert isinstance(result.error, MissingField)

    def test_absent(self):
        assert AbsentValidator().validate(DOCUMENT, ["result", "missing"]).success

    def test_absent_fails(self):
        result = AbsentValidator().validate(DOCUMENT, ["result", "abc", "value"])

        assert not result.success
        assert result.error.expected == "<absent>"
        assert result.error.actual == "xyz"


class TestTypeValidator:
    """Test suite for TypeValidator."""

    @pytest.mark.parametrize(
        "path,json_type",
        [
            (["result", "abc"], "object"),
            (["result", "abc", "flags"], "array"),
            (["result", "abc", "value"], "string"),
            (["result", "count"], "integer"),
            (["result", "count"], "number"),
            (["result", "enabled"], "boolean"),
            (["result", "nothing"], "null"),
        ],
    )
    def test_matching_types(self, path, json_type):
        assert TypeValidator().validate(DOCUMENT, path, expected=json_type).success

    def test_bool_is_not_a_number(self):
        result = TypeValidator().validate(DOCUMENT, ["result", "enabled"], expected="number")

        assert not result.success
        assert result.error.actual == "boolean"

    def test_unknown_type(self):
        result = TypeValidator().validate(DOCUMENT, ["result", "abc"], expected="tuple")

        assert not result.success
        assert "Unknown JSON type" in result.message


class TestValidationRunner:
    """Test suite for ValidationRunner."""

    def test_run_validation_by_name(self):
        runner = ValidationRunner()

        result = runner.run_validation("equals", ERROR_DOCUMENT, ["error", "code"], expected=-32601)

        assert result.success

    def test_unknown_validation_type(self):
        result = ValidationRunner().run_validation("regex", DOCUMENT, ["result"])

        assert not result.success
        assert "Unknown validation type" in result.message

    def test_run_all_validations(self):
        results = ValidationRunner().run_all_validations(
            DOCUMENT,
            [
                {"type": "equals", "path": ["id"], "expected": 3},
                {"type": "absent", "path": ["error"]},
                {"type": "exists"},
            ],
        )

        assert [r.success for r in results] == [True, True, False]
        assert "missing type or path" in results[2].message
