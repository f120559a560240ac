"""
Expected-result validation for camel responses.

Provides validators that check a decoded JSON-RPC response against the
expectations declared in a scenario step.
"""

from abc import ABC, abstractmethod
from typing import Any

from camel_check.errors import CamelCheckError, MissingField, ValueMismatch, format_path
from camel_check.session import get_field, has_field, lookup_path


class ValidationResult:
    """Result of a validation operation."""

    def __init__(
        self,
        success: bool,
        message: str,
        details: dict[str, Any] | None = None,
        error: CamelCheckError | None = None,
    ):
        """Initialize validation result.

        Args:
            success: Whether validation passed
            message: Human-readable result message
            details: Optional additional details
            error: The error describing the failure, if any
        """
        self.success = success
        self.message = message
        self.details = details or {}
        self.error = error

    def __str__(self) -> str:
        """String representation of result."""
        status = "PASS" if self.success else "FAIL"
        return f"[{status}] {self.message}"

    def __bool__(self) -> bool:
        """Boolean representation (True if validation passed)."""
        return self.success


class Validator(ABC):
    """Abstract base class for response validators."""

    @abstractmethod
    def validate(self, document: Any, path: list[Any], **kwargs: Any) -> ValidationResult:
        """Validate one aspect of a response document.

        Args:
            document: Decoded JSON response
            path: Key path the validation applies to
            **kwargs: Additional validation parameters

        Returns:
            Validation result
        """
        pass


class ExistsValidator(Validator):
    """Validates that a key path resolves."""

    def validate(self, document: Any, path: list[Any], **kwargs: Any) -> ValidationResult:
        if has_field(document, path):
            return ValidationResult(True, f"Field present: {format_path(path)}")
        error = MissingField(path, rpc_error=_rpc_error(document))
        return ValidationResult(False, str(error), error=error)


class AbsentValidator(Validator):
    """Validates that a key path does not resolve."""

    def validate(self, document: Any, path: list[Any], **kwargs: Any) -> ValidationResult:
        if not has_field(document, path):
            return ValidationResult(True, f"Field absent: {format_path(path)}")
        actual = lookup_path(document, path)
        error = ValueMismatch(path, expected="<absent>", actual=actual)
        return ValidationResult(False, f"Field unexpectedly present: {format_path(path)}", error=error)


class EqualsValidator(Validator):
    """Validates the value found at a key path."""

    def validate(
        self, document: Any, path: list[Any], expected: Any = None, **kwargs: Any
    ) -> ValidationResult:
        try:
            actual = get_field(document, path)
        except MissingField as e:
            return ValidationResult(False, str(e), error=e)

        details = {"actual": actual, "expected": expected}
        # True == 1 in Python but not in JSON
        if actual == expected and isinstance(actual, bool) == isinstance(expected, bool):
            return ValidationResult(True, f"Value correct at {format_path(path)}", details)

        error = ValueMismatch(path, expected, actual)
        return ValidationResult(False, str(error), details, error=error)


class TypeValidator(Validator):
    """Validates the JSON type of the value at a key path."""

    JSON_TYPES = {
        "string": lambda v: isinstance(v, str),
        "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
        "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
        "boolean": lambda v: isinstance(v, bool),
        "object": lambda v: isinstance(v, dict),
        "array": lambda v: isinstance(v, list),
        "null": lambda v: v is None,
    }

    def validate(
        self, document: Any, path: list[Any], expected: Any = None, **kwargs: Any
    ) -> ValidationResult:
        check = self.JSON_TYPES.get(expected)
        if check is None:
            return ValidationResult(False, f"Unknown JSON type: {expected}")

        try:
            actual = get_field(document, path)
        except MissingField as e:
            return ValidationResult(False, str(e), error=e)

        if check(actual):
            return ValidationResult(True, f"{format_path(path)} is {expected}")

        error = ValueMismatch(path, expected, _json_type_name(actual))
        return ValidationResult(False, f"{format_path(path)} is not {expected}", error=error)


def _rpc_error(document: Any) -> Any:
    return document.get("error") if isinstance(document, dict) else None


def _json_type_name(value: Any) -> str:
    for name in ("null", "boolean", "integer", "number", "string", "array", "object"):
        if TypeValidator.JSON_TYPES[name](value):
            return name
    return type(value).__name__


class ValidationRunner:
    """Runs validators by type name and collects results."""

    def __init__(self):
        """Initialize validation runner."""
        self.validators: dict[str, Validator] = {
            "equals": EqualsValidator(),
            "exists": ExistsValidator(),
            "absent": AbsentValidator(),
            "type": TypeValidator(),
        }

    def run_validation(
        self, validation_type: str, document: Any, path: list[Any], **params: Any
    ) -> ValidationResult:
        """Run a single validation.

        Args:
            validation_type: Type of validation to run
            document: Decoded JSON response
            path: Key path to validate
            **params: Additional validation parameters

        Returns:
            Validation result
        """
        if validation_type not in self.validators:
            return ValidationResult(False, f"Unknown validation type: {validation_type}")

        return self.validators[validation_type].validate(document, path, **params)

    def run_all_validations(
        self, document: Any, validations: list[dict[str, Any]]
    ) -> list[ValidationResult]:
        """Run several validations against one document.

        Args:
            document: Decoded JSON response
            validations: Validation configurations with ``type`` and ``path``

        Returns:
            List of validation results
        """
        results = []
        for validation in validations:
            validation_type = validation.get("type")
            path = validation.get("path")

            if not validation_type or path is None:
                results.append(
                    ValidationResult(False, "Invalid validation configuration: missing type or path")
                )
                continue

            params = {k: v for k, v in validation.items() if k not in ("type", "path")}
            results.append(self.run_validation(validation_type, document, path, **params))

        return results
