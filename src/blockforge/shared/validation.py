"""
Validation Framework

Composable validators used for block definitions and block field values.

Usage:
    result = validate_field("n1", value, [
        RequiredValidator(),
        NumberValidator(),
        RangeValidator(min_value=0),
    ])
    if not result.valid:
        Log.warning("; ".join(result.errors))
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, List, Union
import math
import re


# =============================================================================
# Exceptions
# =============================================================================

class ValidationError(Exception):
    """
    Exception for validation failures.

    Raised when validation must fail immediately.
    """

    def __init__(self, message: str, field_name: Optional[str] = None):
        self.message = message
        self.field_name = field_name
        full_message = f"{field_name}: {message}" if field_name else message
        super().__init__(full_message)


# =============================================================================
# Validation Result
# =============================================================================

@dataclass
class ValidationResult:
    """
    Result of validation operations.

    Attributes:
        valid: True if all validations passed
        errors: List of error messages (validation failures)
        warnings: List of warning messages (non-blocking issues)
        field_name: Optional field name for context
    """
    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    field_name: Optional[str] = None

    def add_error(self, message: str) -> None:
        """Add an error and mark as invalid."""
        if self.field_name and not message.startswith(self.field_name):
            message = f"{self.field_name}: {message}"
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (doesn't affect validity)."""
        if self.field_name and not message.startswith(self.field_name):
            message = f"{self.field_name}: {message}"
        self.warnings.append(message)

    def merge(self, other: 'ValidationResult') -> None:
        """Merge another ValidationResult into this one."""
        if not other.valid:
            self.valid = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def __bool__(self) -> bool:
        return self.valid

    def raise_if_invalid(self) -> None:
        """Raise ValidationError if result is invalid."""
        if not self.valid:
            raise ValidationError("; ".join(self.errors), self.field_name)


# =============================================================================
# Base Validator
# =============================================================================

class Validator(ABC):
    """
    Abstract base class for validators.

    Validators check values against rules and return ValidationResult.
    """

    @abstractmethod
    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        pass

    def __call__(self, value: Any, field_name: str = "") -> ValidationResult:
        return self.validate(value, field_name)


# =============================================================================
# Common Validators
# =============================================================================

class RequiredValidator(Validator):
    """Validates that a value is not None/empty."""

    def __init__(self, message: str = "is required"):
        self.message = message

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        if value is None:
            result.add_error(self.message)
        elif isinstance(value, str) and not value.strip():
            result.add_error(self.message)

        return result


class NumberValidator(Validator):
    """
    Validates that a value is a real number (bool is rejected).

    Usage:
        validator = NumberValidator(allow_non_finite=False)
        result = validator.validate(3.5, "n1")
    """

    def __init__(self, allow_non_finite: bool = True):
        self.allow_non_finite = allow_non_finite

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        if value is None:
            return result  # None is handled by RequiredValidator

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            result.add_error(f"must be a number, got {type(value).__name__}")
            return result

        if not self.allow_non_finite and not math.isfinite(value):
            result.add_error("must be a finite number")

        return result


class RangeValidator(Validator):
    """
    Validates that a numeric value is within a range.

    Usage:
        validator = RangeValidator(min_value=0, max_value=100)
        result = validator.validate(50, "n1")
    """

    def __init__(
        self,
        min_value: Optional[Union[int, float]] = None,
        max_value: Optional[Union[int, float]] = None,
        message: Optional[str] = None,
    ):
        self.min_value = min_value
        self.max_value = max_value
        self.message = message

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        if value is None:
            return result

        try:
            num_value = float(value)
        except (TypeError, ValueError):
            result.add_error(f"must be a number, got {type(value).__name__}")
            return result

        if self.min_value is not None and num_value < self.min_value:
            result.add_error(self.message or f"must be at least {self.min_value}")

        if self.max_value is not None and num_value > self.max_value:
            result.add_error(self.message or f"must be at most {self.max_value}")

        return result


class PatternValidator(Validator):
    """
    Validates that a string matches a regex pattern.

    Usage:
        validator = PatternValidator(r'^[a-z_]+$', "must be lowercase letters")
        result = validator.validate("math_number", "type")
    """

    def __init__(self, pattern: str, message: Optional[str] = None):
        self.pattern = pattern
        self.compiled = re.compile(pattern)
        self.message = message or f"does not match pattern: {pattern}"

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        if value is None:
            return result

        if not isinstance(value, str):
            result.add_error(f"must be a string, got {type(value).__name__}")
            return result

        if not self.compiled.match(value):
            result.add_error(self.message)

        return result


class All(Validator):
    """
    Composes multiple validators with AND logic.

    All validators must pass for the result to be valid.
    """

    def __init__(self, *validators: Validator, stop_on_first_error: bool = False):
        self.validators = validators
        self.stop_on_first_error = stop_on_first_error

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        for validator in self.validators:
            sub_result = validator.validate(value, field_name)
            result.merge(sub_result)

            if self.stop_on_first_error and not sub_result.valid:
                break

        return result


# =============================================================================
# Convenience Functions
# =============================================================================

def validate(
    value: Any,
    validators: Union[Validator, List[Validator]],
    field_name: str = "",
) -> ValidationResult:
    """
    Validate a value against one or more validators.

    Args:
        value: The value to validate
        validators: Single validator or list of validators
        field_name: Optional field name for error messages

    Returns:
        ValidationResult with any errors/warnings
    """
    if isinstance(validators, Validator):
        return validators.validate(value, field_name)

    return All(*validators).validate(value, field_name)


def validate_field(
    field_name: str,
    value: Any,
    validators: Union[Validator, List[Validator]],
) -> ValidationResult:
    """Validate a field value (field_name first for readability)."""
    return validate(value, validators, field_name)
