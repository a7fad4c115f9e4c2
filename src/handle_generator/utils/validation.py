"""Validation utilities for options and command templates."""

import re
from typing import Iterable, List, Optional

from ..types import ErrorType, ValidationError, ValidationResult


PLACEHOLDERS = frozenset({"prefix", "handle", "url"})


class ValidationUtils:
    """Utility class for validating conversion options and templates."""

    @staticmethod
    def validate_prefix(prefix: Optional[str]) -> ValidationResult:
        """
        Validate a handle prefix.

        Args:
            prefix: Prefix to validate

        Returns:
            ValidationResult with validation details
        """
        errors = []
        warnings = []

        if prefix is None or not prefix.strip():
            errors.append(ValidationError(
                type=ErrorType.CONFIGURATION,
                message="Handle prefix is required and must not be empty",
                location="prefix"
            ))
        else:
            if prefix != prefix.strip() or any(ch.isspace() for ch in prefix):
                warnings.append(f"Handle prefix {prefix!r} contains whitespace")
            if "/" in prefix:
                warnings.append(f"Handle prefix {prefix!r} contains '/', "
                                "which separates prefix and suffix in a handle")

        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)

    @staticmethod
    def validate_filter_pattern(pattern: Optional[str]) -> ValidationResult:
        """
        Validate that a filter pattern compiles.

        Args:
            pattern: Regular expression, or None for no filter

        Returns:
            ValidationResult with validation details
        """
        errors = []

        if pattern is not None:
            try:
                re.compile(pattern)
            except re.error as e:
                errors.append(ValidationError(
                    type=ErrorType.PATTERN,
                    message=f"Invalid filter pattern {pattern!r}: {e}",
                    location="filter" if e.pos is None else f"filter, position {e.pos}"
                ))

        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=[])

    @staticmethod
    def validate_limits(max_items: Optional[int], max_input_bytes: Optional[int]) -> ValidationResult:
        """Validate the optional item and input size ceilings."""
        errors = []

        for name, value in (("max_items", max_items), ("max_input_bytes", max_input_bytes)):
            if value is not None and (not isinstance(value, int) or value <= 0):
                errors.append(ValidationError(
                    type=ErrorType.CONFIGURATION,
                    message=f"{name} must be a positive integer, got {value!r}",
                    location=name
                ))

        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=[])

    @staticmethod
    def validate_template(key: str, placeholders: Iterable[str]) -> ValidationResult:
        """
        Validate the placeholders used by a command template.

        Args:
            key: Property key of the template
            placeholders: Placeholder names found in the template

        Returns:
            ValidationResult with validation details
        """
        errors = []
        seen: List[str] = []

        for name in placeholders:
            if name in seen:
                continue
            seen.append(name)
            if name not in PLACEHOLDERS:
                errors.append(ValidationError(
                    type=ErrorType.SUBSTITUTION,
                    message=f"'{key}' uses unknown placeholder '${{{name}}}'",
                    location=key
                ))

        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=[])

    @staticmethod
    def merge(*results: ValidationResult) -> ValidationResult:
        """Combine several validation results into one."""
        errors = [error for result in results for error in result.errors]
        warnings = [warning for result in results for warning in result.warnings]
        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)
