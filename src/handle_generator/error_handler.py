"""Error handling implementation for the Handle Generator."""

import logging
import re
from typing import Optional

from .config import ConversionOptions
from .types import (
    ConversionError,
    ErrorResponse,
    ErrorType,
    HandleGeneratorError,
    ValidationResult,
)
from .utils.validation import ValidationUtils


_SUGGESTIONS = {
    ErrorType.PARSE: "Check that the input is a complete, well-formed XML export "
                     "and that the file is readable.",
    ErrorType.PATTERN: "Fix the --filter regular expression. It must match the "
                       "whole handle value, e.g. '12[0-9]'.",
    ErrorType.TEMPLATE: "Check the command template file. It must define command.delete, "
                        "command.create, command.admin and command.url.",
    ErrorType.SUBSTITUTION: "Command templates may only use ${prefix}, ${handle} and ${url}.",
    ErrorType.CONFIGURATION: "Provide a handle prefix with --prefix or HANDLE_PREFIX.",
    ErrorType.LIMIT: "Raise --max-items or --max-input-size, or split the export.",
    ErrorType.IO: "Check that the output destination is writable.",
}


class ErrorHandler:
    """
    Error handler for conversion runs.

    Validates options before a run starts and turns failures raised
    during a run into a single ConversionError carrying the original cause.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_options(self, options: ConversionOptions) -> ValidationResult:
        """
        Validate conversion options.

        Args:
            options: Options to validate

        Returns:
            ValidationResult with validation details
        """
        result = ValidationUtils.merge(
            ValidationUtils.validate_prefix(options.prefix),
            ValidationUtils.validate_filter_pattern(options.filter),
            ValidationUtils.validate_limits(options.max_items, options.max_input_bytes),
        )
        for warning in result.warnings:
            self.logger.warning(warning)
        return result

    def check_options(self, options: ConversionOptions) -> None:
        """
        Fail fast on invalid options.

        Raises:
            ConversionError: With the type of the first validation error
        """
        result = self.validate_options(options)
        if not result.is_valid:
            messages = [error.message for error in result.errors]
            raise ConversionError("; ".join(messages), result.errors[0].type,
                                  context={"errors": result.errors})

    def compile_filter(self, pattern: Optional[str]) -> Optional[re.Pattern]:
        """
        Compile the handle filter.

        Returns:
            Compiled pattern, or None when no filter is configured

        Raises:
            ConversionError: If the pattern does not compile
        """
        if pattern is None:
            return None
        try:
            return re.compile(pattern)
        except re.error as e:
            raise ConversionError(f"Invalid filter pattern {pattern!r}: {e}",
                                  ErrorType.PATTERN) from e

    def wrap(self, error: Exception, error_type: ErrorType, message: str) -> ConversionError:
        """
        Wrap a failure into a ConversionError.

        HandleGeneratorErrors keep their own type; anything else gets
        ``error_type``. The caller raises the result ``from error``.
        """
        if isinstance(error, HandleGeneratorError):
            error_type = error.error_type
        self.logger.error(f"Conversion failed ({error_type.value}): {error}")
        return ConversionError(f"{message}: {error}", error_type,
                               context=getattr(error, "context", None))

    def handle_conversion_error(self, error: HandleGeneratorError) -> ErrorResponse:
        """
        Describe a failure for the user.

        Args:
            error: Failure raised by a run or by template loading

        Returns:
            ErrorResponse with a suggested action
        """
        return ErrorResponse(
            error_type=error.error_type,
            message=str(error),
            suggested_action=_SUGGESTIONS.get(error.error_type,
                                              "Unknown error type. Please check logs and retry.")
        )
