"""Centralized exception classes for the fee/commission calculator.

This module provides a hierarchy of custom exceptions with error codes,
HTTP status code mapping, and structured error details for consistent
error handling throughout the application.

Exception Hierarchy:
    FCCError (base)
    ├── FileError
    │   ├── FileTooLargeError
    │   └── UnsupportedFormatError
    ├── ValidationError
    ├── UnsupportedVariantError
    └── CalculationStageError
        ├── ClassificationMismatchError
        ├── ExtractionFailureError
        └── CalculationFailureError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: File/upload errors
    - E2xxx: Input validation errors
    - E4xxx: Calculation pipeline errors
    - E9xxx: Internal/unexpected errors
    """

    # File errors (E1xxx)
    FILE_TOO_LARGE = "E1002"
    UNSUPPORTED_FORMAT = "E1003"
    FILE_READ_ERROR = "E1004"

    # Input validation errors (E2xxx)
    MISSING_FIELD = "E2001"
    UNSUPPORTED_VARIANT = "E2002"

    # Calculation pipeline errors (E4xxx)
    CLASSIFICATION_MISMATCH = "E4001"
    EXTRACTION_FAILED = "E4002"
    CALCULATION_FAILED = "E4003"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    CONFIGURATION_ERROR = "E9002"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    Subclasses should set the `http_status` class attribute.
    """

    http_status: int = 500

    def get_http_status(self) -> int:
        """Get the HTTP status code for this exception.

        Returns:
            HTTP status code appropriate for this error.
        """
        return self.http_status


class FCCError(Exception, HTTPStatusMixin):
    """Base exception for all fee/commission calculator errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# File Errors (E1xxx)
# =============================================================================


class FileError(FCCError):
    """Base class for uploaded-file errors."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FILE_READ_ERROR,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file name information.

        Args:
            message: Error message.
            error_code: Error code.
            file_name: Name of the problematic file.
            details: Additional details.
        """
        details = details or {}
        if file_name:
            details["file_name"] = file_name
        super().__init__(message, error_code, details)
        self.file_name = file_name


class FileTooLargeError(FileError):
    """Raised when an upload exceeds the maximum allowed size."""

    http_status: int = 413

    def __init__(
        self,
        file_size: int,
        max_size: int,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            file_name: Optional file name.
            details: Additional details.
        """
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = (
            f"File size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_TOO_LARGE,
            file_name=file_name,
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class UnsupportedFormatError(FileError):
    """Raised when an upload is not an accepted spreadsheet format."""

    def __init__(
        self,
        message: str,
        extension: str | None = None,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with format information.

        Args:
            message: Error message.
            extension: Extension of the rejected file.
            file_name: Optional file name.
            details: Additional details.
        """
        details = details or {}
        if extension:
            details["extension"] = extension
        super().__init__(
            message=message,
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            file_name=file_name,
            details=details,
        )
        self.extension = extension


# =============================================================================
# Input Validation Errors (E2xxx)
# =============================================================================


class ValidationError(FCCError):
    """General validation error for request input."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with validation details.

        Args:
            message: Main error message.
            field: Field that failed validation.
            errors: List of validation errors.
            details: Additional details.
        """
        details = details or {}
        if field:
            details["field"] = field
        if errors:
            details["validation_errors"] = errors
        super().__init__(
            message=message,
            error_code=ErrorCode.MISSING_FIELD,
            details=details,
        )


class UnsupportedVariantError(FCCError):
    """Raised when a declared type/subtype has no calculation algorithm."""

    http_status: int = 400

    def __init__(
        self,
        fee_comm_type: str,
        fee_comm_subtype: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the rejected variant.

        Args:
            fee_comm_type: Declared fee/commission type.
            fee_comm_subtype: Declared subtype, if any.
            details: Additional details.
        """
        details = details or {}
        details["fee_comm_type"] = fee_comm_type
        if fee_comm_subtype:
            details["fee_comm_subtype"] = fee_comm_subtype
        variant = (
            f"{fee_comm_type} ({fee_comm_subtype})"
            if fee_comm_subtype
            else fee_comm_type
        )
        super().__init__(
            message=f"Unsupported fee-commission type: {variant}",
            error_code=ErrorCode.UNSUPPORTED_VARIANT,
            details=details,
        )
        self.fee_comm_type = fee_comm_type
        self.fee_comm_subtype = fee_comm_subtype


# =============================================================================
# Calculation Pipeline Errors (E4xxx)
# =============================================================================


class CalculationStageError(FCCError):
    """Base class for errors raised by a calculation pipeline stage."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CALCULATION_FAILED,
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the pipeline stage.

        Args:
            message: Error message.
            error_code: Error code.
            stage: The pipeline stage where the error occurred.
            details: Additional details.
        """
        details = details or {}
        if stage:
            details["stage"] = stage
        super().__init__(message, error_code, details)
        self.stage = stage


class ClassificationMismatchError(CalculationStageError):
    """Raised when the declared type does not match the file structure."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        declared_type: str | None = None,
        detected_structure: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with declared and detected types.

        Args:
            message: Error message, shown to the caller verbatim.
            declared_type: Type the caller declared.
            detected_structure: Structure detected from the anchor cell.
            details: Additional details.
        """
        details = details or {}
        if declared_type:
            details["declared_type"] = declared_type
        if detected_structure:
            details["detected_structure"] = detected_structure
        super().__init__(
            message=message,
            error_code=ErrorCode.CLASSIFICATION_MISMATCH,
            stage="classification",
            details=details,
        )


class ExtractionFailureError(CalculationStageError):
    """Raised when the workbook cannot be decoded at all."""

    http_status: int = 422

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file name.

        Args:
            message: Error message.
            file_name: Name of the workbook that failed to load.
            details: Additional details.
        """
        details = details or {}
        if file_name:
            details["file_name"] = file_name
        super().__init__(
            message=message,
            error_code=ErrorCode.EXTRACTION_FAILED,
            stage="extraction",
            details=details,
        )


class CalculationFailureError(CalculationStageError):
    """Raised when the calculator cannot produce a result object."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message.

        Args:
            message: Error message.
            details: Additional details.
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.CALCULATION_FAILED,
            stage="calculation",
            details=details,
        )
