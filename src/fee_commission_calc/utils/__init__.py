"""Utilities package for the fee/commission calculator.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
- Nullable numeric helpers (numeric.py)
"""

from fee_commission_calc.utils.exceptions import (
    CalculationFailureError,
    CalculationStageError,
    ClassificationMismatchError,
    ErrorCode,
    ExtractionFailureError,
    FCCError,
    FileError,
    FileTooLargeError,
    HTTPStatusMixin,
    UnsupportedFormatError,
    UnsupportedVariantError,
    ValidationError,
)
from fee_commission_calc.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "CalculationFailureError",
    "CalculationStageError",
    "ClassificationMismatchError",
    "ErrorCode",
    "ExtractionFailureError",
    "FCCError",
    "FileError",
    "FileTooLargeError",
    "HTTPStatusMixin",
    "UnsupportedFormatError",
    "UnsupportedVariantError",
    "ValidationError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
