"""Pydantic models and enumerations for API requests and responses."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from fee_commission_calc.utils.exceptions import ErrorCode


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str


class FeeCommType(str, Enum):
    """Fee/commission schedule type declared by the uploader."""

    REGULAR = "Regular"
    DROP_POINT = "Drop Point"
    EMI_BILLER = "EMI Biller"


class FeeCommSubtype(str, Enum):
    """Drop Point schedule subtype."""

    MIXED = "Mixed"
    FIXED = "Fixed"


class StructureKind(str, Enum):
    """Workbook layout detected from the anchor cell."""

    REGULAR = "Regular"
    DROP_POINT = "Drop Point"


class Party(str, Enum):
    """Initiating party of a transaction."""

    UDDOKTA = "uddokta"
    CUSTOMER = "customer"


class Channel(str, Enum):
    """Transaction channel."""

    APP = "app"
    USSD = "ussd"


class CalculationStage(str, Enum):
    """Stage reached by a calculation request."""

    PENDING = "pending"
    CLASSIFIED = "classified"
    EXTRACTED = "extracted"
    CALCULATED = "calculated"
    FAILED = "failed"


class CalculationResponse(BaseModel):
    """Response model for the calculation endpoint."""

    success: bool = Field(..., description="Whether the calculation succeeded")
    message: str = Field(..., description="Human-readable status message")
    tracking_id: str = Field(..., description="Tracking identifier of the request")
    biller_name: str = Field(..., description="Biller the schedule belongs to")
    data: dict[str, Any] = Field(
        ..., description="Calculation result with summary and raw extracted data"
    )


class ErrorDetail(BaseModel):
    """Error detail model for API error responses."""

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E4001')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        detail: str,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ErrorDetail":
        """Create an ErrorDetail from an ErrorCode enum value."""
        return cls(
            detail=detail,
            error_code=error_code.value,
            details=details,
            request_id=request_id,
        )
