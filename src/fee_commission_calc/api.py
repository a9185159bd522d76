"""FastAPI application for fee/commission calculation."""

import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import PurePath
from typing import Annotated, Any

from fastapi import (
    FastAPI,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from fee_commission_calc.config import settings, validate_settings_on_startup
from fee_commission_calc.models import (
    CalculationResponse,
    ErrorDetail,
    HealthResponse,
)
from fee_commission_calc.output.output_service import OutputService
from fee_commission_calc.services.calculation_pipeline import (
    CalculationOutcome,
    FeeCommissionCalculator,
    generate_tracking_id,
)
from fee_commission_calc.utils.exceptions import (
    ErrorCode,
    FCCError,
    FileTooLargeError,
    UnsupportedFormatError,
    ValidationError,
)
from fee_commission_calc.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
    set_tracking_id,
)

API_VERSION = "0.1.0"

# Configure structured logging using settings
configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {
        "model": ErrorDetail,
        "description": "Missing input, unsupported file or type mismatch",
    },
    413: {"model": ErrorDetail, "description": "File too large"},
    422: {"model": ErrorDetail, "description": "Workbook could not be parsed"},
}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        app.state.calculator = FeeCommissionCalculator()
        app.state.output_service = OutputService()
        try:
            yield
        finally:
            app.state.calculator = None
            app.state.output_service = None

    app = FastAPI(
        title="Fee-Commission Calculation API",
        description=(
            "Parses fee/commission schedule workbooks, validates the declared "
            "schedule type and calculates the commission breakdown per party, "
            "channel and amount slab."
        ),
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Configure CORS using settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Validate settings on startup
    validate_settings_on_startup(settings)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Middleware to assign and track request IDs.

        This middleware:
        1. Generates a unique request ID for each request
        2. Sets it in context for logging correlation
        3. Adds it to the response headers
        4. Clears context after request completes
        """
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)

        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(FCCError)
    async def fcc_exception_handler(request: Request, exc: FCCError) -> JSONResponse:
        """Custom exception handler for application exceptions.

        Handles all custom exceptions from the utils.exceptions module
        and returns structured error responses with error codes.
        """
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.error(
            f"FCC Error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=ErrorDetail.from_error_code(
                exc.error_code,
                exc.message,
                details=exc.details if exc.details else None,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Custom exception handler for HTTP exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"HTTP Error: {exc.detail}",
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                detail=str(exc.detail),
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all exception handler for unexpected errors.

        Logs the full exception and returns a generic error response
        to avoid leaking internal details.
        """
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        if settings.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "Internal server error. Please try again later."

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorDetail.from_error_code(
                ErrorCode.INTERNAL_ERROR,
                detail,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    async def run_calculation(
        request: Request,
        file: UploadFile | None,
        fee_comm_type: str | None,
        fee_comm_subtype: str | None,
        biller_name: str | None,
    ) -> CalculationOutcome:
        """Validate the upload and run the calculation pipeline.

        Raises:
            ValidationError: If the file or type is missing.
            UnsupportedFormatError: If the file is not an accepted workbook.
            FileTooLargeError: If the file exceeds the size limit.
        """
        request_id = getattr(request.state, "request_id", None)

        if file is None or not file.filename:
            logger.warning("Calculate request missing file", request_id=request_id)
            raise ValidationError(
                message="Missing required fields: a fee-commission file is required",
                field="file",
            )
        if not fee_comm_type or not fee_comm_type.strip():
            logger.warning("Calculate request missing type", request_id=request_id)
            raise ValidationError(
                message="Missing required fields: fee_comm_type is required",
                field="fee_comm_type",
            )

        file_name = file.filename
        extension = PurePath(file_name).suffix.lower()
        if extension not in settings.allowed_extensions_list:
            logger.warning(
                "Rejected upload with unsupported extension",
                file_name=file_name,
                extension=extension,
                request_id=request_id,
            )
            raise UnsupportedFormatError(
                message=(
                    "Unsupported file type. Please upload an Excel workbook "
                    f"({', '.join(settings.allowed_extensions_list)})."
                ),
                extension=extension or None,
                file_name=file_name,
            )

        file_content = await file.read()
        file_size = len(file_content)
        if file_size > settings.max_file_size_bytes:
            logger.warning(
                "File too large",
                file_size=file_size,
                max_size=settings.max_file_size_bytes,
                request_id=request_id,
            )
            raise FileTooLargeError(
                file_size=file_size,
                max_size=settings.max_file_size_bytes,
                file_name=file_name,
            )

        tracking_id = generate_tracking_id()
        set_tracking_id(tracking_id)

        calculator: FeeCommissionCalculator = request.app.state.calculator
        return await calculator.calculate_async(
            file_bytes=file_content,
            declared_type=fee_comm_type.strip(),
            file_name=file_name,
            declared_subtype=(fee_comm_subtype or "").strip() or None,
            biller_name=biller_name,
            tracking_id=tracking_id,
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> dict[str, Any]:
        """Check the health status of the service.

        Returns:
            HealthResponse: Service status information including status,
                timestamp, and version.
        """
        request_id = getattr(request.state, "request_id", None)
        logger.debug("Health check requested", request_id=request_id)
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": API_VERSION,
        }

    @app.post(
        "/fee-commission/calculate",
        response_model=CalculationResponse,
        tags=["Calculation"],
        responses=ERROR_RESPONSES,
    )
    async def calculate_fee_commission(
        request: Request,
        file: Annotated[
            UploadFile | None, File(description="Fee-commission schedule (.xlsx)")
        ] = None,
        fee_comm_type: Annotated[
            str | None,
            Form(description="Declared type: Regular, Drop Point or EMI Biller"),
        ] = None,
        fee_comm_subtype: Annotated[
            str | None, Form(description="Drop Point subtype: Mixed or Fixed")
        ] = None,
        biller_name: Annotated[
            str | None, Form(description="Overrides the biller name in the file name")
        ] = None,
    ) -> dict[str, Any]:
        """Upload a schedule workbook and calculate its commissions.

        The declared type is checked against the workbook layout before any
        rates are extracted; a mismatch is reported with a message telling
        the caller which type to choose.

        Returns:
            CalculationResponse: Tracking ID, biller name and the result data.

        Raises:
            HTTPException: 400 for missing input, unsupported files or types,
                and type mismatches; 413 for oversized files; 422 when the
                workbook cannot be parsed.
        """
        outcome = await run_calculation(
            request, file, fee_comm_type, fee_comm_subtype, biller_name
        )
        output_service: OutputService = request.app.state.output_service
        output = output_service.generate_output(outcome)
        logger.info(
            output.summary_line,
            tracking_id=output.tracking_id,
            request_id=getattr(request.state, "request_id", None),
        )
        return output_service.format_for_api(output)

    @app.post(
        "/fee-commission/calculate/csv",
        tags=["Calculation"],
        responses={
            200: {"content": {"text/csv": {}}, "description": "CSV results"},
            **ERROR_RESPONSES,
        },
    )
    async def calculate_fee_commission_csv(
        request: Request,
        file: Annotated[
            UploadFile | None, File(description="Fee-commission schedule (.xlsx)")
        ] = None,
        fee_comm_type: Annotated[
            str | None,
            Form(description="Declared type: Regular, Drop Point or EMI Biller"),
        ] = None,
        fee_comm_subtype: Annotated[
            str | None, Form(description="Drop Point subtype: Mixed or Fixed")
        ] = None,
        biller_name: Annotated[
            str | None, Form(description="Overrides the biller name in the file name")
        ] = None,
    ) -> Response:
        """Calculate commissions and download them as CSV."""
        outcome = await run_calculation(
            request, file, fee_comm_type, fee_comm_subtype, biller_name
        )
        output_service: OutputService = request.app.state.output_service
        export = output_service.export_csv(outcome)
        return Response(
            content=export.content,
            media_type=export.media_type,
            headers={
                "Content-Disposition": f'attachment; filename="{export.file_name}"',
                "X-Tracking-ID": outcome.calculation_result.summary.tracking_id,
            },
        )

    return app


# Create the default app instance
app = create_app()
