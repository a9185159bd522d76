"""Calculation pipeline for uploaded fee/commission schedules.

This module provides the orchestration logic that:
1. Resolves the declared fee-commission type and subtype
2. Validates the declared type against the workbook structure
3. Extracts raw rates from the fixed cell layout
4. Calculates commissions and assembles the audit summary

Each run moves through CLASSIFIED, EXTRACTED and CALCULATED, or stops at
FAILED with the failing stage recorded on the raised error.
"""

import asyncio
import hashlib
import uuid
from dataclasses import dataclass
from datetime import datetime

from fee_commission_calc.config import settings as app_settings
from fee_commission_calc.models import (
    CalculationStage,
    FeeCommSubtype,
    FeeCommType,
    StructureKind,
)
from fee_commission_calc.schedule import CalculationResult, CalculationSummary
from fee_commission_calc.services.cell_extractor import (
    CellExtractor,
    extract_biller_name,
)
from fee_commission_calc.services.commission_calculator import CommissionCalculator
from fee_commission_calc.services.structure_classifier import StructureClassifier
from fee_commission_calc.services.workbook_loader import WorkbookLoader
from fee_commission_calc.utils.exceptions import (
    CalculationFailureError,
    FCCError,
    UnsupportedVariantError,
)
from fee_commission_calc.utils.logging import (
    LogContext,
    get_logger,
    timed_operation,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class CalculationOutcome:
    """Result of a successful pipeline run."""

    calculation_result: CalculationResult
    biller_name: str
    stage: CalculationStage = CalculationStage.CALCULATED


def generate_tracking_id() -> str:
    """Generate a tracking identifier for a calculation request."""
    return f"FCC-{uuid.uuid4().hex[:12].upper()}"


def resolve_variant(
    fee_comm_type: FeeCommType | str,
    fee_comm_subtype: FeeCommSubtype | str | None = None,
) -> tuple[FeeCommType, FeeCommSubtype | None]:
    """Normalize a declared type and subtype.

    Drop Point schedules default to the Mixed subtype; Mixed and Fixed share
    one algorithm. Regular schedules take no subtype.

    Raises:
        UnsupportedVariantError: If the combination has no algorithm.
    """
    raw_type = getattr(fee_comm_type, "value", fee_comm_type)
    raw_subtype = getattr(fee_comm_subtype, "value", fee_comm_subtype) or None

    try:
        declared_type = FeeCommType(raw_type)
    except ValueError as e:
        raise UnsupportedVariantError(str(raw_type), raw_subtype) from e

    if declared_type is FeeCommType.EMI_BILLER:
        raise UnsupportedVariantError(declared_type.value, raw_subtype)

    if declared_type is FeeCommType.REGULAR:
        if raw_subtype is not None:
            raise UnsupportedVariantError(declared_type.value, raw_subtype)
        return declared_type, None

    if raw_subtype is None:
        return declared_type, FeeCommSubtype.MIXED
    try:
        return declared_type, FeeCommSubtype(raw_subtype)
    except ValueError as e:
        raise UnsupportedVariantError(declared_type.value, raw_subtype) from e


class FeeCommissionCalculator:
    """Runs classification, extraction and calculation for one upload.

    The pipeline holds no per-request state, so a single instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        loader: WorkbookLoader | None = None,
        classifier: StructureClassifier | None = None,
        extractor: CellExtractor | None = None,
        calculator: CommissionCalculator | None = None,
    ) -> None:
        self._loader = loader or WorkbookLoader()
        self._classifier = classifier or StructureClassifier(self._loader)
        self._extractor = extractor or CellExtractor()
        self._calculator = calculator or CommissionCalculator()

    def calculate(
        self,
        file_bytes: bytes,
        declared_type: FeeCommType | str,
        file_name: str,
        declared_subtype: FeeCommSubtype | str | None = None,
        biller_name: str | None = None,
        tracking_id: str | None = None,
        calculated_at: datetime | None = None,
        storage_path: str | None = None,
    ) -> CalculationOutcome:
        """Calculate commissions for an uploaded schedule.

        Args:
            file_bytes: Raw ``.xlsx`` upload.
            declared_type: Fee-commission type chosen by the uploader.
            file_name: Original upload file name.
            declared_subtype: Drop Point subtype, if any.
            biller_name: Overrides the name derived from ``file_name``.
            tracking_id: Identifier for the request; generated when omitted.
            calculated_at: Timestamp for the summary; now when omitted.
            storage_path: Where the caller stored the upload, if anywhere.

        Returns:
            CalculationOutcome with the result and biller name.

        Raises:
            UnsupportedVariantError: If the declared variant is unsupported.
            ClassificationMismatchError: If the declared type contradicts the
                workbook structure.
            ExtractionFailureError: If the workbook cannot be decoded.
            CalculationFailureError: If the calculation fails unexpectedly.
        """
        tracking_id = tracking_id or generate_tracking_id()
        resolved_biller = (biller_name or "").strip() or extract_biller_name(file_name)
        stage = CalculationStage.PENDING
        declared_label = getattr(declared_type, "value", str(declared_type))

        with LogContext(tracking_id=tracking_id, file_name=file_name):
            try:
                fee_comm_type, fee_comm_subtype = resolve_variant(
                    declared_type, declared_subtype
                )
                logger.info(
                    "Starting fee-commission calculation",
                    fee_comm_type=fee_comm_type.value,
                    fee_comm_subtype=(
                        fee_comm_subtype.value if fee_comm_subtype else None
                    ),
                    biller_name=resolved_biller,
                    file_size=len(file_bytes),
                )

                with timed_operation(logger, "fee_commission_calculation") as metrics:
                    handle = self._loader.load_from_bytes(
                        file_bytes, file_name=file_name
                    )
                    detected = self._classifier.validate_handle(
                        handle, fee_comm_type
                    )
                    stage = CalculationStage.CLASSIFIED

                    try:
                        if detected is StructureKind.DROP_POINT:
                            drop_point = self._extractor.extract_drop_point(
                                handle, resolved_biller
                            )
                            raw_data = self._extractor.drop_point_raw_data(drop_point)
                        else:
                            regular = self._extractor.extract_regular(
                                handle, resolved_biller
                            )
                            raw_data = self._extractor.regular_raw_data(regular)
                    finally:
                        metrics.cells_read = handle.cells_read
                    stage = CalculationStage.EXTRACTED

                    if detected is StructureKind.DROP_POINT:
                        slabs, warnings = self._calculator.calculate_drop_point(
                            drop_point
                        )
                        regular_results = None
                        total_records = len(slabs) * 2
                        metrics.slabs_processed = len(slabs)
                    else:
                        regular_results, warnings = self._calculator.calculate_regular(
                            regular
                        )
                        slabs = None
                        total_records = sum(
                            len(channels) for channels in regular_results.values()
                        )

                    summary = CalculationSummary(
                        tracking_id=tracking_id,
                        biller_name=resolved_biller,
                        fee_comm_type=fee_comm_type,
                        fee_comm_subtype=(
                            fee_comm_subtype.value if fee_comm_subtype else None
                        ),
                        detected_structure=detected,
                        file_name=file_name,
                        file_sha256=hashlib.sha256(file_bytes).hexdigest(),
                        calculated_at=(
                            calculated_at or datetime.now(app_settings.tzinfo)
                        ).isoformat(),
                        total_records=total_records,
                        storage_path=storage_path,
                    )
                    result = CalculationResult(
                        summary=summary,
                        raw_data=raw_data,
                        regular=regular_results,
                        slabs=slabs,
                        warnings=tuple(warnings),
                    )
                    stage = CalculationStage.CALCULATED
                    metrics.custom_metrics["warnings"] = len(warnings)

            except FCCError as e:
                logger.log_calculation_result(
                    tracking_id=tracking_id,
                    success=False,
                    fee_comm_type=declared_label,
                    biller_name=resolved_biller,
                    stage=CalculationStage.FAILED.value,
                    error_message=str(e),
                )
                raise
            except Exception as e:
                logger.error(
                    "Calculation failed unexpectedly",
                    last_stage=stage.value,
                    error=f"{type(e).__name__}: {e}",
                    exc_info=True,
                )
                logger.log_calculation_result(
                    tracking_id=tracking_id,
                    success=False,
                    fee_comm_type=declared_label,
                    biller_name=resolved_biller,
                    stage=CalculationStage.FAILED.value,
                    error_message=type(e).__name__,
                )
                raise CalculationFailureError(
                    "Failed to calculate fee-commission. Please verify the "
                    "uploaded schedule and try again.",
                    details={"last_stage": stage.value},
                ) from e

            logger.log_calculation_result(
                tracking_id=tracking_id,
                success=True,
                fee_comm_type=fee_comm_type.value,
                biller_name=resolved_biller,
                stage=stage.value,
            )
            return CalculationOutcome(
                calculation_result=result,
                biller_name=resolved_biller,
                stage=stage,
            )

    async def calculate_async(
        self,
        file_bytes: bytes,
        declared_type: FeeCommType | str,
        file_name: str,
        declared_subtype: FeeCommSubtype | str | None = None,
        biller_name: str | None = None,
        tracking_id: str | None = None,
        calculated_at: datetime | None = None,
        storage_path: str | None = None,
    ) -> CalculationOutcome:
        """Run :meth:`calculate` in a worker thread."""
        return await asyncio.to_thread(
            self.calculate,
            file_bytes,
            declared_type,
            file_name,
            declared_subtype,
            biller_name,
            tracking_id,
            calculated_at,
            storage_path,
        )
